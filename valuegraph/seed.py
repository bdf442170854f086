# valuegraph/seed.py
"""Demo data loaded into an empty store."""
from datetime import datetime
from typing import Dict, List

from .schemas import Builder, Product, Community, FloorPlan, Feature, LookupValue

BUILDER_NAMES = [
    "Centra Homes (Mississauga)", "Dunpar Homes (Mississauga)", "Greenpark Group (Mississauga)",
    "Khanani Developments (Mississauga)", "Marlin Spring Developments (Mississauga)",
    "Mattamy Homes (Brampton)", "Mattamy Homes (Milton)", "Mattamy Homes (Milton) - GTU",
    "Mattamy Homes (Mississauga)", "Mattamy Homes (Oakville)", "Mattamy Homes (Oakville) - GTU",
    "National Homes (Mississauga)", "Resale (Milton) <5 years old",
    "Resale (Mississauga - City Centre)", "Resale (Mississauga - Erin Mills)",
    "Resale (Mississauga)", "Resale (Mississauga) - Churchill Meadows/Erin Mills",
    "Resale (Mississauga) - Hurontario", "Resale (North Oakville) <5 years old",
]

PRODUCTS = [
    ("12-Storey Condo", "Attached"),
    ("14-Storey Condo", "Attached"),
    ("16' 3-Storey Condo Street Townhomes (Woodland Collection)", "Attached"),
    ("18' 3-Storey Condo Street Townhomes (River Collection)", "Attached"),
    ("2-Storey Freehold Townhomes", "Attached"),
    ("2-Storey Semi-Detached", "Detached"),
    ("2-Storey Townhomes", "Attached"),
    ("3-Storey Back to Back Condo Village Homes", "Attached"),
    ("3-Storey Back to Back Rooftop Townhomes", "Attached"),
    ("3-Storey Back to Back Village Homes", "Attached"),
    ("3-Storey Condo Duplexes", "Attached"),
    ("3-Storey Condo Street Townhomes - C/E", "Attached"),
    ("3-Storey Condo Street Townhomes - Freehold", "Attached"),
    ("3-Storey Condo Townhomes", "Attached"),
    ("3-Storey Dual Front Condo Townhomes", "Attached"),
    ("3-Storey Rear Lane Townhomes without Rooftop", "Attached"),
    ("Condominium", "Attached"),
    ("Stacked Townhomes", "Attached"),
    ("Village Homes", "Attached"),
]

# name, address, city, status, total lots, total sold
COMMUNITIES = [
    ("The Nine 3 (Derry & Britannia Phase 1A)", "Ninth Line & Derry Road", "Mississauga", "Active", 48, 28),
    ("Mile & Creek Phase 1", "Derry Rd W & Tremaine Rd", "Milton", "Active", 126, 118),
    ("Upper Joshua Creek Phase 5", "Dundas St W & Neyagawa Blvd", "Oakville", "Active", 58, 0),
    ("Clockwork 3", "Trafalgar Rd & Dundas St", "Oakville", "Active", 72, 45),
    ("Hawthorne East Village Phase 8", "Main St E & Thompson Rd", "Milton", "Active", 64, 51),
    ("Union 3 (Feedmill)", "Queen St E & Main St N", "Brampton", "Proposed", 90, 0),
    ("Artisan Towns", "Derry Rd & Mavis Rd", "Mississauga", "Active", 55, 38),
    ("Whitehorn Woods", "Britannia Rd W & Creditview Rd", "Mississauga", "Active", 80, 80),
    ("Addington Park Condos", "Sheppard Ave W & Addington Ave", "North York", "Sold Out", 120, 120),
    ("Gallery Condos", "Finch Ave W & Bathurst St", "Toronto", "Active", 200, 145),
]

_NINE = "The Nine 3 (Derry & Britannia Phase 1A)"
_B2B = "3-Storey Back to Back Condo Village Homes"
_STREET = "3-Storey Condo Street Townhomes - C/E"

# name, product, sqft, bed, bath, elevation, price, bonus, maintenance, carrying cost
FLOOR_PLANS = [
    ("Aldgate End", _B2B, 1343, 3, 2.5, "TA", 771990, -17424, 106, 3538.78),
    ("Brixton", _B2B, 1442, 3, 2.5, "TA", 749990, -17424, 106, 3440.95),
    ("Brondesbury Corner", _B2B, 1607, 3, 2.5, "TA", 816990, -17424, 106, 3738.88),
    ("Richmond End", _B2B, 1634, 3, 2.5, "TA", 831990, -17424, 106, 3805.58),
    ("Northwick", _STREET, 1793, 3, 3.5, "A", 849990, -17424, 0, 3893.15),
    ("Paddington", _STREET, 1940, 4, 3.5, "B", 874990, -17424, 0, 4004.18),
    ("Preston End", _STREET, 2198, 4, 3.5, "C", 939990, -17424, 0, 4293.15),
    ("Uxbridge End", _STREET, 2420, 4, 3.5, "D", 969990, -17424, 0, 4426.42),
]

FEATURES = [
    ("Kitchen", "Granite Countertop Upgrade", 2500),
    ("Bathroom - Owner's", "Frameless Glass Shower Enclosure", 1800),
    ("Flooring", "Engineered Hardwood Throughout Main Floor", 3200),
    ("Exterior", "Stone Veneer Accent on Front Elevation", 4500),
    ("Smart Home", "Smart Home Package (Thermostat, Doorbell, Locks)", -1500),
    ("Energy-Efficiency", "Upgraded Insulation Package", -2000),
    ("Appliances", "Stainless Steel Appliance Package", 1200),
    ("Lighting", "Pot Light Package (12 Lights)", 900),
]

LOOKUPS = {
    "Division": [
        "Charlotte", "Dallas", "Jacksonville", "Orlando", "Phoenix", "Raleigh",
        "Southeast Florida", "Tampa", "Tucson", "Alberta", "GTA", "SouthwestFlorida", "Ottawa",
    ],
    "Elevation Style": ["1", "2", "3", "4", "A", "B", "C", "D", "TA", "EM", "A1", "A2", "MO"],
    "Condo Amenities": ["Co-Working Lounge", "Fitness Centre", "Lobby", "Pet Spa", "Social Lounge"],
    "Condo Freehold": ["Condo", "Freehold"],
    "Incentive Type": ["Decor Dollars", "Off Purchase Price"],
    "Note Category": [
        "Amenity", "Community", "Estimated Closing Date", "Finance", "Maintenance Fee",
        "Spec Level 1", "Spec Level 2", "Spec Level 3",
    ],
    "School Type": ["Elementary", "High", "Middle"],
    "Feature Category": [
        "Appliances", "Bathroom - Owner's", "Bathroom - Secondary", "Construction", "Electrical",
        "Energy-Efficiency", "Exterior", "Flooring", "Garage", "Interior", "Kitchen", "Laundry",
        "Lighting", "Outdoor Living", "Smart Home",
    ],
}


def seed_collections(now: datetime) -> Dict[str, List]:
    stamps = {"created_at": now, "updated_at": now}
    floor_plans = []
    for name, product, sqft, bed, bath, elevation, price, bonus, maint, carrying in FLOOR_PLANS:
        net = price + bonus
        floor_plans.append(FloorPlan(
            division="GTA", community=_NINE, builder="Mattamy Homes (Mississauga)",
            product_type=product, floor_plan_name=name, floor_plan_status="Active",
            square_feet=sqft, stories=3, bed=bed, bath=bath, elevation=elevation,
            condo_freehold="Condo", price=price, bonus=bonus, net_price=net,
            price_per_sq_ft=round(price / sqft, 2), net_price_per_sq_ft=round(net / sqft, 2),
            maintenance=maint, carrying_cost=carrying, **stamps,
        ))
    return {
        "builders": [Builder(builder_name=n, division="GTA", **stamps) for n in BUILDER_NAMES],
        "products": [
            Product(product_name=n, product_type=t, division="GTA", **stamps) for n, t in PRODUCTS
        ],
        "communities": [
            Community(division="GTA", community_name=n, address=a, city=c, status=s,
                      total_lots=lots, total_sold=sold, **stamps)
            for n, a, c, s, lots, sold in COMMUNITIES
        ],
        "floor_plans": floor_plans,
        "features": [
            Feature(division="GTA", feature_category=cat, feature_name=n, retail_price=p, **stamps)
            for cat, n, p in FEATURES
        ],
        "lookup_values": [
            LookupValue(lookup_category=category, lookup_value=v, **stamps)
            for category, values in LOOKUPS.items()
            for v in values
        ],
    }
