# valuegraph/services.py
from collections import OrderedDict
from typing import Dict, List

from .entities import EntityKind, REGISTRY
from .pricing import sold_percentage, sold_tier
from .schemas import Community, LookupValue
from .store import AppState
from .utils import collation_key


def dashboard_summary(state: AppState) -> Dict:
    plans = state.floor_plans
    counts = {
        spec.kind.value: len(state.collection(spec.kind))
        for spec in REGISTRY.values() if spec.kind is not EntityKind.LOOKUPS
    }
    return {
        "counts": counts,
        "active_communities": sum(1 for c in state.communities if c.status == "Active"),
        "active_floor_plans": sum(1 for fp in plans if fp.floor_plan_status == "Active"),
        "total_lots": sum(c.total_lots for c in state.communities),
        "total_sold": sum(c.total_sold for c in state.communities),
        "average_price": sum(fp.price for fp in plans) / len(plans) if plans else 0,
        "average_price_per_sq_ft": sum(fp.price_per_sq_ft for fp in plans) / len(plans) if plans else 0,
    }


def community_progress(community: Community) -> Dict:
    pct = sold_percentage(community.total_sold, community.total_lots)
    return {
        "sold": community.total_sold,
        "lots": community.total_lots,
        "percentage": pct,
        "tier": sold_tier(pct),
    }


def group_lookups(state: AppState) -> "OrderedDict[str, List[LookupValue]]":
    """Lookup values by category, categories alphabetical, values in insertion order."""
    groups: Dict[str, List[LookupValue]] = {}
    for lv in state.lookup_values:
        groups.setdefault(lv.lookup_category, []).append(lv)
    return OrderedDict((cat, groups[cat]) for cat in sorted(groups, key=collation_key))


def lookup_options(state: AppState, category: str) -> List[str]:
    return [lv.lookup_value for lv in state.lookup_values if lv.lookup_category == category]


def reference_options(state: AppState, division: str = "") -> Dict[str, List[Dict[str, str]]]:
    """Communities, builders and products a floor plan in `division` may point at."""
    def keep(record):
        return division == "" or record.division == division

    return {
        "communities": [{"id": c.id, "name": c.community_name} for c in state.communities if keep(c)],
        "builders": [{"id": b.id, "name": b.builder_name} for b in state.builders if keep(b)],
        "products": [{"id": p.id, "name": p.product_name} for p in state.products if keep(p)],
    }
