# valuegraph/entities.py
"""Per-kind configuration for every collection in the console.

Each `EntitySpec` binds an entity kind to its record model and to typed
accessors for search, filtering and sorting, plus the editor's required-field
rules and the import/export column lists. The list engine, editor, importer
and exporter are written once against this table.
"""
from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Dict, Tuple, Type

from .pricing import sold_ratio
from .schemas import Record, Builder, Product, Community, FloorPlan, Feature, LookupValue

DEFAULT_DIVISION = "GTA"


class EntityKind(str, Enum):
    BUILDERS = "builders"
    PRODUCTS = "products"
    COMMUNITIES = "communities"
    FLOOR_PLANS = "floor-plans"
    FEATURES = "features"
    LOOKUPS = "lookups"


def present(value) -> bool:
    return value is not None and str(value).strip() != ""


def positive_number(value) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class SortField:
    key: Callable[[Any], Any]
    numeric: bool = False


@dataclass(frozen=True)
class Rule:
    field: str
    message: str
    check: Callable[[Any], bool] = present


@dataclass(frozen=True)
class EntitySpec:
    kind: EntityKind
    label: str
    model: Type[Record]
    collection: str
    name_field: str
    search: Tuple[Callable[[Any], str], ...]
    filters: Dict[str, Callable[[Any], Any]]
    sorts: Dict[str, SortField]
    rules: Tuple[Rule, ...]
    defaults: Dict[str, Any] = field(default_factory=dict)
    export_columns: Tuple[str, ...] = ()
    import_fields: Tuple[str, ...] = ()

    @property
    def default_sort(self) -> str:
        return self.name_field

    @property
    def plural(self) -> str:
        return self.kind.value.replace("-", " ")

    def display_name(self, record) -> str:
        return getattr(record, self.name_field)

    def numeric_fields(self) -> Tuple[str, ...]:
        return tuple(
            name for name, info in self.model.model_fields.items()
            if info.annotation in (int, float)
        )


def _created(record) -> float:
    return record.created_at.timestamp()


def _text(name):
    return SortField(attrgetter(name))


def _number(name):
    return SortField(attrgetter(name), numeric=True)


BUILDERS = EntitySpec(
    kind=EntityKind.BUILDERS,
    label="Builder",
    model=Builder,
    collection="builders",
    name_field="builder_name",
    search=(attrgetter("builder_name"),),
    filters={"division": attrgetter("division")},
    sorts={
        "builder_name": _text("builder_name"),
        "division": _text("division"),
        "created_at": SortField(_created, numeric=True),
    },
    rules=(Rule("builder_name", "Builder name is required"),),
    defaults={"division": DEFAULT_DIVISION},
    export_columns=("builder_name", "division", "created_at"),
    import_fields=("builder_name", "division"),
)

PRODUCTS = EntitySpec(
    kind=EntityKind.PRODUCTS,
    label="Product",
    model=Product,
    collection="products",
    name_field="product_name",
    search=(attrgetter("product_name"),),
    filters={"product_type": attrgetter("product_type")},
    sorts={
        "product_name": _text("product_name"),
        "product_type": _text("product_type"),
        "division": _text("division"),
        "condo_type": _text("condo_type"),
    },
    rules=(Rule("product_name", "Product name is required"),),
    defaults={"product_type": "Attached", "division": DEFAULT_DIVISION},
    export_columns=("product_name", "product_type", "division", "condo_type", "created_at"),
    import_fields=("product_name", "product_type", "division", "condo_type"),
)

COMMUNITIES = EntitySpec(
    kind=EntityKind.COMMUNITIES,
    label="Community",
    model=Community,
    collection="communities",
    name_field="community_name",
    search=(attrgetter("community_name"), attrgetter("address")),
    filters={
        "division": attrgetter("division"),
        "city": attrgetter("city"),
        "status": attrgetter("status"),
    },
    sorts={
        "community_name": _text("community_name"),
        "city": _text("city"),
        "division": _text("division"),
        "status": _text("status"),
        # sorts by sell-through, not by the raw count
        "total_sold": SortField(lambda c: sold_ratio(c.total_sold, c.total_lots), numeric=True),
    },
    rules=(
        Rule("community_name", "Community name is required"),
        Rule("address", "Address is required"),
        Rule("city", "City is required"),
    ),
    defaults={"division": DEFAULT_DIVISION, "status": "Active"},
    export_columns=(
        "community_name", "division", "city", "address", "status",
        "total_lots", "total_sold", "created_at",
    ),
    import_fields=(
        "community_name", "division", "address", "city", "postal_code",
        "status", "total_lots", "total_sold",
    ),
)

FLOOR_PLANS = EntitySpec(
    kind=EntityKind.FLOOR_PLANS,
    label="Floor Plan",
    model=FloorPlan,
    collection="floor_plans",
    name_field="floor_plan_name",
    search=(attrgetter("floor_plan_name"),),
    filters={
        "division": attrgetter("division"),
        "floor_plan_status": attrgetter("floor_plan_status"),
        "community": attrgetter("community"),
        "builder": attrgetter("builder"),
        "product_type": attrgetter("product_type"),
    },
    sorts={
        "floor_plan_name": _text("floor_plan_name"),
        "builder": _text("builder"),
        "product_type": _text("product_type"),
        "community": _text("community"),
        "floor_plan_status": _text("floor_plan_status"),
        "square_feet": _number("square_feet"),
        "price": _number("price"),
    },
    rules=(
        Rule("floor_plan_name", "Floor Plan name is required"),
        Rule("division", "Division is required"),
        Rule("community", "Community is required"),
        Rule("builder", "Builder is required"),
        Rule("product_type", "Product Type is required"),
        Rule("square_feet", "Valid Square Feet is required", positive_number),
        Rule("elevation", "Elevation is required"),
    ),
    defaults={"division": DEFAULT_DIVISION, "floor_plan_status": "Active"},
    export_columns=(
        "floor_plan_name", "builder", "product_type", "community", "square_feet",
        "bed", "bath", "price", "net_price", "price_per_sq_ft", "floor_plan_status",
    ),
    import_fields=(
        "floor_plan_name", "division", "community", "builder", "product_type",
        "square_feet", "bed", "bath", "price",
    ),
)

FEATURES = EntitySpec(
    kind=EntityKind.FEATURES,
    label="Feature",
    model=Feature,
    collection="features",
    name_field="feature_name",
    search=(attrgetter("feature_name"),),
    filters={
        "division": attrgetter("division"),
        "feature_category": attrgetter("feature_category"),
    },
    sorts={
        "feature_name": _text("feature_name"),
        "feature_category": _text("feature_category"),
        "retail_price": _number("retail_price"),
        "division": _text("division"),
        "created_at": SortField(_created, numeric=True),
    },
    rules=(
        Rule("feature_name", "Feature name is required"),
        Rule("division", "Division is required"),
        Rule("feature_category", "Feature category is required"),
    ),
    defaults={"division": DEFAULT_DIVISION},
    export_columns=("feature_name", "feature_category", "division", "retail_price", "created_at"),
    import_fields=("feature_name", "division", "feature_category", "retail_price"),
)

LOOKUPS = EntitySpec(
    kind=EntityKind.LOOKUPS,
    label="Lookup value",
    model=LookupValue,
    collection="lookup_values",
    name_field="lookup_value",
    search=(attrgetter("lookup_value"),),
    filters={"lookup_category": attrgetter("lookup_category")},
    sorts={
        "lookup_value": _text("lookup_value"),
        "lookup_category": _text("lookup_category"),
    },
    rules=(
        Rule("lookup_category", "Lookup category is required"),
        Rule("lookup_value", "Lookup value is required"),
    ),
)

REGISTRY: Dict[EntityKind, EntitySpec] = {
    spec.kind: spec
    for spec in (BUILDERS, PRODUCTS, COMMUNITIES, FLOOR_PLANS, FEATURES, LOOKUPS)
}


def get_spec(kind) -> EntitySpec:
    try:
        return REGISTRY[EntityKind(kind)]
    except ValueError:
        raise ValueError(f"Unknown entity kind: {kind!r}") from None
