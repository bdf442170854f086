# valuegraph/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
import uuid

ProductType = Literal["Attached", "Detached"]
Status = Literal["Active", "Proposed", "Sold Out", "Not on VG"]

PRODUCT_TYPES = ("Attached", "Detached")
STATUSES = ("Active", "Proposed", "Sold Out", "Not on VG")


def new_id() -> str:
    return str(uuid.uuid4())


class Record(BaseModel):
    """Fields shared by every stored record."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id)
    created_at: datetime
    updated_at: datetime


class Builder(Record):
    builder_name: str = ""
    division: str = ""


class Product(Record):
    product_name: str = ""
    product_type: ProductType = "Attached"
    division: str = ""
    condo_type: str = ""


class Community(Record):
    division: str = ""
    community_name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    status: Status = "Active"
    date_opened: str = ""
    date_sold_out: str = ""
    total_lots: int = 0
    total_sold: int = 0


class HistoricalPrice(BaseModel):
    month: str = ""
    year: str = ""
    base_price: float = 0


class FloorPlan(Record):
    division: str = ""
    community: str = ""
    builder: str = ""
    product_type: str = ""
    floor_plan_name: str = ""
    floor_plan_status: Status = "Active"
    square_feet: float = 0
    stories: float = 0
    bed: float = 0
    bath: float = 0
    garage_parking: str = ""
    primary_bedroom_floor: str = ""
    model_home: str = ""
    elevation: str = ""
    condo_freehold: str = ""
    interior_sf: float = 0
    exterior_sf: float = 0
    condo_amenities: str = ""
    price: float = 0
    bonus: float = 0
    net_price: float = 0
    price_per_sq_ft: float = 0
    net_price_per_sq_ft: float = 0
    maintenance: float = 0
    carrying_cost: float = 0
    historical_pricing: List[HistoricalPrice] = Field(default_factory=list)


class Feature(Record):
    division: str = ""
    feature_category: str = ""
    feature_name: str = ""
    retail_price: float = 0
    feature_type: str = ""


class LookupValue(Record):
    lookup_category: str = ""
    lookup_value: str = ""
    feature_type: str = ""


# --- request / response bodies ---

class ListPageOut(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    page: int
    pages: int
    page_size: int
    start: int
    end: int
    sort: str
    direction: str


class BulkDeleteIn(BaseModel):
    ids: List[str]
    confirm: bool = False


class LookupIn(BaseModel):
    lookup_category: str
    lookup_value: str
    feature_type: str = ""


class LookupUpdate(BaseModel):
    lookup_value: Optional[str] = None
    feature_type: Optional[str] = None


class FieldMappingIn(BaseModel):
    source: str = ""
    target: str


class ImportIn(BaseModel):
    file_name: str
    mode: Literal["add", "update"] = "add"
    division: str = "GTA"
    mappings: List[FieldMappingIn]
    rows: List[Dict[str, Any]]


class ImportIssueOut(BaseModel):
    row: int
    field: str
    message: str
    severity: Literal["error", "warning"]


class ImportResultOut(BaseModel):
    status: str
    total: int
    imported: int
    skipped: int
    errors: int
    issues: List[ImportIssueOut]


class ExportIn(BaseModel):
    format: Literal["xlsx", "csv", "pdf"] = "csv"
    division: str = "all"
    status: str = "all"
    community: str = "all"
    columns: Optional[List[str]] = None
