# valuegraph/exporter.py
"""Export a filtered collection as a table of display-formatted cells."""
import csv
import io
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .entities import EntityKind, get_spec
from .listing import filter_records
from .store import AppState
from .utils import format_currency, format_date, logger

FORMATS = ("xlsx", "csv", "pdf")
WRITABLE_FORMATS = ("csv",)
PREVIEW_ROWS = 5

CURRENCY_COLUMNS = ("maintenance", "carrying_cost")
DATE_COLUMNS = ("created_at", "updated_at", "date_opened", "date_sold_out")


class UnsupportedExportFormat(ValueError):
    pass


@dataclass
class ExportTable:
    kind: EntityKind
    columns: List[str]
    rows: List[List[str]]

    @property
    def preview(self) -> List[List[str]]:
        return self.rows[:PREVIEW_ROWS]


def format_cell(column: str, value: Any) -> str:
    if value is None:
        return "-"
    if "price" in column or column in CURRENCY_COLUMNS:
        return format_currency(value)
    if column in DATE_COLUMNS:
        return format_date(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_filters(kind, division: str = "all", status: str = "all",
                   community: str = "all") -> Dict[str, str]:
    """Map the export screen's filters onto the collection's filter fields."""
    spec = get_spec(kind)
    filters = {"division": division}
    if spec.kind is EntityKind.COMMUNITIES:
        filters["status"] = status
    elif spec.kind is EntityKind.FLOOR_PLANS:
        filters["floor_plan_status"] = status
        filters["community"] = community
    return {k: v for k, v in filters.items() if k in spec.filters}


def build_table(state: AppState, kind, filters: Optional[Dict[str, str]] = None,
                columns: Optional[Sequence[str]] = None) -> ExportTable:
    spec = get_spec(kind)
    columns = list(spec.export_columns if columns is None else columns)
    if not columns:
        raise ValueError("Please select at least one column to export")
    unknown = [c for c in columns if c not in spec.model.model_fields]
    if unknown:
        raise ValueError(f"{spec.label} has no column(s) {', '.join(unknown)}")
    records = filter_records(spec, state.collection(kind), filters=filters)
    rows = [[format_cell(c, getattr(r, c)) for c in columns] for r in records]
    return ExportTable(spec.kind, columns, rows)


def write_csv(table: ExportTable) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(table.columns)
    writer.writerows(table.rows)
    return buf.getvalue()


def export(state: AppState, kind, fmt: str = "csv", filters: Optional[Dict[str, str]] = None,
           columns: Optional[Sequence[str]] = None) -> str:
    if fmt not in FORMATS:
        raise ValueError(f"Export format must be one of {FORMATS}, got {fmt!r}")
    if fmt not in WRITABLE_FORMATS:
        raise UnsupportedExportFormat(f"{fmt.upper()} export is not available, use CSV")
    table = build_table(state, kind, filters, columns)
    logger.info("Exporting %d %s as %s", len(table.rows), table.kind.value, fmt.upper())
    return write_csv(table)
