# valuegraph/editor.py
"""Side-panel record editor: add, edit and duplicate with save-time validation."""
from typing import Any, Dict, List, Optional

from .entities import EntitySpec, get_spec
from .pricing import floor_plan_pricing
from .schemas import HistoricalPrice, Record
from .store import EntityStore, PROTECTED_FIELDS
from .utils import logger

DERIVED_FIELDS = ("net_price", "price_per_sq_ft", "net_price_per_sq_ft")
COPY_SUFFIX = " (Copy)"


class RecordValidationError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def form_fields(spec: EntitySpec) -> List[str]:
    skip = set(PROTECTED_FIELDS) | {"updated_at"} | set(DERIVED_FIELDS)
    return [name for name in spec.model.model_fields if name not in skip]


def blank_form(spec: EntitySpec) -> Dict[str, Any]:
    form = {}
    for name in form_fields(spec):
        info = spec.model.model_fields[name]
        form[name] = info.get_default(call_default_factory=True)
    form.update(spec.defaults)
    return form


def _number(value, cast=float):
    try:
        return cast(float(value)) if value not in (None, "") else cast(0)
    except (TypeError, ValueError):
        return cast(0)


def coerce_form(spec: EntitySpec, form: Dict[str, Any]) -> Dict[str, Any]:
    """Turn raw form input into record values. Unparseable numbers become 0."""
    values = {}
    for name, value in form.items():
        info = spec.model.model_fields.get(name)
        if info is None or name not in form_fields(spec):
            continue
        if info.annotation is int:
            value = _number(value, int)
        elif info.annotation is float:
            value = _number(value)
        elif name == "historical_pricing":
            value = [HistoricalPrice.model_validate(row).model_dump() for row in value or []]
        elif isinstance(value, str):
            value = value.strip() if name == spec.name_field else value
        elif value is None:
            value = ""
        values[name] = value
    return values


def validate_form(spec: EntitySpec, form: Dict[str, Any]):
    # first failing rule wins
    for rule in spec.rules:
        if not rule.check(form.get(rule.field)):
            raise RecordValidationError(rule.field, rule.message)


class RecordEditor:
    def __init__(self, store: EntityStore, kind):
        self.store = store
        self.spec = get_spec(kind)
        self.mode: Optional[str] = None
        self.editing_id: Optional[str] = None
        self.form: Dict[str, Any] = {}
        self.is_open = False
        self.error: Optional[str] = None

    def _open(self, mode, form, editing_id=None):
        self.mode = mode
        self.form = form
        self.editing_id = editing_id
        self.error = None
        self.is_open = True

    def _seed(self, record: Record) -> Dict[str, Any]:
        data = record.model_dump()
        return {name: data[name] for name in form_fields(self.spec)}

    def _resolve(self, record) -> Record:
        if isinstance(record, str):
            return self.store.get(self.spec.kind, record)
        return record

    def open_add(self, **overrides):
        form = blank_form(self.spec)
        form.update(overrides)
        self._open("add", form)

    def open_edit(self, record):
        record = self._resolve(record)
        self._open("edit", self._seed(record), record.id)

    def open_duplicate(self, record):
        record = self._resolve(record)
        form = self._seed(record)
        form[self.spec.name_field] = f"{form[self.spec.name_field]}{COPY_SUFFIX}"
        self._open("duplicate", form)

    def cancel(self):
        self.is_open = False
        self.mode = None
        self.editing_id = None
        self.error = None

    def set(self, name: str, value):
        if name not in form_fields(self.spec):
            raise ValueError(f"{self.spec.label} has no editable field {name!r}")
        self.form[name] = value

    def update(self, **values):
        for name, value in values.items():
            self.set(name, value)

    # historical pricing rows (floor plans)

    def add_price_row(self):
        self.form.setdefault("historical_pricing", []).append(HistoricalPrice().model_dump())

    def remove_price_row(self, index: int):
        rows = self.form.get("historical_pricing", [])
        self.form["historical_pricing"] = [row for i, row in enumerate(rows) if i != index]

    def update_price_row(self, index: int, **values):
        rows = list(self.form.get("historical_pricing", []))
        rows[index] = {**rows[index], **values}
        self.form["historical_pricing"] = rows

    def preview_pricing(self) -> Dict[str, float]:
        return floor_plan_pricing(
            _number(self.form.get("price")),
            _number(self.form.get("bonus")),
            _number(self.form.get("square_feet")),
        )

    def save(self) -> Record:
        if not self.is_open:
            raise RuntimeError("Editor is not open")
        try:
            validate_form(self.spec, self.form)
        except RecordValidationError as e:
            self.error = e.message
            logger.info("Rejected %s save: %s", self.spec.label.lower(), e.message)
            raise
        values = coerce_form(self.spec, self.form)
        if self.mode == "edit":
            current = self.store.get(self.spec.kind, self.editing_id).model_dump()
            patch = {k: v for k, v in values.items() if current.get(k) != v}
            record = self.store.update(self.spec.kind, self.editing_id, patch)
        else:
            record = self.store.add(self.spec.kind, self.store.new_record(self.spec.kind, values))
        self.cancel()
        return record
