# valuegraph/importer.py
"""Spreadsheet import: mapping, row validation and the import task.

Reading the spreadsheet itself happens outside this module; callers hand in
the source column names and the parsed rows (one dict per row, keyed by
source column). Each accepted row goes through the same add/update path as
the record editor.
"""
import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, get_args, get_origin

from .editor import blank_form, coerce_form
from .entities import DEFAULT_DIVISION, get_spec
from .schemas import Record
from .services import lookup_options
from .store import EntityStore
from .utils import logger

ACCEPTED_EXTENSIONS = (".xlsx", ".xls", ".csv")
MODES = ("add", "update")
POSTAL_CODE = re.compile(r"^[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d$")

ProgressCallback = Callable[[int, int], None]


class ImportFileRejected(ValueError):
    pass


@dataclass
class FieldMapping:
    target: str
    source: str = ""


@dataclass
class ImportIssue:
    row: int
    field: str
    message: str
    severity: str = "error"


@dataclass
class ImportResult:
    status: str
    total: int
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    issues: List[ImportIssue] = field(default_factory=list)


def check_file_name(file_name: str) -> str:
    ext = os.path.splitext(file_name or "")[1].lower()
    if ext not in ACCEPTED_EXTENSIONS:
        raise ImportFileRejected(
            "Invalid file format. Please upload .xlsx, .xls, or .csv files."
        )
    return ext


def _normalize(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


def suggest_mappings(kind, source_columns: Sequence[str]) -> List[FieldMapping]:
    """One mapping per import field, pre-filled where a source column name matches."""
    by_name = {_normalize(col): col for col in source_columns}
    return [
        FieldMapping(target, by_name.get(_normalize(target), ""))
        for target in get_spec(kind).import_fields
    ]


class ImportJob:
    def __init__(self, store: EntityStore, kind, file_name: str, mode: str = "add",
                 division: str = DEFAULT_DIVISION, mappings: Iterable[FieldMapping] = ()):
        self.store = store
        self.spec = get_spec(kind)
        self.ext = check_file_name(file_name)
        self.file_name = file_name
        if mode not in MODES:
            raise ValueError(f"Import mode must be one of {MODES}, got {mode!r}")
        self.mode = mode
        self.division = division
        self.mappings = list(mappings)
        for m in self.mappings:
            if m.target not in self.spec.import_fields:
                raise ValueError(f"{self.spec.label} has no import field {m.target!r}")
        self.cancelled = False

    @property
    def mapped(self) -> List[FieldMapping]:
        return [m for m in self.mappings if m.source]

    def cancel(self):
        self.cancelled = True

    def map_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Values for the mapped target fields only."""
        return {m.target: row.get(m.source) for m in self.mapped if m.source in row}

    def check_row(self, number: int, values: Dict[str, Any]) -> Tuple[Dict[str, Any], List[ImportIssue]]:
        form = blank_form(self.spec)
        if "division" in form:
            form["division"] = self.division
        form.update({k: v for k, v in values.items() if v not in (None, "")})
        issues = []
        if self.mode == "add":
            for rule in self.spec.rules:
                if not rule.check(form.get(rule.field)):
                    issues.append(ImportIssue(number, rule.field, rule.message))
        division = form.get("division")
        divisions = lookup_options(self.store.state, "Division")
        # with no Division lookups defined there is nothing to check against
        if division and divisions and division not in divisions:
            issues.append(ImportIssue(number, "division", f"Division value '{division}' is not valid"))
        for name in self.spec.numeric_fields():
            raw = values.get(name)
            if raw in (None, ""):
                continue
            try:
                float(raw)
            except (TypeError, ValueError):
                issues.append(ImportIssue(number, name, f"Value '{raw}' is not a number"))
        for name, raw in values.items():
            choices = self._choices(name)
            if choices and raw not in (None, "") and raw not in choices:
                issues.append(ImportIssue(number, name, f"Value '{raw}' is not one of {', '.join(choices)}"))
        postal = values.get("postal_code")
        if postal and not POSTAL_CODE.match(str(postal).strip()):
            issues.append(ImportIssue(number, "postal_code", "Postal code format appears incorrect", "warning"))
        return form, issues

    def _choices(self, name) -> Tuple[str, ...]:
        info = self.spec.model.model_fields.get(name)
        if info is None or get_origin(info.annotation) is not Literal:
            return ()
        return get_args(info.annotation)

    def validate(self, rows: Sequence[Dict[str, Any]]) -> List[ImportIssue]:
        issues = []
        for number, row in enumerate(rows, start=1):
            issues.extend(self.check_row(number, self.map_row(row))[1])
        return issues

    def _match(self, name) -> Optional[Record]:
        wanted = str(name or "").strip().lower()
        for record in self.store.records(self.spec.kind):
            if self.spec.display_name(record).strip().lower() == wanted:
                return record
        return None

    def run(self, rows: Sequence[Dict[str, Any]], progress: Optional[ProgressCallback] = None) -> ImportResult:
        result = ImportResult(status="completed", total=len(rows))
        for number, row in enumerate(rows, start=1):
            if self.cancelled:
                result.status = "cancelled"
                break
            values = self.map_row(row)
            form, issues = self.check_row(number, values)
            result.issues.extend(issues)
            if any(i.severity == "error" for i in issues):
                result.errors += 1
            else:
                try:
                    self._write(number, form, values, result)
                except ValueError as e:
                    logger.warning("Import row %d of %s failed: %s", number, self.file_name, e)
                    result.errors += 1
                    result.issues.append(ImportIssue(number, "", str(e)))
            if progress is not None:
                progress(number, result.total)
        logger.info("Import of %s into %s %s: %d imported, %d skipped, %d errors",
                    self.file_name, self.spec.plural, result.status,
                    result.imported, result.skipped, result.errors)
        return result

    def _write(self, number: int, form: Dict[str, Any], values: Dict[str, Any], result: ImportResult):
        kind = self.spec.kind
        if self.mode == "add":
            self.store.add(kind, self.store.new_record(kind, coerce_form(self.spec, form)))
            result.imported += 1
            return
        existing = self._match(values.get(self.spec.name_field))
        if existing is None:
            result.skipped += 1
            result.issues.append(ImportIssue(
                number, self.spec.name_field,
                f"No existing {self.spec.label.lower()} named '{values.get(self.spec.name_field)}'",
                "warning",
            ))
            return
        # the name column only identifies the record
        patch = coerce_form(self.spec, {
            k: v for k, v in values.items()
            if v not in (None, "") and k != self.spec.name_field
        })
        self.store.update(kind, existing.id, patch)
        result.imported += 1
