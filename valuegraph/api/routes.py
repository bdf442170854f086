# valuegraph/api/routes.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import ValidationError

from .. import schemas
from ..deletion import request_bulk_delete, request_delete
from ..editor import DERIVED_FIELDS, RecordEditor, RecordValidationError
from ..entities import EntityKind, EntitySpec, get_spec
from ..exporter import UnsupportedExportFormat, build_table, export, export_filters
from ..importer import FieldMapping, ImportFileRejected, ImportJob, suggest_mappings
from ..listing import ListQuery, Selection, distinct_values, list_page
from ..services import community_progress, dashboard_summary, group_lookups, lookup_options, reference_options
from ..store import PROTECTED_FIELDS, EntityStore, RecordNotFound
from ..utils import logger

router = APIRouter()


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def _spec(kind: str) -> EntitySpec:
    try:
        return get_spec(kind)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _out(spec: EntitySpec, record) -> Dict[str, Any]:
    data = record.model_dump(mode="json")
    if spec.kind is EntityKind.COMMUNITIES:
        data["progress"] = community_progress(record)
    return data


def _save(editor: RecordEditor, values: Dict[str, Any]):
    # echoed read-only keys (id, timestamps, derived prices) are ignored
    read_only = set(PROTECTED_FIELDS) | {"updated_at"} | set(DERIVED_FIELDS)
    values = {k: v for k, v in values.items() if k not in read_only}
    try:
        editor.update(**values)
        return editor.save()
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": e.message})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/dashboard")
def dashboard(store: EntityStore = Depends(get_store)):
    return dashboard_summary(store.state)


@router.get("/references")
def references(division: str = "", store: EntityStore = Depends(get_store)):
    return reference_options(store.state, division)


@router.get("/entities/{kind}", response_model=schemas.ListPageOut)
def list_entities(
    kind: str,
    request: Request,
    q: str = "",
    sort: Optional[str] = Query(None),
    direction: str = Query("asc"),
    page: int = Query(1, ge=1),
    store: EntityStore = Depends(get_store)
):
    spec = _spec(kind)
    # filters arrive as filter.<field>=<value>
    filters = {
        key[len("filter."):]: value
        for key, value in request.query_params.items() if key.startswith("filter.")
    }
    try:
        res = list_page(spec.kind, store.records(spec.kind), ListQuery(q, filters, sort, direction, page))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return schemas.ListPageOut(
        items=[_out(spec, r) for r in res.items],
        total=res.total,
        page=res.page,
        pages=res.pages,
        page_size=res.page_size,
        start=res.start,
        end=res.end,
        sort=res.sort,
        direction=res.direction,
    )


@router.get("/entities/{kind}/options/{field}")
def filter_options(kind: str, field: str, store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    try:
        return {"field": field, "values": distinct_values(spec.kind, store.records(spec.kind), field)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/entities/{kind}", status_code=201)
def create_entity(kind: str, payload: Dict[str, Any] = Body(...), store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    editor = RecordEditor(store, spec.kind)
    editor.open_add()
    return _out(spec, _save(editor, payload))


@router.post("/entities/{kind}/bulk-delete")
def bulk_delete(kind: str, payload: schemas.BulkDeleteIn, store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    pending = request_bulk_delete(store, spec.kind, Selection(payload.ids))
    if not payload.confirm:
        return {"status": "confirmation_required", "count": pending.count, "prompt": pending.prompt}
    count = pending.confirm()
    return {"status": "deleted", "count": count, "message": f"{count} {spec.plural} deleted"}


@router.get("/entities/{kind}/{record_id}")
def get_entity(kind: str, record_id: str, store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    try:
        return _out(spec, store.get(spec.kind, record_id))
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/entities/{kind}/{record_id}")
def update_entity(kind: str, record_id: str, payload: Dict[str, Any] = Body(...),
                  store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    editor = RecordEditor(store, spec.kind)
    try:
        editor.open_edit(record_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _out(spec, _save(editor, payload))


@router.post("/entities/{kind}/{record_id}/duplicate", status_code=201)
def duplicate_entity(kind: str, record_id: str, payload: Optional[Dict[str, Any]] = Body(None),
                     store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    editor = RecordEditor(store, spec.kind)
    try:
        editor.open_duplicate(record_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _out(spec, _save(editor, payload or {}))


@router.delete("/entities/{kind}/{record_id}")
def delete_entity(kind: str, record_id: str, confirm: bool = False,
                  store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    pending = request_delete(store, spec.kind, record_id)
    if not confirm:
        return {"status": "confirmation_required", "count": 1, "prompt": pending.prompt}
    pending.confirm()
    return {"status": "deleted", "message": f"{spec.label} deleted"}


@router.get("/lookups")
def lookups(store: EntityStore = Depends(get_store)):
    return {
        category: [lv.model_dump(mode="json") for lv in values]
        for category, values in group_lookups(store.state).items()
    }


@router.get("/lookups/{category}")
def lookup_category(category: str, store: EntityStore = Depends(get_store)):
    return {"category": category, "values": lookup_options(store.state, category)}


@router.post("/lookups", status_code=201)
def create_lookup(payload: schemas.LookupIn, store: EntityStore = Depends(get_store)):
    editor = RecordEditor(store, EntityKind.LOOKUPS)
    editor.open_add()
    return _save(editor, payload.model_dump()).model_dump(mode="json")


@router.patch("/lookups/{record_id}")
def update_lookup(record_id: str, payload: schemas.LookupUpdate, store: EntityStore = Depends(get_store)):
    editor = RecordEditor(store, EntityKind.LOOKUPS)
    try:
        editor.open_edit(record_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _save(editor, payload.model_dump(exclude_unset=True)).model_dump(mode="json")


@router.delete("/lookups/{record_id}")
def delete_lookup(record_id: str, confirm: bool = False, store: EntityStore = Depends(get_store)):
    pending = request_delete(store, EntityKind.LOOKUPS, record_id)
    if not confirm:
        return {"status": "confirmation_required", "count": 1, "prompt": pending.prompt}
    pending.confirm()
    return {"status": "deleted", "message": "Lookup value deleted"}


@router.post("/import/{kind}/mappings")
def import_mappings(kind: str, source_columns: List[str] = Body(..., embed=True)):
    spec = _spec(kind)
    return [vars(m) for m in suggest_mappings(spec.kind, source_columns)]


def _import_job(kind: str, payload: schemas.ImportIn, store: EntityStore) -> ImportJob:
    spec = _spec(kind)
    try:
        return ImportJob(
            store, spec.kind, payload.file_name, mode=payload.mode, division=payload.division,
            mappings=[FieldMapping(m.target, m.source) for m in payload.mappings],
        )
    except ImportFileRejected as e:
        raise HTTPException(status_code=415, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/import/{kind}/validate")
def validate_import(kind: str, payload: schemas.ImportIn, store: EntityStore = Depends(get_store)):
    job = _import_job(kind, payload, store)
    issues = job.validate(payload.rows)
    bad_rows = {i.row for i in issues if i.severity == "error"}
    return {
        "valid_records": len(payload.rows) - len(bad_rows),
        "issues": [vars(i) for i in issues],
    }


@router.post("/import/{kind}", response_model=schemas.ImportResultOut)
def run_import(kind: str, payload: schemas.ImportIn, store: EntityStore = Depends(get_store)):
    job = _import_job(kind, payload, store)
    result = job.run(payload.rows)
    return schemas.ImportResultOut(
        status=result.status,
        total=result.total,
        imported=result.imported,
        skipped=result.skipped,
        errors=result.errors,
        issues=[schemas.ImportIssueOut(**vars(i)) for i in result.issues],
    )


@router.post("/export/{kind}/preview")
def export_preview(kind: str, payload: schemas.ExportIn, store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    filters = export_filters(spec.kind, payload.division, payload.status, payload.community)
    try:
        table = build_table(store.state, spec.kind, filters, payload.columns)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"columns": table.columns, "rows": table.preview, "total": len(table.rows)}


@router.post("/export/{kind}")
def run_export(kind: str, payload: schemas.ExportIn, store: EntityStore = Depends(get_store)):
    spec = _spec(kind)
    filters = export_filters(spec.kind, payload.division, payload.status, payload.community)
    try:
        body = export(store.state, spec.kind, payload.format, filters, payload.columns)
    except UnsupportedExportFormat as e:
        logger.warning("Export of %s refused: %s", spec.plural, e)
        raise HTTPException(status_code=501, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{spec.kind.value}.csv"'},
    )
