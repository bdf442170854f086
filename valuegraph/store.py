# valuegraph/store.py
"""Application state and the store that owns and persists it.

`AppState` is an immutable-by-convention value: the module-level mutation
functions return a new state and never touch the one they were given.
`EntityStore` holds the current state for the process, restores it from the
snapshot row at startup and writes it back after every mutation.
"""
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from . import crud
from .db import SessionLocal, STORAGE_KEY
from .entities import EntityKind, EntitySpec, get_spec
from .pricing import floor_plan_pricing
from .schemas import Builder, Product, Community, FloorPlan, Feature, LookupValue, Record
from .seed import seed_collections
from .utils import logger

PROTECTED_FIELDS = ("id", "created_at")


class RecordNotFound(KeyError):
    def __init__(self, kind, record_id):
        super().__init__(record_id)
        self.kind = kind
        self.record_id = record_id

    def __str__(self):
        return f"{get_spec(self.kind).label} {self.record_id} not found"


class AppState(BaseModel):
    builders: List[Builder] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    communities: List[Community] = Field(default_factory=list)
    floor_plans: List[FloorPlan] = Field(default_factory=list)
    features: List[Feature] = Field(default_factory=list)
    lookup_values: List[LookupValue] = Field(default_factory=list)

    def collection(self, kind) -> List[Record]:
        return getattr(self, get_spec(kind).collection)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def with_derived_fields(spec: EntitySpec, record: Record) -> Record:
    if spec.kind is not EntityKind.FLOOR_PLANS:
        return record
    return record.model_copy(update=floor_plan_pricing(record.price, record.bonus, record.square_feet))


def _replace(state: AppState, spec: EntitySpec, items: List[Record]) -> AppState:
    return state.model_copy(update={spec.collection: items})


def add_record(state: AppState, kind, record: Record) -> AppState:
    spec = get_spec(kind)
    record = with_derived_fields(spec, record)
    return _replace(state, spec, [*state.collection(kind), record])


def update_record(state: AppState, kind, record_id: str, patch: Dict, now: datetime) -> AppState:
    spec = get_spec(kind)
    items = list(state.collection(kind))
    for idx, current in enumerate(items):
        if current.id == record_id:
            break
    else:
        raise RecordNotFound(spec.kind, record_id)
    data = current.model_dump()
    data.update({k: v for k, v in patch.items() if k not in PROTECTED_FIELDS})
    data["updated_at"] = now
    items[idx] = with_derived_fields(spec, spec.model.model_validate(data))
    return _replace(state, spec, items)


def delete_records(state: AppState, kind, ids: Iterable[str]) -> AppState:
    spec = get_spec(kind)
    doomed = set(ids)
    # absent ids are ignored
    return _replace(state, spec, [r for r in state.collection(kind) if r.id not in doomed])


class EntityStore:
    def __init__(self, session_factory=SessionLocal, storage_key: str = STORAGE_KEY,
                 clock: Callable[[], datetime] = utcnow, state: Optional[AppState] = None):
        self.session_factory = session_factory
        self.storage_key = storage_key
        self.clock = clock
        self.state = state if state is not None else AppState()
        # route handlers run in a threadpool; mutations are serialized
        self._lock = threading.Lock()

    # --- persistence ---

    def load(self, seed: bool = True) -> AppState:
        db = self.session_factory()
        try:
            payload = crud.get_snapshot(db, self.storage_key)
        finally:
            db.close()
        if payload is not None:
            self.state = AppState.model_validate(payload)
            logger.info("Restored snapshot %s", self.storage_key)
        elif seed:
            self.state = AppState(**seed_collections(self.clock()))
            logger.info("No snapshot under %s, seeded demo data", self.storage_key)
            self.flush()
        return self.state

    def flush(self):
        db = self.session_factory()
        try:
            crud.upsert_snapshot(db, self.storage_key, self.state.model_dump(mode="json"))
        finally:
            db.close()
        logger.debug("Flushed snapshot %s", self.storage_key)

    def reset(self, seed: bool = True) -> AppState:
        db = self.session_factory()
        try:
            crud.delete_snapshot(db, self.storage_key)
        finally:
            db.close()
        self.state = AppState()
        return self.load(seed=seed)

    # --- reads ---

    def records(self, kind) -> List[Record]:
        return self.state.collection(kind)

    def get(self, kind, record_id: str) -> Record:
        for record in self.records(kind):
            if record.id == record_id:
                return record
        raise RecordNotFound(get_spec(kind).kind, record_id)

    # --- mutations ---

    def new_record(self, kind, fields: Dict) -> Record:
        spec = get_spec(kind)
        now = self.clock()
        data = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        return spec.model.model_validate({**data, "created_at": now, "updated_at": now})

    def add(self, kind, record: Record) -> Record:
        spec = get_spec(kind)
        with self._lock:
            self.state = add_record(self.state, kind, record)
            self.flush()
            added = self.state.collection(kind)[-1]
        logger.info("Added %s %s", spec.label.lower(), record.id)
        return added

    def update(self, kind, record_id: str, patch: Dict) -> Record:
        spec = get_spec(kind)
        with self._lock:
            self.state = update_record(self.state, kind, record_id, patch, self.clock())
            self.flush()
            updated = self.get(kind, record_id)
        logger.info("Updated %s %s", spec.label.lower(), record_id)
        return updated

    def delete(self, kind, record_id: str) -> bool:
        return self.delete_many(kind, [record_id]) == 1

    def delete_many(self, kind, ids: Iterable[str]) -> int:
        spec = get_spec(kind)
        with self._lock:
            before = len(self.records(kind))
            self.state = delete_records(self.state, kind, ids)
            removed = before - len(self.records(kind))
            self.flush()
        logger.info("Deleted %d %s", removed, spec.plural)
        return removed
