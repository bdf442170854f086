# valuegraph/crud.py
"""Read, upsert and delete helpers for the persisted `Snapshot` row."""
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy import func
from sqlalchemy.orm import Session
from .models import Snapshot
from typing import Dict, Any, Optional

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}

def upsert_snapshot(db: Session, storage_key: str, payload: Dict[str, Any]):
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        # no native upsert: read-modify-write in the session
        obj = db.query(Snapshot).filter(Snapshot.storage_key == storage_key).first()
        if obj is None:
            db.add(Snapshot(storage_key=storage_key, payload=payload))
        else:
            obj.payload = payload
        db.commit()
        return
    table = Snapshot.__table__
    stmt = insert(table).values(storage_key=storage_key, payload=payload)
    stmt = stmt.on_conflict_do_update(
        index_elements=["storage_key"],
        set_={"payload": stmt.excluded.payload, "updated_at": func.now()},
    )
    db.execute(stmt)
    db.commit()

def get_snapshot(db: Session, storage_key: str) -> Optional[Dict[str, Any]]:
    obj = db.query(Snapshot).filter(Snapshot.storage_key == storage_key).first()
    return obj.payload if obj else None

def delete_snapshot(db: Session, storage_key: str):
    obj = db.query(Snapshot).filter(Snapshot.storage_key == storage_key).first()
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True
