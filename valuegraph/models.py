# valuegraph/models.py
"""SQLAlchemy ORM models for persisted state.

The whole console is stored as one JSON snapshot per storage key.
"""
from sqlalchemy import Column, Integer, Text, JSON, TIMESTAMP, func
from .db import Base

class Snapshot(Base):
    __tablename__ = "snapshots"
    id = Column(Integer, primary_key=True, index=True)
    storage_key = Column(Text, nullable=False, unique=True, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
