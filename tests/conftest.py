# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from valuegraph.db import Base
from valuegraph.store import EntityStore
import valuegraph.models  # noqa: F401


class TickingClock:
    """Advances one second per call so successive writes get distinct timestamps."""

    def __init__(self, start=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(session_factory, clock):
    s = EntityStore(session_factory, storage_key="test-storage", clock=clock)
    s.load(seed=False)
    return s


@pytest.fixture
def seeded_store(session_factory, clock):
    s = EntityStore(session_factory, storage_key="test-storage", clock=clock)
    s.load(seed=True)
    return s


@pytest.fixture
def make(store):
    def _make(kind, **fields):
        return store.add(kind, store.new_record(kind, fields))
    return _make
