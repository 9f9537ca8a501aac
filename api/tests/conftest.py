import os
import time

# Must be in place before group_search.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RECORD_SOURCE", "postgres")
os.environ.setdefault("DISPLAY_LOCALE", "en")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from group_search.db import init_db
from group_search.schemas import GroupRecord


class FakeSource:
    """In-memory record source that remembers what it was asked for."""

    def __init__(self, rows=(), error=None):
        self.rows = [r if isinstance(r, GroupRecord) else GroupRecord(**r) for r in rows]
        self.error = error
        self.calls = []

    def fetch(self, q=None):
        self.calls.append(q)
        if self.error is not None:
            raise self.error
        if not q:
            return list(self.rows)
        needle = q.lower()
        return [
            r for r in self.rows
            if any(needle in (getattr(r, f) or "").lower() for f in ("title", "description", "writer"))
        ]


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process timezone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")

    def use(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield use
    monkeypatch.undo()
    time.tzset()
