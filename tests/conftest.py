"""Shared fixtures: a fresh file-backed SQLite database per test and a movable clock."""
from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta

import pytest

from library_app.db import engine as db_engine
from library_app.db.engine import init_engine_once, reset_for_tests
from library_app.utils import clock


@pytest.fixture(autouse=True)
def library_db(monkeypatch, tmp_path):
    reset_for_tests(drop=True)
    db_path = tmp_path / "library.db"
    monkeypatch.setenv("LIBRARY_DB_PATH", str(db_path))
    init_engine_once()
    yield db_path
    reset_for_tests(drop=True)


class FrozenClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def frozen_clock(monkeypatch):
    frozen = FrozenClock(datetime(2024, 3, 1, 9, 0, 0))
    monkeypatch.setattr(clock, "utcnow", frozen)
    return frozen


@pytest.fixture
def write_locked_store(monkeypatch, library_db):
    """Hold the database write lock from a second connection.

    The engine is rebuilt with a short busy timeout so blocked writers give up
    quickly; the retry backoff sleep is skipped.
    """
    monkeypatch.setenv("LIBRARY_DB_BUSY_TIMEOUT", "0.2")
    monkeypatch.setenv("LIBRARY_DB_RETRY_ATTEMPTS", "2")
    monkeypatch.setattr(db_engine.time, "sleep", lambda _s: None)
    reset_for_tests()
    init_engine_once()
    holder = sqlite3.connect(str(library_db), isolation_level=None)
    holder.execute("BEGIN IMMEDIATE")
    try:
        yield holder
    finally:
        holder.execute("ROLLBACK")
        holder.close()
