"""Database engine, session & transaction management.

One SQLite engine per process, created lazily by `init_engine_once()`.
Writers open their transaction with ``BEGIN IMMEDIATE`` so that concurrent
read-modify-write sequences (checkout, return, copy adjustments) serialize
on the database write lock instead of racing. Lock waits are bounded by the
SQLite busy timeout plus a small, bounded retry in `run_in_transaction()`.
"""
from __future__ import annotations

import os, threading, time
try:  # POSIX file locking for multi-worker schema creation
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - non-POSIX fallback
    fcntl = None  # type: ignore
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session as SASession

from library_app import config as app_config
from library_app.db.models import Base
from library_app.errors import StoreError
from library_app.utils.logging import get_logger

T = TypeVar("T")

_engine: Optional[Engine] = None
_SessionFactory: Optional[Callable[[], SASession]] = None
_LOCK = threading.Lock()
_BEGIN_OPTION = "library_begin"
_LOCK_MESSAGES = ("database is locked", "database table is locked", "database is busy")
_INITIAL_BACKOFF = 0.05

LOG = get_logger("library.db")


def _install_sqlite_hooks(engine: Engine) -> None:
    """Hand transaction control to SQLAlchemy so BEGIN mode can be chosen."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):  # pragma: no cover - exercised via engine
        # Disable pysqlite's implicit BEGIN; the "begin" hook emits our own.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # pragma: no cover - exercised via engine
        mode = conn.get_execution_options().get(_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def init_engine_once() -> None:
    global _engine, _SessionFactory
    if _engine is not None:
        return
    with _LOCK:
        if _engine is not None:
            return
        db_path = app_config.get_db_path()
        LOG.info("Initializing library database engine at %s", db_path)
        parent_dir = os.path.dirname(os.path.abspath(db_path)) or "."
        os.makedirs(parent_dir, exist_ok=True)
        if not os.access(parent_dir, os.W_OK):
            raise RuntimeError(f"library DB directory not writable: {parent_dir}")
        engine = create_engine(
            f"sqlite:///{db_path}",
            future=True,
            connect_args={
                "timeout": app_config.db_busy_timeout(),
                "check_same_thread": False,
            },
        )
        _install_sqlite_hooks(engine)
        _engine = engine
        _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False, class_=SASession)
        # Cross-process lock so several workers starting together do not
        # race on CREATE TABLE.
        lock_path = os.path.join(parent_dir, ".library_schema.lock")
        if fcntl is not None:
            with open(lock_path, "w") as lf:
                try:
                    fcntl.flock(lf, fcntl.LOCK_EX)
                    _safe_create_schema()
                finally:
                    fcntl.flock(lf, fcntl.LOCK_UN)
        else:
            _safe_create_schema()
        LOG.debug("library schema ready")


def _safe_create_schema() -> None:
    """Run metadata.create_all, tolerating a concurrent creator."""
    try:
        if _engine is None:
            return
        Base.metadata.create_all(_engine)
    except OperationalError as e:  # pragma: no cover - concurrency edge
        if "already exists" in str(e).lower():
            LOG.warning("Schema create encountered existing tables (benign race)")
        else:
            raise


def get_engine() -> Engine:
    if _engine is None:
        init_engine_once()
    return _engine  # type: ignore[return-value]


def get_session_factory() -> Callable[[], SASession]:
    if _SessionFactory is None:
        init_engine_once()
    if _SessionFactory is None:
        raise RuntimeError("Session factory could not be initialized.")
    return _SessionFactory


@contextmanager
def app_session(*, write: bool = False) -> Iterator[SASession]:
    """Yield a session wrapped in one transaction (commit on success)."""
    sess = get_session_factory()()
    try:
        if write:
            # Must run before the first statement so BEGIN IMMEDIATE is used.
            sess.connection(execution_options={_BEGIN_OPTION: "IMMEDIATE"})
        yield sess
        sess.commit()
    except Exception:
        sess.rollback()
        raise
    finally:
        sess.close()


def is_lock_error(exc: BaseException) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return any(fragment in message for fragment in _LOCK_MESSAGES)


def run_in_transaction(
    work: Callable[[SASession], T],
    *,
    write: bool = True,
    attempts: Optional[int] = None,
) -> T:
    """Run ``work(session)`` atomically, retrying briefly on lock contention.

    Any exception raised by ``work`` rolls the whole transaction back. Lock
    errors are retried up to ``attempts`` times with exponential backoff;
    other operational failures (and exhausted retries) raise StoreError.
    """
    max_attempts = attempts or app_config.db_retry_attempts()
    delay = _INITIAL_BACKOFF
    for attempt in range(1, max_attempts + 1):
        try:
            with app_session(write=write) as session:
                return work(session)
        except OperationalError as exc:
            if is_lock_error(exc) and attempt < max_attempts:
                LOG.warning(
                    "Store locked (attempt %s/%s); retrying in %.2fs",
                    attempt,
                    max_attempts,
                    delay,
                )
                time.sleep(delay)
                delay *= 2
                continue
            LOG.error("Store transaction failed after %s attempt(s): %s", attempt, exc)
            code = "store_locked" if is_lock_error(exc) else "store_failure"
            raise StoreError(code) from exc
    raise StoreError("store_failure")  # pragma: no cover - loop always returns/raises


def reset_for_tests(drop: bool = False) -> None:
    global _engine, _SessionFactory
    with _LOCK:
        if _engine is not None:
            if drop:
                try:
                    Base.metadata.drop_all(_engine)
                except Exception:
                    LOG.warning("Failed dropping tables during reset", exc_info=True)
            _engine.dispose()
        _engine = None
        _SessionFactory = None


__all__ = [
    "init_engine_once",
    "get_engine",
    "get_session_factory",
    "app_session",
    "is_lock_error",
    "run_in_transaction",
    "reset_for_tests",
]
