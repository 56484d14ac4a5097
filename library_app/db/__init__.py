"""Database layer root: engine, sessions and the transaction runner."""

from .engine import (
    init_engine_once,
    get_engine,
    get_session_factory,
    app_session,
    run_in_transaction,
)

__all__ = [
    "init_engine_once",
    "get_engine",
    "get_session_factory",
    "app_session",
    "run_in_transaction",
]
