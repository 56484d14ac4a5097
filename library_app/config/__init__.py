"""Application configuration accessors.

Centralizes environment variable parsing & defaults so the rest of the
package never reads ``os.environ`` directly. Accessors are plain functions
(evaluated on every call) so tests can ``monkeypatch.setenv`` freely.
"""
from __future__ import annotations

import os
import secrets
from functools import lru_cache

APP_NAME = "library_app"
APP_VERSION = "0.4.0"
APP_DESCRIPTION = "Library loan ledger with role-gated sessions"

DEFAULT_DB_PATH = "library.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SESSION_TTL_HOURS = 24
DEFAULT_LOAN_PERIOD_DAYS = 14
DEFAULT_BUSY_TIMEOUT = 5.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000
_TRUE = {"1", "true", "yes", "on"}


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE


def env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = _raw_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = _raw_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def get_db_path() -> str:
    raw = _raw_env("LIBRARY_DB_PATH", DEFAULT_DB_PATH) or DEFAULT_DB_PATH
    if not os.path.isabs(raw):
        data_dir = os.getenv("LIBRARY_DATA_DIR")
        if data_dir:
            return os.path.join(data_dir, raw)
    return raw


def log_level_name() -> str:
    return (_raw_env("LIBRARY_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()


def session_ttl_hours() -> int:
    return env_int("LIBRARY_SESSION_TTL_HOURS", DEFAULT_SESSION_TTL_HOURS, minimum=1)


def loan_period_days() -> int:
    return env_int("LIBRARY_LOAN_PERIOD_DAYS", DEFAULT_LOAN_PERIOD_DAYS, minimum=1)


def db_busy_timeout() -> float:
    """Seconds SQLite waits on a locked database before raising."""
    return env_float("LIBRARY_DB_BUSY_TIMEOUT", DEFAULT_BUSY_TIMEOUT)


def db_retry_attempts() -> int:
    return env_int("LIBRARY_DB_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS, minimum=1)


def server_host() -> str:
    return _raw_env("LIBRARY_HOST", DEFAULT_HOST) or DEFAULT_HOST


def server_port() -> int:
    return env_int("LIBRARY_PORT", DEFAULT_PORT, minimum=1)


def cookie_secure() -> bool:
    return env_bool("LIBRARY_COOKIE_SECURE", default=False)


@lru_cache(maxsize=1)
def _generated_secret() -> str:
    return secrets.token_hex(32)


def secret_key() -> str:
    """Flask SECRET_KEY (random per process when LIBRARY_SECRET_KEY is unset)."""
    value = os.getenv("LIBRARY_SECRET_KEY")
    if value and value.strip():
        return value.strip()
    return _generated_secret()


@lru_cache(maxsize=1)
def metadata() -> dict:
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    }


def summarize_runtime_config() -> dict:
    return {
        "db_path": get_db_path(),
        "log_level": log_level_name(),
        "session_ttl_hours": session_ttl_hours(),
        "loan_period_days": loan_period_days(),
        "db_busy_timeout": db_busy_timeout(),
        "db_retry_attempts": db_retry_attempts(),
    }


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "APP_DESCRIPTION",
    "env_bool",
    "env_int",
    "env_float",
    "get_db_path",
    "log_level_name",
    "session_ttl_hours",
    "loan_period_days",
    "db_busy_timeout",
    "db_retry_attempts",
    "cookie_secure",
    "server_host",
    "server_port",
    "secret_key",
    "metadata",
    "summarize_runtime_config",
]
