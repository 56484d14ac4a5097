"""Service exports."""

from . import (
    access_gate,
    accounts_service,
    catalog_service,
    credentials,
    ledger_service,
    reporting_service,
    session_service,
)
from .session_service import Identity

__all__ = [
    "access_gate",
    "accounts_service",
    "catalog_service",
    "credentials",
    "ledger_service",
    "reporting_service",
    "session_service",
    "Identity",
]
