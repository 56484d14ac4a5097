"""Time source for due dates, overdue detection and session expiry.

Callers go through the module (``clock.utcnow()``) rather than importing the
functions directly, so tests can move time with ``monkeypatch.setattr``.
Timestamps are naive UTC, matching what SQLite stores.
"""
from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """Calendar date (UTC) used for loan status; derived from utcnow()."""
    return utcnow().date()


__all__ = ["utcnow", "today"]
