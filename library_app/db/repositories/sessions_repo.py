"""Repository helpers for server-side login sessions (caller-supplied session).

Services run these inside `run_in_transaction`, so lock contention is
retried and surfaces as StoreError like every other store access.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_app.db.models import UserSession


class SessionTokenExistsError(Exception):
    """Raised when a generated token collides with a stored one."""


def insert_session(
    session: Session,
    *,
    token: str,
    username: str,
    role: str,
    expires_at: datetime,
) -> UserSession:
    record = UserSession(token=token, username=username, role=role, expires_at=expires_at)
    session.add(record)
    try:
        session.flush()
    except IntegrityError as exc:
        raise SessionTokenExistsError("Session token already stored") from exc
    return record


def get_session(session: Session, token: str) -> Optional[UserSession]:
    return session.get(UserSession, token)


def delete_session(session: Session, token: str) -> bool:
    """Delete the row for ``token``; False when nothing was stored."""
    result = session.execute(delete(UserSession).where(UserSession.token == token))
    return result.rowcount > 0


def delete_expired(session: Session, now: datetime) -> int:
    result = session.execute(delete(UserSession).where(UserSession.expires_at < now))
    return int(result.rowcount or 0)


def count_sessions(session: Session, username: Optional[str] = None) -> int:
    query = select(func.count()).select_from(UserSession)
    if username is not None:
        query = query.where(UserSession.username == username)
    return session.execute(query).scalar_one()


__all__ = [
    "SessionTokenExistsError",
    "insert_session",
    "get_session",
    "delete_session",
    "delete_expired",
    "count_sessions",
]
