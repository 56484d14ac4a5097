"""Server-side session store.

Tokens are opaque, URL-safe and carry 256 bits of entropy. A session stores
the username and the role it was created with; `resolve()` trusts that copy
and never consults the users table. Expiry is lazy: the first lookup after
`expires_at` deletes the row and reports no session.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from library_app import config as app_config
from library_app.db import run_in_transaction
from library_app.db.repositories import sessions_repo
from library_app.db.repositories.sessions_repo import SessionTokenExistsError
from library_app.errors import StoreError
from library_app.utils import clock
from library_app.utils.logging import get_logger

LOG = get_logger("session_service")
_TOKEN_BYTES = 32
_TOKEN_ATTEMPTS = 3


@dataclass(frozen=True)
class Identity:
    username: str
    role: str


def _default_ttl() -> timedelta:
    return timedelta(hours=app_config.session_ttl_hours())


def open_in(session: Session, username: str, role: str, ttl: Optional[timedelta] = None) -> str:
    """Insert a session row inside the caller's transaction; returns the token.

    A token collision raises SessionTokenExistsError and the caller's whole
    transaction is expected to roll back.
    """
    expires_at = clock.utcnow() + (ttl if ttl is not None else _default_ttl())
    token = secrets.token_urlsafe(_TOKEN_BYTES)
    sessions_repo.insert_session(
        session,
        token=token,
        username=username,
        role=role,
        expires_at=expires_at,
    )
    return token


def with_fresh_token(work):
    """Run ``work(session)`` in a write transaction, retrying token collisions."""
    for _ in range(_TOKEN_ATTEMPTS):
        try:
            return run_in_transaction(work)
        except SessionTokenExistsError:
            LOG.warning("Session token collision; retrying with a new token")
    raise StoreError("session_token_collision")


def create(username: str, role: str, ttl: Optional[timedelta] = None) -> str:
    """Persist a new session and return its token."""
    token = with_fresh_token(lambda session: open_in(session, username, role, ttl))
    LOG.info("Created session username=%s role=%s", username, role)
    return token


def resolve(token: Optional[str]) -> Optional[Identity]:
    if not token:
        return None

    def _lookup(session):
        record = sessions_repo.get_session(session, token)
        if record is None:
            return None
        return record.username, record.role, record.expires_at

    found = run_in_transaction(_lookup, write=False)
    if found is None:
        return None
    username, role, expires_at = found
    if clock.utcnow() > expires_at:
        run_in_transaction(lambda session: sessions_repo.delete_session(session, token))
        LOG.debug("Expired session removed username=%s", username)
        return None
    return Identity(username=username, role=role)


def destroy(token: Optional[str]) -> None:
    if not token:
        return
    if run_in_transaction(lambda session: sessions_repo.delete_session(session, token)):
        LOG.info("Session destroyed")


def purge_expired() -> int:
    """Delete every expired session row (maintenance sweep)."""
    now = clock.utcnow()
    removed = run_in_transaction(lambda session: sessions_repo.delete_expired(session, now))
    if removed:
        LOG.info("Purged %s expired session(s)", removed)
    return removed


def count(username: Optional[str] = None) -> int:
    return run_in_transaction(lambda session: sessions_repo.count_sessions(session, username), write=False)


__all__ = ["Identity", "open_in", "with_fresh_token", "create", "resolve", "destroy", "purge_expired", "count"]
