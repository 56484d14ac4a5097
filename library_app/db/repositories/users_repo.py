"""Repository helpers for registered users (caller-supplied session)."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_app.db.models import User


class UserExistsError(Exception):
    """Raised when attempting to insert a duplicate username."""


def get_by_username(session: Session, username: str) -> Optional[User]:
    return session.execute(select(User).where(User.username == username)).scalar_one_or_none()


def find_user_id(session: Session, username: str) -> Optional[int]:
    """In-transaction lookup used by the ledger."""
    return session.execute(select(User.id).where(User.username == username)).scalar_one_or_none()


def create_user(session: Session, username: str, password_digest: str, role: str) -> User:
    user = User(username=username, password_digest=password_digest, role=role)
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        raise UserExistsError("User already exists for username") from exc
    return user


def list_users(session: Session) -> List[User]:
    return list(session.execute(select(User).order_by(User.id)).scalars())


__all__ = [
    "UserExistsError",
    "get_by_username",
    "find_user_id",
    "create_user",
    "list_users",
]
