"""Access gate: session token -> authorization decision.

An operation declares what it needs: ``public``, ``any`` (any authenticated
user) or a concrete role. No session and the wrong role produce the same
UnauthorizedError so a prober learns nothing about which roles exist.
"""
from __future__ import annotations

from typing import Optional

from library_app.errors import UnauthorizedError
from library_app.services import session_service
from library_app.services.session_service import Identity
from library_app.utils.constants import ACCESS_ANY, ACCESS_PUBLIC, ROLES
from library_app.utils.logging import get_logger

LOG = get_logger("access_gate")
_LEVELS = ROLES | {ACCESS_PUBLIC, ACCESS_ANY}


def authorize(token: Optional[str], required: str) -> Optional[Identity]:
    if required not in _LEVELS:
        raise ValueError(f"unknown access level: {required}")
    identity = session_service.resolve(token)
    if required == ACCESS_PUBLIC:
        return identity
    if identity is None:
        raise UnauthorizedError()
    if required != ACCESS_ANY and identity.role != required:
        LOG.info("Denied username=%s role=%s required=%s", identity.username, identity.role, required)
        raise UnauthorizedError()
    return identity


def is_allowed(token: Optional[str], required: str) -> bool:
    try:
        authorize(token, required)
    except UnauthorizedError:
        return False
    return True


__all__ = ["authorize", "is_allowed"]
