"""Error taxonomy shared by the store, services and routes.

Every error carries a short machine code (``str(exc)``), a human-readable
``message`` and the HTTP ``status`` the transport answers with.
"""
from __future__ import annotations

from typing import Optional


class LibraryError(RuntimeError):
    """Base error for ledger, catalog and access failures."""

    status = 500
    default_message = "Internal error."

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(code)
        self.code = code
        self.message = message or self.default_message

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(LibraryError, ValueError):
    """Raised for malformed or missing input, before any mutation."""

    status = 400
    default_message = "Invalid input."


class NotFoundError(LibraryError):
    """Raised when a username, book id or loan id does not resolve."""

    status = 404
    default_message = "Not found."


class ConflictError(LibraryError):
    """Raised when a business rule forbids the operation."""

    status = 409
    default_message = "Operation conflicts with current state."


class UnauthorizedError(LibraryError):
    """Raised for missing, expired or role-mismatched sessions.

    The code is always ``unauthorized`` so callers cannot tell a missing
    session from a wrong role.
    """

    status = 401
    default_message = "Authentication required."

    def __init__(self, code: str = "unauthorized", message: Optional[str] = None):
        super().__init__(code, message)


class StoreError(LibraryError):
    """Raised when a store transaction cannot complete (after bounded retry)."""

    status = 503
    default_message = "Storage is temporarily unavailable."


class CredentialError(LibraryError):
    """Raised when the password verifier itself fails (e.g. malformed digest)."""

    status = 500
    default_message = "Credential verification failed."


__all__ = [
    "LibraryError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "StoreError",
    "CredentialError",
]
