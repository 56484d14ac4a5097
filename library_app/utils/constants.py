"""Role and access-level constants shared by services and routes."""
from __future__ import annotations

ROLE_ADMIN = "admin"
ROLE_LENDER = "lender"
ROLES = frozenset({ROLE_ADMIN, ROLE_LENDER})

# Access levels an operation can declare in addition to a concrete role.
ACCESS_PUBLIC = "public"
ACCESS_ANY = "any"

SESSION_COOKIE = "session"

LOAN_BORROWED = "borrowed"
LOAN_OVERDUE = "overdue"
LOAN_RETURNED = "returned"

__all__ = [
    "ROLE_ADMIN",
    "ROLE_LENDER",
    "ROLES",
    "ACCESS_PUBLIC",
    "ACCESS_ANY",
    "SESSION_COOKIE",
    "LOAN_BORROWED",
    "LOAN_OVERDUE",
    "LOAN_RETURNED",
]
