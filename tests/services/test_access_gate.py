"""Tests for role-based authorization decisions."""
from __future__ import annotations

import pytest

from library_app.errors import UnauthorizedError
from library_app.services import access_gate, session_service


@pytest.fixture
def tokens(frozen_clock):
    return {
        "admin": session_service.create("root", "admin"),
        "lender": session_service.create("ann", "lender"),
    }


def test_role_match_returns_identity(tokens):
    identity = access_gate.authorize(tokens["admin"], "admin")
    assert identity.username == "root"
    assert identity.role == "admin"


def test_any_accepts_every_role(tokens):
    assert access_gate.authorize(tokens["lender"], "any").role == "lender"
    assert access_gate.authorize(tokens["admin"], "any").role == "admin"


def test_public_never_raises(tokens):
    assert access_gate.authorize(None, "public") is None
    assert access_gate.authorize(tokens["lender"], "public").username == "ann"


def test_missing_session_and_wrong_role_are_indistinguishable(tokens):
    with pytest.raises(UnauthorizedError) as missing:
        access_gate.authorize(None, "admin")
    with pytest.raises(UnauthorizedError) as wrong_role:
        access_gate.authorize(tokens["lender"], "admin")
    assert str(missing.value) == str(wrong_role.value) == "unauthorized"
    assert missing.value.message == wrong_role.value.message


def test_expired_session_is_unauthorized(tokens, frozen_clock):
    frozen_clock.advance(days=2)
    assert access_gate.is_allowed(tokens["admin"], "admin") is False


def test_unknown_level_is_a_programming_error(tokens):
    with pytest.raises(ValueError):
        access_gate.authorize(tokens["admin"], "superuser")
