"""Tests for session creation, resolution and lazy expiry."""
from __future__ import annotations

from datetime import timedelta

from library_app.services import session_service
from library_app.services.session_service import Identity


def test_create_and_resolve(frozen_clock):
    token = session_service.create("ann", "lender")
    assert len(token) >= 43
    assert session_service.resolve(token) == Identity(username="ann", role="lender")


def test_tokens_are_unique(frozen_clock):
    tokens = {session_service.create("ann", "lender") for _ in range(5)}
    assert len(tokens) == 5


def test_resolve_unknown_or_empty_token():
    assert session_service.resolve(None) is None
    assert session_service.resolve("") is None
    assert session_service.resolve("missing") is None


def test_expired_session_is_deleted_on_lookup(frozen_clock):
    token = session_service.create("ann", "lender", ttl=timedelta(hours=1))
    frozen_clock.advance(minutes=59)
    assert session_service.resolve(token) is not None

    frozen_clock.advance(minutes=2)
    assert session_service.resolve(token) is None
    assert session_service.count() == 0


def test_default_ttl_comes_from_config(monkeypatch, frozen_clock):
    monkeypatch.setenv("LIBRARY_SESSION_TTL_HOURS", "2")
    token = session_service.create("ann", "admin")
    frozen_clock.advance(hours=1, minutes=59)
    assert session_service.resolve(token) is not None
    frozen_clock.advance(minutes=2)
    assert session_service.resolve(token) is None


def test_destroy_removes_session(frozen_clock):
    token = session_service.create("ann", "lender")
    session_service.destroy(token)
    assert session_service.resolve(token) is None
    session_service.destroy(token)


def test_purge_expired(frozen_clock):
    session_service.create("ann", "lender", ttl=timedelta(minutes=5))
    keep = session_service.create("bob", "lender", ttl=timedelta(days=1))
    frozen_clock.advance(hours=1)

    assert session_service.purge_expired() == 1
    assert session_service.count() == 1
    assert session_service.resolve(keep) is not None
