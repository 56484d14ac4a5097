"""Tests for the maintenance CLI commands."""
from __future__ import annotations

from datetime import timedelta

from library_app.services import session_service


def test_init_db_reports_path(app, library_db):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert str(library_db) in result.output
    assert "0 book(s) corrected" in result.output


def test_purge_sessions(app, frozen_clock):
    session_service.create("ann", "lender", ttl=timedelta(minutes=1))
    session_service.create("bob", "lender")
    frozen_clock.advance(hours=1)

    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0
    assert "Purged 1 expired session(s)" in result.output
    assert session_service.count() == 1
