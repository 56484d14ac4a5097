"""Application initialization / wiring.

Orchestrates: DB init, route registration, error rendering and the
maintenance CLI commands (``flask --app library_app init-db`` /
``purge-sessions``).
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

import click
from flask import Flask, jsonify

from library_app import config as app_config
from library_app.db import init_engine_once
from library_app.errors import LibraryError
from library_app.routes import register_all as register_routes
from library_app.services import ledger_service, session_service
from library_app.utils.logging import get_logger

LOG = get_logger("library.startup")


def _render_library_error(exc: LibraryError):
    if exc.status >= 500:
        LOG.error("Request failed code=%s: %s", exc.code, exc.message)
    return jsonify(exc.as_dict()), exc.status


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create the schema and reconcile availability."""
        init_engine_once()
        corrected = ledger_service.sync_availability()
        click.echo(f"Database ready at {app_config.get_db_path()} ({corrected} book(s) corrected)")

    @app.cli.command("purge-sessions")
    def purge_sessions_command():
        """Delete expired session rows."""
        removed = session_service.purge_expired()
        click.echo(f"Purged {removed} expired session(s)")


def init_app(app: Any) -> None:
    LOG.debug("init_app starting")
    init_engine_once()
    LOG.debug("DB engine initialized")
    register_routes(app)
    app.register_error_handler(LibraryError, _render_library_error)
    _register_cli(app)
    LOG.info("App startup wiring complete config=%s", app_config.summarize_runtime_config())


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask("library_app")
    app.config["SECRET_KEY"] = app_config.secret_key()
    # The ledger session token owns the "session" cookie name.
    app.config["SESSION_COOKIE_NAME"] = "library_flask"
    if overrides:
        app.config.update(overrides)
    init_app(app)
    return app


__all__ = ["create_app", "init_app"]
