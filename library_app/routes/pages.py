"""Landing pages. Role pages bounce unauthorized callers back to ``/``."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, g, jsonify

from library_app import config as app_config
from library_app.services import access_gate, reporting_service
from library_app.utils.constants import ACCESS_PUBLIC, ROLE_ADMIN, ROLE_LENDER
from library_app.utils.logging import get_logger

from .guards import require_role, session_token

LOG = get_logger("routes.pages")
bp = Blueprint("pages", __name__)


@bp.route("/", methods=["GET"])
def index():
    identity = access_gate.authorize(session_token(), ACCESS_PUBLIC)
    payload = dict(app_config.metadata())
    payload["signed_in"] = identity is not None
    if identity is not None:
        payload["username"] = identity.username
        payload["role"] = identity.role
    return jsonify(payload)


@bp.route("/admin", methods=["GET"])
@require_role(ROLE_ADMIN, page=True)
def admin_home():
    return jsonify({"username": g.identity.username, "summary": reporting_service.dashboard_summary()})


@bp.route("/lender", methods=["GET"])
@require_role(ROLE_LENDER, page=True)
def lender_home():
    username = g.identity.username
    return jsonify(
        {
            "username": username,
            "loans": reporting_service.my_loans(username),
            "overdue": reporting_service.list_overdue(username),
        }
    )


def register_pages(app: Any) -> None:
    if getattr(app, "_pages_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_pages_bp", bp)
    LOG.debug("pages blueprint registered")


__all__ = ["bp", "register_pages"]
