"""Register / login / logout endpoints.

Success sets the ``session`` cookie (HttpOnly, path ``/``) and redirects to the
role's landing page, or answers JSON when the client sent or asked for JSON.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, redirect

from library_app.services import accounts_service
from library_app.services.accounts_service import AuthResult
from library_app.utils.constants import ROLE_ADMIN
from library_app.utils.logging import get_logger

from .guards import clear_session_cookie, request_payload, session_token, set_session_cookie, wants_json

LOG = get_logger("routes.auth")
bp = Blueprint("auth", __name__)


def _landing_for(role: str) -> str:
    return "/admin" if role == ROLE_ADMIN else "/lender"


def _signed_in(result: AuthResult, status: int):
    if wants_json():
        response = jsonify({"username": result.username, "role": result.role, "redirect": _landing_for(result.role)})
        response.status_code = status
    else:
        response = redirect(_landing_for(result.role))
    return set_session_cookie(response, result.token)


@bp.route("/register", methods=["POST"])
def register():
    data = request_payload()
    result = accounts_service.register(
        data.get("username"),
        data.get("password"),
        data.get("role"),
    )
    return _signed_in(result, 201)


@bp.route("/login", methods=["POST"])
def login():
    data = request_payload()
    result = accounts_service.login(data.get("username"), data.get("password"))
    return _signed_in(result, 200)


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    accounts_service.logout(session_token())
    return clear_session_cookie(redirect("/"))


def register_auth(app: Any) -> None:
    if getattr(app, "_auth_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_auth_bp", bp)
    LOG.debug("auth blueprint registered")


__all__ = ["bp", "register_auth"]
