"""Request helpers shared by the blueprints: session cookie, role gate, payloads."""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import g, jsonify, redirect, request

from library_app import config as app_config
from library_app.errors import UnauthorizedError, ValidationError
from library_app.services import access_gate
from library_app.utils.constants import SESSION_COOKIE
from library_app.utils.logging import get_logger

LOG = get_logger("routes.guards")


def session_token() -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE) or None


def set_session_cookie(response, token: str):
    response.set_cookie(
        SESSION_COOKIE,
        token,
        path="/",
        httponly=True,
        secure=app_config.cookie_secure(),
        samesite="Lax",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response


def require_role(required: str, *, page: bool = False) -> Callable:
    """Gate a view on the caller's session.

    The resolved identity is stored on ``g.identity``. API views let the
    UnauthorizedError reach the app error handler; page views redirect to
    ``/`` instead.
    """

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.identity = access_gate.authorize(session_token(), required)
            except UnauthorizedError:
                if page:
                    return redirect("/")
                raise
            return view(*args, **kwargs)

        return wrapper

    return decorator


def wants_json() -> bool:
    if request.is_json:
        return True
    best = request.accept_mimetypes.best_match(["application/json", "text/html"])
    return best == "application/json" and request.accept_mimetypes[best] > request.accept_mimetypes["text/html"]


def request_payload() -> Dict[str, Any]:
    """JSON body or form fields as a plain dict."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("invalid_payload", "Request body must be a JSON object.")
        return data
    return request.form.to_dict()


def json_ok(payload: Any, status: int = 200):
    return jsonify(payload), status


__all__ = [
    "session_token",
    "set_session_cookie",
    "clear_session_cookie",
    "require_role",
    "wants_json",
    "request_payload",
    "json_ok",
]
