"""Admin JSON API under /admin/api.

Routes:
    GET    /admin/api/users            -> all users (no password digests)
    GET    /admin/api/books            -> catalog with availability status
    POST   /admin/api/books            -> add a book or restock by ISBN
    PUT    /admin/api/books/<id>       -> update fields and total copies
    DELETE /admin/api/books/<id>       -> delete (refused with active loans)
    GET    /admin/api/loans            -> every loan with its status
    GET    /admin/api/overdue          -> active loans past due
    POST   /admin/api/sync             -> recompute availability from loans

All routes require an admin session.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, g

from library_app.services import catalog_service, ledger_service, reporting_service
from library_app.utils.constants import ROLE_ADMIN
from library_app.utils.logging import get_logger

from .guards import json_ok, request_payload, require_role

LOG = get_logger("routes.admin_api")
bp = Blueprint("admin_api", __name__, url_prefix="/admin/api")


@bp.before_request
@require_role(ROLE_ADMIN)
def _gate():
    return None


@bp.route("/users", methods=["GET"])
def list_users():
    return json_ok({"users": reporting_service.list_users()})


@bp.route("/books", methods=["GET"])
def list_books():
    return json_ok({"books": reporting_service.list_books()})


@bp.route("/books", methods=["POST"])
def add_book():
    data = request_payload()
    result = catalog_service.add_or_increment(
        data.get("title"),
        data.get("author"),
        data.get("isbn"),
        year=data.get("year_of_publication", data.get("year")),
        genre=data.get("genre"),
        copies=data.get("copies", 1),
    )
    LOG.info("Admin %s %s book_id=%s", g.identity.username, result["status"], result["book_id"])
    return json_ok(result, 201 if result["status"] == "created" else 200)


@bp.route("/books/<int:book_id>", methods=["PUT"])
def update_book(book_id: int):
    data = request_payload()
    fields = {k: v for k, v in data.items() if k != "total_copies"}
    book = catalog_service.update(book_id, fields, data.get("total_copies"))
    return json_ok({"book": book})


@bp.route("/books/<int:book_id>", methods=["DELETE"])
def delete_book(book_id: int):
    return json_ok(catalog_service.delete(book_id))


@bp.route("/loans", methods=["GET"])
def list_loans():
    return json_ok({"loans": reporting_service.list_loans()})


@bp.route("/overdue", methods=["GET"])
def list_overdue():
    return json_ok({"loans": reporting_service.list_overdue()})


@bp.route("/sync", methods=["POST"])
def sync():
    return json_ok({"corrected": ledger_service.sync_availability()})


def register_admin_api(app: Any) -> None:
    if getattr(app, "_admin_api_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_admin_api_bp", bp)
    LOG.debug("admin api blueprint registered")


__all__ = ["bp", "register_admin_api"]
