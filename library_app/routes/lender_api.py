"""Lender JSON API under /lender/api. Every route acts as the session's user."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, g, request

from library_app.services import ledger_service, reporting_service
from library_app.utils.constants import ROLE_LENDER
from library_app.utils.logging import get_logger

from .guards import json_ok, require_role

LOG = get_logger("routes.lender_api")
bp = Blueprint("lender_api", __name__, url_prefix="/lender/api")


@bp.before_request
@require_role(ROLE_LENDER)
def _gate():
    return None


@bp.route("/books", methods=["GET"])
def list_books():
    return json_ok({"books": reporting_service.lender_catalog()})


@bp.route("/search", methods=["GET"])
def search():
    query = (request.args.get("q") or "").strip()
    if not query:
        return json_ok({"books": []})
    return json_ok({"books": reporting_service.lender_catalog(query)})


@bp.route("/myloans", methods=["GET"])
def my_loans():
    return json_ok({"loans": reporting_service.my_loans(g.identity.username)})


@bp.route("/checkout/<int:book_id>", methods=["POST"])
def checkout(book_id: int):
    loan_id = ledger_service.checkout(g.identity.username, book_id)
    return json_ok({"loan_id": loan_id, "book_id": book_id}, 201)


@bp.route("/return/<int:loan_id>", methods=["POST"])
def return_loan(loan_id: int):
    return json_ok(ledger_service.return_loan(loan_id, username=g.identity.username))


@bp.route("/overdue", methods=["GET"])
def overdue():
    return json_ok({"loans": reporting_service.list_overdue(g.identity.username)})


def register_lender_api(app: Any) -> None:
    if getattr(app, "_lender_api_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_lender_api_bp", bp)
    LOG.debug("lender api blueprint registered")


__all__ = ["bp", "register_lender_api"]
