"""Read-only admin and lender views over the ledger and catalog."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from library_app.db import run_in_transaction
from library_app.db.repositories import books_repo, loans_repo, users_repo
from library_app.services import catalog_service
from library_app.services.ledger_service import loan_status
from library_app.utils import clock
from library_app.utils.constants import LOAN_BORROWED
from library_app.utils.logging import get_logger

LOG = get_logger("reporting_service")


@dataclass
class LoanView:
    loan_id: int
    username: str
    title: str
    checkout_date: str
    due_date: str
    return_date: Optional[str]
    status: str


@dataclass
class OverdueView:
    loan_id: int
    username: str
    title: str
    due_date: str
    days_overdue: int


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def book_status(available: int, total: int) -> str:
    return f"{available} available, {total - available} checked out"


def list_users() -> List[Dict[str, Any]]:
    users = run_in_transaction(users_repo.list_users, write=False)
    return [user.as_dict() for user in users]


def list_books() -> List[Dict[str, Any]]:
    """Admin book list (availability synced first) with a status string."""
    books = catalog_service.list_books()
    for book in books:
        book["status"] = book_status(book["available_copies"], book["total_copies"])
    return books


def list_loans() -> List[Dict[str, Any]]:
    today = clock.today()
    rows = run_in_transaction(loans_repo.list_loan_details, write=False)
    views = [
        LoanView(
            loan_id=loan.id,
            username=username,
            title=title,
            checkout_date=_iso(loan.checkout_date),
            due_date=_iso(loan.due_date),
            return_date=_iso(loan.return_date),
            status=loan_status(loan.due_date, loan.return_date, today),
        )
        for loan, username, title in rows
    ]
    return [v.__dict__ for v in views]


def list_overdue(username: Optional[str] = None) -> List[Dict[str, Any]]:
    """Active loans past their due date, oldest loan first.

    ``days_overdue`` counts whole days since the due date. With ``username``
    only that user's loans are listed.
    """
    today = clock.today()

    def _work(session):
        return loans_repo.list_loan_details(
            session,
            username=username,
            active_only=True,
            due_before=today,
        )

    rows = run_in_transaction(_work, write=False)
    views = [
        OverdueView(
            loan_id=loan.id,
            username=owner,
            title=title,
            due_date=_iso(loan.due_date),
            days_overdue=(today - loan.due_date).days,
        )
        for loan, owner, title in rows
    ]
    return [v.__dict__ for v in views]


def lender_catalog(query: Optional[str] = None) -> List[Dict[str, Any]]:
    """Books a lender can borrow right now, optionally filtered."""
    if query and query.strip():
        return catalog_service.search(query, only_available=True)
    return catalog_service.list_books(only_available=True)


def my_loans(username: str) -> List[Dict[str, Any]]:
    """The user's active loans that are not yet overdue."""
    today = clock.today()

    def _work(session):
        return loans_repo.list_loan_details(
            session,
            username=username,
            active_only=True,
            due_on_or_after=today,
        )

    rows = run_in_transaction(_work, write=False)
    return [
        LoanView(
            loan_id=loan.id,
            username=owner,
            title=title,
            checkout_date=_iso(loan.checkout_date),
            due_date=_iso(loan.due_date),
            return_date=None,
            status=LOAN_BORROWED,
        ).__dict__
        for loan, owner, title in rows
    ]


def dashboard_summary() -> Dict[str, int]:
    """Counts shown on the admin landing page."""
    today = clock.today()

    def _work(session):
        books = books_repo.list_books(session)
        active = loans_repo.list_loan_details(session, active_only=True)
        return {
            "books": len(books),
            "copies_total": sum(b.total_copies for b in books),
            "copies_available": sum(b.available_copies for b in books),
            "active_loans": len(active),
            "overdue_loans": sum(1 for loan, _u, _t in active if loan.due_date < today),
        }

    return run_in_transaction(_work, write=False)


__all__ = [
    "LoanView",
    "OverdueView",
    "book_status",
    "list_users",
    "list_books",
    "list_loans",
    "list_overdue",
    "lender_catalog",
    "my_loans",
    "dashboard_summary",
]
