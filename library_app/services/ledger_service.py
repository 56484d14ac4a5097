"""Loan ledger: checkout, return and availability sync.

Checkout and return are the only places that move ``available_copies`` for
loans. Each runs in one ``BEGIN IMMEDIATE`` transaction, so two checkouts of
the same book serialize on the store's write lock; the decrement is also
conditional on ``available_copies > 0`` so a lost update cannot push the
count below zero.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from library_app import config as app_config
from library_app.db import run_in_transaction
from library_app.db.repositories import books_repo, loans_repo, users_repo
from library_app.errors import ConflictError, NotFoundError
from library_app.utils import clock
from library_app.utils.constants import LOAN_BORROWED, LOAN_OVERDUE, LOAN_RETURNED
from library_app.utils.identity import normalize_username
from library_app.utils.logging import get_logger
from library_app.utils.parsing import coerce_int

LOG = get_logger("ledger_service")


def loan_status(due_date: date, return_date: Optional[date], today: Optional[date] = None) -> str:
    if return_date is not None:
        return LOAN_RETURNED
    current = today if today is not None else clock.today()
    if due_date < current:
        return LOAN_OVERDUE
    return LOAN_BORROWED


def sync_availability() -> int:
    """Recompute every book's available copies from its active loans.

    Returns the number of rows that had drifted. Running it twice changes
    nothing the second time.
    """
    corrected = run_in_transaction(books_repo.resync_available_copies)
    if corrected:
        LOG.warning("Availability sync corrected %s book(s)", corrected)
    else:
        LOG.debug("Availability sync found no drift")
    return corrected


def checkout(username: str, book_id: int) -> int:
    """Lend one copy of ``book_id`` to ``username``; returns the new loan id."""
    clean_username = normalize_username(username) or ""
    clean_book_id = coerce_int(book_id, "book_id_invalid")
    checkout_date = clock.today()
    due_date = checkout_date + timedelta(days=app_config.loan_period_days())

    def _work(session) -> int:
        user_id = users_repo.find_user_id(session, clean_username)
        if user_id is None:
            raise NotFoundError("user_missing", "User not found.")
        available = books_repo.get_available_copies(session, clean_book_id)
        if available is None:
            raise NotFoundError("book_missing", "Book not found.")
        if available <= 0:
            raise ConflictError("not_available", "Book not available.")
        if loans_repo.has_active_loan(session, user_id, clean_book_id):
            raise ConflictError("already_borrowed", "You already borrowed this book.")
        loan = loans_repo.insert_loan(
            session,
            user_id=user_id,
            book_id=clean_book_id,
            checkout_date=checkout_date,
            due_date=due_date,
        )
        if not books_repo.decrement_available(session, clean_book_id):
            raise ConflictError("not_available", "Book not available.")
        return loan.id

    try:
        loan_id = run_in_transaction(_work)
    except ConflictError as exc:
        LOG.info("Checkout refused book_id=%s username=%s reason=%s", clean_book_id, clean_username, exc)
        raise
    except IntegrityError as exc:
        # Partial unique index on active (user, book) pairs.
        raise ConflictError("already_borrowed", "You already borrowed this book.") from exc
    LOG.info(
        "Checked out book_id=%s username=%s loan_id=%s due=%s",
        clean_book_id,
        clean_username,
        loan_id,
        due_date.isoformat(),
    )
    return loan_id


def return_loan(loan_id: int, username: Optional[str] = None) -> Dict[str, Any]:
    """Close a loan and put its copy back.

    When ``username`` is given the loan must belong to that user; a loan owned
    by someone else is reported as missing. Returning an already-returned
    loan is a no-op success (``returned`` is False in the result).
    """
    clean_loan_id = coerce_int(loan_id, "loan_id_invalid")
    return_date = clock.today()

    def _work(session) -> Dict[str, Any]:
        loan = loans_repo.get_loan(session, clean_loan_id)
        if loan is None:
            raise NotFoundError("loan_missing", "Loan not found.")
        if username is not None:
            owner_id = users_repo.find_user_id(session, normalize_username(username) or "")
            if owner_id is None or owner_id != loan.user_id:
                raise NotFoundError("loan_missing", "Loan not found.")
        returned = loans_repo.mark_returned(session, clean_loan_id, return_date)
        if returned and not books_repo.increment_available(session, loan.book_id):
            LOG.warning("Return of loan_id=%s found book_id=%s already at full availability", clean_loan_id, loan.book_id)
        return {"loan_id": clean_loan_id, "book_id": loan.book_id, "returned": returned}

    result = run_in_transaction(_work)
    if result["returned"]:
        LOG.info("Returned loan_id=%s book_id=%s", clean_loan_id, result["book_id"])
    else:
        LOG.info("Return of loan_id=%s ignored (already returned)", clean_loan_id)
    return result


__all__ = ["loan_status", "sync_availability", "checkout", "return_loan"]
