"""Repository helpers for loan rows (caller-supplied session)."""
from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from library_app.db.models import Book, Loan, User

# (loan, username, title)
LoanDetail = Tuple[Loan, str, str]


def get_loan(session: Session, loan_id: int) -> Optional[Loan]:
    return session.get(Loan, loan_id)


def has_active_loan(session: Session, user_id: int, book_id: int) -> bool:
    count = session.execute(
        select(func.count(Loan.id)).where(
            Loan.user_id == user_id,
            Loan.book_id == book_id,
            Loan.return_date.is_(None),
        )
    ).scalar_one()
    return count > 0


def count_active_for_book(session: Session, book_id: int) -> int:
    return session.execute(
        select(func.count(Loan.id)).where(Loan.book_id == book_id, Loan.return_date.is_(None))
    ).scalar_one()


def insert_loan(
    session: Session,
    *,
    user_id: int,
    book_id: int,
    checkout_date: date,
    due_date: date,
) -> Loan:
    loan = Loan(
        user_id=user_id,
        book_id=book_id,
        checkout_date=checkout_date,
        due_date=due_date,
        return_date=None,
    )
    session.add(loan)
    session.flush()
    return loan


def mark_returned(session: Session, loan_id: int, return_date: date) -> bool:
    """Set return_date on an active loan; False when it was already returned."""
    result = session.execute(
        update(Loan)
        .where(Loan.id == loan_id, Loan.return_date.is_(None))
        .values(return_date=return_date)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_for_book(session: Session, book_id: int) -> int:
    deleted = session.query(Loan).filter(Loan.book_id == book_id).delete(synchronize_session=False)
    return int(deleted or 0)


def list_loan_details(
    session: Session,
    *,
    username: Optional[str] = None,
    active_only: bool = False,
    due_before: Optional[date] = None,
    due_on_or_after: Optional[date] = None,
) -> List[LoanDetail]:
    """Loans joined with their user and book, ordered by loan id."""
    query = (
        select(Loan, User.username, Book.title)
        .join(User, User.id == Loan.user_id)
        .join(Book, Book.id == Loan.book_id)
    )
    if username is not None:
        query = query.where(User.username == username)
    if active_only:
        query = query.where(Loan.return_date.is_(None))
    if due_before is not None:
        query = query.where(Loan.due_date < due_before)
    if due_on_or_after is not None:
        query = query.where(Loan.due_date >= due_on_or_after)
    rows = session.execute(query.order_by(Loan.id)).all()
    return [(row[0], row[1], row[2]) for row in rows]


__all__ = [
    "LoanDetail",
    "get_loan",
    "has_active_loan",
    "count_active_for_book",
    "insert_loan",
    "mark_returned",
    "delete_for_book",
    "list_loan_details",
]
