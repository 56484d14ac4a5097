"""Repository helpers for catalog rows.

Unlike the user/session helpers these take the caller's session, because
every copy-count change is one step of a larger transaction (checkout,
return, restock, delete) opened by the service layer.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from library_app.db.models import Book, Loan


def get_book(session: Session, book_id: int) -> Optional[Book]:
    return session.get(Book, book_id)


def get_by_isbn(session: Session, isbn: str) -> Optional[Book]:
    return session.execute(select(Book).where(Book.isbn == isbn)).scalar_one_or_none()


def get_available_copies(session: Session, book_id: int) -> Optional[int]:
    return session.execute(
        select(Book.available_copies).where(Book.id == book_id)
    ).scalar_one_or_none()


def insert_book(
    session: Session,
    *,
    title: str,
    author: str,
    isbn: str,
    year_of_publication: Optional[int],
    genre: Optional[str],
    copies: int,
) -> Book:
    book = Book(
        title=title,
        author=author,
        isbn=isbn,
        year_of_publication=year_of_publication,
        genre=genre,
        total_copies=copies,
        available_copies=copies,
    )
    session.add(book)
    session.flush()
    return book


def add_copies(session: Session, book_id: int, copies: int) -> None:
    """Restock: raise both counters by ``copies``."""
    session.execute(
        update(Book)
        .where(Book.id == book_id)
        .values(
            total_copies=Book.total_copies + copies,
            available_copies=Book.available_copies + copies,
        )
        .execution_options(synchronize_session=False)
    )


def decrement_available(session: Session, book_id: int) -> bool:
    """Take one copy; False when none is left (nothing changed)."""
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.available_copies > 0)
        .values(available_copies=Book.available_copies - 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def increment_available(session: Session, book_id: int) -> bool:
    """Put one copy back, never above total_copies."""
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.available_copies < Book.total_copies)
        .values(available_copies=Book.available_copies + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_book(session: Session, book_id: int) -> bool:
    deleted = session.query(Book).filter(Book.id == book_id).delete(synchronize_session=False)
    return bool(deleted)


def resync_available_copies(session: Session, book_id: Optional[int] = None) -> int:
    """Recompute available = total - active loans; return corrected row count."""
    active_loans = (
        select(func.count(Loan.id))
        .where(Loan.book_id == Book.id, Loan.return_date.is_(None))
        .scalar_subquery()
    )
    expected = Book.total_copies - active_loans
    drifted = select(Book.id).where(Book.available_copies != expected)
    if book_id is not None:
        drifted = drifted.where(Book.id == book_id)
    drifted_ids = list(session.execute(drifted).scalars())
    if not drifted_ids:
        return 0
    session.execute(
        update(Book)
        .where(Book.id.in_(drifted_ids))
        .values(available_copies=expected)
        .execution_options(synchronize_session=False)
    )
    return len(drifted_ids)


def list_books(
    session: Session,
    *,
    term: Optional[str] = None,
    only_available: bool = False,
) -> List[Book]:
    """All books ordered by id, optionally filtered by a case-insensitive term."""
    query = select(Book)
    if term:
        needle = term.lower()
        query = query.where(
            or_(
                func.lower(Book.title).contains(needle, autoescape=True),
                func.lower(Book.author).contains(needle, autoescape=True),
                func.lower(Book.isbn).contains(needle, autoescape=True),
                func.lower(func.coalesce(Book.genre, "")).contains(needle, autoescape=True),
            )
        )
    if only_available:
        query = query.where(Book.available_copies > 0)
    return list(session.execute(query.order_by(Book.id)).scalars())


__all__ = [
    "get_book",
    "get_by_isbn",
    "get_available_copies",
    "insert_book",
    "add_copies",
    "decrement_available",
    "increment_available",
    "delete_book",
    "resync_available_copies",
    "list_books",
]
