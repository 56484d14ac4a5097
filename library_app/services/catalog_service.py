"""Catalog store: add/restock, update, delete, list and search books.

Copy counts move only inside write transactions. Reads that present
availability re-derive it from active loans in the same transaction first.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from library_app.db import run_in_transaction
from library_app.db.repositories import books_repo, loans_repo
from library_app.errors import ConflictError, NotFoundError, ValidationError
from library_app.utils.logging import get_logger
from library_app.utils.parsing import coerce_int, optional_int, optional_text, required_text

LOG = get_logger("catalog_service")

_DESCRIPTIVE_FIELDS = ("title", "author", "isbn", "year_of_publication", "genre")


def _log_drift(corrected: int) -> None:
    if corrected:
        LOG.warning("Availability drift corrected on %s book(s)", corrected)


def add_or_increment(
    title: str,
    author: str,
    isbn: str,
    year: Optional[int] = None,
    genre: Optional[str] = None,
    copies: int = 1,
) -> Dict[str, Any]:
    """Insert a book, or restock the existing one with the same ISBN."""
    clean_title = required_text(title, "title_required")
    clean_author = required_text(author, "author_required")
    clean_isbn = required_text(isbn, "isbn_required")
    clean_year = optional_int(year, "year_invalid")
    clean_genre = optional_text(genre)
    clean_copies = coerce_int(copies, "copies_invalid", minimum=1)

    def _work(session) -> Dict[str, Any]:
        existing = books_repo.get_by_isbn(session, clean_isbn)
        if existing is not None:
            books_repo.add_copies(session, existing.id, clean_copies)
            return {"book_id": existing.id, "status": "incremented"}
        book = books_repo.insert_book(
            session,
            title=clean_title,
            author=clean_author,
            isbn=clean_isbn,
            year_of_publication=clean_year,
            genre=clean_genre,
            copies=clean_copies,
        )
        return {"book_id": book.id, "status": "created"}

    try:
        result = run_in_transaction(_work)
    except IntegrityError as exc:
        raise ConflictError("isbn_exists", "A book with this ISBN already exists.") from exc
    LOG.info(
        "Catalog %s book_id=%s isbn=%s copies=%s",
        result["status"],
        result["book_id"],
        clean_isbn,
        clean_copies,
    )
    return result


def update(book_id: int, fields: Mapping[str, Any], new_total_copies: int) -> Dict[str, Any]:
    """Update descriptive fields and resize the copy pool.

    The pool cannot shrink below the number of copies currently lent out;
    available copies become ``new_total_copies - checked_out``.
    """
    clean_id = coerce_int(book_id, "book_id_invalid")
    new_total = coerce_int(new_total_copies, "copies_invalid", minimum=0)
    changes: Dict[str, Any] = {}
    for key in _DESCRIPTIVE_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        if key in ("title", "author", "isbn"):
            changes[key] = required_text(value, f"{key}_required")
        elif key == "year_of_publication":
            changes[key] = optional_int(value, "year_invalid")
        else:
            changes[key] = optional_text(value)

    def _work(session) -> Dict[str, Any]:
        book = books_repo.get_book(session, clean_id)
        if book is None:
            raise NotFoundError("book_missing", "Book not found.")
        checked_out = book.total_copies - book.available_copies
        if new_total < checked_out:
            raise ConflictError(
                "copies_below_checked_out",
                "Cannot reduce total copies below number currently checked out.",
            )
        for key, value in changes.items():
            setattr(book, key, value)
        book.total_copies = new_total
        book.available_copies = new_total - checked_out
        session.flush()
        return book.as_dict()

    try:
        updated = run_in_transaction(_work)
    except IntegrityError as exc:
        raise ConflictError("isbn_exists", "A book with this ISBN already exists.") from exc
    LOG.info(
        "Updated book_id=%s total=%s available=%s",
        clean_id,
        updated["total_copies"],
        updated["available_copies"],
    )
    return updated


def delete(book_id: int) -> Dict[str, Any]:
    """Delete a book and its loan history; refused while any loan is active."""
    clean_id = coerce_int(book_id, "book_id_invalid")

    def _work(session) -> Dict[str, Any]:
        if books_repo.get_book(session, clean_id) is None:
            raise NotFoundError("book_missing", "Book not found.")
        active = loans_repo.count_active_for_book(session, clean_id)
        if active > 0:
            raise ConflictError(
                "book_has_active_loans",
                f"Cannot delete book {clean_id}: {active} active loan(s) exist",
            )
        removed_loans = loans_repo.delete_for_book(session, clean_id)
        books_repo.delete_book(session, clean_id)
        return {"book_id": clean_id, "loans_deleted": removed_loans}

    result = run_in_transaction(_work)
    LOG.info("Deleted book_id=%s with %s historical loan(s)", clean_id, result["loans_deleted"])
    return result


def get_book(book_id: int) -> Dict[str, Any]:
    clean_id = coerce_int(book_id, "book_id_invalid")

    def _work(session) -> Dict[str, Any]:
        _log_drift(books_repo.resync_available_copies(session, clean_id))
        book = books_repo.get_book(session, clean_id)
        if book is None:
            raise NotFoundError("book_missing", "Book not found.")
        return book.as_dict()

    return run_in_transaction(_work)


def get_available_copies(book_id: int) -> int:
    return get_book(book_id)["available_copies"]


def list_books(*, only_available: bool = False) -> List[Dict[str, Any]]:
    def _work(session) -> List[Dict[str, Any]]:
        _log_drift(books_repo.resync_available_copies(session))
        return [b.as_dict() for b in books_repo.list_books(session, only_available=only_available)]

    return run_in_transaction(_work)


def search(substring: str, *, only_available: bool = False) -> List[Dict[str, Any]]:
    """Case-insensitive match on title, author, isbn or genre."""
    term = (substring or "").strip() if isinstance(substring, str) else ""
    if not term:
        raise ValidationError("query_required", "Search term is required.")

    def _work(session) -> List[Dict[str, Any]]:
        _log_drift(books_repo.resync_available_copies(session))
        books = books_repo.list_books(session, term=term, only_available=only_available)
        return [b.as_dict() for b in books]

    return run_in_transaction(_work)


__all__ = [
    "add_or_increment",
    "update",
    "delete",
    "get_book",
    "get_available_copies",
    "list_books",
    "search",
]
