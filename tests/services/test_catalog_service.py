"""Tests for catalog add/restock, update, delete, list and search."""
from __future__ import annotations

import pytest
from sqlalchemy import update as sa_update

from library_app.db import app_session
from library_app.db.models import Book, Loan
from library_app.errors import ConflictError, NotFoundError, ValidationError
from library_app.services import accounts_service, catalog_service, ledger_service


def _add(isbn="978-0", title="Dune", author="Frank Herbert", copies=1, **kwargs):
    return catalog_service.add_or_increment(title, author, isbn, copies=copies, **kwargs)


def test_add_new_book():
    result = _add(copies=3, year=1965, genre="SF")
    assert result["status"] == "created"
    book = catalog_service.get_book(result["book_id"])
    assert book["total_copies"] == 3
    assert book["available_copies"] == 3
    assert book["year_of_publication"] == 1965
    assert book["genre"] == "SF"


def test_same_isbn_increments_copies():
    first = _add(copies=2)
    second = _add(title="Different title", copies=3)
    assert second == {"book_id": first["book_id"], "status": "incremented"}
    book = catalog_service.get_book(first["book_id"])
    assert book["title"] == "Dune"
    assert (book["total_copies"], book["available_copies"]) == (5, 5)


@pytest.mark.parametrize(
    "kwargs,code",
    [
        ({"title": " "}, "title_required"),
        ({"author": ""}, "author_required"),
        ({"isbn": ""}, "isbn_required"),
        ({"copies": 0}, "copies_invalid"),
        ({"copies": "many"}, "copies_invalid"),
        ({"year": "soon"}, "year_invalid"),
    ],
)
def test_add_rejects_bad_input(kwargs, code):
    with pytest.raises(ValidationError) as excinfo:
        _add(**kwargs)
    assert str(excinfo.value) == code
    assert catalog_service.list_books() == []


def test_update_fields_and_grow_pool():
    book_id = _add(copies=2)["book_id"]
    updated = catalog_service.update(book_id, {"title": "Dune Messiah", "genre": "Classic"}, 4)
    assert updated["title"] == "Dune Messiah"
    assert updated["genre"] == "Classic"
    assert (updated["total_copies"], updated["available_copies"]) == (4, 4)


def test_update_keeps_checked_out_copies(frozen_clock):
    accounts_service.register("ann", "pw", "lender")
    book_id = _add(copies=3)["book_id"]
    ledger_service.checkout("ann", book_id)

    updated = catalog_service.update(book_id, {}, 2)
    assert (updated["total_copies"], updated["available_copies"]) == (2, 1)


def test_update_cannot_shrink_below_checked_out(frozen_clock):
    accounts_service.register("ann", "pw", "lender")
    accounts_service.register("bob", "pw", "lender")
    book_id = _add(copies=3)["book_id"]
    ledger_service.checkout("ann", book_id)
    ledger_service.checkout("bob", book_id)

    with pytest.raises(ConflictError) as excinfo:
        catalog_service.update(book_id, {"title": "Changed"}, 1)
    assert str(excinfo.value) == "copies_below_checked_out"
    book = catalog_service.get_book(book_id)
    assert book["title"] == "Dune"
    assert (book["total_copies"], book["available_copies"]) == (3, 1)


def test_update_to_existing_isbn_conflicts():
    _add(isbn="111")
    other = _add(isbn="222")["book_id"]
    with pytest.raises(ConflictError) as excinfo:
        catalog_service.update(other, {"isbn": "111"}, 1)
    assert str(excinfo.value) == "isbn_exists"


def test_update_missing_book():
    with pytest.raises(NotFoundError):
        catalog_service.update(999, {}, 1)


def test_delete_without_loans():
    book_id = _add()["book_id"]
    assert catalog_service.delete(book_id) == {"book_id": book_id, "loans_deleted": 0}
    with pytest.raises(NotFoundError):
        catalog_service.get_book(book_id)


def test_delete_refused_while_loan_active(frozen_clock):
    accounts_service.register("ann", "pw", "lender")
    book_id = _add(copies=2)["book_id"]
    loan_id = ledger_service.checkout("ann", book_id)

    with pytest.raises(ConflictError) as excinfo:
        catalog_service.delete(book_id)
    assert str(excinfo.value) == "book_has_active_loans"
    assert "1 active loan(s)" in excinfo.value.message
    with app_session() as session:
        assert session.get(Book, book_id) is not None
        assert session.get(Loan, loan_id) is not None


def test_delete_removes_loan_history(frozen_clock):
    accounts_service.register("ann", "pw", "lender")
    book_id = _add()["book_id"]
    loan_id = ledger_service.checkout("ann", book_id)
    ledger_service.return_loan(loan_id)

    assert catalog_service.delete(book_id)["loans_deleted"] == 1
    with app_session() as session:
        assert session.get(Loan, loan_id) is None


def test_search_matches_any_field_case_insensitively():
    _add(isbn="111", title="Dune", author="Frank Herbert", genre="Science Fiction")
    _add(isbn="222", title="Emma", author="Jane Austen", genre="Romance")
    _add(isbn="333-x", title="Persuasion", author="Jane Austen")

    assert [b["title"] for b in catalog_service.search("AUSTEN")] == ["Emma", "Persuasion"]
    assert [b["title"] for b in catalog_service.search("fiction")] == ["Dune"]
    assert [b["title"] for b in catalog_service.search("333")] == ["Persuasion"]
    assert catalog_service.search("tolstoy") == []


def test_search_treats_wildcards_literally():
    _add(isbn="111", title="100% Pure")
    _add(isbn="222", title="Plain")
    assert [b["title"] for b in catalog_service.search("%")] == ["100% Pure"]


def test_search_requires_term():
    with pytest.raises(ValidationError):
        catalog_service.search("   ")


def test_reads_repair_drifted_availability(frozen_clock):
    accounts_service.register("ann", "pw", "lender")
    book_id = _add(copies=3)["book_id"]
    ledger_service.checkout("ann", book_id)
    with app_session(write=True) as session:
        session.execute(sa_update(Book).where(Book.id == book_id).values(available_copies=3))

    assert catalog_service.get_available_copies(book_id) == 2
