"""Tests for the /lender/api blueprint."""
from __future__ import annotations

import pytest


@pytest.fixture
def book_id(admin_client):
    resp = admin_client.post(
        "/admin/api/books",
        json={"title": "Dune", "author": "Frank Herbert", "isbn": "X", "copies": 1, "genre": "SF"},
    )
    return resp.get_json()["book_id"]


@pytest.fixture
def second_lender(app):
    c = app.test_client()
    resp = c.post("/register", json={"username": "bob", "password": "pw", "role": "lender"})
    assert resp.status_code == 201
    return c


def test_lender_api_requires_lender(client, admin_client):
    assert client.get("/lender/api/books").status_code == 401
    assert admin_client.post("/lender/api/checkout/1").status_code == 401


def test_scenario_last_copy(lender_client, second_lender, admin_client, book_id):
    resp = lender_client.post(f"/lender/api/checkout/{book_id}")
    assert resp.status_code == 201
    assert resp.get_json()["book_id"] == book_id

    books = admin_client.get("/admin/api/books").get_json()["books"]
    assert books[0]["available_copies"] == 0

    refused = second_lender.post(f"/lender/api/checkout/{book_id}")
    assert refused.status_code == 409
    assert refused.get_json()["error"] == "not_available"


def test_catalog_and_search(lender_client, book_id):
    assert [b["id"] for b in lender_client.get("/lender/api/books").get_json()["books"]] == [book_id]
    assert [b["title"] for b in lender_client.get("/lender/api/search?q=herb").get_json()["books"]] == ["Dune"]
    assert lender_client.get("/lender/api/search?q=austen").get_json()["books"] == []
    assert lender_client.get("/lender/api/search").get_json()["books"] == []

    lender_client.post(f"/lender/api/checkout/{book_id}")
    assert lender_client.get("/lender/api/books").get_json()["books"] == []


def test_my_loans_and_return(lender_client, book_id, frozen_clock):
    loan_id = lender_client.post(f"/lender/api/checkout/{book_id}").get_json()["loan_id"]
    loans = lender_client.get("/lender/api/myloans").get_json()["loans"]
    assert [(l["loan_id"], l["due_date"]) for l in loans] == [(loan_id, "2024-03-15")]

    frozen_clock.advance(days=15)
    assert lender_client.get("/lender/api/myloans").status_code == 401
    assert lender_client.post("/login", json={"username": "ann", "password": "pw"}).status_code == 200
    assert lender_client.get("/lender/api/myloans").get_json()["loans"] == []
    overdue = lender_client.get("/lender/api/overdue").get_json()["loans"]
    assert [(o["loan_id"], o["days_overdue"]) for o in overdue] == [(loan_id, 1)]

    returned = lender_client.post(f"/lender/api/return/{loan_id}")
    assert returned.status_code == 200
    assert returned.get_json()["returned"] is True
    assert lender_client.get("/lender/api/overdue").get_json()["loans"] == []
    assert [b["id"] for b in lender_client.get("/lender/api/books").get_json()["books"]] == [book_id]


def test_cannot_return_another_lenders_loan(lender_client, second_lender, book_id):
    loan_id = lender_client.post(f"/lender/api/checkout/{book_id}").get_json()["loan_id"]
    resp = second_lender.post(f"/lender/api/return/{loan_id}")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "loan_missing"


def test_checkout_missing_book(lender_client):
    resp = lender_client.post("/lender/api/checkout/999")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "book_missing"
