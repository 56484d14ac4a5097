"""Flask app / client fixtures for blueprint tests."""
from __future__ import annotations

import pytest

from library_app import create_app


@pytest.fixture
def app(frozen_clock):
    app = create_app({"TESTING": True, "SECRET_KEY": "library-test-secret"})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username, role, password="pw"):
    return client.post("/register", json={"username": username, "password": password, "role": role})


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    assert register(c, "root", "admin").status_code == 201
    return c


@pytest.fixture
def lender_client(app):
    c = app.test_client()
    assert register(c, "ann", "lender").status_code == 201
    return c
