"""Tests for users_repo helpers."""
from __future__ import annotations

import pytest

from library_app.db import app_session, run_in_transaction
from library_app.db.repositories import users_repo


def test_usernames_are_unique():
    run_in_transaction(lambda session: users_repo.create_user(session, "ann", "digest", "lender"))
    with pytest.raises(users_repo.UserExistsError):
        run_in_transaction(lambda session: users_repo.create_user(session, "ann", "other", "admin"))

    with app_session() as session:
        assert [u.username for u in users_repo.list_users(session)] == ["ann"]
        assert users_repo.get_by_username(session, "ann").password_digest == "digest"


def test_lookup_is_case_sensitive():
    run_in_transaction(lambda session: users_repo.create_user(session, "ann", "digest", "lender"))
    with app_session() as session:
        assert users_repo.get_by_username(session, "ANN") is None
        assert users_repo.find_user_id(session, "ann") is not None
