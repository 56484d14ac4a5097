"""Registration, login and logout."""
from __future__ import annotations

from dataclasses import dataclass

from library_app.db import run_in_transaction
from library_app.db.repositories import users_repo
from library_app.db.repositories.users_repo import UserExistsError
from library_app.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from library_app.services import credentials, session_service
from library_app.utils.identity import normalize_role, normalize_username
from library_app.utils.logging import get_logger

LOG = get_logger("accounts_service")


@dataclass(frozen=True)
class AuthResult:
    token: str
    username: str
    role: str


def _require_username(raw) -> str:
    username = normalize_username(raw)
    if not username:
        raise ValidationError("username_required", "Username is required.")
    return username


def register(username: str, password: str, role: str) -> AuthResult:
    """Create the user and open a session for it in one transaction."""
    clean_username = _require_username(username)
    clean_role = normalize_role(role)
    if clean_role is None:
        raise ValidationError("unknown_role", "Role must be 'admin' or 'lender'.")
    digest = credentials.hash_password(password)

    def _work(session) -> str:
        users_repo.create_user(session, clean_username, digest, clean_role)
        return session_service.open_in(session, clean_username, clean_role)

    try:
        token = session_service.with_fresh_token(_work)
    except UserExistsError as exc:
        raise ConflictError("user_exists", "User already exists.") from exc
    LOG.info("Registered username=%s role=%s", clean_username, clean_role)
    return AuthResult(token=token, username=clean_username, role=clean_role)


def login(username: str, password: str) -> AuthResult:
    clean_username = _require_username(username)
    if not isinstance(password, str) or not password:
        raise ValidationError("password_required", "Password is required.")
    user = run_in_transaction(lambda session: users_repo.get_by_username(session, clean_username), write=False)
    if user is None:
        raise NotFoundError("user_missing", "No account with that username; register first.")
    if not credentials.verify_password(password, user.password_digest):
        LOG.info("Rejected login username=%s", clean_username)
        raise UnauthorizedError("invalid_credentials", "Invalid password.")
    token = session_service.create(user.username, user.role)
    LOG.info("Login username=%s role=%s", user.username, user.role)
    return AuthResult(token=token, username=user.username, role=user.role)


def logout(token: str) -> None:
    session_service.destroy(token)


__all__ = ["AuthResult", "register", "login", "logout"]
