"""Password hashing & verification (werkzeug.security)."""
from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from library_app.errors import CredentialError, ValidationError


def hash_password(plaintext: str) -> str:
    if not isinstance(plaintext, str) or not plaintext:
        raise ValidationError("password_required", "Password is required.")
    return generate_password_hash(plaintext)


def verify_password(plaintext: str, digest: str) -> bool:
    """Return whether ``plaintext`` matches ``digest``.

    werkzeug reports a malformed digest as a plain mismatch; here it is a
    CredentialError so a corrupt stored hash is never mistaken for a wrong
    password.
    """
    if not isinstance(digest, str) or digest.count("$") < 2:
        raise CredentialError("digest_malformed")
    if not isinstance(plaintext, str):
        return False
    try:
        return check_password_hash(digest, plaintext)
    except (TypeError, ValueError) as exc:
        raise CredentialError("digest_malformed") from exc


__all__ = ["hash_password", "verify_password"]
