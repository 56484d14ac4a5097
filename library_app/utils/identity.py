"""Identity normalization helpers."""
from __future__ import annotations

from typing import Any, Optional

from library_app.utils.constants import ROLES


def normalize_username(raw: Any) -> Optional[str]:
    """Strip surrounding whitespace; usernames stay case-sensitive."""
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


def normalize_role(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().lower()
    return cleaned if cleaned in ROLES else None


__all__ = ["normalize_username", "normalize_role"]
