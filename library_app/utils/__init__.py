"""Utility helpers."""
from .identity import normalize_role, normalize_username
from . import clock, constants

__all__ = [
    "normalize_role",
    "normalize_username",
    "clock",
    "constants",
]
