"""Input coercion helpers raising ValidationError with stable codes."""
from __future__ import annotations

from typing import Any, Optional

from library_app.errors import ValidationError


def coerce_int(value: Any, code: str, *, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(code)
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip():
        try:
            result = int(value.strip())
        except ValueError as exc:
            raise ValidationError(code) from exc
    else:
        raise ValidationError(code)
    if minimum is not None and result < minimum:
        raise ValidationError(code)
    return result


def optional_int(value: Any, code: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_int(value, code)


def required_text(value: Any, code: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(code)
    return value.strip()


def optional_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


__all__ = ["coerce_int", "optional_int", "required_text", "optional_text"]
