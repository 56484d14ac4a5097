"""Blueprint registration."""
from __future__ import annotations

from typing import Any

from .admin_api import register_admin_api
from .auth import register_auth
from .health import register_health
from .lender_api import register_lender_api
from .pages import register_pages


def register_all(app: Any) -> None:
    register_auth(app)
    register_pages(app)
    register_admin_api(app)
    register_lender_api(app)
    register_health(app)


__all__ = ["register_all"]
