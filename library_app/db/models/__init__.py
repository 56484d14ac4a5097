"""ORM models aggregate exports."""
from .library import (  # noqa: F401
	Base,
	Book,
	Loan,
	User,
	UserSession,
)

__all__ = [
	"Base",
	"Book",
	"Loan",
	"User",
	"UserSession",
]
