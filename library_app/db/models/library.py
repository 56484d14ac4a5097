"""ORM models for the library DB (users, books, loans, sessions)."""
from __future__ import annotations

import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    """Registered account. Username and role never change after creation."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(150), nullable=False, unique=True)
    password_digest = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'lender')", name="ck_users_role"),
    )

    def as_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} username={self.username} role={self.role}>"


class Book(Base):
    """Catalog title with per-title copy counts.

    `available_copies` is kept equal to `total_copies` minus the active loans
    on the book; the check constraints back the 0..total bound.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(32), nullable=False, unique=True)
    year_of_publication = Column(Integer, nullable=True)
    genre = Column(String(100), nullable=True)
    total_copies = Column(Integer, nullable=False, default=0)
    available_copies = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("total_copies >= 0", name="ck_books_total_nonnegative"),
        CheckConstraint("available_copies >= 0", name="ck_books_available_nonnegative"),
        CheckConstraint("available_copies <= total_copies", name="ck_books_available_le_total"),
    )

    @property
    def checked_out(self) -> int:
        return (self.total_copies or 0) - (self.available_copies or 0)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "year_of_publication": self.year_of_publication,
            "genre": self.genre,
            "total_copies": self.total_copies,
            "available_copies": self.available_copies,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return (
            "<Book id={0} isbn={1} total={2} available={3}>".format(
                self.id,
                self.isbn,
                self.total_copies,
                self.available_copies,
            )
        )


class Loan(Base):
    """One checkout of one book by one user; active while return_date is NULL."""

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    checkout_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)

    __table_args__ = (
        # At most one active loan per (user, book).
        Index(
            "uq_loans_active_user_book",
            "user_id",
            "book_id",
            unique=True,
            sqlite_where=text("return_date IS NULL"),
        ),
        Index("ix_loans_book_return", "book_id", "return_date"),
    )

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "book_id": self.book_id,
            "checkout_date": self.checkout_date.isoformat() if self.checkout_date else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "return_date": self.return_date.isoformat() if self.return_date else None,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Loan id={self.id} user_id={self.user_id} book_id={self.book_id} returned={self.return_date}>"


class UserSession(Base):
    """Server-side login session.

    `role` is copied from the user at creation time and trusted for the
    lifetime of the token.
    """

    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    username = Column(String(150), nullable=False, index=True)
    role = Column(String(16), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<UserSession username={self.username} role={self.role} expires_at={self.expires_at}>"


__all__ = ["Base", "User", "Book", "Loan", "UserSession"]
