"""
Database models for the todo API.

Defines the SQLAlchemy ORM models backing the service:

- :class:`User` -- a registered account, looked up by email at login.
- :class:`Task` -- a to-do item owned by exactly one user.

Serialisation helpers deliberately omit the password verifier and the
task owner id.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from . import db


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert datetime to an ISO-8601 UTC string.

    SQLite commonly returns naive datetime values even when timezone-aware
    columns are declared. For API contracts, always normalize to UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


class User(db.Model):
    """
    Registered account.

    Attributes:
        id: Auto-incrementing integer primary key.
        username: Display name (max 80 chars); not required to be unique.
        email: Unique email address (max 120 chars), compared case-sensitively.
        password_hash: Salted verifier produced by
            :func:`todo_app.security.passwords.hash_password`.
        created_at: Timestamp of account creation, stored as UTC.
    """

    __tablename__ = "users"

    __table_args__ = (
        db.CheckConstraint("length(username) <= 80", name="ck_users_username_len"),
        db.CheckConstraint("length(email) <= 120", name="ck_users_email_len"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    username: str = db.Column(db.String(80), nullable=False)
    # Unique constraint backs the registration lookup under concurrent signups
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Unique identifier for the task.
        user_id: Id of the owning account; never serialised.
        title: Short title describing the task.
        description: Detailed description of the task.
        created_at: Timestamp when the task was created.
        updated_at: Timestamp when the task was last modified.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: str = db.Column(db.String(200), nullable=False)
    description: str = db.Column(db.Text, nullable=False, default="")
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the task to its JSON representation.

        Returns:
            Dictionary with ``id``, ``title``, ``description`` and the
            UTC timestamps.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
