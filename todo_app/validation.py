"""
Request-body validation.

Each validator parses the JSON body of the current request into a small
typed input object, or raises :class:`~todo_app.errors.ValidationError`
with the message returned to the client.  Route handlers receive these
objects instead of raw dictionaries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from flask import request

from .errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MAX_USERNAME_LENGTH = 80
MAX_EMAIL_LENGTH = 120
MAX_TITLE_LENGTH = 200


@dataclass(frozen=True)
class RegistrationInput:
    username: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class TaskInput:
    title: str
    description: str


@dataclass(frozen=True)
class TaskUpdate:
    """Partial update; ``None`` means the field is left unchanged."""

    title: str | None = None
    description: str | None = None

    def changed_fields(self) -> dict[str, str]:
        return {
            name: value
            for name, value in (("title", self.title), ("description", self.description))
            if value is not None
        }


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("failed to parse request body")
    return data


def _string_field(data: dict[str, Any], field: str) -> str:
    """Return *field* as a string; missing or null becomes ``""``."""
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value


def _validate_credentials(data: dict[str, Any]) -> tuple[str, str]:
    password = _string_field(data, "password")
    email = _string_field(data, "email").strip()

    if not password:
        raise ValidationError("password is not specified")
    if not email:
        raise ValidationError("email is not specified")
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValidationError(f"email must be {MAX_EMAIL_LENGTH} characters or less")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("invalid email address")
    return email, password


def parse_registration() -> RegistrationInput:
    """Validate a ``{username, email, password}`` body."""
    data = _json_body()
    username = _string_field(data, "username").strip()
    if not username:
        raise ValidationError("username is not specified")
    if len(username) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"username must be {MAX_USERNAME_LENGTH} characters or less")
    email, password = _validate_credentials(data)
    return RegistrationInput(username=username, email=email, password=password)


def parse_login() -> LoginInput:
    """Validate an ``{email, password}`` body."""
    email, password = _validate_credentials(_json_body())
    return LoginInput(email=email, password=password)


def _check_title_length(title: str) -> None:
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"title must be {MAX_TITLE_LENGTH} characters or less")


def parse_new_task() -> TaskInput:
    """Validate a create-task body; both fields are required."""
    data = _json_body()
    title = _string_field(data, "title")
    description = _string_field(data, "description")

    if not title.strip():
        raise ValidationError("task title is not specified")
    if not description.strip():
        raise ValidationError("task description is not specified")
    _check_title_length(title)
    return TaskInput(title=title, description=description)


def parse_task_update() -> TaskUpdate:
    """Validate an update-task body; at least one non-empty field is required."""
    data = _json_body()
    title = _string_field(data, "title")
    description = _string_field(data, "description")

    if not title.strip() and not description.strip():
        raise ValidationError("at least one field is required")
    if title:
        _check_title_length(title)
    return TaskUpdate(
        title=title if title.strip() else None,
        description=description if description.strip() else None,
    )
