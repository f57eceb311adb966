"""
Persistence layer for users and tasks.

Thin wrappers around the Flask-SQLAlchemy session.  Every query is a
single parameterised statement; services call at most one read and one
write per operation.  Any SQLAlchemy failure rolls back the session, is
logged here, and is re-raised as :class:`~todo_app.errors.InternalError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import db
from .errors import Conflict, InternalError
from .models import Task, User

logger = logging.getLogger(__name__)


@contextmanager
def _store_operation(description: str) -> Iterator[None]:
    """Translate store faults into ``InternalError`` after a rollback."""
    try:
        yield
    # sqlite3 raises OverflowError directly for integers wider than 64 bits
    except (SQLAlchemyError, OverflowError) as exc:
        db.session.rollback()
        logger.error("Store operation failed (%s): %s", description, exc)
        raise InternalError(f"store operation failed: {description}") from exc


class UserRepository:
    """Account lookups and inserts."""

    def find_by_email(self, email: str) -> User | None:
        """Return the account registered with *email*, or ``None``."""
        with _store_operation("find user by email"):
            return db.session.scalar(select(User).where(User.email == email))

    def insert(self, user: User) -> int:
        """
        Persist a new account and return its id.

        Raises:
            Conflict: If another account already uses the same email.
        """
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            logger.warning("Duplicate account insert for email %s", user.email)
            raise Conflict("user with this email already exists") from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Store operation failed (insert user): %s", exc)
            raise InternalError("store operation failed: insert user") from exc
        return user.id


class TaskRepository:
    """Task queries scoped by owner where the operation requires it."""

    def list(self, owner_id: int, page: int, limit: int) -> list[Task]:
        """Return one page of the owner's tasks ordered by id."""
        stmt = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.id)
            .limit(limit)
            .offset((page - 1) * limit)
        )
        with _store_operation("list tasks"):
            return list(db.session.scalars(stmt).all())

    def count(self, owner_id: int) -> int:
        stmt = select(func.count()).select_from(Task).where(Task.user_id == owner_id)
        with _store_operation("count tasks"):
            return int(db.session.scalar(stmt) or 0)

    def find_by_id(self, task_id: int) -> Task | None:
        with _store_operation("find task by id"):
            return db.session.get(Task, task_id)

    def insert(self, task: Task) -> Task:
        with _store_operation("insert task"):
            db.session.add(task)
            db.session.commit()
        return task

    def update_fields(self, task: Task, fields: Mapping[str, Any]) -> Task:
        """Apply *fields* to *task* and commit."""
        with _store_operation("update task"):
            for name, value in fields.items():
                setattr(task, name, value)
            db.session.commit()
        return task

    def delete(self, task: Task) -> None:
        with _store_operation("delete task"):
            db.session.delete(task)
            db.session.commit()
