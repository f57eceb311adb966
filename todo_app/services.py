"""
Account and task orchestration.

``AccountService`` implements registration, login and access-token
renewal on top of the password helpers, the token service and the user
store.  ``TaskService`` implements the owner-scoped task operations and
distinguishes an unknown task (404) from a task owned by someone else
(403).

Both services raise :mod:`todo_app.errors` exceptions; they never build
HTTP responses themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import Conflict, Forbidden, NotFound, Unauthorized
from .models import Task, User
from .repositories import TaskRepository, UserRepository
from .security.passwords import DEFAULT_HASH_METHOD, hash_password, verify_password
from .security.tokens import TokenPair, TokenService
from .validation import TaskInput, TaskUpdate

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "invalid email or password"


class AccountService:
    """
    Registration and login orchestration.

    Args:
        users: User store.
        tokens: Token service used to issue the token pair.
        hash_method: Werkzeug password hash method (with work factor).
    """

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        hash_method: str = DEFAULT_HASH_METHOD,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.hash_method = hash_method

    def register(self, email: str, username: str, password: str) -> TokenPair:
        """
        Create an account and issue its first token pair.

        Raises:
            Conflict: If the email is already registered.
            InternalError: On store, hashing or signing faults.
        """
        if self.users.find_by_email(email) is not None:
            logger.info("Registration rejected: email already registered")
            raise Conflict("user with this email already exists")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, method=self.hash_method),
        )
        user_id = self.users.insert(user)

        logger.info("New user registered with id %s", user_id)
        return self.tokens.issue_pair(user_id)

    def login(self, email: str, password: str) -> TokenPair:
        """
        Verify credentials and issue a token pair.

        An unknown email and a wrong password produce the same error.

        Raises:
            Unauthorized: If the credentials do not match an account.
            InternalError: On store or signing faults.
        """
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed for a supplied email")
            raise Unauthorized(INVALID_CREDENTIALS_MESSAGE)

        logger.info("User %s logged in", user.id)
        return self.tokens.issue_pair(user.id)

    def issue_access_token(self, user_id: int) -> str:
        """Issue a fresh access token; signing faults propagate."""
        return self.tokens.issue_access_token(user_id)


@dataclass(frozen=True)
class TaskPage:
    tasks: list[Task]
    page: int
    limit: int
    total: int

    def to_dict(self) -> dict:
        return {
            "data": [task.to_dict() for task in self.tasks],
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
        }


class TaskService:
    """Owner-scoped task operations."""

    def __init__(self, tasks: TaskRepository) -> None:
        self.tasks = tasks

    def list_tasks(self, owner_id: int, page: int, limit: int) -> TaskPage:
        tasks = self.tasks.list(owner_id, page, limit)
        total = self.tasks.count(owner_id)
        return TaskPage(tasks=tasks, page=page, limit=limit, total=total)

    def create_task(self, owner_id: int, data: TaskInput) -> Task:
        task = self.tasks.insert(
            Task(user_id=owner_id, title=data.title, description=data.description)
        )
        logger.info("Created task %s for user %s", task.id, owner_id)
        return task

    def _owned_task(self, task_id: int, owner_id: int) -> Task:
        task = self.tasks.find_by_id(task_id)
        if task is None:
            raise NotFound("task not found")
        if task.user_id != owner_id:
            logger.warning("User %s attempted to modify task %s owned by another user", owner_id, task_id)
            raise Forbidden("task belongs to another user")
        return task

    def update_task(self, task_id: int, owner_id: int, changes: TaskUpdate) -> Task:
        """
        Apply a partial update.

        Raises:
            NotFound: If no task has *task_id*.
            Forbidden: If the task belongs to another user.
        """
        task = self._owned_task(task_id, owner_id)
        task = self.tasks.update_fields(task, changes.changed_fields())
        logger.info("Updated task %s", task_id)
        return task

    def delete_task(self, task_id: int, owner_id: int) -> None:
        task = self._owned_task(task_id, owner_id)
        self.tasks.delete(task)
        logger.info("Deleted task %s", task_id)
