"""
Task endpoints.

Every endpoint requires an access token and operates only on the
caller's own tasks.

Endpoints:
    GET    /todos?page=&limit=  - List one page of the caller's tasks
    POST   /todos               - Create a task
    PUT    /todos/<id>          - Partially update a task
    DELETE /todos/<id>          - Delete a task
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from ..auth import RequestContext, require_auth
from ..errors import ValidationError
from ..security.rate_limit import rate_limited
from ..services import TaskService
from ..validation import parse_new_task, parse_task_update

logger = logging.getLogger(__name__)

todos_bp = Blueprint("todos", __name__)


# Largest value SQLite (and a signed 64-bit INTEGER column) can bind
MAX_SQL_INTEGER = 2**63 - 1


def _tasks() -> TaskService:
    return current_app.extensions["task_service"]


def _parse_digits(raw: str) -> int | None:
    """Parse a plain ASCII decimal string; anything else yields ``None``."""
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def _positive_int_arg(name: str, default: int) -> int:
    """Read a positive integer query parameter, falling back to *default*."""
    value = _parse_digits(request.args.get(name, ""))
    if value is None or value <= 0 or value > MAX_SQL_INTEGER:
        return default
    return value


def _parse_task_id(raw_id: str) -> int:
    task_id = _parse_digits(raw_id)
    if task_id is None or task_id > MAX_SQL_INTEGER:
        raise ValidationError("incorrect id")
    return task_id


@todos_bp.route("/todos", methods=["GET"])
@rate_limited
@require_auth
def list_todos(ctx: RequestContext) -> tuple[Response, int]:
    """
    List the caller's tasks.

    Query Parameters:
        page: 1-based page number (default 1)
        limit: Page size (default 10, capped at TASKS_MAX_PAGE_SIZE)

    Returns:
        200 with ``data``, ``page``, ``limit`` and ``total``.
    """
    page = _positive_int_arg("page", 1)
    limit = _positive_int_arg("limit", current_app.config["TASKS_DEFAULT_PAGE_SIZE"])
    limit = min(limit, current_app.config["TASKS_MAX_PAGE_SIZE"])
    if (page - 1) * limit > MAX_SQL_INTEGER:
        page = 1

    logger.info(
        "GET /todos - user_id=%s client=%s page=%s limit=%s",
        ctx.user_id,
        ctx.client_id,
        page,
        limit,
    )
    result = _tasks().list_tasks(ctx.user_id, page, limit)
    return jsonify(result.to_dict()), 200


@todos_bp.route("/todos", methods=["POST"])
@rate_limited
@require_auth
def create_todo(ctx: RequestContext) -> tuple[Response, int]:
    """
    Create a task.

    Request Body (JSON):
        title: Task title (required)
        description: Task description (required)

    Returns:
        202 with the created task.
    """
    logger.info("POST /todos - user_id=%s client=%s", ctx.user_id, ctx.client_id)
    data = parse_new_task()
    task = _tasks().create_task(ctx.user_id, data)
    return jsonify(task.to_dict()), 202


@todos_bp.route("/todos/<task_id>", methods=["PUT"])
@rate_limited
@require_auth
def update_todo(task_id: str, ctx: RequestContext) -> tuple[Response, int]:
    """
    Update the title and/or description of a task.

    Returns:
        202 with the updated task; 404 if the task does not exist, 403 if
        it belongs to another user.
    """
    logger.info("PUT /todos/%s - user_id=%s client=%s", task_id, ctx.user_id, ctx.client_id)
    task_pk = _parse_task_id(task_id)
    changes = parse_task_update()
    task = _tasks().update_task(task_pk, ctx.user_id, changes)
    return jsonify(task.to_dict()), 202


@todos_bp.route("/todos/<task_id>", methods=["DELETE"])
@rate_limited
@require_auth
def delete_todo(task_id: str, ctx: RequestContext) -> tuple[str, int]:
    """
    Delete a task.

    Returns:
        204 with an empty body; 404 / 403 as for updates.
    """
    logger.info("DELETE /todos/%s - user_id=%s client=%s", task_id, ctx.user_id, ctx.client_id)
    task_pk = _parse_task_id(task_id)
    _tasks().delete_task(task_pk, ctx.user_id)
    return "", 204
