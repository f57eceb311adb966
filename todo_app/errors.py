"""
Error taxonomy for the todo API.

Every failure the service reports to a client is an :class:`ApiError`
subclass carrying the HTTP status it maps to.  A single application-level
error handler renders them all with the ``{"error": "..."}`` envelope, so
services and helpers can simply ``raise`` instead of building responses.

Internal faults (store, signing, hashing) are logged where they are
detected and surface to the client only as a generic message.
"""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"


class ApiError(Exception):
    """Base class for errors that are reported to API clients."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers or {}
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class ValidationError(ApiError):
    """Malformed or missing request input."""

    status_code = 400


class Unauthorized(ApiError):
    """Missing, invalid, expired or wrong-type token, or bad credentials."""

    status_code = 401


class Forbidden(ApiError):
    """Authenticated caller is not the owner of the resource."""

    status_code = 403


class NotFound(ApiError):
    """The requested resource does not exist."""

    status_code = 404


class Conflict(ApiError):
    """The resource already exists."""

    status_code = 409


class RateLimited(ApiError):
    """The caller exhausted its request window."""

    status_code = 429

    def __init__(self, message: str = "rate limit exceeded", retry_after: float | None = None) -> None:
        headers = {"Retry-After": str(max(1, int(retry_after)))} if retry_after else None
        super().__init__(message, headers=headers)


class InternalError(ApiError):
    """
    Store, signing or hashing fault.

    The message is for the server log only; clients always receive
    ``"internal server error"``.
    """

    status_code = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE) -> None:
        super().__init__(message)


def _json_error(
    message: str, status_code: int, headers: dict[str, str] | None = None
) -> tuple[Response, int]:
    """Build the standard ``{"error": ...}`` response."""
    response = jsonify({"error": message})
    response.headers.update(headers or {})
    return response, status_code


def register_error_handlers(app: Flask) -> None:
    """
    Attach the JSON error handlers to *app*.

    ``ApiError`` subclasses render their own status and message, Werkzeug
    HTTP errors (unknown route, wrong method) keep their status, and any
    other exception becomes a logged 500.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> tuple[Response, int]:
        if isinstance(error, InternalError):
            return _json_error(INTERNAL_ERROR_MESSAGE, error.status_code)
        return _json_error(error.message, error.status_code, error.headers)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
        return _json_error(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled error: %s", error)
        return _json_error(INTERNAL_ERROR_MESSAGE, 500)
