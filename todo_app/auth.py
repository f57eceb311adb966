"""
Bearer-token authentication for API endpoints.

``authenticate`` runs the full check sequence against the current request
and returns a typed :class:`RequestContext`; ``require_auth`` wraps a view
so it only runs for a valid *access* token and receives that context as
its ``ctx`` keyword argument.

Check order (each failure is a ``401`` with the message shown):

1. ``Authorization`` header carries a token     -- "no authorization token"
2. signature and algorithm are valid            -- "failed to validate token"
3. ``exp`` is present and not in the past       -- "token expired"
4. ``type`` matches the expected token type     -- "invalid type of token"
5. ``uid`` is a positive integer                -- "token with invalid claims"
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import Response, current_app, request

from .errors import Unauthorized
from .security.rate_limit import client_identifier
from .security.tokens import TokenService, TokenType

logger = logging.getLogger(__name__)

TOKEN_SERVICE_KEY = "token_service"


@dataclass(frozen=True)
class RequestContext:
    """Verified identity of the caller, passed explicitly to handlers."""

    user_id: int
    token_type: TokenType
    client_id: str


def get_token_service() -> TokenService:
    return current_app.extensions[TOKEN_SERVICE_KEY]


def extract_bearer_token(header_value: str | None) -> str | None:
    """
    Return the token part of an ``Authorization`` header value.

    The ``Bearer`` scheme word is optional and surrounding whitespace is
    ignored; an empty result is reported as ``None``.
    """
    if not header_value:
        return None
    token = header_value.strip()
    scheme, _, rest = token.partition(" ")
    if scheme.lower() == "bearer":
        token = rest.strip()
    elif token.lower() == "bearer":
        token = ""
    return token or None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_claims(claims: dict[str, Any], expected_type: TokenType) -> int:
    """
    Enforce expiry, token type and subject claims on validated *claims*.

    Returns:
        The subject (user) id.

    Raises:
        Unauthorized: With the message describing the first failed check.
    """
    expires_at = claims.get("exp")
    if not _is_number(expires_at) or time.time() > expires_at:
        raise Unauthorized("token expired")

    if claims.get("type") != TokenType(expected_type).value:
        raise Unauthorized("invalid type of token")

    user_id = claims.get("uid")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise Unauthorized("token with invalid claims")
    return user_id


def authenticate(expected_type: TokenType = TokenType.ACCESS) -> RequestContext:
    """
    Authenticate the current request with a token of *expected_type*.

    Raises:
        Unauthorized: If any step of the check sequence fails.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        logger.warning("Rejected %s %s: no authorization token", request.method, request.path)
        raise Unauthorized("no authorization token")

    claims = get_token_service().validate(token)
    try:
        user_id = check_claims(claims, expected_type)
    except Unauthorized as exc:
        logger.warning("Rejected %s %s: %s", request.method, request.path, exc.message)
        raise

    return RequestContext(
        user_id=user_id,
        token_type=TokenType(expected_type),
        client_id=client_identifier(),
    )


def require_auth(view_func: Callable[..., tuple[Response, int] | Response]):
    """
    Decorator that enforces access-token authentication on an endpoint.

    The wrapped view is called with ``ctx=RequestContext(...)`` in
    addition to its URL arguments.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        ctx = authenticate(TokenType.ACCESS)
        return view_func(*args, ctx=ctx, **kwargs)

    return wrapper
