"""
Account endpoints.

Endpoints:
    GET  /health    - Liveness probe (not rate limited)
    POST /register  - Create an account, returns an access/refresh token pair
    POST /login     - Authenticate, returns an access/refresh token pair
    POST /refresh   - Exchange a refresh token for a new access token
"""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response, current_app, jsonify, request

from ..auth import authenticate
from ..security.rate_limit import rate_limited
from ..security.tokens import TokenType
from ..services import AccountService
from ..validation import parse_login, parse_registration

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _accounts() -> AccountService:
    return current_app.extensions["account_service"]


@auth_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify(
        {
            "status": "healthy",
            "service": "todo-api",
            "environment": os.getenv("ENVIRONMENT", "unknown"),
        }
    ), 200


@auth_bp.route("/register", methods=["POST"])
@rate_limited
def register() -> tuple[Response, int]:
    """
    Register a new account.

    Request Body (JSON):
        username: Display name (required)
        email: Email address, unique across accounts (required)
        password: Plain-text password (required)

    Returns:
        200 with ``token`` and ``refreshToken``.
        400 on invalid input, 409 if the email is taken.
    """
    logger.info("POST /register from %s", request.remote_addr)
    data = parse_registration()
    tokens = _accounts().register(data.email, data.username, data.password)
    return jsonify(tokens.to_dict()), 200


@auth_bp.route("/login", methods=["POST"])
@rate_limited
def login() -> tuple[Response, int]:
    """
    Authenticate with email and password.

    The same ``"invalid email or password"`` message is returned whether
    the email is unknown or the password is wrong.

    Returns:
        200 with ``token`` and ``refreshToken``.
        400 on invalid input, 401 on bad credentials.
    """
    logger.info("POST /login from %s", request.remote_addr)
    data = parse_login()
    tokens = _accounts().login(data.email, data.password)
    return jsonify(tokens.to_dict()), 200


@auth_bp.route("/refresh", methods=["POST"])
@rate_limited
def refresh() -> tuple[Response, int]:
    """
    Issue a new access token for a valid refresh token.

    Expects ``Authorization: Bearer <refresh token>``.  No new refresh
    token is issued.

    Returns:
        200 with ``token``; 401 if the refresh token is missing, invalid,
        expired or of the wrong type.
    """
    ctx = authenticate(TokenType.REFRESH)
    token = _accounts().issue_access_token(ctx.user_id)
    logger.info("Refreshed access token for user %s", ctx.user_id)
    return jsonify({"token": token}), 200
