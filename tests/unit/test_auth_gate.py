"""
Unit tests for bearer-token authentication (``require_auth`` / ``authenticate``).

Each rejection path must short-circuit with 401 and the message that
names the failed check, in the order: missing token, bad signature,
expired, wrong type, invalid subject.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask, jsonify

from shared.test_helpers import (
    OTHER_JWT_SECRET,
    TEST_JWT_SECRET,
    build_claims,
    create_test_token,
    encode_claims,
)
from todo_app.auth import (
    RequestContext,
    authenticate,
    check_claims,
    extract_bearer_token,
    require_auth,
)
from todo_app.errors import Unauthorized, register_error_handlers
from todo_app.security.tokens import TokenService, TokenType

pytestmark = pytest.mark.unit


@pytest.fixture
def gate_app() -> Flask:
    """A minimal app with one access-protected and one refresh-protected route."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.extensions["token_service"] = TokenService(
        secret=TEST_JWT_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=1),
    )
    register_error_handlers(app)

    @app.route("/_protected")
    @require_auth
    def _protected(ctx: RequestContext):
        return jsonify({"user_id": ctx.user_id, "type": ctx.token_type.value})

    @app.route("/_refresh_only")
    def _refresh_only():
        ctx = authenticate(TokenType.REFRESH)
        return jsonify({"user_id": ctx.user_id})

    return app


@pytest.fixture
def gate_client(gate_app):
    with gate_app.test_client() as client:
        yield client


def _get(client, path: str, token: str | None):
    headers = {"Authorization": f"Bearer {token}"} if token is not None else {}
    return client.get(path, headers=headers)


class TestRequireAuth:
    """Tests for the access-token decorator."""

    def test_valid_access_token_passes_context(self, gate_client):
        """Test that the view receives the verified user id."""
        # Arrange
        token = create_test_token(user_id=77)

        # Act
        response = _get(gate_client, "/_protected", token)

        # Assert
        assert response.status_code == 200
        assert response.get_json() == {"user_id": 77, "type": "access"}

    def test_missing_header_returns_401(self, gate_client):
        response = gate_client.get("/_protected")

        assert response.status_code == 401
        assert response.get_json() == {"error": "no authorization token"}

    def test_bearer_without_token_returns_401(self, gate_client):
        response = gate_client.get("/_protected", headers={"Authorization": "Bearer   "})

        assert response.status_code == 401
        assert response.get_json() == {"error": "no authorization token"}

    def test_forged_signature_is_rejected_before_expiry_check(self, gate_client):
        """Test that an expired token signed with another secret reports a validation failure."""
        # Arrange
        token = encode_claims(
            build_claims(expires_in=timedelta(hours=-1)), secret=OTHER_JWT_SECRET
        )

        # Act
        response = _get(gate_client, "/_protected", token)

        # Assert
        assert response.status_code == 401
        assert response.get_json() == {"error": "failed to validate token"}

    def test_expired_token_returns_401(self, gate_client):
        token = create_test_token(expired=True)

        response = _get(gate_client, "/_protected", token)

        assert response.status_code == 401
        assert response.get_json() == {"error": "token expired"}

    def test_refresh_token_is_rejected_by_protected_route(self, gate_client):
        """Test that a refresh token cannot be used as an access token."""
        token = create_test_token(token_type="refresh")

        response = _get(gate_client, "/_protected", token)

        assert response.status_code == 401
        assert response.get_json() == {"error": "invalid type of token"}

    def test_token_without_subject_returns_401(self, gate_client):
        claims = build_claims()
        claims.pop("uid")

        response = _get(gate_client, "/_protected", encode_claims(claims))

        assert response.status_code == 401
        assert response.get_json() == {"error": "token with invalid claims"}

    def test_token_without_exp_reports_expired(self, gate_client):
        claims = build_claims()
        claims.pop("exp")

        response = _get(gate_client, "/_protected", encode_claims(claims))

        assert response.status_code == 401
        assert response.get_json() == {"error": "token expired"}


class TestRefreshGate:
    """Tests for ``authenticate`` with the refresh token type."""

    def test_refresh_token_is_accepted(self, gate_client):
        token = create_test_token(user_id=5, token_type="refresh")

        response = _get(gate_client, "/_refresh_only", token)

        assert response.status_code == 200
        assert response.get_json() == {"user_id": 5}

    def test_access_token_is_rejected(self, gate_client):
        """Test that an access token cannot be used to refresh."""
        token = create_test_token(token_type="access")

        response = _get(gate_client, "/_refresh_only", token)

        assert response.status_code == 401
        assert response.get_json() == {"error": "invalid type of token"}


class TestCheckClaims:
    """Direct tests of claim enforcement on already-validated claims."""

    @pytest.mark.parametrize("user_id", [0, -3, "1", 1.5, True, None])
    def test_invalid_subject_rejected(self, user_id):
        claims = build_claims(user_id=user_id)

        with pytest.raises(Unauthorized) as exc_info:
            check_claims(claims, TokenType.ACCESS)
        assert exc_info.value.message == "token with invalid claims"

    @pytest.mark.parametrize("exp", ["tomorrow", None, True])
    def test_non_numeric_exp_rejected(self, exp):
        claims = build_claims(exp=exp)

        with pytest.raises(Unauthorized) as exc_info:
            check_claims(claims, TokenType.ACCESS)
        assert exc_info.value.message == "token expired"

    def test_missing_type_rejected(self):
        claims = build_claims()
        claims.pop("type")

        with pytest.raises(Unauthorized) as exc_info:
            check_claims(claims, TokenType.ACCESS)
        assert exc_info.value.message == "invalid type of token"

    def test_valid_claims_return_subject(self):
        assert check_claims(build_claims(user_id=9), TokenType.ACCESS) == 9


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer   abc.def.ghi  ", "abc.def.ghi"),
        ("abc.def.ghi", "abc.def.ghi"),
        ("Bearer", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected
