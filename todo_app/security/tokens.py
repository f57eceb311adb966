"""
JWT issuance and validation.

Tokens are signed with a single shared secret (HS256) and carry:

    - ``iss``  -- constant issuer string identifying the application.
    - ``uid``  -- integer id of the account the token was issued to.
    - ``type`` -- ``"access"`` or ``"refresh"``.
    - ``iat``  -- issued-at timestamp (UTC epoch seconds).
    - ``exp``  -- expiration timestamp (UTC epoch seconds).

``TokenService.validate`` only proves that a token was signed by this
service with the expected algorithm.  Expiry and type are checked by the
caller (see :mod:`todo_app.auth`) so that an expired or wrong-type token
can be told apart from a forged one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import jwt

from ..errors import InternalError, Unauthorized

logger = logging.getLogger(__name__)

DEFAULT_ISSUER = "todolistApp"
DEFAULT_ALGORITHM = "HS256"


class TokenType(str, Enum):
    """Token subtypes; a token is only accepted where its type is expected."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together at registration or login."""

    access_token: str
    refresh_token: str

    def to_dict(self) -> dict[str, str]:
        return {"token": self.access_token, "refreshToken": self.refresh_token}


class TokenService:
    """
    Issue and validate signed, claim-bearing tokens.

    Args:
        secret: Shared signing secret.
        access_ttl: Lifetime of access tokens.
        refresh_ttl: Lifetime of refresh tokens; must not be shorter than
            ``access_ttl``.
        issuer: Value of the ``iss`` claim.
        algorithm: HMAC algorithm used for signing and the only one
            accepted on validation.
    """

    def __init__(
        self,
        secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        issuer: str = DEFAULT_ISSUER,
        algorithm: str = DEFAULT_ALGORITHM,
    ) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        if access_ttl > refresh_ttl:
            raise ValueError("access token lifetime must not exceed refresh token lifetime")
        self._secret = secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.issuer = issuer
        self.algorithm = algorithm

    def issue(self, subject_id: int, token_type: TokenType, ttl: timedelta) -> str:
        """
        Sign a token for *subject_id*.

        Raises:
            InternalError: If signing fails.
        """
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "iss": self.issuer,
            "uid": int(subject_id),
            "type": TokenType(token_type).value,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        try:
            token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
            logger.error("Failed to sign %s token for user %s: %s", payload["type"], subject_id, exc)
            raise InternalError("token signing failed") from exc

        logger.info("Issued %s token for user %s", payload["type"], subject_id)
        return token

    def issue_access_token(self, subject_id: int) -> str:
        return self.issue(subject_id, TokenType.ACCESS, self.access_ttl)

    def issue_refresh_token(self, subject_id: int) -> str:
        return self.issue(subject_id, TokenType.REFRESH, self.refresh_ttl)

    def issue_pair(self, subject_id: int) -> TokenPair:
        """Issue an access token and its paired refresh token."""
        return TokenPair(
            access_token=self.issue_access_token(subject_id),
            refresh_token=self.issue_refresh_token(subject_id),
        )

    def validate(self, token: str) -> dict[str, Any]:
        """
        Verify the signature and algorithm of *token* and return its claims.

        ``exp`` is deliberately not verified here.

        Raises:
            Unauthorized: If the signature is invalid, the algorithm is not
                the configured one, or the claims cannot be decoded.
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            logger.warning("Token validation failed: %s", exc)
            raise Unauthorized("failed to validate token") from exc
