"""
Password hashing helpers.

Wraps Werkzeug's ``generate_password_hash`` / ``check_password_hash``.
The hash method carries a fixed work factor (``pbkdf2:sha256:600000`` by
default) and Werkzeug embeds the method and a random salt in the output,
so verification only needs the stored verifier.
"""

from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import InternalError

logger = logging.getLogger(__name__)

DEFAULT_HASH_METHOD = "pbkdf2:sha256:600000"
SALT_LENGTH = 16


def hash_password(password: str, method: str = DEFAULT_HASH_METHOD) -> str:
    """
    Derive a salted, one-way verifier from a plain-text password.

    Args:
        password: The plain-text password.
        method: Werkzeug hash method string, including the work factor.

    Returns:
        The verifier string (``method$salt$hash``).

    Raises:
        InternalError: If the hashing engine rejects the method or input.
    """
    try:
        return generate_password_hash(password, method=method, salt_length=SALT_LENGTH)
    except (ValueError, TypeError) as exc:
        logger.error("Password hashing failed with method %r: %s", method, exc)
        raise InternalError("password hashing failed") from exc


def verify_password(password: str, verifier: str) -> bool:
    """
    Check a plain-text password against a stored verifier.

    A mismatch is a normal ``False`` result.  A verifier that cannot be
    parsed is treated as a mismatch as well.
    """
    try:
        return check_password_hash(verifier, password)
    except (ValueError, TypeError):
        logger.warning("Stored password verifier could not be parsed")
        return False
