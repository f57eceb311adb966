"""
Application configuration module.

Defines configuration classes for the development, testing and production
environments.  Values are read from environment variables with defaults
that are only suitable for local development.

Key settings:
- Database location (SQLite under ``instance/`` unless ``DATABASE_URL`` is set)
- JWT signing secret, issuer and the independent access/refresh lifetimes
- Password hashing method and work factor
- Per-client rate limiting (requests per sliding window)
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

DEV_JWT_SECRET = "todo-api-dev-jwt-secret-change-in-production"


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag such as ``1``/``true``/``off`` from the environment."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """
    Base configuration shared by all environments.

    Subclasses override only the values that differ.  Every setting can be
    controlled through an environment variable so deployments can inject
    secrets without code changes.
    """

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'todos.db'}",
    )

    # Symmetric signing secret shared by token issuance and verification
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", DEV_JWT_SECRET)
    JWT_ALGORITHM: str = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_ISSUER: str = os.environ.get("JWT_ISSUER", "todolistApp")
    ACCESS_TOKEN_TTL_MINUTES: int = int(os.environ.get("ACCESS_TOKEN_TTL_MINUTES", "60"))
    # Refresh tokens must outlive the access tokens they renew
    REFRESH_TOKEN_TTL_MINUTES: int = int(
        os.environ.get("REFRESH_TOKEN_TTL_MINUTES", str(7 * 24 * 60))
    )

    PASSWORD_HASH_METHOD: str = os.environ.get("PASSWORD_HASH_METHOD", "pbkdf2:sha256:600000")

    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", True)
    RATE_LIMIT_REQUESTS: int = int(os.environ.get("RATE_LIMIT_REQUESTS", "50"))
    RATE_LIMIT_WINDOW_SECONDS: float = float(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "60"))

    TASKS_DEFAULT_PAGE_SIZE: int = 10
    TASKS_MAX_PAGE_SIZE: int = int(os.environ.get("TASKS_MAX_PAGE_SIZE", "100"))


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses an in-memory SQLite database so test runs never touch development
    data, a fixed signing secret so tests can mint their own tokens, and a
    cheap hashing work factor to keep the suite fast.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}
    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET_KEY", "test-jwt-secret-key-for-local-tests-123456"
    )
    PASSWORD_HASH_METHOD: str = "pbkdf2:sha256:1000"
    RATE_LIMIT_REQUESTS: int = 50
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0


class ProductionConfig(Config):
    """
    Production environment configuration.

    All secrets must be supplied through environment variables; the app
    factory refuses to start with the development JWT secret.
    """

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
