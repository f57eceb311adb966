"""
Flask application factory for the todo API.

``create_app`` builds the application for a given configuration name,
binds the shared SQLAlchemy instance, wires the security services
(token service, rate limiter) and the account/task services into
``app.extensions``, and registers the blueprints and JSON error handlers.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import DEV_JWT_SECRET, get_config

# Shared SQLAlchemy instance -- initialised with a concrete app inside create_app()
db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if not sqlite_path or sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def _init_services(app: Flask) -> None:
    """Build the security and domain services from the loaded config."""
    from .auth import TOKEN_SERVICE_KEY
    from .repositories import TaskRepository, UserRepository
    from .security.rate_limit import EXTENSION_KEY as RATE_LIMITER_KEY
    from .security.rate_limit import SlidingWindowRateLimiter
    from .security.tokens import TokenService
    from .services import AccountService, TaskService

    if not app.config.get("DEBUG") and not app.config.get("TESTING"):
        if app.config["JWT_SECRET_KEY"] == DEV_JWT_SECRET:
            raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    tokens = TokenService(
        secret=app.config["JWT_SECRET_KEY"],
        access_ttl=timedelta(minutes=int(app.config["ACCESS_TOKEN_TTL_MINUTES"])),
        refresh_ttl=timedelta(minutes=int(app.config["REFRESH_TOKEN_TTL_MINUTES"])),
        issuer=app.config["JWT_ISSUER"],
        algorithm=app.config["JWT_ALGORITHM"],
    )
    app.extensions[TOKEN_SERVICE_KEY] = tokens
    app.extensions["account_service"] = AccountService(
        users=UserRepository(),
        tokens=tokens,
        hash_method=app.config["PASSWORD_HASH_METHOD"],
    )
    app.extensions["task_service"] = TaskService(tasks=TaskRepository())

    if app.config.get("RATE_LIMIT_ENABLED", True):
        app.extensions[RATE_LIMITER_KEY] = SlidingWindowRateLimiter(
            limit=int(app.config["RATE_LIMIT_REQUESTS"]),
            window_seconds=float(app.config["RATE_LIMIT_WINDOW_SECONDS"]),
        )


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating todo API app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)
    _init_services(app)

    from .errors import register_error_handlers
    from .routes.auth import auth_bp
    from .routes.todos import todos_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(todos_bp)
    register_error_handlers(app)

    # Tables are created at startup; there is no migration tool.
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    return app
