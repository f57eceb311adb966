"""
Shared pytest fixtures for the todo API test suite.

Provides the Flask application, test client, database session, token
helpers and data factories used by the unit and integration suites.

Key Concepts:
- Session-scoped app, function-scoped client and database for isolation
- Factory fixtures (user_factory, task_factory) backed by Faker
- Rate-limit windows reset before every test
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from shared.test_helpers import TEST_JWT_SECRET, auth_headers
from todo_app import create_app, db
from todo_app.models import Task, User
from todo_app.security.passwords import hash_password

fake = Faker()

DEFAULT_PASSWORD = "StrongPass123!"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application instance for the entire test session.

    Created once with the 'testing' config (in-memory SQLite, fixed JWT
    secret) and shared across all tests.
    """
    application = create_app("testing")
    assert application.config["JWT_SECRET_KEY"] == TEST_JWT_SECRET
    yield application


@pytest.fixture(autouse=True)
def _reset_rate_limiter(app):
    """Start every test with empty rate-limit windows."""
    limiter = app.extensions.get("rate_limiter")
    if limiter is not None:
        limiter.reset()
    yield


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test function.

    Creates all tables before the test, then rolls back uncommitted work
    and drops every table afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def token_service(app):
    """The app's configured token service."""
    return app.extensions["token_service"]


# -----------------------------------------------------------------------------
# Data Factories
# -----------------------------------------------------------------------------

@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """
    Factory that creates and persists User rows.

    Passwords are hashed with the testing work factor so login tests can
    authenticate with the plain-text value.
    """

    def _create_user(
        *,
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            username=username or fake.user_name(),
            email=email or fake.unique.email(),
            password_hash=hash_password(password, method="pbkdf2:sha256:1000"),
        )
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session) -> Callable[..., Task]:
    """Factory that creates Task rows with Faker-generated defaults."""

    def _create_task(
        *,
        user_id: int,
        title: str | None = None,
        description: str | None = None,
    ) -> Task:
        task = Task(
            user_id=user_id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


# -----------------------------------------------------------------------------
# Identity Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def user(user_factory) -> User:
    """A registered account with the default password."""
    return user_factory(username="user_one", email="user_one@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    """A second account, used for ownership tests."""
    return user_factory(username="user_two", email="user_two@example.com")


@pytest.fixture
def api_headers(token_service, user) -> dict[str, str]:
    """Authorization + JSON headers carrying an access token for ``user``."""
    return auth_headers(token_service.issue_access_token(user.id))


@pytest.fixture
def other_user_headers(token_service, other_user) -> dict[str, str]:
    """Authorization + JSON headers carrying an access token for ``other_user``."""
    return auth_headers(token_service.issue_access_token(other_user.id))
