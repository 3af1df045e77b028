"""
Shared pytest fixtures for the login site test suite.

Fixtures follow the Arrange-Act-Assert (AAA) pattern and ensure test
isolation by giving every test an empty user store.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Injecting a storage backend into the application factory
- Test data factories
- Test client creation
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from login_app import create_app
from login_app.models import UserRecord
from login_app.store import JsonFileUserStore


# Initialize Faker for generating test data
fake = Faker()

DEFAULT_PASSWORD = "StrongPass123!"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def store_path(tmp_path_factory) -> Path:
    """Location of the JSON user store used by the test application."""
    return tmp_path_factory.mktemp("user_store") / "users.json"


@pytest.fixture(scope="session")
def app(store_path):
    """
    Create application instance for the test session.

    The app is created once with the 'testing' config and a JSON store
    in a temporary directory, then reused for all tests.
    """
    application = create_app("testing", user_store=JsonFileUserStore(store_path))
    yield application


@pytest.fixture(scope="function")
def user_store(app, store_path):
    """
    Provide the application's user store, empty for each test.

    The backing file is removed before and after the test so no users
    leak between tests.
    """
    store_path.unlink(missing_ok=True)
    yield app.extensions["user_store"]
    store_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def client(app, user_store):
    """
    Create a test client for making HTTP requests.

    Opens a new test-client context for every test so that request
    state (cookies, sessions) never leaks between tests.
    """
    with app.test_client() as test_client:
        yield test_client


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def user_factory(user_store) -> Callable[..., UserRecord]:
    """
    Factory fixture that creates and persists users.

    Example:
        def test_something(user_factory):
            user = user_factory(username="alice", password="secret")
    """

    def _create_user(username: str | None = None, password: str = DEFAULT_PASSWORD) -> UserRecord:
        return user_store.append(username or fake.unique.user_name(), password)

    return _create_user


@pytest.fixture
def login(client):
    """Return a helper that submits the login form with the given credentials."""

    def _login(username: str, password: str = DEFAULT_PASSWORD, follow_redirects: bool = False):
        return client.post(
            "/user/login",
            data={"username": username, "password": password},
            follow_redirects=follow_redirects,
        )

    return _login
