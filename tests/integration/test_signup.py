"""
Integration tests for the signup form.

Each validation branch must produce exactly one response and leave the
store untouched; only a valid, unused username reaches the store.

Key SDET Concepts Demonstrated:
- Negative testing (mismatched and duplicate input)
- Store-state assertions alongside HTTP assertions
- Failure injection with monkeypatch
"""

from __future__ import annotations

import pytest

from login_app.store import DuplicateUserError, StoreIOError

pytestmark = pytest.mark.integration


def _signup(client, username: str, password: str, confirm_password: str | None = None):
    return client.post(
        "/user/signup",
        data={
            "username": username,
            "password": password,
            "confirm_password": password if confirm_password is None else confirm_password,
        },
        follow_redirects=False,
    )


def test_signup_page_renders(client):
    response = client.get("/user/signup")

    assert response.status_code == 200
    assert b'name="confirm_password"' in response.data


def test_mismatched_passwords_rerender_form_with_username(client, user_store):
    # Act
    response = _signup(client, "carol", "a", "b")

    # Assert
    assert response.status_code == 400
    assert b"Passwords do not match!" in response.data
    assert b'value="carol"' in response.data
    assert user_store.all() == []


def test_mismatch_short_circuits_before_store_lookup(client, user_store, monkeypatch):
    # Arrange
    def _unexpected(*_args, **_kwargs):
        raise AssertionError("store must not be consulted")

    monkeypatch.setattr(user_store, "exists", _unexpected)
    monkeypatch.setattr(user_store, "append", _unexpected)

    # Act
    response = _signup(client, "carol", "a", "b")

    # Assert
    assert response.status_code == 400


def test_existing_username_rerenders_form_without_username(client, user_factory, user_store):
    # Arrange
    user_factory(username="alice", password="secret")

    # Act
    response = _signup(client, "alice", "new-password")

    # Assert
    assert response.status_code == 409
    assert b"User already exists!" in response.data
    assert b'value="alice"' not in response.data
    assert [record.username for record in user_store.all()] == ["alice"]
    assert user_store.find("alice").check_password("secret")


def test_existing_username_short_circuits_before_append(client, user_factory, user_store, monkeypatch):
    # Arrange
    user_factory(username="alice")

    def _unexpected(*_args, **_kwargs):
        raise AssertionError("append must not run")

    monkeypatch.setattr(user_store, "append", _unexpected)

    # Act
    response = _signup(client, "alice", "pw")

    # Assert
    assert response.status_code == 409


def test_new_user_is_stored_and_redirected_to_login(client, user_factory, user_store):
    # Arrange
    user_factory(username="alice")
    before = len(user_store.all())

    # Act
    response = _signup(client, "carol", "pw")

    # Assert
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/user/login")
    assert len(user_store.all()) == before + 1
    assert user_store.exists("carol")


def test_new_user_can_log_in(client, login):
    # Arrange
    _signup(client, "carol", "pw")

    # Act
    response = login("carol", "pw")

    # Assert
    assert response.status_code == 302
    assert client.get("/").status_code == 200


def test_blank_fields_are_rejected(client, user_store):
    response = _signup(client, "   ", "")

    assert response.status_code == 400
    assert b"Username and password are required." in response.data
    assert user_store.all() == []


def test_username_taken_between_check_and_write(client, user_store, monkeypatch):
    # Arrange -- simulate another request winning the race
    def _lost_race(username, _password):
        raise DuplicateUserError(username)

    monkeypatch.setattr(user_store, "append", _lost_race)

    # Act
    response = _signup(client, "carol", "pw")

    # Assert
    assert response.status_code == 409
    assert b"User already exists!" in response.data


def test_store_write_failure_returns_server_error(client, user_store, monkeypatch):
    # Arrange
    def _broken_append(*_args, **_kwargs):
        raise StoreIOError("Unable to write user store at '/secret/path/users.json'")

    monkeypatch.setattr(user_store, "append", _broken_append)

    # Act
    response = _signup(client, "carol", "pw")

    # Assert
    assert response.status_code == 500
    assert b"/secret/path" not in response.data


@pytest.mark.parametrize(
    ("username", "password", "confirm_password"),
    [
        ("carol", "", "b"),
        ("", "a", "b"),
    ],
)
def test_mismatch_is_reported_before_blank_fields(
    client, user_store, username, password, confirm_password
):
    # Act
    response = _signup(client, username, password, confirm_password)

    # Assert
    assert response.status_code == 400
    assert b"Passwords do not match!" in response.data
    assert b"Username and password are required." not in response.data
    assert f'value="{username}"'.encode() in response.data
    assert user_store.all() == []
