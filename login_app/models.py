"""
Data models for the login site.

Defines the two records the application passes around: the
:class:`UserRecord` persisted in the user store, and the
:class:`SessionIdentity` placed into the caller's session after a
successful login.  Both are plain frozen dataclasses; persistence is
handled by :mod:`login_app.store`.

Key Concepts Demonstrated:
- Werkzeug password hashing (salted, one-way)
- Constant-time password verification
- Safe serialisation that keeps secrets out of the session
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass(frozen=True)
class UserRecord:
    """
    A registered user as stored in the user store.

    Attributes:
        username: Unique, case-sensitive login name.
        password_hash: Werkzeug-generated hash of the user's password.
    """

    username: str
    password_hash: str

    @classmethod
    def create(cls, username: str, password: str) -> UserRecord:
        """
        Build a new record, hashing the plain-text password.

        Args:
            username: The login name for the new user.
            password: The plain-text password to hash.

        Returns:
            A record whose ``password_hash`` never equals *password*.
        """
        return cls(username=username, password_hash=generate_password_hash(password))

    @classmethod
    def from_dict(cls, data: Any) -> UserRecord:
        """
        Rebuild a record from one entry of the JSON document.

        Raises:
            ValueError: If *data* is not an object with string
                ``username`` and ``password_hash`` fields.
        """
        if not isinstance(data, dict):
            raise ValueError(f"user entry must be an object, got {type(data).__name__}")
        username = data.get("username")
        password_hash = data.get("password_hash")
        if not isinstance(username, str) or not isinstance(password_hash, str):
            raise ValueError("user entry requires string 'username' and 'password_hash'")
        return cls(username=username, password_hash=password_hash)

    def check_password(self, password: str) -> bool:
        """
        Verify a plain-text password against the stored hash.

        Args:
            password: The candidate plain-text password.

        Returns:
            ``True`` if the password matches, ``False`` otherwise.
        """
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, str]:
        """Return the JSON document representation of this record."""
        return {"username": self.username, "password_hash": self.password_hash}

    def __repr__(self) -> str:
        return f"<UserRecord {self.username}>"


@dataclass(frozen=True)
class SessionIdentity:
    """
    The identity claim kept in the caller's session.

    Only the username is kept; the password hash never leaves the store.
    """

    username: str

    @classmethod
    def from_record(cls, record: UserRecord) -> SessionIdentity:
        return cls(username=record.username)

    @classmethod
    def from_dict(cls, data: Any) -> SessionIdentity | None:
        """Return an identity for a well-formed claim, or ``None``."""
        if not isinstance(data, dict):
            return None
        username = data.get("username")
        if not isinstance(username, str) or not username:
            return None
        return cls(username=username)

    def to_dict(self) -> dict[str, str]:
        return {"username": self.username}
