"""
Credential verification and session management.

Two concerns live here:

1. **Credential verification** -- ``verify_credentials`` looks a user up
   in a :class:`~login_app.store.UserStore` and returns either
   :class:`Accepted` or :class:`Rejected`.
2. **Session management** -- ``establish_session``, ``resolve_identity``
   and ``terminate_session`` read and write the identity claim in a
   session mapping.  They take the session explicitly so they can be
   exercised with a plain ``dict``; the view layer passes Flask's
   ``session``.

The ``login_required`` decorator guards views: anonymous callers are
sent to the login form and the requested path is remembered so a later
successful login can send them back.

Key Concepts Demonstrated:
- Result objects instead of exceptions for expected failures
- Minimal identity claim in a signed cookie session
- Decorator-based access control
- Open-redirect protection for the remembered return path
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import g, redirect, request, session, url_for

from .models import SessionIdentity, UserRecord
from .store import UserStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"
SESSION_RETURN_TO_KEY = "return_to"

# Keys that survive session rotation at login time
_PRESERVED_SESSION_KEYS = ("_flashes",)

USER_NOT_FOUND = "User not found"
INCORRECT_PASSWORD = "Incorrect password"


@dataclass(frozen=True)
class Accepted:
    """Successful verification carrying the matched record."""

    record: UserRecord


@dataclass(frozen=True)
class Rejected:
    """Failed verification with a user-facing reason."""

    reason: str


def verify_credentials(store: UserStore, username: str, password: str) -> Accepted | Rejected:
    """
    Check a username/password pair against the user store.

    The username comparison is exact and case-sensitive; the first
    matching record wins.  Store failures are not caught here, so a
    broken store surfaces as an error instead of "user not found".

    Args:
        store: The user store to consult.
        username: Submitted login name.
        password: Submitted plain-text password.

    Returns:
        ``Accepted(record)`` on success, otherwise ``Rejected`` with
        ``"User not found"`` or ``"Incorrect password"``.

    Raises:
        StoreIOError: If the store cannot be read.
    """
    record = store.find(username)
    if record is None:
        return Rejected(USER_NOT_FOUND)
    if not record.check_password(password):
        return Rejected(INCORRECT_PASSWORD)
    return Accepted(record)


# =====================================================================
# Session Manager
# =====================================================================


def establish_session(session_data: MutableMapping[str, Any], record: UserRecord) -> SessionIdentity:
    """
    Record *record*'s identity in the session.

    Everything except pending flash messages is discarded first so a
    pre-login session cannot carry state into the authenticated one.
    Only the username is stored.

    Returns:
        The identity now held in the session.
    """
    preserved = {key: session_data[key] for key in _PRESERVED_SESSION_KEYS if key in session_data}
    session_data.clear()
    session_data.update(preserved)

    identity = SessionIdentity.from_record(record)
    session_data[SESSION_USER_KEY] = identity.to_dict()
    return identity


def resolve_identity(session_data: MutableMapping[str, Any]) -> SessionIdentity | None:
    """Return the caller's identity from the stored claim, or ``None`` if anonymous."""
    return SessionIdentity.from_dict(session_data.get(SESSION_USER_KEY))


def terminate_session(session_data: MutableMapping[str, Any]) -> None:
    """Remove the identity claim; the session itself may live on."""
    session_data.pop(SESSION_USER_KEY, None)
    session_data.pop(SESSION_RETURN_TO_KEY, None)


def is_safe_return_path(path: Any) -> bool:
    """Accept only same-site absolute paths such as ``/reports?x=1``."""
    if not isinstance(path, str) or not path.startswith("/"):
        return False
    # "//host" and "/\host" are treated as network locations by browsers
    return not path.startswith("//") and not path.startswith("/\\")


def remember_return_to(session_data: MutableMapping[str, Any], path: str) -> None:
    if is_safe_return_path(path):
        session_data[SESSION_RETURN_TO_KEY] = path


def pop_return_to(session_data: MutableMapping[str, Any], default: str) -> str:
    """Consume the remembered return path, falling back to *default*."""
    path = session_data.pop(SESSION_RETURN_TO_KEY, None)
    return path if is_safe_return_path(path) else default


def _requested_path() -> str:
    if request.query_string:
        return f"{request.path}?{request.query_string.decode('utf-8', 'replace')}"
    return request.path


def load_current_user() -> None:
    """Attach the session identity (or ``None``) to ``g.user`` for this request."""
    g.user = resolve_identity(session)


def login_required(view_func):
    """
    Decorator that requires an established session for view routes.

    Anonymous callers are redirected to the login form and the path they
    asked for is stored in the session so ``POST /user/login`` can
    return them to it.

    Args:
        view_func: The Flask view function to protect.

    Returns:
        The decorated view function.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if g.get("user") is None:
            remember_return_to(session, _requested_path())
            logger.info("Anonymous request to %s redirected to login", request.path)
            return redirect(url_for("views.login"))
        return view_func(*args, **kwargs)

    return wrapper
