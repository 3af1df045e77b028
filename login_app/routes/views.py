"""
HTML view routes for the login site.

Implements the user-facing pages: the protected home page, the login
and logout flow, and account signup.  Route handlers stay thin --
credential checks and session bookkeeping live in
:mod:`login_app.auth`, persistence in :mod:`login_app.store`.

Routes:
    GET  /              - Home page (login required)
    GET  /health        - Liveness probe
    GET  /user/login    - Login form
    POST /user/login    - Login form submission
    POST /user/logout   - End the session
    GET  /user/signup   - Signup form
    POST /user/signup   - Signup form submission

Every failing branch of a form handler returns immediately, so exactly
one response is produced per request.
"""

from __future__ import annotations

import logging

from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from .. import get_user_store
from ..auth import (
    Rejected,
    establish_session,
    login_required,
    pop_return_to,
    terminate_session,
    verify_credentials,
)
from ..store import DuplicateUserError

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

PASSWORDS_DO_NOT_MATCH = "Passwords do not match!"
USER_ALREADY_EXISTS = "User already exists!"
FIELDS_REQUIRED = "Username and password are required."


def _render_signup(message: str, status_code: int, username: str = ""):
    """Re-render the signup form with a single error message."""
    return render_template("signup.html", username=username, message=message), status_code


@views_bp.route("/health", methods=["GET"])
def health_check():
    """
    Return service health status.

    This endpoint is public and is intended for load-balancer and
    orchestrator liveness probes.
    """
    return {"status": "healthy", "service": current_app.config["SERVICE_NAME"]}, 200


@views_bp.route("/")
@login_required
def index():
    """Render the home page for the signed-in user."""
    return render_template("index.html", user=g.user)


# =====================================================================
# Authentication Routes
# =====================================================================


@views_bp.route("/user/login", methods=["GET"])
def login():
    """Render the login page."""
    return render_template("login.html")


@views_bp.route("/user/login", methods=["POST"])
def login_submit():
    """
    Handle login form submission.

    On success the identity is written to the session and the caller is
    sent to the page they originally asked for (or home).  On failure
    the reason is flashed and the caller goes back to the login form.
    """
    username = request.form.get("username", "")
    password = request.form.get("password", "")

    result = verify_credentials(get_user_store(), username, password)
    if isinstance(result, Rejected):
        logger.warning("Rejected login for %r: %s", username, result.reason)
        flash(result.reason, "error")
        return redirect(url_for("views.login"))

    target = pop_return_to(session, default=url_for("views.index"))
    establish_session(session, result.record)
    session.permanent = True
    logger.info("User %s logged in", result.record.username)
    return redirect(target)


@views_bp.route("/user/logout", methods=["POST"])
def logout():
    """Clear the session identity and redirect to the login page."""
    user = g.get("user")
    terminate_session(session)
    if user is not None:
        logger.info("User %s logged out", user.username)
    flash("Logged out.", "success")
    return redirect(url_for("views.login"))


@views_bp.route("/user/signup", methods=["GET"])
def signup():
    """Render the signup page."""
    return render_template("signup.html", username="", message=None)


@views_bp.route("/user/signup", methods=["POST"])
def signup_submit():
    """
    Handle signup form submission.

    Form Data:
        username: Desired login name
        password: Desired password
        confirm_password: Must equal ``password``

    Returns:
        A redirect to the login page on success, or the re-rendered
        signup form with one message on failure.  Store failures
        propagate to the 500 handler.
    """
    username = request.form.get("username", "")
    password = request.form.get("password", "")
    confirm_password = request.form.get("confirm_password", "")

    if password != confirm_password:
        # Keep the username so the user doesn't have to retype it
        return _render_signup(PASSWORDS_DO_NOT_MATCH, 400, username=username)

    if not username.strip() or not password:
        return _render_signup(FIELDS_REQUIRED, 400, username=username)

    store = get_user_store()
    if store.exists(username):
        return _render_signup(USER_ALREADY_EXISTS, 409)

    try:
        store.append(username, password)
    except DuplicateUserError:
        # Another request took the name between the check and the write
        return _render_signup(USER_ALREADY_EXISTS, 409)

    logger.info("Created account for %s", username)
    flash("Account created. Please log in.", "success")
    return redirect(url_for("views.login"))
