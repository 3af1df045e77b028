"""
Application-wide error handlers.

Infrastructure failures are logged with their traceback for operators
and rendered as a generic page.  Only a debug application shows the
underlying error on the page, and never for store failures.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, render_template
from werkzeug.exceptions import InternalServerError, NotFound

from ..store import StoreIOError

logger = logging.getLogger(__name__)

errors_bp = Blueprint("errors", __name__)

GENERIC_ERROR_MESSAGE = "Something went wrong."


def _render_server_error(error: BaseException | None):
    detail = repr(error) if current_app.debug and error is not None else None
    return (
        render_template(
            "error.html", status_code=500, message=GENERIC_ERROR_MESSAGE, detail=detail
        ),
        500,
    )


@errors_bp.app_errorhandler(NotFound)
def not_found(error: NotFound):
    return render_template("error.html", status_code=404, message="Page not found."), 404


@errors_bp.app_errorhandler(StoreIOError)
def store_unavailable(error: StoreIOError):
    """Log the store failure and return a generic 500 page."""
    logger.exception("User store failure: %s", error)
    return _render_server_error(None)


@errors_bp.app_errorhandler(InternalServerError)
def internal_error(error: InternalServerError):
    original = getattr(error, "original_exception", None)
    if original is not None:
        logger.error("Unhandled error: %r", original)
    return _render_server_error(original)
