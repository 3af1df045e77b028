"""
Flask application factory for the login site.

Provides the ``create_app`` factory function that assembles the
application: configuration, the user store, the per-request identity
hook, blueprints, error handlers and CLI commands.

The user store is bound to the application through
``app.extensions["user_store"]`` so that tests (or alternative
deployments) can inject their own backend instead of the configured
JSON file.

Key Concepts Demonstrated:
- Application factory pattern (``create_app``)
- Dependency injection of the storage backend
- Blueprint-based route registration
- Lazy import to avoid circular dependencies
"""

from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, current_app

from config import get_config

from .store import UserStore, build_user_store

USER_STORE_EXTENSION = "user_store"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def get_user_store() -> UserStore:
    """Return the user store bound to the current application."""
    return current_app.extensions[USER_STORE_EXTENSION]


def create_app(config_name: str | None = None, user_store: UserStore | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When
            *None*, the value is read from the ``FLASK_ENV`` environment
            variable, defaulting to ``"development"``.
        user_store: Optional pre-built store.  When *None*, one is built
            from ``USER_STORE_BACKEND`` and ``USER_STORE_PATH``.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.permanent_session_lifetime = timedelta(
        hours=app.config["PERMANENT_SESSION_LIFETIME_HOURS"]
    )

    logger.info("Creating app with config: %s", config_class.__name__)

    if user_store is None:
        user_store = build_user_store(
            app.config["USER_STORE_BACKEND"], app.config["USER_STORE_PATH"]
        )
    app.extensions[USER_STORE_EXTENSION] = user_store
    logger.info("Using user store %r", user_store)

    # Import inside the factory to avoid circular imports -- these modules
    # reference ``get_user_store`` from this package, which must exist first.
    from .auth import load_current_user
    from .cli import users_cli
    from .routes.errors import errors_bp
    from .routes.views import views_bp

    app.before_request(load_current_user)
    app.register_blueprint(views_bp)
    app.register_blueprint(errors_bp)
    app.cli.add_command(users_cli)

    return app
