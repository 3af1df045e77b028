"""WSGI entry point for the login site."""

import os

from login_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
