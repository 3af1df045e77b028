"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """
    Base configuration shared by all environments.

    Subclasses should override only the values that need to change.
    Every setting can also be controlled via an environment variable so
    that deployments can inject secrets without code changes.
    """

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SERVICE_NAME: str = os.environ.get("SERVICE_NAME", "login-site")

    # "json" persists users to USER_STORE_PATH, "memory" keeps them in-process
    USER_STORE_BACKEND: str = os.environ.get("USER_STORE_BACKEND", "json")
    USER_STORE_PATH: str = os.environ.get(
        "USER_STORE_PATH",
        str(BASE_DIR / "data" / "users.json"),
    )

    PERMANENT_SESSION_LIFETIME_HOURS: int = int(
        os.environ.get("PERMANENT_SESSION_LIFETIME_HOURS", "8")
    )
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "false").strip().lower() == "true"
    )


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Points the store at a separate file so test runs never touch
    development users. Most tests inject their own store instead.
    """

    DEBUG: bool = True
    TESTING: bool = True

    USER_STORE_PATH: str = os.environ.get(
        "TEST_USER_STORE_PATH",
        str(BASE_DIR / "instance" / "test_users.json"),
    )


class ProductionConfig(Config):
    """
    Production environment configuration.

    The hard-coded SECRET_KEY default in the base class is insecure;
    production deployments must supply one through the environment.
    """

    DEBUG: bool = False
    TESTING: bool = False
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "true").strip().lower() == "true"
    )


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
