"""
Flask CLI commands for managing the user store.

Usage::

    flask --app wsgi users create alice
    flask --app wsgi users list
"""

from __future__ import annotations

import click
from flask.cli import AppGroup

from . import get_user_store
from .store import DuplicateUserError, StoreIOError

users_cli = AppGroup("users", help="Manage accounts in the user store.")


@users_cli.command("create")
@click.argument("username")
@click.password_option(help="Password for the new account.")
def create_user(username: str, password: str) -> None:
    """Add USERNAME to the user store."""
    if not username.strip():
        raise click.UsageError("Username must not be blank.")
    try:
        get_user_store().append(username, password)
    except (DuplicateUserError, StoreIOError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created user {username}")


@users_cli.command("list")
def list_users() -> None:
    """Print every username in store order."""
    try:
        records = get_user_store().all()
    except StoreIOError as exc:
        raise click.ClickException(str(exc)) from exc
    for record in records:
        click.echo(record.username)
