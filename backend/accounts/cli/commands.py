"""Flask CLI commands for account and verification maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from accounts.core.container import get_services
from accounts.services._shared.errors import NotFoundError

LOGGER = logging.getLogger(__name__)


@click.group("accounts")
def accounts_cli() -> None:
    """Account administration commands."""


@accounts_cli.command("unlock")
@click.argument("email")
@with_appcontext
def unlock_command(email: str) -> None:
    """Reset the failed-login counter and lock of EMAIL."""
    try:
        result = get_services().credentials.unlock(email)
    except NotFoundError as exc:
        raise click.ClickException(f"No account for {email}") from exc
    click.echo(f"{result.message}: {result.email}")


@click.group("verification")
def verification_cli() -> None:
    """Email verification maintenance commands."""


@verification_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete every verification code past its expiry."""
    deleted = get_services().verification.purge_expired()
    LOGGER.info("verification.purge.cli deleted=%s", deleted)
    click.echo(f"Deleted {deleted} expired verification code(s).")
