"""Tests for the maintenance CLI commands."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from accounts.models.user import User
from tests.factories.email_verification import EmailVerificationFactory
from tests.factories.user import UserFactory


def test_unlock_command(app, session, services):
    user = UserFactory(login_attempts=5, locked_until=datetime.now(UTC) + timedelta(minutes=15))
    session.commit()

    result = app.test_cli_runner().invoke(args=["accounts", "unlock", user.email])

    assert result.exit_code == 0, result.output
    assert f"Account unlocked successfully: {user.email}" in result.output
    session.expire_all()
    refreshed = session.get(User, user.id)
    assert refreshed.login_attempts == 0
    assert refreshed.locked_until is None


def test_unlock_command_unknown_email(app, services):
    result = app.test_cli_runner().invoke(args=["accounts", "unlock", "ghost@example.com"])

    assert result.exit_code == 1
    assert "No account for ghost@example.com" in result.output


def test_purge_expired_command(app, session, services):
    now = datetime.now(UTC)
    EmailVerificationFactory(created_at=now - timedelta(hours=1), expires_at=now - timedelta(minutes=1))
    EmailVerificationFactory(created_at=now - timedelta(hours=2), expires_at=now - timedelta(hours=1))
    EmailVerificationFactory(created_at=now, expires_at=now + timedelta(minutes=15))
    session.commit()

    result = app.test_cli_runner().invoke(args=["verification", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "Deleted 2 expired verification code(s)." in result.output
