"""Unit tests for the composition root."""

from __future__ import annotations

from datetime import timedelta

import pytest
from accounts.core.container import (
    EXTENSION_KEY,
    ServiceContainer,
    build_container,
    build_notifier,
    get_services,
)
from accounts.infra.mail.log_notifier import LoggingNotifier
from accounts.infra.mail.smtp_notifier import SMTPNotifier


def test_app_exposes_container(app):
    with app.app_context():
        services = get_services()
    assert isinstance(services, ServiceContainer)
    assert services is app.extensions[EXTENSION_KEY]


def test_container_reads_policies_from_config(app, notifier):
    container = build_container(app, notifier=notifier)

    assert container.notifier is notifier
    assert container.verification.notifier is notifier
    assert container.credentials.policy.max_attempts == app.config["AUTH_MAX_LOGIN_ATTEMPTS"]
    assert container.credentials.policy.lock_duration == timedelta(
        minutes=app.config["AUTH_LOCK_MINUTES"]
    )
    assert container.auth.credentials is container.credentials
    assert container.auth.cfg.access_ttl == app.config["JWT_ACCESS_TOKEN_TTL"]
    assert container.verification.policy.resend_interval_seconds == (
        app.config["VERIFICATION_RESEND_INTERVAL_SECONDS"]
    )


def test_build_notifier_log_backend():
    assert isinstance(build_notifier({"MAIL_BACKEND": "log"}), LoggingNotifier)
    assert isinstance(build_notifier({}), LoggingNotifier)


def test_build_notifier_smtp_backend():
    notifier = build_notifier(
        {
            "MAIL_BACKEND": "SMTP",
            "SMTP_HOST": "mail.example.com",
            "SMTP_PORT": "2525",
            "SMTP_FROM": "accounts@example.com",
            "SMTP_USE_TLS": False,
        }
    )
    assert isinstance(notifier, SMTPNotifier)
    assert notifier.port == 2525
    assert notifier.sender == "accounts@example.com"
    assert notifier.use_tls is False


@pytest.mark.parametrize(
    "config",
    [{"MAIL_BACKEND": "pigeon"}, {"MAIL_BACKEND": "smtp"}],
)
def test_build_notifier_rejects_bad_config(config):
    with pytest.raises(RuntimeError):
        build_notifier(config)
