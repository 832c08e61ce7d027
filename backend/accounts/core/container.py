"""Composition root: build the adapters and services once per application."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask import Flask, current_app

from accounts.core.config import parse_duration
from accounts.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from accounts.infra.mail.log_notifier import LoggingNotifier
from accounts.infra.mail.smtp_notifier import SMTPNotifier
from accounts.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from accounts.services._shared.ports import Notifier, PasswordHasher, TokenSigner
from accounts.services.auth.dto import AuthTokenConfig
from accounts.services.auth.service import AuthService
from accounts.services.credentials.dto import LockoutPolicy
from accounts.services.credentials.service import CredentialService
from accounts.services.email_verification.dto import VerificationPolicy
from accounts.services.email_verification.service import EmailVerificationService
from accounts.services.registration.service import UserRegistrationService

EXTENSION_KEY = "accounts.services"
MAIL_BACKENDS = ("log", "smtp")


@dataclass(frozen=True, slots=True)
class ServiceContainer:
    """Everything the HTTP and CLI layers need, wired together."""

    password_hasher: PasswordHasher
    token_signer: TokenSigner
    notifier: Notifier
    credentials: CredentialService
    auth: AuthService
    verification: EmailVerificationService
    registration: UserRegistrationService


def build_notifier(config: Mapping[str, Any]) -> Notifier:
    """
    Select the mail backend from ``MAIL_BACKEND``.

    :raises RuntimeError: Unknown backend, or SMTP without ``SMTP_HOST``.
    """
    backend = str(config.get("MAIL_BACKEND", "log")).strip().lower()
    if backend not in MAIL_BACKENDS:
        raise RuntimeError(f"Unknown MAIL_BACKEND {backend!r}; expected one of {MAIL_BACKENDS}")
    if backend == "log":
        return LoggingNotifier()
    host = config.get("SMTP_HOST")
    if not host:
        raise RuntimeError("SMTP_HOST is required when MAIL_BACKEND=smtp")
    return SMTPNotifier(
        host=host,
        port=int(config.get("SMTP_PORT", 587)),
        username=config.get("SMTP_USER"),
        password=config.get("SMTP_PASSWORD"),
        sender=config.get("SMTP_FROM") or "no-reply@localhost",
        use_tls=bool(config.get("SMTP_USE_TLS", True)),
        timeout=int(config.get("SMTP_TIMEOUT", 10)),
    )


def build_container(
    app: Flask,
    *,
    notifier: Notifier | None = None,
    password_hasher: PasswordHasher | None = None,
) -> ServiceContainer:
    """
    Construct every adapter and service from ``app.config``.

    :param app: Configured application.
    :param notifier: Override for the mail backend (tests).
    :param password_hasher: Override for the password hasher.
    :rtype: ServiceContainer
    """
    cfg = app.config
    hasher = password_hasher or WerkzeugPasswordHasher(
        method=cfg.get("PASSWORD_HASH_METHOD", "scrypt")
    )
    token_cfg = AuthTokenConfig(
        access_ttl=cfg["JWT_ACCESS_TOKEN_TTL"],
        refresh_ttl=cfg["JWT_REFRESH_TOKEN_TTL"],
        remember_me_access_ttl=cfg["JWT_REMEMBER_ME_ACCESS_TTL"],
        remember_me_refresh_ttl=cfg["JWT_REMEMBER_ME_REFRESH_TTL"],
    )
    signer = JWTTokenSigner(
        access_ttl=parse_duration(token_cfg.access_ttl),
        refresh_ttl=parse_duration(token_cfg.refresh_ttl),
    )
    mailer = notifier or build_notifier(cfg)

    credentials = CredentialService(
        hasher=hasher,
        policy=LockoutPolicy(
            max_attempts=int(cfg["AUTH_MAX_LOGIN_ATTEMPTS"]),
            lock_duration=timedelta(minutes=int(cfg["AUTH_LOCK_MINUTES"])),
        ),
    )
    return ServiceContainer(
        password_hasher=hasher,
        token_signer=signer,
        notifier=mailer,
        credentials=credentials,
        auth=AuthService(credentials=credentials, token_signer=signer, token_cfg=token_cfg),
        verification=EmailVerificationService(
            notifier=mailer,
            policy=VerificationPolicy(
                default_ttl_minutes=int(cfg["VERIFICATION_CODE_TTL_MINUTES"]),
                min_ttl_minutes=int(cfg["VERIFICATION_CODE_MIN_TTL_MINUTES"]),
                max_ttl_minutes=int(cfg["VERIFICATION_CODE_MAX_TTL_MINUTES"]),
                resend_interval_seconds=int(cfg["VERIFICATION_RESEND_INTERVAL_SECONDS"]),
            ),
        ),
        registration=UserRegistrationService(hasher=hasher),
    )


def init_app(app: Flask) -> None:
    """Build the container and attach it to ``app.extensions``."""
    app.extensions[EXTENSION_KEY] = build_container(app)


def get_services() -> ServiceContainer:
    """Return the container bound to the current application."""
    return cast(ServiceContainer, current_app.extensions[EXTENSION_KEY])
