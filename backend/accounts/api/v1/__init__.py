"""Version 1 of the account API: health, authentication, email verification."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .email_verification import bp as email_verification_bp
from .health import bp as health_bp

API_VERSION = "v1"

REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "auth"),
    (email_verification_bp, "email-verification"),
]
