"""Cross-origin policy for the account API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Clients send bearer tokens and may forward their own correlation id.
ALLOWED_HEADERS = ("Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID")
EXPOSED_HEADERS = ("X-Request-ID",)


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value; blank means any origin."""
    return [origin.strip() for origin in (raw or "").split(",") if origin.strip()]


def init_app(app: Flask) -> None:
    """Allow the configured front-end origins to call ``/api/*``.

    A wildcard (``"*"`` or an empty list) never allows credentials, so a
    browser cannot replay cookies cross-site against the API.

    :param app: Application carrying ``CORS_ORIGINS`` and ``CORS_MAX_AGE``.
    :type app: flask.Flask
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        allow_headers=list(ALLOWED_HEADERS),
        expose_headers=list(EXPOSED_HEADERS),
        supports_credentials=not wildcard,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
