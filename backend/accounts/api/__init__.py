"""HTTP surface of the account service.

Versions live in sub-packages exposing ``API_VERSION`` and a ``REGISTRY`` of
``(blueprint, relative_prefix)`` pairs; they are mounted below
``API_BASE_PREFIX`` (``/api`` by default).
"""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """``join_prefix("/api/", "v1", "/auth")`` -> ``"/api/v1/auth"``; empty parts are skipped."""
    parts = [segment.strip("/") for segment in segments if segment.strip("/")]
    return "/" + "/".join(parts)


def mount(app: Flask, prefix: str, entries: Iterable[tuple[Blueprint, str]]) -> None:
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=join_prefix(prefix, relative))


def init_app(app: Flask) -> None:
    from accounts.api import v1

    mount(app, join_prefix(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION), v1.REGISTRY)


__all__ = ["init_app", "join_prefix", "mount"]
