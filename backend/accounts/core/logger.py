"""Structured logging with request and user correlation.

Flow loggers emit dotted event names followed by ``key=value`` pairs
(``auth.login.success user_id=7``, ``verification.issued email=...``). Every
record is tagged with the request id and, once :func:`accounts.api.deps.require_auth`
has resolved a caller, the authenticated ``user_id``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] [user=%(user_id)s] %(message)s"

# Optional ``extra=`` keys copied into the JSON document.
EXTRA_FIELDS = ("endpoint", "elapsed_ms", "status")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``default=str`` keeps datetimes serialisable."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
            "user_id": getattr(record, "user_id", None),
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and ``user_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            record.user_id = current_user_id()
        else:
            record.request_id = None
            record.user_id = None
        return True


def ensure_request_id() -> str:
    """
    Return the id of the current request.

    Reuses ``X-Request-ID`` or ``X-Correlation-ID`` from the caller, otherwise
    generates a UUID4. The value is cached on ``g``.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return cached
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
    )
    g.request_id = incoming or str(uuid4())
    return g.request_id


def current_user_id() -> int | None:
    user = g.get("current_user")
    return getattr(user, "id", None)


def configure_logging(level: str | int = "INFO", fmt: str = "json") -> None:
    """
    Send the root logger to stdout.

    :param level: Level name (case-insensitive) or number.
    :param fmt: ``"json"`` (production) or ``"text"`` (local development).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(TEXT_FORMAT) if fmt == "text" else JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id, echo it on responses and log each API call."""
    app.logger.addFilter(RequestContextFilter())
    access_log = logging.getLogger("accounts.http")

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _finish(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        if request.path.startswith(app.config.get("API_BASE_PREFIX", "/api")):
            access_log.info(
                "http.request method=%s path=%s",
                request.method,
                request.path,
                extra={"endpoint": request.endpoint, "status": response.status_code},
            )
        return response


__all__ = [
    "configure_logging",
    "current_user_id",
    "ensure_request_id",
    "init_app",
    "JSONFormatter",
    "RequestContextFilter",
]
