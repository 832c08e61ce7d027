"""RFC 7807 (``application/problem+json``) error responses for the account API.

Every error body carries ``type``, ``title``, ``status``, ``detail``,
``instance``, a stable snake_case ``code``, optional camelCase ``details``
and the ``request_id`` also sent in the ``X-Request-ID`` header.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from accounts.core.logger import ensure_request_id

log = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    423: "locked",
    429: "too_many_requests",
    500: "internal_server_error",
    501: "not_implemented",
    503: "service_unavailable",
}


def problem(
    status: int, code: str, detail: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build a problem document for the current request.

    :param status: HTTP status.
    :param code: Stable machine-readable code (``account_locked`` ...).
    :param detail: Client-safe message.
    :param details: Extra structured fields, omitted when empty.
    :rtype: dict
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path,
        "code": code,
    }
    if details:
        body["details"] = details
    body["request_id"] = ensure_request_id()
    return body


def problem_response(body: dict[str, Any], headers: dict[str, str] | None = None) -> Response:
    resp = jsonify(body)
    resp.status_code = body["status"]
    resp.mimetype = "application/problem+json"
    resp.headers.update(headers or {})
    return resp


class APIError(Exception):
    """
    An error the API reports to the client as-is.

    :param message: Client-safe description.
    :param status_code: HTTP status (400 by default).
    :param code: Stable snake_case identifier.
    :param details: Structured extras (``minutesUntilUnlock`` ...).
    """

    headers: dict[str, str] = {}

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem(self.status_code, self.code, self.message, self.details or None)


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, HTTPStatus.NOT_FOUND, "not_found")


class Conflict(APIError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, HTTPStatus.CONFLICT, "conflict")


class Unauthorized(APIError):
    """401; ``code`` distinguishes bad credentials from token failures."""

    def __init__(self, message: str = "Unauthorized", *, code: str = "unauthorized") -> None:
        super().__init__(message, HTTPStatus.UNAUTHORIZED, code)


class Forbidden(APIError):
    def __init__(self, message: str = "Forbidden", *, code: str = "forbidden") -> None:
        super().__init__(message, HTTPStatus.FORBIDDEN, code)


class AccountLocked(APIError):
    """423 while the lockout window is open."""

    def __init__(self, message: str, *, minutes_until_unlock: int) -> None:
        super().__init__(
            message,
            HTTPStatus.LOCKED,
            "account_locked",
            {"minutesUntilUnlock": minutes_until_unlock},
        )


class ResendThrottled(APIError):
    """429 with ``Retry-After`` set to the remaining wait."""

    def __init__(self, message: str, *, wait_seconds: int) -> None:
        super().__init__(
            message,
            HTTPStatus.TOO_MANY_REQUESTS,
            "resend_throttled",
            {"waitTimeSeconds": wait_seconds},
        )
        self.headers = {"Retry-After": str(wait_seconds)}


class ServiceUnavailable(APIError):
    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable")


class NotImplementedYet(APIError):
    """501 for declared endpoints whose flow does not exist yet."""

    def __init__(self, message: str = "Not implemented") -> None:
        super().__init__(message, HTTPStatus.NOT_IMPLEMENTED, "not_implemented")


def init_app(app: Flask) -> None:
    """
    Register the problem+json handlers.

    Service errors go through
    :meth:`accounts.services._shared.base.BaseService.translate_exceptions`;
    4xx are logged as warnings, 5xx as errors with the traceback.
    """
    # Deferred: the service layer imports this module.
    from accounts.services._shared.base import BaseService
    from accounts.services._shared.errors import ServiceError

    def _emit(body: dict[str, Any], exc: BaseException | None = None) -> None:
        if body["status"] >= 500:
            log.error("api.error code=%s status=%s", body["code"], body["status"], exc_info=exc)
        else:
            log.warning(
                "api.error code=%s status=%s detail=%s", body["code"], body["status"], body["detail"]
            )

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_problem()
        _emit(body)
        return problem_response(body, err.headers)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        if isinstance(translated, APIError):
            return handle_api_error(translated)
        return handle_unexpected_error(err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        body = problem(status, code, detail)
        _emit(body)
        return problem_response(body)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        body = problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )
        _emit(body)
        return problem_response(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Unique email raced past the registration pre-check.
        body = problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict")
        log.warning("api.error code=conflict status=409 integrity=%s", err.orig)
        return problem_response(body)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        body = problem(
            HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable"
        )
        _emit(body, err)
        return problem_response(body)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        body = problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")
        _emit(body, err)
        return problem_response(body)
