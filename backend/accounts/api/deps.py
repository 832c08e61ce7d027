"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt import ExpiredSignatureError, InvalidTokenError

from accounts.core.container import get_services
from accounts.core.errors import Forbidden, Unauthorized
from accounts.services._shared.dto import UserOut
from accounts.services._shared.errors import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
)
from accounts.services._shared.ports import TokenPayload

F = TypeVar("F", bound=Callable[..., Any])

TOKEN_REASONS = {"missing", "expired", "invalid"}


def request_token_payload() -> TokenPayload:
    """
    Locate and verify the bearer token of the current request.

    Flask-JWT-Extended finds the token in the configured location and checks
    its signature and expiry; the claims are then rebuilt as a payload.

    :raises TokenMissingError: No bearer token was sent.
    :raises TokenExpiredError: The token is past its ``exp``.
    :raises TokenInvalidError: Bad signature, bad header or malformed claims.
    """

    try:
        verify_jwt_in_request()
    except NoAuthorizationError as exc:
        raise TokenMissingError() from exc
    except ExpiredSignatureError as exc:
        raise TokenExpiredError() from exc
    except (InvalidTokenError, JWTExtendedException) as exc:
        raise TokenInvalidError() from exc

    try:
        return TokenPayload.from_claims(get_jwt())
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenInvalidError("Invalid token payload") from exc


def optional_token_payload() -> TokenPayload | None:
    """Like :func:`request_token_payload`, but ``None`` when absent or unusable."""

    try:
        return request_token_payload()
    except TokenMissingError:
        return None
    except TokenError as exc:
        current_app.logger.warning("auth.header_token.unverifiable reason=%s", exc.reason)
        return None


def json_body() -> dict[str, Any]:
    """Return the JSON body as a dict (empty when absent or not an object)."""

    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def require_auth(func: F | None = None, *, role: str | None = None) -> Any:
    """Ensure the request carries a valid bearer token for a usable account.

    The token subject is re-resolved on every call, so deactivated or locked
    accounts are rejected even with an unexpired token. The resolved user is
    stored in ``g.current_user``.

    Usable bare (``@require_auth``) or with a role (``@require_auth(role="admin")``).
    """

    def decorator(view: F) -> F:
        @functools.wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                payload = request_token_payload()
            except TokenError as exc:
                raise Unauthorized(str(exc), code=f"token_{exc.reason}") from exc
            verdict = get_services().auth.check_payload(payload)
            if not verdict.valid or verdict.user is None:
                reason = verdict.reason or "invalid"
                code = f"token_{reason}" if reason in TOKEN_REASONS else reason
                raise Unauthorized(verdict.message, code=code)
            if role is not None and verdict.user.role != role:
                raise Forbidden("Insufficient role")
            g.current_user = verdict.user
            return view(*args, **kwargs)

        return cast(F, wrapper)

    if func is not None:
        return decorator(func)
    return decorator


def current_user() -> UserOut:
    """Return the user resolved by :func:`require_auth`."""

    return cast(UserOut, g.current_user)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
