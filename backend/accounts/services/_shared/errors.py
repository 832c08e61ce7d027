"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly. They serve as stable contracts between
repositories, domain models, and application services.

Three families exist:

* business-rule failures (credentials, lockout, tokens, verification codes,
  throttling) which are expected and carry a user-facing message;
* lookup/uniqueness failures (:class:`NotFoundError`, :class:`ConflictError`);
* infrastructure failures (:class:`InfrastructureError`) which are logged with
  context and surfaced generically.

The translation to HTTP responses (RFC 7807) is handled by
``accounts/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer or BaseService will later translate them to APIError.
    """

    pass


class InfrastructureError(ServiceError):
    """Raised when a collaborator (keys, transport, storage) is unavailable."""


class SigningKeyError(InfrastructureError):
    """Raised when token signing keys cannot be loaded in a strict posture."""


class NotificationError(InfrastructureError):
    """Raised by notifier adapters when a message could not be delivered."""


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class InvalidInputError(ServiceError):
    """Raised when a service receives arguments outside the accepted domain."""


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for login-time failures."""


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class AccountInactiveError(AuthenticationError):
    """The account exists but its email has not been verified yet."""

    def __init__(self, message: str = "Account is not active. Please verify your email.") -> None:
        super().__init__(message)


@dataclass(slots=True)
class AccountLockedError(AuthenticationError):
    """
    The account is temporarily locked after repeated failures.

    :param minutes: Whole minutes until the lock elapses (rounded up).
    :type minutes: int
    """

    minutes: int

    def __str__(self) -> str:
        return f"Account is locked. Try again in {self.minutes} minutes."


# --------------------------------------------------------------------------- #
# Tokens
# --------------------------------------------------------------------------- #

TOKEN_MISSING = "missing"
TOKEN_EXPIRED = "expired"
TOKEN_INVALID = "invalid"


class TokenError(ServiceError):
    """
    Base class for bearer-token verification failures.

    ``reason`` is :data:`TOKEN_MISSING` (no bearer token sent),
    :data:`TOKEN_EXPIRED` (refresh may help) or :data:`TOKEN_INVALID`
    (re-authenticate).
    """

    reason: str = TOKEN_INVALID
    default_message = "Invalid token"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class TokenMissingError(TokenError):
    reason = TOKEN_MISSING
    default_message = "No token provided"


class TokenExpiredError(TokenError):
    reason = TOKEN_EXPIRED
    default_message = "Token has expired"


class TokenInvalidError(TokenError):
    reason = TOKEN_INVALID
    default_message = "Invalid token"


# --------------------------------------------------------------------------- #
# Email verification
# --------------------------------------------------------------------------- #


class VerificationCodeError(ServiceError):
    """Base class for verification-code redemption failures."""


class VerificationCodeInvalidError(VerificationCodeError):
    def __init__(self, message: str = "Invalid verification code") -> None:
        super().__init__(message)


class VerificationCodeUsedError(VerificationCodeError):
    def __init__(self, message: str = "Verification code has already been used") -> None:
        super().__init__(message)


class VerificationCodeExpiredError(VerificationCodeError):
    def __init__(self, message: str = "Verification code has expired") -> None:
        super().__init__(message)


@dataclass(slots=True)
class ResendThrottledError(ServiceError):
    """
    A new code was requested before the minimum resend interval elapsed.

    :param wait_seconds: Seconds the client should wait before retrying.
    :type wait_seconds: int
    """

    wait_seconds: int

    def __str__(self) -> str:
        return f"Please wait {self.wait_seconds} seconds before requesting a new code"
