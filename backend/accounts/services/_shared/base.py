# accounts/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from accounts.core import errors as api_errors
from accounts.services._shared.errors import (
    AccountInactiveError,
    AccountLockedError,
    ConflictError,
    InfrastructureError,
    InvalidCredentialsError,
    NotFoundError,
    ResendThrottledError,
    ServiceError,
    TokenError,
    VerificationCodeExpiredError,
    VerificationCodeInvalidError,
    VerificationCodeUsedError,
)
from accounts.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current aware UTC time."""
    return datetime.now(UTC)


class BaseService:
    """
    Common plumbing for the account services.

    A service opens one unit of work per use-case (:meth:`rw_uow` or
    :meth:`ro_uow`) and reads time only from :meth:`now_utc`, so lockout
    windows, code expiry and the resend throttle can be driven by a fake
    clock in tests. Service errors are mapped to HTTP problems by
    :meth:`translate_exceptions`.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, clock: Clock | None = None) -> None:
        """
        :param clock: Returns the current aware UTC time; defaults to :func:`utc_now`.
        :type clock: Callable[[], datetime] | None
        """
        self._clock: Clock = clock or utc_now

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Unit of work that commits on clean exit."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Unit of work for lookups; any write inside it raises.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED", "REPEATABLE READ").
        :type isolation: str | None
        :param enforce_db_readonly: Apply `SET TRANSACTION READ ONLY` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map a service error onto the :mod:`accounts.core.errors` problem it is reported as.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        # --- Lookup / uniqueness -------------------------------------------
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        # --- Authentication ------------------------------------------------
        if isinstance(exc, InvalidCredentialsError):
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        if isinstance(exc, AccountInactiveError):
            return api_errors.Forbidden(str(exc), code="account_inactive")

        if isinstance(exc, AccountLockedError):
            return api_errors.AccountLocked(str(exc), minutes_until_unlock=exc.minutes)

        if isinstance(exc, TokenError):
            # expired → client may refresh; invalid → client must re-authenticate
            return api_errors.Unauthorized(str(exc), code=f"token_{exc.reason}")

        # --- Email verification --------------------------------------------
        if isinstance(exc, VerificationCodeInvalidError):
            return api_errors.APIError(str(exc), code="verification_code_invalid")

        if isinstance(exc, VerificationCodeUsedError):
            return api_errors.APIError(str(exc), code="verification_code_used")

        if isinstance(exc, VerificationCodeExpiredError):
            return api_errors.APIError(str(exc), code="verification_code_expired")

        if isinstance(exc, ResendThrottledError):
            return api_errors.ResendThrottled(str(exc), wait_seconds=exc.wait_seconds)

        # --- Infrastructure ------------------------------------------------
        if isinstance(exc, InfrastructureError):
            log.error("Infrastructure failure: %s", exc, exc_info=exc)
            return api_errors.ServiceUnavailable()

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(str(exc))

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
