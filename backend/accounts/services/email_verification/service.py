"""
EmailVerificationService
========================

Issues, throttles and redeems single-use 6-digit codes that gate account
activation.

Invariants
----------
- At most one usable code per email: issuing a code supersedes (marks used)
  every older unused code for the same address.
- A code is redeemed at most once: redemption is a conditional ``UPDATE``
  that only matches an unused, unexpired row.
- A failed redemption never consumes the code.
- Notifier failure does not roll back the issued code; the failure is
  logged and the code stays valid.
"""

from __future__ import annotations

import logging
import math
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from accounts.models.base import as_utc
from accounts.models.email_verification import CODE_LENGTH, EmailVerification, normalize_code
from accounts.services._shared.base import BaseService, Clock
from accounts.services._shared.errors import (
    InvalidInputError,
    NotFoundError,
    NotificationError,
    ResendThrottledError,
    VerificationCodeExpiredError,
    VerificationCodeInvalidError,
    VerificationCodeUsedError,
)
from accounts.services._shared.ports import Notification, Notifier
from accounts.services.email_verification.dto import (
    ALREADY_VERIFIED_CODE_ID,
    SendCodeIn,
    SendCodeOut,
    VerificationPolicy,
    VerifyCodeIn,
    VerifyCodeOut,
)

log = logging.getLogger(__name__)

TEMPLATE_NAME = "email_verification"
SUBJECT_TEMPLATE = "Verify your email - Code: {code}"


def generate_numeric_code() -> str:
    """Return a uniformly random 6-digit code (``100000`` to ``999999``)."""
    return str(secrets.randbelow(900_000) + 100_000)


@dataclass(frozen=True, slots=True)
class _IssuedCode:
    id: str
    code: str
    expires_at: datetime
    first_name: str


class EmailVerificationService(BaseService):
    """Verification-code lifecycle: send, resend, verify, purge."""

    def __init__(
        self,
        *,
        notifier: Notifier,
        policy: VerificationPolicy | None = None,
        code_generator: Callable[[], str] | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param notifier: Outbound mail adapter.
        :type notifier: Notifier
        :param policy: Lifetime bounds and resend interval.
        :type policy: VerificationPolicy | None
        :param code_generator: Source of new codes.
        :type code_generator: Callable[[], str] | None
        :param clock: Time source.
        """
        super().__init__(clock=clock)
        self.notifier = notifier
        self.policy = policy or VerificationPolicy()
        self._generate_code = code_generator or generate_numeric_code

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def send(self, dto: SendCodeIn) -> SendCodeOut:
        """
        Issue a new code for ``dto.email`` and mail it.

        :param dto: Send input.
        :rtype: SendCodeOut
        :raises NotFoundError: If no user has this email.
        :raises InvalidInputError: If the requested lifetime is out of bounds.
        """
        return self._issue(dto, throttle=False)

    def resend(self, dto: SendCodeIn) -> SendCodeOut:
        """
        Like :meth:`send`, but refuse while the live code is younger than the
        resend interval.

        :param dto: Send input.
        :rtype: SendCodeOut
        :raises ResendThrottledError: Carries the remaining wait in seconds.
        """
        return self._issue(dto, throttle=True)

    def _issue(self, dto: SendCodeIn, *, throttle: bool) -> SendCodeOut:
        email = _normalize_email(dto.email)
        ttl_minutes = self._resolve_ttl(dto.expiration_minutes)
        now = self.now_utc()

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            if user.is_active:
                log.info("verification.skipped_already_active email=%s", email)
                return SendCodeOut(
                    success=True,
                    message="Email is already verified. No verification needed.",
                    expires_at=now,
                    code_id=ALREADY_VERIFIED_CODE_ID,
                    already_verified=True,
                )

            if throttle:
                latest = uow.verifications.find_latest_valid(email, now=now)
                if latest is not None:
                    wait = self._remaining_wait(latest, now)
                    if wait > 0:
                        raise ResendThrottledError(wait)

            superseded = uow.verifications.invalidate_unused(email, now=now)
            record = EmailVerification.issue(
                email=email, code=self._generate_code(), now=now, ttl_minutes=ttl_minutes
            )
            uow.verifications.add(record)
            issued = _IssuedCode(
                id=record.id,
                code=record.code,
                expires_at=as_utc(record.expires_at),
                first_name=user.first_name,
            )

        log.info(
            "verification.issued email=%s code_id=%s superseded=%s ttl_minutes=%s",
            email,
            issued.id,
            superseded,
            ttl_minutes,
        )
        self._dispatch(email, issued, ttl_minutes)
        return SendCodeOut(
            success=True,
            message=(
                "Verification code resent successfully"
                if throttle
                else "Verification code sent successfully"
            ),
            expires_at=issued.expires_at,
            code_id=issued.id,
        )

    def _resolve_ttl(self, requested: int | None) -> int:
        if requested is None:
            return self.policy.default_ttl_minutes
        low, high = self.policy.min_ttl_minutes, self.policy.max_ttl_minutes
        if not low <= requested <= high:
            raise InvalidInputError(f"Expiration must be between {low} and {high} minutes")
        return requested

    def _remaining_wait(self, latest: EmailVerification, now: datetime) -> int:
        created_at = as_utc(latest.created_at)
        if created_at is None:
            return 0
        elapsed = math.floor((now - created_at).total_seconds())
        return self.policy.resend_interval_seconds - elapsed

    def _dispatch(self, email: str, issued: _IssuedCode, ttl_minutes: int) -> None:
        notification = Notification(
            to=email,
            subject=SUBJECT_TEMPLATE.format(code=issued.code),
            template=TEMPLATE_NAME,
            context={
                "code": issued.code,
                "first_name": issued.first_name,
                "expiration_minutes": ttl_minutes,
            },
        )
        try:
            receipt = self.notifier.send(notification)
        except NotificationError as exc:
            # The code stays valid; the user can ask for a resend.
            log.warning(
                "verification.notify_failed email=%s code_id=%s error=%s", email, issued.id, exc
            )
            return
        log.info("verification.notified email=%s message_id=%s", email, receipt.message_id)

    # ------------------------------------------------------------------ #
    # Redeem
    # ------------------------------------------------------------------ #

    def verify(self, dto: VerifyCodeIn) -> VerifyCodeOut:
        """
        Redeem ``dto.code`` and activate the account, in one transaction.

        :param dto: Verify input.
        :rtype: VerifyCodeOut
        :raises InvalidInputError: Code is not 6 characters.
        :raises VerificationCodeInvalidError: No code matches.
        :raises VerificationCodeUsedError: Code already consumed or superseded.
        :raises VerificationCodeExpiredError: Code past its expiry.
        :raises NotFoundError: Code matches but the user is gone.
        """
        email = _normalize_email(dto.email)
        code = normalize_code(dto.code)
        if len(code) != CODE_LENGTH:
            raise InvalidInputError("Verification code must be 6 digits")
        now = self.now_utc()

        with self.rw_uow() as uow:
            record = uow.verifications.find_by_email_and_code(email, code)
            if record is None:
                raise VerificationCodeInvalidError()
            _ensure_usable(record, now)

            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)

            if not uow.verifications.redeem(record.id, now=now):
                # Lost a race; classify with the committed state.
                _ensure_usable(uow.verifications.reload(record), now)
                raise VerificationCodeUsedError()

            activated = uow.users.activate(user)

        log.info("verification.verified email=%s user_activated=%s", email, activated)
        return VerifyCodeOut(
            success=True, message="Email verified successfully", user_activated=activated
        )

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def purge_expired(self) -> int:
        """
        Delete every code past its expiry.

        :returns: Number of deleted records.
        :rtype: int
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            deleted = uow.verifications.delete_expired(now=now)
        log.info("verification.purged count=%s", deleted)
        return deleted


def _ensure_usable(record: EmailVerification, now: datetime) -> None:
    if record.is_used:
        raise VerificationCodeUsedError()
    if record.is_expired(now):
        raise VerificationCodeExpiredError()


def _normalize_email(raw: str) -> str:
    email = (raw or "").strip().lower()
    if "@" not in email:
        raise InvalidInputError("Invalid email format")
    return email
