"""
CredentialService
=================

Owns the account-lockout state machine:

- ``ACTIVE_UNLOCKED`` → failed attempt → counter + 1 (lock at the threshold).
- ``ACTIVE_LOCKED`` → every attempt is rejected until ``locked_until``.
- ``INACTIVE`` → never authenticates, counters untouched.

Counter changes are single-statement conditional updates
(:class:`~accounts.repositories.credential.CredentialRepository`), so
concurrent attempts on the same account cannot lose increments.

:meth:`CredentialService.authenticate` reports its outcome instead of
raising: a raise inside the unit of work would roll back the counters it
just wrote.
"""

from __future__ import annotations

import logging

from accounts.services._shared.base import BaseService, Clock
from accounts.services._shared.errors import NotFoundError
from accounts.services._shared.ports import PasswordHasher
from accounts.services.credentials.dto import (
    AuthenticationResult,
    AuthOutcome,
    CredentialRecord,
    LockoutPolicy,
    LoginStatsOut,
    UnlockOut,
)

log = logging.getLogger(__name__)


class CredentialService(BaseService):
    """Password verification with brute-force lockout."""

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        policy: LockoutPolicy | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param hasher: Password hashing adapter.
        :type hasher: PasswordHasher
        :param policy: Lockout thresholds.
        :type policy: LockoutPolicy | None
        :param clock: Time source.
        """
        super().__init__(clock=clock)
        self.hasher = hasher
        self.policy = policy or LockoutPolicy()

    # ------------------------------------------------------------------ #
    # Authentication
    # ------------------------------------------------------------------ #

    def authenticate(self, email: str, password: str) -> AuthenticationResult:
        """
        Check ``password`` for ``email`` and update the lockout counters.

        Order of checks: unknown email, inactive account, open lock,
        password. Only the password check touches the counters.

        :param email: Login email (normalized here).
        :type email: str
        :param password: Raw password.
        :type password: str
        :returns: Outcome; counters are committed before returning.
        :rtype: AuthenticationResult
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                log.info("auth.credentials.unknown_email")
                return AuthenticationResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

            early = self._reject_if_blocked(CredentialRecord.from_user(user), now)
            if early is not None:
                return early

            if not self.hasher.verify(password, user.password_hash):
                applied = uow.credentials.register_failure(
                    user.id,
                    now=now,
                    max_attempts=self.policy.max_attempts,
                    lock_until=now + self.policy.lock_duration,
                )
                record = CredentialRecord.from_user(uow.credentials.reload(user))
                if not applied:
                    # Locked or deactivated by a concurrent request.
                    return self._reject_if_blocked(record, now) or AuthenticationResult(
                        outcome=AuthOutcome.INVALID_CREDENTIALS, record=record
                    )
                locked_now = record.is_locked(now)
                if locked_now:
                    log.warning(
                        "auth.credentials.locked user_id=%s attempts=%s until=%s",
                        record.user_id,
                        record.login_attempts,
                        record.locked_until.isoformat(),
                    )
                else:
                    log.info(
                        "auth.credentials.failed user_id=%s attempts=%s",
                        record.user_id,
                        record.login_attempts,
                    )
                return AuthenticationResult(
                    outcome=AuthOutcome.INVALID_CREDENTIALS,
                    record=record,
                    locked_now=locked_now,
                )

            applied = uow.credentials.register_success(user.id, now=now)
            record = CredentialRecord.from_user(uow.credentials.reload(user))
            if not applied:
                return self._reject_if_blocked(record, now) or AuthenticationResult(
                    outcome=AuthOutcome.INVALID_CREDENTIALS, record=record
                )
            return AuthenticationResult(outcome=AuthOutcome.AUTHENTICATED, record=record)

    def _reject_if_blocked(self, record: CredentialRecord, now) -> AuthenticationResult | None:
        if not record.is_active:
            log.info("auth.credentials.inactive user_id=%s", record.user_id)
            return AuthenticationResult(outcome=AuthOutcome.INACTIVE, record=record)
        if record.is_locked(now):
            log.info("auth.credentials.rejected_locked user_id=%s", record.user_id)
            return AuthenticationResult(
                outcome=AuthOutcome.LOCKED,
                record=record,
                minutes_until_unlock=record.minutes_until_unlock(now),
            )
        return None

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def find_by_id(self, user_id: int) -> CredentialRecord | None:
        """
        Resolve a user by id.

        :param user_id: User identifier.
        :type user_id: int
        :rtype: CredentialRecord | None
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            return CredentialRecord.from_user(user) if user is not None else None

    def is_active_and_verified(self, email: str) -> bool:
        """
        ``True`` when the account exists, is active and has no pending
        verification marker.

        :param email: Login email.
        :type email: str
        :rtype: bool
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            return bool(user is not None and user.is_active and user.verification_token is None)

    def minutes_until_unlock(self, email: str) -> int:
        """
        Remaining lock minutes for ``email`` (``0`` when unlocked or unknown).

        :param email: Login email.
        :type email: str
        :rtype: int
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            return user.minutes_until_unlock(self.now_utc()) if user is not None else 0

    def get_login_stats(self, user_id: int) -> LoginStatsOut:
        """
        Login statistics for ``user_id``.

        :param user_id: User identifier.
        :type user_id: int
        :rtype: LoginStatsOut
        :raises NotFoundError: If the user does not exist.
        """
        record = self.find_by_id(user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        now = self.now_utc()
        locked = record.is_locked(now)
        return LoginStatsOut(
            user_id=record.user_id,
            last_login_at=record.last_login_at,
            failed_attempts=record.login_attempts,
            is_locked=locked,
            locked_until=record.locked_until if locked else None,
            minutes_until_unlock=record.minutes_until_unlock(now),
        )

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #

    def unlock(self, email: str) -> UnlockOut:
        """
        Clear the counter and the lock of ``email``.

        :param email: Account email.
        :type email: str
        :rtype: UnlockOut
        :raises NotFoundError: If the user does not exist.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            uow.credentials.unlock(user.id)
            unlocked_email = user.email
        log.info("auth.credentials.unlocked email=%s", unlocked_email)
        return UnlockOut(email=unlocked_email, unlocked_at=now)
