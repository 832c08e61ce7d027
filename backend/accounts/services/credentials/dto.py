"""
DTOs for CredentialService.

Records here are detached snapshots: they are built inside a unit of work
and stay valid after the session has been committed or closed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from accounts.models.base import as_utc

# ------------------------------ Policy ------------------------------------ #


@dataclass(frozen=True, slots=True)
class LockoutPolicy:
    """
    Brute-force protection settings.

    :param max_attempts: Consecutive failures that lock the account.
    :type max_attempts: int
    :param lock_duration: Length of the lock window.
    :type lock_duration: timedelta
    """

    max_attempts: int = 5
    lock_duration: timedelta = timedelta(minutes=15)


# ------------------------------ Records ----------------------------------- #


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """
    Snapshot of a user's identity and lockout state.

    :param user_id: User identifier.
    :type user_id: int
    :param email: Normalized email.
    :type email: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param role: Role value.
    :type role: str
    :param is_active: Email verified flag.
    :type is_active: bool
    :param login_attempts: Consecutive failures in the current window.
    :type login_attempts: int
    :param locked_until: End of the lock window, if any.
    :type locked_until: datetime | None
    :param last_login_at: Last successful login.
    :type last_login_at: datetime | None
    """

    user_id: int
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> CredentialRecord:
        """
        Snapshot an ORM user.

        :param user: :class:`~accounts.models.user.User` instance.
        :rtype: CredentialRecord
        """
        return cls(
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=getattr(user.role, "value", user.role),
            is_active=bool(user.is_active),
            login_attempts=user.login_attempts or 0,
            locked_until=as_utc(user.locked_until),
            last_login_at=as_utc(user.last_login_at),
        )

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def minutes_until_unlock(self, now: datetime) -> int:
        if not self.is_locked(now):
            return 0
        return max(0, math.ceil((self.locked_until - now).total_seconds() / 60))


class AuthOutcome(str, Enum):
    """Result of checking a credential."""

    AUTHENTICATED = "authenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE = "inactive"
    LOCKED = "locked"


@dataclass(frozen=True, slots=True)
class AuthenticationResult:
    """
    Outcome of :meth:`CredentialService.authenticate`.

    The lockout counters are already committed when this is returned,
    whatever the outcome.

    :param outcome: Classification of the attempt.
    :type outcome: AuthOutcome
    :param record: Account snapshot after the attempt (``None`` for unknown emails).
    :type record: CredentialRecord | None
    :param minutes_until_unlock: Remaining lock minutes for ``LOCKED``.
    :type minutes_until_unlock: int
    :param locked_now: ``True`` when this failure is the one that locked the account.
    :type locked_now: bool
    """

    outcome: AuthOutcome
    record: CredentialRecord | None = None
    minutes_until_unlock: int = 0
    locked_now: bool = False

    @property
    def authenticated(self) -> bool:
        return self.outcome is AuthOutcome.AUTHENTICATED


# ------------------------------ Outputs ----------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginStatsOut:
    """
    Login statistics for a single user.

    :param user_id: User identifier.
    :type user_id: int
    :param last_login_at: Last successful login.
    :type last_login_at: datetime | None
    :param failed_attempts: Consecutive failures in the current window.
    :type failed_attempts: int
    :param is_locked: Whether the lock window is open now.
    :type is_locked: bool
    :param locked_until: End of the lock window (only while locked).
    :type locked_until: datetime | None
    :param minutes_until_unlock: Remaining lock minutes.
    :type minutes_until_unlock: int
    """

    user_id: int
    last_login_at: datetime | None
    failed_attempts: int
    is_locked: bool
    locked_until: datetime | None
    minutes_until_unlock: int


@dataclass(frozen=True, slots=True)
class UnlockOut:
    """
    Result of an administrative unlock.

    :param email: Unlocked account email.
    :type email: str
    :param unlocked_at: Time of the unlock.
    :type unlocked_at: datetime
    :param message: Human readable confirmation.
    :type message: str
    """

    email: str
    unlocked_at: datetime
    message: str = "Account unlocked successfully"
