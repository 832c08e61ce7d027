"""Credential (lockout) persistence over the ``users`` table.

Every state change is a single conditional ``UPDATE`` evaluated by the
database, so two concurrent failed logins cannot lose an increment and a
lock set by one request cannot be cleared by a stale success in another.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, case, or_, update

from accounts.models.user import User
from accounts.repositories.base import BaseRepository


def _not_locked_at(now: datetime):
    """SQL predicate: no lock, or the lock window has elapsed at ``now``."""
    return or_(User.locked_until.is_(None), User.locked_until <= now)


class CredentialRepository(BaseRepository[User]):
    """Atomic lockout-counter operations for :class:`User` rows."""

    model = User

    def register_failure(
        self,
        user_id: int,
        *,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> bool:
        """Count one failed login and lock the account when the threshold is hit.

        An elapsed lock is cleared by the same statement and the counter
        restarts, so the attempt opens a new window.

        :param user_id: Target user id.
        :type user_id: int
        :param now: Evaluation time.
        :type now: datetime
        :param max_attempts: Failures that trigger a lock.
        :type max_attempts: int
        :param lock_until: Lock end applied when the threshold is reached.
        :type lock_until: datetime
        :returns: ``False`` when no row matched (inactive, or locked by a
                  concurrent request).
        :rtype: bool
        """
        lock_elapsed = and_(User.locked_until.is_not(None), User.locked_until <= now)
        attempts = case((lock_elapsed, 0), else_=User.login_attempts) + 1
        stmt = (
            update(User)
            .where(User.id == user_id, User.is_active.is_(True), _not_locked_at(now))
            .values(
                login_attempts=attempts,
                locked_until=case((attempts >= max_attempts, lock_until), else_=None),
            )
        )
        return self.execute_bulk(stmt) == 1

    def register_success(self, user_id: int, *, now: datetime) -> bool:
        """Reset the counter, clear the lock and stamp ``last_login_at``.

        :returns: ``False`` when the account got locked in the meantime.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.is_active.is_(True), _not_locked_at(now))
            .values(login_attempts=0, locked_until=None, last_login_at=now)
        )
        return self.execute_bulk(stmt) == 1

    def unlock(self, user_id: int) -> bool:
        """Force ``login_attempts = 0`` and ``locked_until = NULL``."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(login_attempts=0, locked_until=None)
        )
        return self.execute_bulk(stmt) == 1
