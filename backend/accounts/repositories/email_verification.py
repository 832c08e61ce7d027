"""Email verification code repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from accounts.models.email_verification import EmailVerification, normalize_code
from accounts.repositories.base import BaseRepository


class EmailVerificationRepository(BaseRepository[EmailVerification]):
    """Persistence-only repository for :class:`EmailVerification`."""

    model = EmailVerification

    # ---------------------------- Lookups ----------------------------

    def find_by_email_and_code(self, email: str, code: str) -> EmailVerification | None:
        """Return the newest record matching ``(email, code)``.

        The code is compared after trimming and upper-casing.

        :param email: Target address.
        :type email: str
        :param code: Raw code as typed by the user.
        :type code: str
        :rtype: EmailVerification | None
        """
        stmt = (
            select(EmailVerification)
            .where(
                EmailVerification.email == email.lower().strip(),
                EmailVerification.code == normalize_code(code),
            )
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        return cast(EmailVerification | None, self.session.execute(stmt).scalars().first())

    def find_latest_valid(self, email: str, *, now: datetime) -> EmailVerification | None:
        """Return the most recent unused, unexpired code for ``email``.

        :param email: Target address.
        :type email: str
        :param now: Evaluation time.
        :type now: datetime
        :rtype: EmailVerification | None
        """
        stmt = (
            select(EmailVerification)
            .where(
                EmailVerification.email == email.lower().strip(),
                EmailVerification.is_used.is_(False),
                EmailVerification.expires_at > now,
            )
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        return cast(EmailVerification | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Mutations ----------------------------

    def invalidate_unused(self, email: str, *, now: datetime) -> int:
        """Mark every unused code for ``email`` as used.

        :returns: Number of superseded codes.
        :rtype: int
        """
        stmt = (
            update(EmailVerification)
            .where(
                EmailVerification.email == email.lower().strip(),
                EmailVerification.is_used.is_(False),
            )
            .values(is_used=True, used_at=now)
        )
        return self.execute_bulk(stmt)

    def redeem(self, verification_id: str, *, now: datetime) -> bool:
        """Consume a code if, and only if, it is still usable at ``now``.

        :param verification_id: Record id.
        :type verification_id: str
        :returns: ``True`` when this call consumed the code.
        :rtype: bool
        """
        stmt = (
            update(EmailVerification)
            .where(
                EmailVerification.id == verification_id,
                EmailVerification.is_used.is_(False),
                EmailVerification.expires_at > now,
            )
            .values(is_used=True, used_at=now)
        )
        return self.execute_bulk(stmt) == 1

    def delete_expired(self, *, now: datetime) -> int:
        """Delete every record with ``expires_at < now``.

        :returns: Number of deleted rows.
        :rtype: int
        """
        stmt = (
            delete(EmailVerification)
            .where(EmailVerification.expires_at < now)
        )
        return self.execute_bulk(stmt)
