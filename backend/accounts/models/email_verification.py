"""Single-use email verification codes."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from accounts.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin, as_utc

CODE_LENGTH = 6


def normalize_code(raw: str) -> str:
    """Trim and upper-case a user-supplied code before comparison."""
    return (raw or "").strip().upper()


class EmailVerification(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A 6-character code proving control of ``email``.

    A code is usable iff it is unused and ``now < expires_at``. Issuing a new
    code marks every older unused code for the same email as used, so at most
    one code per email is usable at any time.

    Fields
    ------
    email : str
        Target address (normalized).
    code : str
        Six numeric characters.
    expires_at : datetime
        End of validity; strictly in the future at creation.
    is_used : bool
        Set on redemption or when superseded.
    used_at : datetime | None
        When the code was consumed or superseded.
    """

    __tablename__ = "email_verifications"
    __repr_fields__ = ("email", "is_used")

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    code: Mapped[str] = mapped_column(String(CODE_LENGTH), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_email_verifications_email_code", "email", "code"),
        Index("ix_email_verifications_email_used_expires", "email", "is_used", "expires_at"),
        Index("ix_email_verifications_email", "email"),
        Index("ix_email_verifications_expires_at", "expires_at"),
        CheckConstraint("length(code) = 6", name="code_length"),
    )

    @classmethod
    def issue(
        cls, *, email: str, code: str, now: datetime, ttl_minutes: int
    ) -> EmailVerification:
        """
        Build a fresh, unused code valid for ``ttl_minutes`` from ``now``.

        :raises ValueError: If the TTL is not positive.
        """
        if ttl_minutes <= 0:
            raise ValueError("Verification code must expire in the future.")
        return cls(
            email=email,
            code=code,
            expires_at=now + timedelta(minutes=ttl_minutes),
            is_used=False,
            created_at=now,
            updated_at=now,
        )

    # -------------------- State helpers --------------------
    def is_expired(self, now: datetime) -> bool:
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and now >= expires_at

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        if not value or "@" not in value:
            raise ValueError("Invalid email format.")
        return value.strip().lower()

    @validates("code")
    def _validate_code(self, key: str, value: str) -> str:
        v = normalize_code(value)
        if len(v) != CODE_LENGTH:
            raise ValueError("Verification code must be 6 digits.")
        return v
