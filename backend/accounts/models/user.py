"""User model: identity plus the credential (lockout) state."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from accounts.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_utc


class UserRole(str, Enum):
    """Role enumeration aligned with DB schema."""

    USER = "user"
    ADMIN = "admin"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity and its security-relevant state.

    Lock expiry is lazy: ``locked_until`` may stay populated after the window
    has passed. Readers must always compare it against the current time
    (:meth:`is_locked`), never just null-check it.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        One-way hash produced by the password hasher.
    first_name, last_name : str
        Display names carried inside issued tokens.
    role : UserRole
        Authorization role (``user`` by default).
    is_active : bool
        ``False`` until the email address has been verified.
    verification_token : str | None
        Pending-verification marker, cleared on activation.
    login_attempts : int
        Consecutive failed logins in the current window.
    locked_until : datetime | None
        End of the current lock window.
    last_login_at : datetime | None
        Timestamp of the last successful login.
    """

    __tablename__ = "users"
    __repr_fields__ = ("email", "is_active")

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="enum_user_role",
            native_enum=True,
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=UserRole.USER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Credential state
    login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Lockout helpers --------------------
    def is_locked(self, now: datetime) -> bool:
        """
        Return ``True`` while the lock window is still open at ``now``.

        :param now: Aware reference time.
        :type now: datetime
        :rtype: bool
        """
        locked_until = as_utc(self.locked_until)
        return locked_until is not None and locked_until > now

    def minutes_until_unlock(self, now: datetime) -> int:
        """
        Whole minutes (rounded up) until the lock elapses, ``0`` when unlocked.

        :param now: Aware reference time.
        :type now: datetime
        :rtype: int
        """
        locked_until = as_utc(self.locked_until)
        if locked_until is None or locked_until <= now:
            return 0
        return max(0, math.ceil((locked_until - now).total_seconds() / 60))

    def activate(self) -> None:
        """Mark the email as verified and drop the pending marker."""
        self.is_active = True
        self.verification_token = None

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("first_name", "last_name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()
