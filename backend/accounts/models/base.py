"""Column mixins and UTC helpers shared by the account models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column


def as_utc(value: datetime | None) -> datetime | None:
    """
    Return ``value`` as an aware UTC datetime.

    SQLite hands back naive values; every timestamp here is written in UTC,
    so naive values are tagged, aware ones converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TimestampMixin:
    """``created_at``/``updated_at``, database-filled unless set explicitly.

    Verification codes set ``created_at`` from the service clock because the
    resend throttle and expiry are computed from it.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class PKMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class UUIDPKMixin:
    """UUID4 string key generated by the application at flush time."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))


class ReprMixin:
    """``<User id=3 email='a@b.c'>``; extra fields come from ``__repr_fields__``."""

    __repr_fields__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        parts = [f"id={getattr(self, 'id', None)}"]
        parts += [f"{name}={getattr(self, name, None)!r}" for name in self.__repr_fields__]
        return f"<{type(self).__name__} {' '.join(parts)}>"
