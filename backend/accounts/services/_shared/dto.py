# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public-safe user representation returned by authentication flows.

    :param id: User identifier.
    :type id: int
    :param email: Normalized email.
    :type email: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param role: Role value (``user`` | ``admin``).
    :type role: str
    :param is_active: Whether the email has been verified.
    :type is_active: bool
    :param last_login_at: Last successful login, if any.
    :type last_login_at: datetime | None
    """

    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    last_login_at: datetime | None = None

    @classmethod
    def from_source(cls, source: Any) -> UserOut:
        """
        Build from any object exposing the user attributes (ORM row or record).

        :param source: :class:`~accounts.models.user.User` or a credential record.
        :rtype: UserOut
        """
        role = getattr(source, "role", "user")
        return cls(
            id=int(getattr(source, "user_id", None) or source.id),
            email=source.email,
            first_name=source.first_name,
            last_name=source.last_name,
            role=getattr(role, "value", role),
            is_active=bool(source.is_active),
            last_login_at=source.last_login_at,
        )
