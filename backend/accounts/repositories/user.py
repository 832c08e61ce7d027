"""User repository for identity lookups and profile persistence."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from accounts.models.user import User
from accounts.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Handles lookups, registration inserts and activation. Lockout counters
    are owned by :class:`~accounts.repositories.credential.CredentialRepository`.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Activation ----------------------------

    def activate(self, user: User) -> bool:
        """Activate ``user`` if needed and flush.

        :param user: Persistent user.
        :type user: User
        :returns: ``True`` when the user transitioned to active; ``False``
                  when it already was.
        :rtype: bool
        """
        if user.is_active:
            return False
        user.activate()
        self.flush()
        return True
