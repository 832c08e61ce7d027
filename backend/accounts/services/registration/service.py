"""
UserRegistrationService
=======================

Process-level service that registers a new identity:

- Creates an inactive ``User`` with a pending verification marker.
- Rejects duplicate emails, including the insert race, with ``ConflictError``.
- Allows post-commit side-effects via a callback (the API sends the first
  verification code from there).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from accounts.models.user import User, UserRole
from accounts.services._shared.base import BaseService, Clock
from accounts.services._shared.dto import UserOut
from accounts.services._shared.errors import ConflictError, InvalidInputError, ServiceError
from accounts.services._shared.ports import PasswordHasher
from accounts.services.registration.dto import UserRegistrationIn, UserRegistrationOut

log = logging.getLogger(__name__)


class UserRegistrationService(BaseService):
    """
    Orchestrates the user registration process.
    """

    def __init__(self, *, hasher: PasswordHasher, clock: Clock | None = None) -> None:
        super().__init__(clock=clock)
        self.hasher = hasher

    def register(
        self,
        dto: UserRegistrationIn,
        *,
        on_committed: Callable[[UserRegistrationOut], None] | None = None,
    ) -> UserRegistrationOut:
        """
        Register an inactive user.

        :param dto: Registration input.
        :type dto: :class:`UserRegistrationIn`
        :param on_committed: Optional callback executed **after** commit.
        :type on_committed: Callable[[UserRegistrationOut], None] | None
        :returns: Registration result payload.
        :rtype: :class:`UserRegistrationOut`
        :raises ConflictError: When the email is already registered.
        :raises InvalidInputError: When the role is unknown.
        """
        # Normalize natural key early
        norm_email = dto.email.lower().strip()
        try:
            role = UserRole(dto.role)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown role: {dto.role}") from exc

        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(norm_email):
                    raise ConflictError("User", "email already in use")
                user = User(
                    email=norm_email,
                    password_hash=self.hasher.hash(dto.password),
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    role=role,
                    is_active=False,
                    verification_token=uuid4().hex,
                )
                uow.users.add(user)
                result = UserRegistrationOut(user=UserOut.from_source(user))
        except IntegrityError as exc:
            # Concurrent insert won the unique constraint.
            raise ConflictError("User", "email already in use") from exc

        log.info("registration.created user_id=%s", result.user.id)

        # Post-commit side-effects (only after transaction succeeded)
        if callable(on_committed):
            try:
                on_committed(result)
            except ServiceError as exc:
                log.warning(
                    "registration.post_commit_failed user_id=%s error=%s", result.user.id, exc
                )
        return result
