"""
DTOs for UserRegistrationService.

Contracts for the self-registration flow that creates an inactive ``User``
awaiting email verification.
"""

from __future__ import annotations

from dataclasses import dataclass

from accounts.services._shared.dto import UserOut

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegistrationIn:
    """
    Input payload for the registration process.

    :param email: Login email (will be normalized to lowercase+trim).
    :type email: str
    :param password: Raw password (hashed by the service).
    :type password: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param role: Requested role value.
    :type role: str
    """

    email: str
    password: str
    first_name: str
    last_name: str
    role: str = "user"


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegistrationOut:
    """
    Output summary for the registration process.

    :param user: Public-safe user payload.
    :type user: :class:`UserOut`
    :param message: Next-step hint for the client.
    :type message: str
    """

    user: UserOut
    message: str = "User registered successfully. Please verify your email."
