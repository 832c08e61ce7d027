# accounts/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from accounts.services._shared.dto import UserOut
from accounts.services._shared.ports import TokenPayload

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    :param remember_me: Issue long-lived tokens.
    :type remember_me: bool
    """

    email: str
    password: str
    remember_me: bool = False


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param token: Encoded JWT presented by the client, if any.
    :type token: str | None
    :param payload: Claims of a bearer token the HTTP layer already
        verified; takes precedence over ``token``.
    :type payload: TokenPayload | None
    """

    token: str | None = None
    payload: TokenPayload | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Successful login payload.

    :param user: Authenticated user.
    :type user: UserOut
    :param tokens: Issued token pair.
    :type tokens: TokenPairOut
    :param expires_in: Access token lifetime as configured (e.g. ``"24h"``).
    :type expires_in: str
    """

    user: UserOut
    tokens: TokenPairOut
    expires_in: str
    message: str = "Login successful"


@dataclass(frozen=True, slots=True)
class RefreshOut:
    tokens: TokenPairOut
    expires_in: str
    message: str = "Tokens refreshed successfully"


@dataclass(frozen=True, slots=True)
class VerifyTokenOut:
    """
    Token introspection result. Never raised as an error.

    :param valid: Whether the token is usable right now.
    :type valid: bool
    :param message: Human readable verdict.
    :type message: str
    :param user: Resolved user when ``valid``.
    :type user: UserOut | None
    :param reason: Machine readable failure reason when not ``valid``.
    :type reason: str | None
    """

    valid: bool
    message: str
    user: UserOut | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutOut:
    logged_out_at: datetime
    message: str = "Logout successful"


# ------------------------------ Config DTO --------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token lifetimes, kept in their configured textual form.

    :param access_ttl: Access token lifetime (``"24h"``).
    :type access_ttl: str
    :param refresh_ttl: Refresh token lifetime (``"7d"``).
    :type refresh_ttl: str
    :param remember_me_access_ttl: Access lifetime with *remember me*.
    :type remember_me_access_ttl: str
    :param remember_me_refresh_ttl: Refresh lifetime with *remember me*.
    :type remember_me_refresh_ttl: str
    """

    access_ttl: str = "24h"
    refresh_ttl: str = "7d"
    remember_me_access_ttl: str = "7d"
    remember_me_refresh_ttl: str = "30d"

    def lifetimes(self, remember_me: bool = False) -> tuple[str, str]:
        """Return ``(access_ttl, refresh_ttl)`` for the session type."""
        if remember_me:
            return self.remember_me_access_ttl, self.remember_me_refresh_ttl
        return self.access_ttl, self.refresh_ttl
