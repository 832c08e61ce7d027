from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Identity carried inside every bearer token.

    Wire claims: ``sub``, ``email``, ``role``, ``firstName``, ``lastName``,
    ``iat``.

    :param sub: User id as a string.
    :type sub: str
    :param iat: Issued-at (seconds since epoch); set by the signer.
    :type iat: int | None
    """

    sub: str
    email: str
    role: str
    first_name: str
    last_name: str
    iat: int | None = None

    def claims(self) -> dict[str, Any]:
        """Additional (non-registered) claims to embed next to ``sub``."""
        return {
            "email": self.email,
            "role": self.role,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> TokenPayload:
        """
        Rebuild a payload from decoded claims.

        :raises KeyError: If ``sub`` is missing.
        """
        iat = claims.get("iat")
        return cls(
            sub=str(claims["sub"]),
            email=str(claims.get("email", "")),
            role=str(claims.get("role", "")),
            first_name=str(claims.get("firstName", "")),
            last_name=str(claims.get("lastName", "")),
            iat=int(iat) if iat is not None else None,
        )


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenSigner(Protocol):
    """Port for signing and verifying bearer tokens."""

    def sign(self, payload: TokenPayload, ttl: timedelta | None = None) -> str: ...

    def verify(self, token: str) -> TokenPayload:
        """Return the payload or raise ``TokenExpiredError`` / ``TokenInvalidError``."""
        ...

    def generate_token_pair(
        self,
        payload: TokenPayload,
        *,
        access_ttl: timedelta | None = None,
        refresh_ttl: timedelta | None = None,
    ) -> TokenPair: ...
