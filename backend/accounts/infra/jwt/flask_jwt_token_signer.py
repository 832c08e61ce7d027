# accounts/infra/jwt/flask_jwt_token_signer.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import ExpiredSignatureError, InvalidTokenError

from accounts.services._shared.errors import TokenExpiredError, TokenInvalidError
from accounts.services._shared.ports import TokenPair, TokenPayload, TokenSigner


def _require_positive(ttl: timedelta, name: str) -> timedelta:
    # flask-jwt-extended leaves out ``exp`` entirely for a zero delta.
    if ttl <= timedelta(0):
        raise ValueError(f"{name} must be a positive duration, got {ttl}")
    return ttl


@dataclass(slots=True)
class JWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    Algorithm and key material come from the application config prepared by
    :func:`accounts.infra.jwt.keys.configure_signing_keys` (shared secret, or
    private key for signing and public key for verification).

    Access and refresh tokens share the same claims and differ only by
    lifetime; both verify through :meth:`verify`.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    access_ttl: timedelta
    refresh_ttl: timedelta

    def __post_init__(self) -> None:
        _require_positive(self.access_ttl, "access_ttl")
        _require_positive(self.refresh_ttl, "refresh_ttl")

    def sign(self, payload: TokenPayload, ttl: timedelta | None = None) -> str:
        """
        :param ttl: Lifetime of this token; ``None`` means :attr:`access_ttl`.
        :raises ValueError: If the lifetime is zero or negative.
        """
        from flask_jwt_extended import create_access_token as _create_access

        lifetime = _require_positive(self.access_ttl if ttl is None else ttl, "ttl")
        return cast(
            str,
            _create_access(
                identity=payload.sub,
                additional_claims=payload.claims(),
                expires_delta=lifetime,
                fresh=False,
            ),
        )

    def verify(self, token: str) -> TokenPayload:
        """
        Check signature and expiry, then rebuild the payload.

        :raises TokenExpiredError: When ``exp`` is in the past.
        :raises TokenInvalidError: On any other signature/format problem.
        """
        from flask_jwt_extended import decode_token

        try:
            claims = cast(dict[str, Any], decode_token(token))
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except (InvalidTokenError, JWTExtendedException) as exc:
            raise TokenInvalidError() from exc

        try:
            return TokenPayload.from_claims(claims)
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalidError("Invalid token payload") from exc

    def generate_token_pair(
        self,
        payload: TokenPayload,
        *,
        access_ttl: timedelta | None = None,
        refresh_ttl: timedelta | None = None,
    ) -> TokenPair:
        return TokenPair(
            access_token=self.sign(payload, access_ttl),
            refresh_token=self.sign(
                payload, self.refresh_ttl if refresh_ttl is None else refresh_ttl
            ),
        )
