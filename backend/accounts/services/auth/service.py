# accounts/services/auth/service.py
from __future__ import annotations

import logging

from accounts.core.config import parse_duration
from accounts.services._shared.base import BaseService, Clock
from accounts.services._shared.dto import UserOut
from accounts.services._shared.errors import (
    AccountInactiveError,
    AccountLockedError,
    InvalidCredentialsError,
    NotFoundError,
    TokenError,
    TokenInvalidError,
    TokenMissingError,
)
from accounts.services._shared.ports import TokenPayload, TokenSigner
from accounts.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RefreshOut,
    TokenPairOut,
    VerifyTokenOut,
)
from accounts.services.credentials.dto import AuthOutcome, CredentialRecord
from accounts.services.credentials.service import CredentialService

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / verify / logout).

    Tokens are stateless: nothing is stored server-side, so logout cannot
    revoke a token. Every flow that accepts a token re-resolves its subject
    against the credential store and re-checks the active/locked state,
    because a valid signature says nothing about the account today.
    """

    def __init__(
        self,
        *,
        credentials: CredentialService,
        token_signer: TokenSigner,
        token_cfg: AuthTokenConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param credentials: Lockout-aware credential checks.
        :param token_signer: Adapter for issuing/verifying JWTs.
        :param token_cfg: Access/Refresh lifetimes.
        :param clock: Time source.
        """
        super().__init__(clock=clock)
        self.credentials = credentials
        self.tokens = token_signer
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: User, token pair and access lifetime.
        :raises InvalidCredentialsError: Unknown email or wrong password.
        :raises AccountInactiveError: Email not verified yet.
        :raises AccountLockedError: Lock window still open.
        """
        result = self.credentials.authenticate(dto.email, dto.password)

        if result.outcome is AuthOutcome.INACTIVE:
            raise AccountInactiveError()
        if result.outcome is AuthOutcome.LOCKED:
            raise AccountLockedError(result.minutes_until_unlock)
        if not result.authenticated or result.record is None:
            raise InvalidCredentialsError()

        record = result.record
        access_ttl, refresh_ttl = self.cfg.lifetimes(dto.remember_me)
        pair = self.tokens.generate_token_pair(
            self._payload_for(record),
            access_ttl=parse_duration(access_ttl),
            refresh_ttl=parse_duration(refresh_ttl),
        )
        log.info(
            "auth.login.success user_id=%s remember_me=%s", record.user_id, dto.remember_me
        )
        return LoginOut(
            user=UserOut.from_source(record),
            tokens=TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token),
            expires_in=access_ttl,
        )

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> RefreshOut:
        """
        Exchange a refresh token for a new pair with the default lifetimes.

        :param dto: Refresh input.
        :raises TokenExpiredError: Refresh token expired.
        :raises TokenInvalidError: Bad signature or malformed payload.
        :raises NotFoundError: Subject no longer exists.
        :raises AccountInactiveError: Subject deactivated.
        :raises AccountLockedError: Subject currently locked.
        """
        payload = self.tokens.verify(dto.refresh_token)
        record = self._resolve_subject(payload)
        pair = self.tokens.generate_token_pair(
            self._payload_for(record),
            access_ttl=parse_duration(self.cfg.access_ttl),
            refresh_ttl=parse_duration(self.cfg.refresh_ttl),
        )
        log.info("auth.refresh.success user_id=%s", record.user_id)
        return RefreshOut(
            tokens=TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token),
            expires_in=self.cfg.access_ttl,
        )

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify_token(self, token: str | None) -> VerifyTokenOut:
        """
        Introspect ``token``. Business failures come back as ``valid=False``.

        :param token: Encoded JWT or ``None``.
        :rtype: VerifyTokenOut
        """
        try:
            if not token:
                raise TokenMissingError()
            payload = self.tokens.verify(token)
        except TokenError as exc:
            return VerifyTokenOut(valid=False, message=str(exc), reason=exc.reason)
        return self.check_payload(payload)

    def check_payload(self, payload: TokenPayload) -> VerifyTokenOut:
        """
        Re-resolve the subject of an already verified token.

        Used directly when the HTTP layer decoded the token itself.

        :param payload: Claims from a token whose signature and expiry passed.
        :rtype: VerifyTokenOut
        """
        try:
            record = self._resolve_subject(payload)
        except TokenError as exc:
            return VerifyTokenOut(valid=False, message=str(exc), reason=exc.reason)
        except NotFoundError:
            return VerifyTokenOut(valid=False, message="User not found", reason="user_not_found")
        except AccountInactiveError:
            return VerifyTokenOut(
                valid=False, message="Account is not active", reason="account_inactive"
            )
        except AccountLockedError as exc:
            return VerifyTokenOut(valid=False, message=str(exc), reason="account_locked")
        return VerifyTokenOut(valid=True, message="Token is valid", user=UserOut.from_source(record))

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> LogoutOut:
        """
        Best-effort logout. Tokens stay valid until they expire; the
        presented token is only inspected to log who left.

        :param dto: Logout input.
        :rtype: LogoutOut
        """
        now = self.now_utc()
        payload = dto.payload
        if payload is None and dto.token:
            try:
                payload = self.tokens.verify(dto.token)
            except TokenError as exc:
                log.warning("auth.logout.unverifiable_token reason=%s", exc.reason)
        if payload is not None:
            record = self.credentials.find_by_id(_subject_id(payload))
            log.info("auth.logout user_id=%s known=%s", payload.sub, record is not None)
        return LogoutOut(logged_out_at=now)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _resolve_subject(self, payload: TokenPayload) -> CredentialRecord:
        record = self.credentials.find_by_id(_subject_id(payload))
        if record is None:
            raise NotFoundError("User", payload.sub)
        if not record.is_active:
            raise AccountInactiveError("Account is not active")
        now = self.now_utc()
        if record.is_locked(now):
            raise AccountLockedError(record.minutes_until_unlock(now))
        return record

    @staticmethod
    def _payload_for(record: CredentialRecord) -> TokenPayload:
        return TokenPayload(
            sub=str(record.user_id),
            email=record.email,
            role=record.role,
            first_name=record.first_name,
            last_name=record.last_name,
        )


def _subject_id(payload: TokenPayload) -> int:
    try:
        return int(payload.sub)
    except (TypeError, ValueError) as exc:
        raise TokenInvalidError("Invalid token payload") from exc
