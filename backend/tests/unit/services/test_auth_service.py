# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from accounts.core.config import parse_duration
from accounts.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from accounts.services._shared.errors import (
    AccountInactiveError,
    AccountLockedError,
    InvalidCredentialsError,
    NotFoundError,
    TokenExpiredError,
    TokenInvalidError,
)
from accounts.services._shared.ports import TokenPayload
from accounts.services.auth.dto import AuthTokenConfig, LoginIn, LogoutIn, RefreshIn
from accounts.services.auth.service import AuthService
from accounts.services.credentials.service import CredentialService
from flask_jwt_extended import decode_token
from freezegun import freeze_time
from tests.factories.user import DEFAULT_PASSWORD, UserFactory, test_hasher

NOW = datetime(2026, 6, 1, 10, 0, tzinfo=UTC)


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def signer() -> JWTTokenSigner:
    return JWTTokenSigner(access_ttl=timedelta(hours=24), refresh_ttl=timedelta(days=7))


@pytest.fixture()
def service(signer) -> AuthService:
    """Build an AuthService over the real JWT signer and credential store."""
    return AuthService(
        credentials=CredentialService(hasher=test_hasher),
        token_signer=signer,
        token_cfg=AuthTokenConfig(),
    )


@pytest.fixture()
def user(session):
    user = UserFactory(first_name="Ada", last_name="Lovelace")
    session.commit()
    return user


def _lifetime(token: str) -> timedelta:
    # Lifetime only; the frozen issue time may lie far in the past.
    claims = decode_token(token, allow_expired=True)
    return timedelta(seconds=claims["exp"] - claims["iat"])


# -------------------------------- Login ----------------------------------- #
def test_login_issues_token_pair(service, user):
    out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

    assert out.message == "Login successful"
    assert out.expires_in == "24h"
    assert out.user.email == user.email
    assert out.user.first_name == "Ada"
    assert out.tokens.access_token != out.tokens.refresh_token
    assert _lifetime(out.tokens.access_token) == parse_duration("24h")
    assert _lifetime(out.tokens.refresh_token) == parse_duration("7d")

    claims = decode_token(out.tokens.access_token)
    assert claims["sub"] == str(user.id)
    assert claims["email"] == user.email
    assert claims["role"] == "user"
    assert claims["firstName"] == "Ada"
    assert claims["lastName"] == "Lovelace"


def test_login_remember_me_uses_long_lifetimes(service, user):
    out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD, remember_me=True))

    assert out.expires_in == "7d"
    assert _lifetime(out.tokens.access_token) == timedelta(days=7)
    assert _lifetime(out.tokens.refresh_token) == timedelta(days=30)


def test_login_invalid_credentials(service, user):
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email="missing@example.com", password=DEFAULT_PASSWORD))
    with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
        service.login(LoginIn(email=user.email, password="nope"))


def test_login_inactive(service, session):
    pending = UserFactory(pending=True)
    session.commit()

    with pytest.raises(AccountInactiveError, match="verify your email"):
        service.login(LoginIn(email=pending.email, password=DEFAULT_PASSWORD))


def test_login_lockout_messages(service, user):
    """The fifth failure locks; later attempts report the remaining minutes."""
    with freeze_time(NOW) as frozen:
        for _ in range(5):
            with pytest.raises(InvalidCredentialsError):
                service.login(LoginIn(email=user.email, password="nope"))

        frozen.tick(timedelta(minutes=10))
        with pytest.raises(AccountLockedError) as excinfo:
            service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

    assert excinfo.value.minutes == 5
    assert str(excinfo.value) == "Account is locked. Try again in 5 minutes."


def test_failed_login_counter_survives_the_raise(service, user):
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email=user.email, password="nope"))

    assert service.credentials.find_by_id(user.id).login_attempts == 1


# ------------------------------- Refresh ---------------------------------- #
def test_refresh_issues_new_pair(service, user):
    with freeze_time(NOW) as frozen:
        first = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD, remember_me=True))
        frozen.tick(timedelta(seconds=5))
        out = service.refresh(RefreshIn(refresh_token=first.tokens.refresh_token))

    assert out.message == "Tokens refreshed successfully"
    assert out.expires_in == "24h"
    assert out.tokens.access_token != first.tokens.access_token
    # Refresh always falls back to the default lifetimes.
    assert _lifetime(out.tokens.refresh_token) == timedelta(days=7)


def test_refresh_accepts_any_unexpired_token(service, user):
    first = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
    out = service.refresh(RefreshIn(refresh_token=first.tokens.access_token))
    assert out.tokens.refresh_token


def test_refresh_expired(service, user):
    with freeze_time(NOW) as frozen:
        first = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        frozen.tick(timedelta(days=8))
        with pytest.raises(TokenExpiredError):
            service.refresh(RefreshIn(refresh_token=first.tokens.refresh_token))


def test_refresh_garbage(service):
    with pytest.raises(TokenInvalidError):
        service.refresh(RefreshIn(refresh_token="not-a-jwt"))


def test_refresh_rejects_deactivated_subject(service, session, user):
    first = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
    user.is_active = False
    session.commit()

    with pytest.raises(AccountInactiveError, match="Account is not active"):
        service.refresh(RefreshIn(refresh_token=first.tokens.refresh_token))


def test_refresh_rejects_locked_subject(service, session, user):
    first = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
    user.locked_until = datetime.now(UTC) + timedelta(minutes=15)
    session.commit()

    with pytest.raises(AccountLockedError):
        service.refresh(RefreshIn(refresh_token=first.tokens.refresh_token))


def test_refresh_unknown_subject(service, signer):
    token = signer.sign(
        TokenPayload(sub="999999", email="x@y.com", role="user", first_name="X", last_name="Y")
    )
    with pytest.raises(NotFoundError):
        service.refresh(RefreshIn(refresh_token=token))


# -------------------------------- Verify ---------------------------------- #
def test_verify_token_valid(service, user):
    out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
    verdict = service.verify_token(out.tokens.access_token)

    assert verdict.valid
    assert verdict.message == "Token is valid"
    assert verdict.user.id == user.id
    assert verdict.reason is None


@pytest.mark.parametrize(
    ("token", "reason", "message"),
    [
        (None, "missing", "No token provided"),
        ("", "missing", "No token provided"),
        ("garbage", "invalid", "Invalid token"),
    ],
)
def test_verify_token_rejections(service, token, reason, message):
    verdict = service.verify_token(token)
    assert not verdict.valid
    assert verdict.reason == reason
    assert verdict.message == message
    assert verdict.user is None


def test_verify_token_expired(service, user):
    with freeze_time(NOW) as frozen:
        out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        frozen.tick(timedelta(hours=25))
        verdict = service.verify_token(out.tokens.access_token)

    assert verdict.reason == "expired"
    assert verdict.message == "Token has expired"


def test_verify_token_state_checks(service, session, user, signer):
    out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

    user.locked_until = datetime.now(UTC) + timedelta(minutes=15)
    session.commit()
    assert service.verify_token(out.tokens.access_token).reason == "account_locked"

    user.locked_until = None
    user.is_active = False
    session.commit()
    assert service.verify_token(out.tokens.access_token).reason == "account_inactive"

    ghost = signer.sign(
        TokenPayload(sub="999999", email="g@h.com", role="user", first_name="G", last_name="H")
    )
    assert service.verify_token(ghost).reason == "user_not_found"


def test_verify_token_bad_subject(service, signer):
    token = signer.sign(
        TokenPayload(sub="abc", email="a@b.com", role="user", first_name="A", last_name="B")
    )
    verdict = service.verify_token(token)
    assert verdict.reason == "invalid"
    assert verdict.message == "Invalid token payload"


# -------------------------------- Logout ---------------------------------- #
def test_logout_does_not_revoke(service, user):
    out = service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

    with freeze_time(NOW):
        result = service.logout(LogoutIn(token=out.tokens.refresh_token))

    assert result.message == "Logout successful"
    assert result.logged_out_at == NOW
    assert service.verify_token(out.tokens.access_token).valid


def test_logout_tolerates_bad_or_missing_token(service, caplog):
    with caplog.at_level("WARNING"):
        assert service.logout(LogoutIn(token="garbage")).message == "Logout successful"
    assert "auth.logout.unverifiable_token" in caplog.text
    assert service.logout(LogoutIn()).message == "Logout successful"


def test_logout_with_verified_payload(service, user, caplog):
    payload = TokenPayload(
        sub=str(user.id), email=user.email, role="user", first_name="Ada", last_name="Lovelace"
    )
    with caplog.at_level("INFO"):
        result = service.logout(LogoutIn(payload=payload))

    assert result.message == "Logout successful"
    assert f"auth.logout user_id={user.id} known=True" in caplog.text


# ------------------------------ Check payload ----------------------------- #
def test_check_payload_resolves_subject(service, session, user):
    payload = TokenPayload(
        sub=str(user.id), email=user.email, role="user", first_name="Ada", last_name="Lovelace"
    )
    verdict = service.check_payload(payload)
    assert verdict.valid
    assert verdict.user.id == user.id

    user.is_active = False
    session.commit()
    assert service.check_payload(payload).reason == "account_inactive"


def test_check_payload_rejects_non_numeric_subject(service):
    payload = TokenPayload(sub="abc", email="a@b.com", role="user", first_name="A", last_name="B")
    verdict = service.check_payload(payload)
    assert not verdict.valid
    assert verdict.reason == "invalid"
