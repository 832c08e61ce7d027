"""Unit tests for EmailVerificationService."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from accounts.infra.mail.log_notifier import LoggingNotifier
from accounts.models.email_verification import EmailVerification
from accounts.models.user import User
from accounts.services._shared.errors import (
    InvalidInputError,
    NotFoundError,
    ResendThrottledError,
    VerificationCodeExpiredError,
    VerificationCodeInvalidError,
    VerificationCodeUsedError,
)
from accounts.services.email_verification import service as verification_module
from accounts.services.email_verification.dto import (
    ALREADY_VERIFIED_CODE_ID,
    SendCodeIn,
    VerificationPolicy,
    VerifyCodeIn,
)
from accounts.services.email_verification.service import (
    EmailVerificationService,
    generate_numeric_code,
)
from freezegun import freeze_time
from sqlalchemy import select
from tests.factories.email_verification import EmailVerificationFactory
from tests.factories.user import UserFactory
from tests.helpers.notifier import InMemoryNotifier

NOW = datetime(2026, 7, 1, 12, 0, tzinfo=UTC)


def _sequential_codes():
    counter = count(111111)
    return lambda: str(next(counter))


@pytest.fixture()
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture()
def service(notifier) -> EmailVerificationService:
    return EmailVerificationService(
        notifier=notifier,
        policy=VerificationPolicy(),
        code_generator=_sequential_codes(),
    )


@pytest.fixture()
def pending(session) -> User:
    user = UserFactory(email="pending@example.com", first_name="Pat", pending=True)
    session.commit()
    return user


def _codes_for(session, email):
    stmt = select(EmailVerification).where(EmailVerification.email == email)
    return list(session.execute(stmt).scalars())


def test_generate_numeric_code_shape():
    for _ in range(50):
        code = generate_numeric_code()
        assert len(code) == 6
        assert code.isdigit()
        assert code[0] != "0"


# --------------------------------- Send ----------------------------------- #
class TestSend:
    def test_send_persists_and_mails(self, service, notifier, pending, session):
        with freeze_time(NOW):
            out = service.send(SendCodeIn(email="Pending@Example.com"))

        assert out.success
        assert out.message == "Verification code sent successfully"
        assert out.expires_at == NOW + timedelta(minutes=15)
        assert not out.already_verified

        mail = notifier.last
        assert mail.to == "pending@example.com"
        assert mail.subject == "Verify your email - Code: 111111"
        assert mail.template == "email_verification"
        assert mail.context["code"] == "111111"
        assert mail.context["first_name"] == "Pat"
        assert mail.context["expiration_minutes"] == 15

        [record] = _codes_for(session, "pending@example.com")
        assert record.id == out.code_id
        assert record.code == "111111"

    def test_send_custom_expiration(self, service, pending):
        with freeze_time(NOW):
            out = service.send(SendCodeIn(email=pending.email, expiration_minutes=30))
        assert out.expires_at == NOW + timedelta(minutes=30)

    @pytest.mark.parametrize("minutes", [0, 4, 61])
    def test_send_rejects_out_of_bounds_expiration(self, service, pending, minutes):
        with pytest.raises(InvalidInputError, match="between 5 and 60"):
            service.send(SendCodeIn(email=pending.email, expiration_minutes=minutes))

    def test_send_supersedes_previous_codes(self, service, pending, session):
        with freeze_time(NOW) as frozen:
            first = service.send(SendCodeIn(email=pending.email))
            frozen.tick(timedelta(seconds=1))
            second = service.send(SendCodeIn(email=pending.email))

        records = {r.id: r for r in _codes_for(session, pending.email)}
        assert records[first.code_id].is_used
        assert not records[second.code_id].is_used

    def test_send_unknown_user(self, service, notifier):
        with pytest.raises(NotFoundError):
            service.send(SendCodeIn(email="nobody@example.com"))
        assert notifier.outbox == []

    def test_send_rejects_malformed_email(self, service):
        with pytest.raises(InvalidInputError):
            service.send(SendCodeIn(email="not-an-email"))

    def test_send_to_active_user_is_a_noop(self, service, notifier, session):
        active = UserFactory()
        session.commit()

        out = service.send(SendCodeIn(email=active.email))

        assert out.success
        assert out.already_verified
        assert out.code_id == ALREADY_VERIFIED_CODE_ID
        assert out.message == "Email is already verified. No verification needed."
        assert notifier.outbox == []
        assert _codes_for(session, active.email) == []

    def test_notifier_failure_keeps_code(self, pending, session, caplog):
        failing = EmailVerificationService(
            notifier=InMemoryNotifier(fail_with="smtp down"),
            code_generator=lambda: "424242",
        )
        with caplog.at_level("WARNING"):
            out = failing.send(SendCodeIn(email=pending.email))

        assert out.success
        assert "verification.notify_failed" in caplog.text
        [record] = _codes_for(session, pending.email)
        assert record.code == "424242"
        assert not record.is_used

    def test_unrenderable_template_keeps_code(self, pending, session, caplog, monkeypatch):
        monkeypatch.setattr(verification_module, "TEMPLATE_NAME", "no_such_template")
        logging_service = EmailVerificationService(
            notifier=LoggingNotifier(), code_generator=lambda: "515151"
        )
        with caplog.at_level("WARNING"):
            out = logging_service.send(SendCodeIn(email=pending.email))

        assert out.success
        assert "verification.notify_failed" in caplog.text
        assert "no_such_template" in caplog.text
        [record] = _codes_for(session, pending.email)
        assert record.code == "515151"


# -------------------------------- Resend ---------------------------------- #
class TestResend:
    def test_resend_is_throttled(self, service, pending):
        with freeze_time(NOW) as frozen:
            service.send(SendCodeIn(email=pending.email))
            frozen.tick(timedelta(seconds=30))
            with pytest.raises(ResendThrottledError) as excinfo:
                service.resend(SendCodeIn(email=pending.email))

        assert excinfo.value.wait_seconds == 30
        assert str(excinfo.value) == "Please wait 30 seconds before requesting a new code"

    def test_resend_after_interval(self, service, notifier, pending):
        with freeze_time(NOW) as frozen:
            first = service.send(SendCodeIn(email=pending.email))
            frozen.tick(timedelta(seconds=60))
            out = service.resend(SendCodeIn(email=pending.email))

        assert out.message == "Verification code resent successfully"
        assert out.code_id != first.code_id
        assert len(notifier.outbox) == 2

    def test_resend_without_live_code(self, service, pending, session):
        EmailVerificationFactory(
            email=pending.email,
            created_at=NOW - timedelta(minutes=20),
            expires_at=NOW - timedelta(minutes=5),
        )
        session.commit()

        with freeze_time(NOW):
            out = service.resend(SendCodeIn(email=pending.email))

        assert out.success

    def test_resend_to_active_user(self, service, session):
        active = UserFactory()
        session.commit()

        out = service.resend(SendCodeIn(email=active.email))
        assert out.already_verified


# -------------------------------- Verify ---------------------------------- #
class TestVerify:
    def test_verify_activates_user(self, service, pending, session):
        with freeze_time(NOW):
            service.send(SendCodeIn(email=pending.email))
            out = service.verify(VerifyCodeIn(email=pending.email, code="111111"))

        assert out.success
        assert out.message == "Email verified successfully"
        assert out.user_activated

        session.expire_all()
        user = session.get(User, pending.id)
        assert user.is_active
        assert user.verification_token is None
        [record] = _codes_for(session, pending.email)
        assert record.is_used
        assert record.used_at is not None

    def test_verify_twice_reports_used(self, service, pending):
        service.send(SendCodeIn(email=pending.email))
        service.verify(VerifyCodeIn(email=pending.email, code="111111"))

        with pytest.raises(VerificationCodeUsedError):
            service.verify(VerifyCodeIn(email=pending.email, code="111111"))

    def test_verify_wrong_code_does_not_consume(self, service, pending, session):
        service.send(SendCodeIn(email=pending.email))

        with pytest.raises(VerificationCodeInvalidError):
            service.verify(VerifyCodeIn(email=pending.email, code="999999"))

        out = service.verify(VerifyCodeIn(email=pending.email, code="111111"))
        assert out.success

    def test_verify_expired(self, service, pending):
        with freeze_time(NOW) as frozen:
            service.send(SendCodeIn(email=pending.email, expiration_minutes=5))
            frozen.tick(timedelta(minutes=5))
            with pytest.raises(VerificationCodeExpiredError):
                service.verify(VerifyCodeIn(email=pending.email, code="111111"))

    def test_verify_superseded_code(self, service, pending):
        with freeze_time(NOW) as frozen:
            service.send(SendCodeIn(email=pending.email))
            frozen.tick(timedelta(minutes=2))
            service.resend(SendCodeIn(email=pending.email))

            with pytest.raises(VerificationCodeUsedError):
                service.verify(VerifyCodeIn(email=pending.email, code="111111"))
            assert service.verify(VerifyCodeIn(email=pending.email, code="111112")).success

    @pytest.mark.parametrize("code", ["12345", "1234567", "   "])
    def test_verify_rejects_bad_shape(self, service, code):
        with pytest.raises(InvalidInputError, match="6 digits"):
            service.verify(VerifyCodeIn(email="a@example.com", code=code))

    def test_verify_code_without_user(self, service, session):
        EmailVerificationFactory(email="orphan@example.com", code="555555")
        session.commit()

        with pytest.raises(NotFoundError):
            service.verify(VerifyCodeIn(email="orphan@example.com", code="555555"))

    def test_verify_for_already_active_user(self, service, session):
        user = UserFactory(email="done@example.com")
        EmailVerificationFactory(email=user.email, code="777777")
        session.commit()

        out = service.verify(VerifyCodeIn(email=user.email, code="777777"))
        assert out.success
        assert not out.user_activated


# --------------------------------- Purge ---------------------------------- #
def test_purge_expired(service, session):
    EmailVerificationFactory(
        email="old@example.com",
        created_at=NOW - timedelta(hours=2),
        expires_at=NOW - timedelta(hours=1),
    )
    live = EmailVerificationFactory(
        email="live@example.com",
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=15),
    )
    session.commit()

    with freeze_time(NOW):
        assert service.purge_expired() == 1
        assert service.purge_expired() == 0

    assert _codes_for(session, "old@example.com") == []
    assert [r.id for r in _codes_for(session, "live@example.com")] == [live.id]
