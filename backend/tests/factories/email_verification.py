"""Factory Boy definition for :class:`accounts.models.email_verification.EmailVerification`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from accounts.models.email_verification import EmailVerification

import factory
from tests.factories import BaseFactory


class EmailVerificationFactory(BaseFactory):
    """Unused code for ``email``, issued now and valid for 15 minutes."""

    class Meta:
        model = EmailVerification

    email = factory.Sequence(lambda n: f"verify{n}@example.com")
    code = factory.Sequence(lambda n: f"{100000 + n:06d}")
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    updated_at = factory.SelfAttribute("created_at")
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(minutes=15))
    is_used = False
    used_at = None
