"""
DTOs for EmailVerificationService.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ALREADY_VERIFIED_CODE_ID = "already-verified"

# --------------------------------------------------------------------------- #
# Policy
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class VerificationPolicy:
    """
    Code lifetime and resend throttling.

    :param default_ttl_minutes: Lifetime when the caller does not ask for one.
    :type default_ttl_minutes: int
    :param min_ttl_minutes: Lower bound for a requested lifetime.
    :type min_ttl_minutes: int
    :param max_ttl_minutes: Upper bound for a requested lifetime.
    :type max_ttl_minutes: int
    :param resend_interval_seconds: Minimum age of the live code before a resend.
    :type resend_interval_seconds: int
    """

    default_ttl_minutes: int = 15
    min_ttl_minutes: int = 5
    max_ttl_minutes: int = 60
    resend_interval_seconds: int = 60


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class SendCodeIn:
    """
    :param email: Address to verify.
    :type email: str
    :param expiration_minutes: Requested lifetime, clamped to the policy bounds.
    :type expiration_minutes: int | None
    """

    email: str
    expiration_minutes: int | None = None


@dataclass(frozen=True, slots=True)
class VerifyCodeIn:
    email: str
    code: str


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class SendCodeOut:
    """
    Result of issuing (or skipping) a code.

    :param success: Always ``True``; failures raise.
    :type success: bool
    :param message: Human readable outcome.
    :type message: str
    :param expires_at: Code expiry (``now`` when already verified).
    :type expires_at: datetime
    :param code_id: Identifier of the issued record.
    :type code_id: str
    :param already_verified: ``True`` when no code was needed.
    :type already_verified: bool
    """

    success: bool
    message: str
    expires_at: datetime
    code_id: str
    already_verified: bool = False


@dataclass(frozen=True, slots=True)
class VerifyCodeOut:
    success: bool
    message: str
    user_activated: bool
