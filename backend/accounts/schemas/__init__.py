"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    LogoutResponseSchema,
    LogoutSchema,
    RefreshResponseSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    TokenPairSchema,
    UnlockResponseSchema,
    UnlockSchema,
    VerifyTokenResponseSchema,
    VerifyTokenSchema,
)
from .common import CamelCaseSchema, EmailOnlySchema, NormalizedEmail, camelcase
from .email_verification import (
    SendCodeResponseSchema,
    SendCodeSchema,
    VerifyCodeResponseSchema,
    VerifyCodeSchema,
)
from .user import LoginStatsSchema, UserSchema

__all__ = [
    "CamelCaseSchema",
    "EmailOnlySchema",
    "NormalizedEmail",
    "camelcase",
    "LoginSchema",
    "LoginResponseSchema",
    "LogoutSchema",
    "LogoutResponseSchema",
    "RefreshSchema",
    "RefreshResponseSchema",
    "RegisterSchema",
    "RegisterResponseSchema",
    "TokenPairSchema",
    "UnlockSchema",
    "UnlockResponseSchema",
    "VerifyTokenSchema",
    "VerifyTokenResponseSchema",
    "SendCodeSchema",
    "SendCodeResponseSchema",
    "VerifyCodeSchema",
    "VerifyCodeResponseSchema",
    "UserSchema",
    "LoginStatsSchema",
]
