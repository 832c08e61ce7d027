"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`accounts.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``accounts.services._shared.base``)
    * :class:`BaseService`

- Credential service (from ``accounts.services.credentials``)
    * :class:`CredentialService`
    * DTOs: :class:`LockoutPolicy`, :class:`AuthenticationResult`,
      :class:`LoginStatsOut`, :class:`UnlockOut`

- Auth service (from ``accounts.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`LogoutIn`,
      :class:`LoginOut`, :class:`RefreshOut`, :class:`VerifyTokenOut`,
      :class:`LogoutOut`, :class:`AuthTokenConfig`

- Email verification service (from ``accounts.services.email_verification``)
    * :class:`EmailVerificationService`
    * DTOs: :class:`SendCodeIn`, :class:`VerifyCodeIn`, :class:`SendCodeOut`,
      :class:`VerifyCodeOut`, :class:`VerificationPolicy`

- Registration service (from ``accounts.services.registration``)
    * :class:`UserRegistrationService`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import UserOut
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RefreshOut,
    VerifyTokenOut,
)
from .auth.service import AuthService
from .credentials.dto import AuthenticationResult, LockoutPolicy, LoginStatsOut, UnlockOut
from .credentials.service import CredentialService
from .email_verification.dto import (
    SendCodeIn,
    SendCodeOut,
    VerificationPolicy,
    VerifyCodeIn,
    VerifyCodeOut,
)
from .email_verification.service import EmailVerificationService
from .registration.dto import UserRegistrationIn, UserRegistrationOut
from .registration.service import UserRegistrationService

__all__ = [
    # Base
    "BaseService",
    "UserOut",
    # Credentials
    "CredentialService",
    "LockoutPolicy",
    "AuthenticationResult",
    "LoginStatsOut",
    "UnlockOut",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "LoginOut",
    "LogoutIn",
    "LogoutOut",
    "RefreshIn",
    "RefreshOut",
    "VerifyTokenOut",
    # Email verification
    "EmailVerificationService",
    "SendCodeIn",
    "SendCodeOut",
    "VerifyCodeIn",
    "VerifyCodeOut",
    "VerificationPolicy",
    # Registration
    "UserRegistrationService",
    "UserRegistrationIn",
    "UserRegistrationOut",
]
