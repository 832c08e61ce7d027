"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from accounts.repositories.base import BaseRepository
from accounts.repositories.credential import CredentialRepository
from accounts.repositories.email_verification import EmailVerificationRepository
from accounts.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "CredentialRepository",
    "EmailVerificationRepository",
    "UserRepository",
]
