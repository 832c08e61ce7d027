"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from accounts.repositories import (
        CredentialRepository,
        EmailVerificationRepository,
        UserRepository,
    )


class SupportsCommit(Protocol):
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class UnitOfWork(ABC):
    """
    Transactional boundary for one account use-case.

    Every repository below shares the same session, so a login attempt's
    counter update, or a code redemption plus the account activation, either
    commit together or not at all.
    """

    users: UserRepository
    credentials: CredentialRepository
    verifications: EmailVerificationRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
