"""Units of work used by the account services.

``SQLAlchemyUnitOfWork`` commits on clean exit; ``SQLAlchemyReadOnlyUnitOfWork``
guards against writes and never commits.
"""

from .base import SupportsCommit, UnitOfWork
from .sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyRepositoryContainer,
    SQLAlchemyUnitOfWork,
)

__all__ = [
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyRepositoryContainer",
    "SQLAlchemyUnitOfWork",
    "SupportsCommit",
    "UnitOfWork",
]
