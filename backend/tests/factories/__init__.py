"""Factory Boy base for account models, persisting into the test session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import Session

_bound: Session | None = None


def bind_session(session: Session | None) -> None:
    """Point every factory at ``session`` (``None`` to unbind)."""
    global _bound
    _bound = session


def bound_session() -> Session:
    if _bound is None:
        raise RuntimeError("No session bound for factories; request the 'session' fixture.")
    return _bound


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush-only persistence so each test's savepoint can discard the rows."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = bound_session
        sqlalchemy_session_persistence = "flush"
