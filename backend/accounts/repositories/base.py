"""Shared persistence helpers for the account repositories.

Repositories never commit or roll back; the unit of work owning the session
does. State that concurrent requests race on (lockout counters, code
redemption) changes through single conditional statements run with
:meth:`BaseRepository.execute_bulk`, never through load-mutate-flush.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Delete, Update
from sqlalchemy.orm import Session

from accounts.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Session holder plus the handful of primitives every repository needs.

    Subclasses set ``model`` to their mapped class.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope; the
            Flask-scoped ``db.session`` when omitted.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so defaults and the primary key are set.

        :returns: The same instance.
        :rtype: E
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Primary-key lookup, served from the identity map when possible."""
        return self.session.get(self.model, entity_id)

    def flush(self) -> None:
        self.session.flush()

    def reload(self, instance: E) -> E:
        """Re-read ``instance`` after a bulk statement changed its row.

        :param instance: Persistent entity.
        :type instance: E
        :rtype: E
        """
        self.session.refresh(instance)
        return instance

    def execute_bulk(self, stmt: Update | Delete) -> int:
        """Run a conditional ``UPDATE``/``DELETE`` without syncing the session.

        Affected instances must be :meth:`reload`-ed to see the new values.

        :param stmt: Statement to execute.
        :returns: Number of matched rows.
        :rtype: int
        """
        stmt = stmt.execution_options(synchronize_session=False)
        return int(self.session.execute(stmt).rowcount or 0)
