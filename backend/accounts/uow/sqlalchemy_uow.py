"""
Flask-SQLAlchemy units of work for the account services.

Both share ``db.session`` so a request sees one consistent transaction.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from accounts.core.extensions import db
from accounts.repositories import (
    CredentialRepository,
    EmailVerificationRepository,
    UserRepository,
)
from accounts.uow.base import UnitOfWork

# Dialects accepting ``SET TRANSACTION`` directives at the start of a transaction
_TXN_DIRECTIVE_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.credentials = CredentialRepository(session=self.session)
        self.verifications = EmailVerificationRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write scope: commits on a clean exit, rolls back on any exception.

    Services return outcomes rather than raising when a write (for example a
    failed-login counter) has to survive a rejected request.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session autobegins on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read scope for lookups such as token subject resolution and login stats.

    On entry it begins its own transaction when the session is idle; on
    PostgreSQL/MySQL that transaction is marked ``READ ONLY`` and given the
    requested isolation level. When the session already runs a transaction
    (request that wrote earlier, test savepoint) the scope joins it instead.

    Either way two listeners reject writes while the scope is open: one on
    ``before_flush`` for pending ORM changes and one on
    ``before_cursor_execute`` for raw DML/DDL.

    :param isolation_level: ``SET TRANSACTION ISOLATION LEVEL`` value, or
        ``None`` for the connection default.
    :type isolation_level: str | None
    :param enforce_db_readonly: Issue ``SET TRANSACTION READ ONLY`` when the
        dialect supports it.
    :type enforce_db_readonly: bool
    """

    _WRITE_KEYWORDS = frozenset(
        {
            "insert",
            "update",
            "delete",
            "merge",
            "upsert",
            "replace",
            "create",
            "alter",
            "drop",
            "truncate",
            "grant",
            "revoke",
        }
    )
    _ISOLATION_LEVELS = frozenset(
        {"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"}
    )

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned_txn: SessionTransaction | None = None
        self._guard_target: Connection | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            txn = self.session.begin()
        except InvalidRequestError:
            txn = None  # join the running transaction
        else:
            txn.__enter__()
        self._owned_txn = txn

        conn = self.session.connection()
        self._add_guards(conn)
        if txn is not None and conn.dialect.name in _TXN_DIRECTIVE_DIALECTS:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        txn, self._owned_txn = self._owned_txn, None
        try:
            if txn is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                txn.__exit__(exc_type, exc, tb)
        finally:
            self._drop_guards()

    def commit(self) -> None:
        """:raises RuntimeError: Always."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ------------------------------------------------------------------ #
    # Directives and guards
    # ------------------------------------------------------------------ #

    def _apply_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.strip().upper()
                if level not in self._ISOLATION_LEVELS:
                    current_app.logger.warning("uow.readonly.unknown_isolation level=%s", level)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning("uow.readonly.directives_failed error=%s", exc)

    def _block_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked "
                f"(new={len(session.new)} dirty={len(session.dirty)} deleted={len(session.deleted)})."
            )

    def _block_statement(self, conn, cursor, statement, parameters, context, executemany) -> None:
        words = (statement or "").split(None, 1)
        keyword = words[0].lower() if words else ""
        if keyword in self._WRITE_KEYWORDS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def _add_guards(self, conn: Connection) -> None:
        event.listen(self.session, "before_flush", self._block_flush)
        event.listen(conn, "before_cursor_execute", self._block_statement)
        self._guard_target = conn

    def _drop_guards(self) -> None:
        if self._guard_target is None:
            return
        if event.contains(self.session, "before_flush", self._block_flush):
            event.remove(self.session, "before_flush", self._block_flush)
        if event.contains(self._guard_target, "before_cursor_execute", self._block_statement):
            event.remove(self._guard_target, "before_cursor_execute", self._block_statement)
        self._guard_target = None
