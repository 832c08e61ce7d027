"""Shared fixtures for the account service test-suite.

One in-memory SQLite database lives for the whole run. Every test gets a
session on a shared connection whose outer transaction is rolled back at
teardown; service commits only release an inner SAVEPOINT.
"""

from __future__ import annotations

import os

import pytest
from accounts.core.config import TestingConfig
from accounts.core.container import EXTENSION_KEY, build_container
from accounts.core.extensions import db as _db
from accounts.factory import create_app
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker
from tests.helpers.notifier import InMemoryNotifier


class TestConfig(TestingConfig):
    """In-memory database, HS256 tokens, no proxy middleware, quiet logs."""

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_USE_ASYMMETRIC = False
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


# -- Application and schema ----------------------------------------------------
@pytest.fixture(scope="session")
def app():
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture(scope="session")
def db(app):
    """Create the ``users`` and ``email_verifications`` tables once."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def session(db, connection):
    """
    Session installed as ``db.session`` for one test.

    A SAVEPOINT is re-opened each time the session ends one, so code under
    test may commit or roll back freely; the outer transaction discards it all.

    :rtype: sqlalchemy.orm.scoped_session
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, future=True))
    connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            connection.begin_nested()

    original = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker` for reproducible data."""
    from faker import Faker

    Faker.seed(1337)
    return Faker()


# -- Factories and service doubles ---------------------------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Bind the factories to the transactional session for the test."""
    from tests.factories import bind_session

    bind_session(session)
    yield
    bind_session(None)


@pytest.fixture()
def notifier():
    """Collect outgoing mail instead of delivering it."""
    return InMemoryNotifier()


@pytest.fixture()
def services(app, session, notifier):
    """Install a container using :func:`notifier` for the duration of a test.

    Yields
    ------
    accounts.core.container.ServiceContainer
        The container the API resolves through ``current_app``.
    """
    original = app.extensions[EXTENSION_KEY]
    container = build_container(app, notifier=notifier)
    app.extensions[EXTENSION_KEY] = container
    try:
        yield container
    finally:
        app.extensions[EXTENSION_KEY] = original


@pytest.fixture()
def client(app, services):
    """Flask test client bound to the transactional session.

    Requests reuse an already pushed app context, so a fresh one is pushed
    here to keep ``g`` (request id, current user) from leaking across tests.
    """
    with app.app_context():
        yield app.test_client()
