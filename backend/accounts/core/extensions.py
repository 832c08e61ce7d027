"""Extension singletons shared by models, repositories and the JWT adapter."""

from __future__ import annotations

from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Deterministic constraint names keep Alembic autogenerate diffs stable.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and JWT manager to ``app``.

    Signing keys are resolved (:func:`accounts.infra.jwt.keys.configure_signing_keys`)
    before :class:`~flask_jwt_extended.JWTManager` reads ``JWT_*`` settings.

    :raises accounts.services._shared.errors.SigningKeyError: Asymmetric keys
        missing in production.
    """
    from accounts import models  # noqa: F401  (register tables on the metadata)
    from accounts.infra.jwt.keys import configure_signing_keys

    db.init_app(app)
    migrate.init_app(app, db)
    configure_signing_keys(app)
    jwt.init_app(app)
