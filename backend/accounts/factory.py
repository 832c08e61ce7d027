"""Application factory."""

from __future__ import annotations

from flask import Flask

from accounts.core.config import BaseConfig, get_config
from accounts.core.logger import configure_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the account service.

    Configuration comes from ``config`` (or ``APP_ENV`` via
    :func:`~accounts.core.config.get_config`), then from an optional
    ``instance/config.py``.

    :raises accounts.services._shared.errors.SigningKeyError: Production
        deployment without its JWT signing keys.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FORMAT", "json"))

    from accounts import api, cli
    from accounts.core import container, cors, errors, extensions, logger, proxy

    # Extensions before the container: the token signer needs the configured JWT keys.
    for component in (proxy, extensions, logger, container, cors, api, errors, cli):
        component.init_app(app)

    app.logger.info(
        "app.started env=%s signing=%s", app.config.get("APP_ENV"), app.config.get("JWT_SIGNING_MODE")
    )
    return app
