"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PRODUCTION: Final[str] = "production"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[Mapping[str, str]] = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert a compact duration such as ``"15m"``, ``"24h"`` or ``"7d"``.

    Parameters
    ----------
    value: str | int | datetime.timedelta
        Duration string (``<int><s|m|h|d>``), number of seconds, or an
        already-built :class:`~datetime.timedelta`.

    Returns
    -------
    datetime.timedelta
        Parsed duration.

    Raises
    ------
    ValueError
        If the string does not match the supported grammar.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(str(value))
    if match is None:
        raise ValueError(f"Unsupported duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})


def is_production(config: Mapping[str, object]) -> bool:
    """Return ``True`` when the configuration describes a production posture."""
    return str(config.get("APP_ENV", "")).strip().lower() == PRODUCTION


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing. Defaults to a development-safe
        placeholder and should be overridden in production.
    JWT_SECRET_KEY: str
        Shared secret used for symmetric token signing, and as the fallback
        when asymmetric key material cannot be loaded outside production.
    JWT_ALGORITHM: str
        Symmetric signing algorithm (``HS256`` by default).
    JWT_USE_ASYMMETRIC: bool
        Sign with a private key and verify with a public key/certificate.
    JWT_ASYMMETRIC_ALGORITHM: str
        Algorithm used when asymmetric signing is active (``RS256``).
    JWT_KEYS_DIR: str
        Directory holding ``private.key`` and ``public.key`` or
        ``certificate.pem``.
    JWT_ACCESS_TOKEN_TTL / JWT_REFRESH_TOKEN_TTL: str
        Default token lifetimes as compact durations.
    JWT_REMEMBER_ME_ACCESS_TTL / JWT_REMEMBER_ME_REFRESH_TTL: str
        Longer lifetimes used when the client asks to be remembered.
    AUTH_MAX_LOGIN_ATTEMPTS: int
        Consecutive failures that lock an account.
    AUTH_LOCK_MINUTES: int
        Lock window length.
    VERIFICATION_CODE_TTL_MINUTES: int
        Default verification-code lifetime; callers may pick a value inside
        ``[VERIFICATION_CODE_MIN_TTL_MINUTES, VERIFICATION_CODE_MAX_TTL_MINUTES]``.
    VERIFICATION_RESEND_INTERVAL_SECONDS: int
        Minimum spacing between two issued codes for the same email.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method (``scrypt`` by default).
    MAIL_BACKEND: str
        ``"log"`` writes outgoing mail to the logger, ``"smtp"`` delivers it.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    LOG_FORMAT: str
        ``json`` (default) or ``text`` log lines.
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    USE_PROXYFIX: bool
        Trust ``X-Forwarded-*`` headers (on by default).
    PROXYFIX_HOPS: int
        Number of reverse proxies in front of the app.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    APP_ENV = os.getenv(ENV_VAR, "development").strip().lower()
    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_USE_ASYMMETRIC = env_bool("JWT_USE_ASYMMETRIC", False)
    JWT_ASYMMETRIC_ALGORITHM = os.getenv("JWT_ASYMMETRIC_ALGORITHM", "RS256")
    JWT_KEYS_DIR = os.getenv("JWT_KEYS_DIR", os.path.join("cert", APP_ENV))

    # Token lifetimes
    JWT_ACCESS_TOKEN_TTL = os.getenv("JWT_ACCESS_TOKEN_TTL", "24h")
    JWT_REFRESH_TOKEN_TTL = os.getenv("JWT_REFRESH_TOKEN_TTL", "7d")
    JWT_REMEMBER_ME_ACCESS_TTL = os.getenv("JWT_REMEMBER_ME_ACCESS_TTL", "7d")
    JWT_REMEMBER_ME_REFRESH_TTL = os.getenv("JWT_REMEMBER_ME_REFRESH_TTL", "30d")

    # Password hashing (werkzeug method string)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Lockout
    AUTH_MAX_LOGIN_ATTEMPTS = env_int("AUTH_MAX_LOGIN_ATTEMPTS", 5)
    AUTH_LOCK_MINUTES = env_int("AUTH_LOCK_MINUTES", 15)

    # Email verification
    VERIFICATION_CODE_TTL_MINUTES = env_int("VERIFICATION_CODE_TTL_MINUTES", 15)
    VERIFICATION_CODE_MIN_TTL_MINUTES = 5
    VERIFICATION_CODE_MAX_TTL_MINUTES = 60
    VERIFICATION_RESEND_INTERVAL_SECONDS = env_int("VERIFICATION_RESEND_INTERVAL_SECONDS", 60)

    # Outbound mail
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "log")
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = env_int("SMTP_PORT", 587)
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM = os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "no-reply@localhost"))
    SMTP_USE_TLS = env_bool("SMTP_USE_TLS", True)
    SMTP_TIMEOUT = env_int("SMTP_TIMEOUT", 10)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Keeps outbound mail in the log backend.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    MAIL_BACKEND = "log"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Missing asymmetric key material is
    fatal at startup in this posture.
    """

    APP_ENV = PRODUCTION
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    PRODUCTION: ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
