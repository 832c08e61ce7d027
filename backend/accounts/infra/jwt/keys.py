"""Signing-key resolution for bearer tokens.

Asymmetric mode reads ``private.key`` and ``public.key`` (or, failing that,
the public key embedded in ``certificate.pem``) from ``JWT_KEYS_DIR``. When
the files are unusable the application refuses to start in production and
falls back to the shared secret everywhere else, logging the downgrade.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from flask import Flask

from accounts.core.config import is_production
from accounts.services._shared.errors import SigningKeyError

log = logging.getLogger(__name__)

PRIVATE_KEY_FILE: Final[str] = "private.key"
PUBLIC_KEY_FILE: Final[str] = "public.key"
CERTIFICATE_FILE: Final[str] = "certificate.pem"

MODE_SYMMETRIC: Final[str] = "symmetric"
MODE_ASYMMETRIC: Final[str] = "asymmetric"
MODE_FALLBACK: Final[str] = "symmetric-fallback"

_KEY_ERRORS = (OSError, ValueError, TypeError, UnsupportedAlgorithm)


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """PEM-encoded key pair used for asymmetric signing."""

    private_key: str
    public_key: str


def _public_key_from_certificate(data: bytes) -> str:
    certificate = x509.load_pem_x509_certificate(data)
    return (
        certificate.public_key()
        .public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


def load_key_material(keys_dir: str | Path) -> KeyMaterial:
    """Read and parse the key pair stored in ``keys_dir``.

    :param keys_dir: Directory holding the PEM files.
    :type keys_dir: str | pathlib.Path
    :returns: Parsed key material.
    :rtype: KeyMaterial
    :raises OSError: If a required file is missing or unreadable.
    :raises ValueError: If a file does not contain a valid PEM structure.
    """
    base = Path(keys_dir)
    private_pem = (base / PRIVATE_KEY_FILE).read_bytes()
    serialization.load_pem_private_key(private_pem, password=None)

    public_path = base / PUBLIC_KEY_FILE
    if public_path.is_file():
        public_pem = public_path.read_text(encoding="ascii")
        serialization.load_pem_public_key(public_pem.encode("ascii"))
    else:
        public_pem = _public_key_from_certificate((base / CERTIFICATE_FILE).read_bytes())

    return KeyMaterial(private_key=private_pem.decode("ascii"), public_key=public_pem)


def _ensure_symmetric_algorithm(app: Flask) -> None:
    algorithm = str(app.config.get("JWT_ALGORITHM") or "HS256")
    if not algorithm.upper().startswith("HS"):
        algorithm = "HS256"
    app.config["JWT_ALGORITHM"] = algorithm


def configure_signing_keys(app: Flask) -> str:
    """Prepare ``JWT_*`` settings before :class:`flask_jwt_extended.JWTManager` binds.

    :param app: Application being configured.
    :type app: flask.Flask
    :returns: Effective signing mode (``symmetric``, ``asymmetric`` or
              ``symmetric-fallback``), also stored as ``JWT_SIGNING_MODE``.
    :rtype: str
    :raises SigningKeyError: If asymmetric keys are configured but unusable
                             in a production posture.
    """
    if not app.config.get("JWT_USE_ASYMMETRIC"):
        _ensure_symmetric_algorithm(app)
        app.config["JWT_SIGNING_MODE"] = MODE_SYMMETRIC
        return MODE_SYMMETRIC

    keys_dir = app.config.get("JWT_KEYS_DIR") or "cert"
    try:
        material = load_key_material(keys_dir)
    except _KEY_ERRORS as exc:
        log.error("Failed to load JWT signing keys from %s: %s", keys_dir, exc)
        if is_production(app.config):
            raise SigningKeyError(f"Asymmetric signing keys unavailable in {keys_dir!r}") from exc
        _ensure_symmetric_algorithm(app)
        log.warning(
            "Asymmetric JWT keys unavailable; falling back to %s with the shared secret",
            app.config["JWT_ALGORITHM"],
        )
        app.config["JWT_SIGNING_MODE"] = MODE_FALLBACK
        return MODE_FALLBACK

    app.config.update(
        JWT_ALGORITHM=app.config.get("JWT_ASYMMETRIC_ALGORITHM", "RS256"),
        JWT_PRIVATE_KEY=material.private_key,
        JWT_PUBLIC_KEY=material.public_key,
        JWT_SIGNING_MODE=MODE_ASYMMETRIC,
    )
    log.info("JWT signing configured with %s key pair from %s", app.config["JWT_ALGORITHM"], keys_dir)
    return MODE_ASYMMETRIC
