# accounts/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from accounts.services._shared.ports import PasswordHasher


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted password hashing via :mod:`werkzeug.security`.

    ``check_password_hash`` compares digests in constant time.

    :param method: Werkzeug hashing method (``scrypt`` or ``pbkdf2:sha256[:iterations]``).
    :type method: str
    """

    method: str = "scrypt"
    salt_length: int = 16

    def hash(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(raw, method=self.method, salt_length=self.salt_length)

    def verify(self, raw: str, hashed: str) -> bool:
        if not hashed or not isinstance(raw, str):
            return False
        # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
        return bool(check_password_hash(hashed, raw))
