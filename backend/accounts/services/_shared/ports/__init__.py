"""
accounts.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, token signing and outbound notifications.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher` for one-way hashing and verification.

- :mod:`token_signer`:
    Defines :class:`~.TokenSigner`, :class:`~.TokenPayload` and
    :class:`~.TokenPair` for bearer-token signing and verification.

- :mod:`notifier`:
    Defines :class:`~.Notifier`, :class:`~.Notification` and
    :class:`~.DeliveryReceipt`.

Design Notes
------------
Concrete adapters (werkzeug, flask-jwt-extended, SMTP) live under
``accounts.infra`` and are wired once per application by
:func:`accounts.core.container.build_container`.
"""

from __future__ import annotations

from .notifier import DeliveryReceipt, Notification, Notifier
from .password_hasher import PasswordHasher
from .token_signer import TokenPair, TokenPayload, TokenSigner

__all__ = [
    "DeliveryReceipt",
    "Notification",
    "Notifier",
    "PasswordHasher",
    "TokenPair",
    "TokenPayload",
    "TokenSigner",
]
