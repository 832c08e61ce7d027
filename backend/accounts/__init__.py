"""User accounts backend: lockout-aware login, JWT sessions and email verification."""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
