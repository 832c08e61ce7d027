"""``flask accounts ...`` and ``flask verification ...`` maintenance commands."""

from __future__ import annotations

from flask import Flask

from .commands import accounts_cli, verification_cli


def init_app(app: Flask) -> None:
    for group in (accounts_cli, verification_cli):
        app.cli.add_command(group)
