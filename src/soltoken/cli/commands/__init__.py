"""Builtin CLI command registration."""

from __future__ import annotations

import typer

from soltoken.cli.commands import mint, tokens, update, upload


def register_builtin_commands(app: typer.Typer) -> None:
    """Attach every subcommand to the typer application."""

    tokens.register(app)
    mint.register(app)
    upload.register(app)
    update.register(app)


__all__ = ["register_builtin_commands"]
