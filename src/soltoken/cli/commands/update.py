"""Metadata field updates: update-name, update-symbol and update-uri."""

from __future__ import annotations

from pathlib import Path

import typer

from soltoken.cli.types import get_state
from soltoken.core.metadata_update import update_metadata_field
from soltoken.solana.metadata import MetadataField

_FIELDS: tuple[tuple[str, MetadataField, str], ...] = (
    ("update-name", "name", "Update a token's metadata name"),
    ("update-symbol", "symbol", "Update a token's metadata symbol"),
    ("update-uri", "uri", "Update a token's metadata URI"),
)


def _make_command(field: MetadataField, help_text: str):
    def command(
        ctx: typer.Context,
        mint: str = typer.Argument(..., help="Token mint address"),  # noqa: B008
        value: list[str] = typer.Argument(..., help=f"New {field}; remaining words are joined with spaces"),  # noqa: B008
        wallet: Path | None = typer.Option(None, "--wallet", help="Keypair file of the update authority"),  # noqa: B008
    ) -> None:
        state = get_state(ctx)
        new_value = " ".join(value)
        with state.console.status(f"Updating token {field}…"):
            result = update_metadata_field(state.config, mint, field, new_value, wallet_path=wallet)
        if not result.success:
            state.fail(f"Failed to update token {field}: {result.error}")
        state.success(
            "\n".join(
                [
                    f"New {field}: {result.value}",
                    f"Metadata:  {result.metadata_address}",
                    f"Signature: {result.signature}",
                    f"Explorer:  {result.explorer_url}",
                ]
            ),
            title=f"Token {field} updated",
        )

    command.__doc__ = help_text
    return command


def register(app: typer.Typer) -> None:
    """Register one update command per metadata field."""
    for name, field, help_text in _FIELDS:
        app.command(name)(_make_command(field, help_text))
