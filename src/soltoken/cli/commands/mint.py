"""Minting additional supply."""

from __future__ import annotations

from pathlib import Path

import typer

from soltoken.cli.types import get_state
from soltoken.core.minting import mint_tokens


def register(app: typer.Typer) -> None:
    """Register the `mint` command."""

    @app.command("mint")
    def mint_command(
        ctx: typer.Context,
        mint: str = typer.Argument(..., help="Token mint address"),  # noqa: B008
        amount: str = typer.Argument(..., help="Amount in whole tokens, e.g. 1000 or 12.5"),  # noqa: B008
        wallet: Path | None = typer.Option(None, "--wallet", help="Keypair file of the mint authority"),  # noqa: B008
    ) -> None:
        """Mint additional supply into the wallet's token account."""
        state = get_state(ctx)
        with state.console.status(f"Minting {amount} tokens…"):
            result = mint_tokens(state.config, mint, amount, wallet_path=wallet)
        if not result.success:
            state.fail(f"Minting failed: {result.error}")
        state.success(
            "\n".join(
                [
                    f"Minted {result.amount} tokens ({result.base_units} base units)",
                    f"Token account: {result.token_account}",
                    f"Signature:     {result.signature}",
                    f"Explorer:      {result.explorer_url}",
                ]
            ),
            title="Tokens minted",
        )
