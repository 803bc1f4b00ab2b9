"""Listing and viewing recorded tokens."""

from __future__ import annotations

import typer

from soltoken.cli.types import get_state
from soltoken.core.viewer import (
    TokenLookupError,
    get_token_details,
    list_tokens,
    render_token_details,
    render_token_list,
    resolve_index,
)
from soltoken.solana.spl_cli import looks_like_address


def register(app: typer.Typer) -> None:
    """Register the `list` and `view` commands."""

    @app.command("list")
    def list_command(
        ctx: typer.Context,
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every recorded field"),  # noqa: B008
        filter_text: str = typer.Option("", "--filter", help="Only tokens whose name or symbol contains TEXT"),  # noqa: B008
    ) -> None:
        """List tokens created with this tool, newest first."""
        state = get_state(ctx)
        records = list_tokens(state.token_store, filter_text)
        render_token_list(state.console, records, verbose=verbose)

    @app.command("view")
    def view_command(
        ctx: typer.Context,
        mint_or_index: str = typer.Argument(..., help="Mint address, or 1-based position from `list`"),  # noqa: B008
        simulate: bool = typer.Option(False, "--simulate", help="Use the local record only"),  # noqa: B008
    ) -> None:
        """Show one token's details, merged with on-chain supply."""
        state = get_state(ctx)
        try:
            mint = mint_or_index
            if mint_or_index.isdigit() and not looks_like_address(mint_or_index):
                record = resolve_index(state.token_store, int(mint_or_index))
                if not record.mint:
                    state.fail(f"Token #{mint_or_index} has no mint address recorded.")
                mint = record.mint
            elif not looks_like_address(mint_or_index):
                state.fail(f"Invalid mint address: {mint_or_index}")
            details = get_token_details(state.config, state.token_store, mint, simulate_only=simulate)
        except TokenLookupError as exc:
            state.fail(str(exc))
        render_token_details(state.console, details)
