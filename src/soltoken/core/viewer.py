"""Listing and inspection of locally recorded tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from soltoken.core.config import SolTokenConfig
from soltoken.core.records import TokenRecord, TokenStore
from soltoken.solana.rpc import SolanaRPCClient, SolanaRPCError

logger = logging.getLogger(__name__)

NO_TOKENS_MESSAGE = "No tokens found. Create a token first."


class TokenLookupError(RuntimeError):
    """Raised when a token cannot be resolved or its details fetched."""


@dataclass(slots=True)
class TokenDetails:
    """Local record merged with on-chain supply information."""

    mint: str
    decimals: int | None = None
    supply: str | None = None
    record: TokenRecord | None = None
    is_simulated: bool = False
    explorer_url: str | None = None
    notes: list[str] = field(default_factory=list)


def list_tokens(store: TokenStore, filter_text: str = "") -> list[TokenRecord]:
    """Newest first; ``filter_text`` is a case-insensitive substring of name or symbol."""
    return store.list_records(filter_text)


def resolve_index(store: TokenStore, index: int) -> TokenRecord:
    """Resolve a 1-based position in the unfiltered listing."""
    records = store.list_records()
    if not records:
        raise TokenLookupError(NO_TOKENS_MESSAGE)
    if index < 1 or index > len(records):
        raise TokenLookupError(f"Invalid token index {index}. Choose between 1 and {len(records)}.")
    return records[index - 1]


def get_token_details(
    config: SolTokenConfig,
    store: TokenStore,
    mint: str,
    *,
    simulate_only: bool = False,
    rpc: SolanaRPCClient | None = None,
) -> TokenDetails:
    record = store.find_by_mint(mint)
    explorer_url = config.explorer_url("address", mint)
    if record is not None and (simulate_only or record.is_simulated):
        return TokenDetails(
            mint=mint,
            decimals=record.decimals,
            supply=_format_amount(record.initial_supply),
            record=record,
            is_simulated=True,
            explorer_url=record.explorer_url or explorer_url,
            notes=["This is a simulated token that does not exist on the blockchain."],
        )

    client = rpc or SolanaRPCClient(endpoint=config.endpoint)
    try:
        supply = client.get_token_supply(mint)
    except SolanaRPCError as exc:
        raise TokenLookupError(f"Failed to fetch token info: {exc}") from exc
    logger.debug("On-chain supply for %s: %s", mint, supply.ui_amount_string)
    return TokenDetails(
        mint=mint,
        decimals=supply.decimals,
        supply=supply.ui_amount_string or _format_amount(supply.ui_amount or 0),
        record=record,
        explorer_url=explorer_url,
    )


def _format_amount(value: float | int | Decimal) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}" if isinstance(value, int) else str(value)


def _address(value: str | None) -> str:
    return f"[soltoken.address]{escape(value)}[/soltoken.address]" if value else "-"


def _link(value: str | None) -> str:
    return f"[soltoken.link]{escape(value)}[/soltoken.link]" if value else ""


def render_token_list(console: Console, records: list[TokenRecord], *, verbose: bool = False) -> None:
    if not records:
        console.print(f"[yellow]{NO_TOKENS_MESSAGE}[/yellow]")
        return
    table = Table(title=f"Found {len(records)} tokens", box=box.ROUNDED, title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Symbol", style="green")
    table.add_column("Mint", style="yellow", overflow="fold")
    if verbose:
        table.add_column("Decimals", justify="right")
        table.add_column("Initial Supply", justify="right")
        table.add_column("Description")
        table.add_column("Image URL", overflow="fold")
        table.add_column("Created")
        table.add_column("Explorer", overflow="fold")
    for position, record in enumerate(records, start=1):
        row = [str(position), escape(record.name), escape(record.symbol), _address(record.mint)]
        if verbose:
            row.extend(
                [
                    str(record.decimals),
                    _format_amount(record.initial_supply),
                    escape(record.description or ""),
                    escape(record.image_url or ""),
                    record.created_at.strftime("%Y-%m-%d %H:%M:%S") if record.created_at else "",
                    _link(record.explorer_url),
                ]
            )
        table.add_row(*row)
    console.print(table)


def render_token_details(console: Console, details: TokenDetails) -> None:
    record = details.record
    title = record.name if record else "Unknown Token"
    table = Table(title=f"Token Details for: {escape(title)}", box=box.ROUNDED, show_header=False, title_justify="left")
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("Mint Address", _address(details.mint))
    if record and record.symbol:
        table.add_row("Symbol", f"[cyan]{escape(record.symbol)}[/cyan]")
    table.add_row("Decimals", "" if details.decimals is None else str(details.decimals))
    table.add_row("Current Supply", details.supply or "")
    if record:
        table.add_row("Initial Supply", _format_amount(record.initial_supply))
        for label, value in (
            ("Description", record.description),
            ("Image URL", record.image_url),
            ("Metadata Address", record.metadata_address),
            ("Metadata URI", record.metadata_uri),
            ("Token Account", record.token_account),
            ("Transaction", record.transaction),
        ):
            if value:
                table.add_row(label, escape(value))
        if record.created_at:
            table.add_row("Created", record.created_at.strftime("%Y-%m-%d %H:%M:%S"))
    table.add_row("Explorer URL", _link(details.explorer_url))
    for note in details.notes:
        console.print(f"[yellow]⚠️  {note}[/yellow]")
    console.print(table)


__all__ = [
    "NO_TOKENS_MESSAGE",
    "TokenDetails",
    "TokenLookupError",
    "get_token_details",
    "list_tokens",
    "render_token_details",
    "render_token_list",
    "resolve_index",
]
