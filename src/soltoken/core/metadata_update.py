"""Single-field updates of Metaplex token metadata (name, symbol, URI)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from solders.pubkey import Pubkey

from soltoken.core.config import ConfigurationError, SolTokenConfig, resolve_wallet_path
from soltoken.solana.constants import TOKEN_METADATA_PROGRAM_ID
from soltoken.solana.metadata import (
    MetadataError,
    MetadataField,
    decode_metadata_account,
    find_metadata_pda,
    update_metadata_instruction,
    validate_field,
)
from soltoken.solana.rpc import SolanaRPCClient, SolanaRPCError
from soltoken.solana.wallet import WalletError, load_wallet

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UpdateResult:
    success: bool
    field: str
    value: str | None = None
    signature: str | None = None
    metadata_address: str | None = None
    explorer_url: str | None = None
    error: str | None = None


def update_metadata_field(
    config: SolTokenConfig,
    mint: str,
    field: MetadataField,
    value: str,
    *,
    wallet_path: str | Path | None = None,
    rpc: SolanaRPCClient | None = None,
) -> UpdateResult:
    """Replace one DataV2 field of ``mint``'s metadata, signed by the update authority."""
    mint = (mint or "").strip()
    value = (value or "").strip()
    metadata_address: Pubkey | None = None
    try:
        if not mint:
            raise MetadataError("Mint address is required.")
        if not value:
            raise MetadataError(f"New {field} is required.")
        validate_field(field, value)
        try:
            mint_key = Pubkey.from_string(mint)
        except ValueError as exc:
            raise MetadataError(f"Invalid mint address: {mint}") from exc
        metadata_address = find_metadata_pda(mint_key)
        wallet = load_wallet(resolve_wallet_path(config, wallet_path))

        client = rpc or SolanaRPCClient(endpoint=config.endpoint)
        account = client.get_account_data(str(metadata_address))
        if account is None:
            raise MetadataError(f"No metadata account found for mint {mint} ({metadata_address}).")
        data, owner = account
        if owner != str(TOKEN_METADATA_PROGRAM_ID):
            raise MetadataError(f"Account {metadata_address} is not owned by the token metadata program.")
        current = decode_metadata_account(data)
        if current.update_authority != wallet.public_key:
            raise MetadataError(
                f"Wallet {wallet.public_key} is not the update authority "
                f"(expected {current.update_authority})."
            )
        if not current.is_mutable:
            raise MetadataError(f"Metadata for {mint} is immutable.")

        logger.debug("Updating %s of %s: %r -> %r", field, mint, getattr(current, field), value)
        instruction = update_metadata_instruction(
            metadata=metadata_address,
            update_authority=wallet.keypair.pubkey(),
            current=current.with_field(field, value),
        )
        signature = client.send_and_confirm([instruction], wallet.keypair, timeout_secs=config.confirm_timeout_secs)
    except (MetadataError, ConfigurationError, WalletError, SolanaRPCError) as exc:
        return UpdateResult(
            success=False,
            field=field,
            value=value or None,
            metadata_address=str(metadata_address) if metadata_address else None,
            error=str(exc),
        )

    return UpdateResult(
        success=True,
        field=field,
        value=value,
        signature=signature,
        metadata_address=str(metadata_address),
        explorer_url=config.explorer_url("tx", signature),
    )


def update_name(config: SolTokenConfig, mint: str, name: str, **kwargs) -> UpdateResult:
    return update_metadata_field(config, mint, "name", name, **kwargs)


def update_symbol(config: SolTokenConfig, mint: str, symbol: str, **kwargs) -> UpdateResult:
    return update_metadata_field(config, mint, "symbol", symbol, **kwargs)


def update_uri(config: SolTokenConfig, mint: str, uri: str, **kwargs) -> UpdateResult:
    return update_metadata_field(config, mint, "uri", uri, **kwargs)


__all__ = ["UpdateResult", "update_metadata_field", "update_name", "update_symbol", "update_uri"]
