"""Minting additional supply of an existing token."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import (
    MintToParams,
    create_associated_token_account,
    get_associated_token_address,
    mint_to,
)

from soltoken.core.config import ConfigurationError, SolTokenConfig, resolve_wallet_path
from soltoken.solana.constants import TOKEN_PROGRAMS
from soltoken.solana.rpc import SolanaRPCClient, SolanaRPCError
from soltoken.solana.wallet import WalletError, load_wallet

logger = logging.getLogger(__name__)


class MintError(RuntimeError):
    """Raised for invalid mint requests before anything is submitted."""


@dataclass(slots=True)
class MintResult:
    success: bool
    mint: str
    amount: str | None = None
    base_units: int | None = None
    signature: str | None = None
    token_account: str | None = None
    explorer_url: str | None = None
    error: str | None = None


def parse_amount(raw: str | int | float | Decimal) -> Decimal:
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise MintError(f"Invalid amount: {raw}") from exc
    if not amount.is_finite() or amount <= 0:
        raise MintError("Amount must be a positive number.")
    return amount


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Exact ``amount * 10**decimals``; rejects amounts finer than the mint's precision."""
    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise MintError(f"Amount {amount} has more than {decimals} decimal places.")
    return int(scaled)


def mint_tokens(
    config: SolTokenConfig,
    mint: str,
    amount: str | int | float | Decimal,
    *,
    wallet_path: str | Path | None = None,
    rpc: SolanaRPCClient | None = None,
) -> MintResult:
    """Mint ``amount`` whole tokens of ``mint`` into the wallet's associated token account."""
    mint = (mint or "").strip()
    try:
        if not mint:
            raise MintError("Mint address is required.")
        try:
            mint_key = Pubkey.from_string(mint)
        except ValueError as exc:
            raise MintError(f"Invalid mint address: {mint}") from exc
        ui_amount = parse_amount(amount)
        wallet = load_wallet(resolve_wallet_path(config, wallet_path))
    except (MintError, ConfigurationError, WalletError) as exc:
        return MintResult(success=False, mint=mint, error=str(exc))

    client = rpc or SolanaRPCClient(endpoint=config.endpoint)
    try:
        parsed = client.get_parsed_mint(mint)
        if parsed.mint_authority != wallet.public_key:
            raise MintError(
                "Mint authority mismatch: wallet "
                f"{wallet.public_key} is not the mint authority "
                f"(expected {parsed.mint_authority or 'none; minting is disabled'})."
            )
        program_id = TOKEN_PROGRAMS.get(parsed.owner_program)
        if program_id is None:
            raise MintError(f"Mint {mint} is owned by an unsupported program {parsed.owner_program}.")
        base_units = to_base_units(ui_amount, parsed.decimals)

        owner = wallet.keypair.pubkey()
        token_account = get_associated_token_address(owner, mint_key, program_id)
        instructions: list[Instruction] = []
        if not client.account_exists(str(token_account)):
            logger.debug("Creating associated token account %s", token_account)
            instructions.append(
                create_associated_token_account(payer=owner, owner=owner, mint=mint_key, token_program_id=program_id)
            )
        instructions.append(
            mint_to(
                MintToParams(
                    program_id=program_id,
                    mint=mint_key,
                    dest=token_account,
                    mint_authority=owner,
                    amount=base_units,
                )
            )
        )
        signature = client.send_and_confirm(instructions, wallet.keypair, timeout_secs=config.confirm_timeout_secs)
    except (MintError, SolanaRPCError) as exc:
        logger.debug("Minting %s failed: %s", mint, exc)
        return MintResult(success=False, mint=mint, amount=str(ui_amount), error=str(exc))

    logger.info("Minted %s base units of %s (%s)", base_units, mint, signature)
    return MintResult(
        success=True,
        mint=mint,
        amount=str(ui_amount),
        base_units=base_units,
        signature=signature,
        token_account=str(token_account),
        explorer_url=config.explorer_url("tx", signature),
    )


__all__ = ["MintError", "MintResult", "mint_tokens", "parse_amount", "to_base_units"]
