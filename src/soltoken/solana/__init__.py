"""Solana-focused utilities for soltoken."""

from .metadata import MetadataError, OnChainMetadata, find_metadata_pda
from .rpc import SolanaRPCClient, SolanaRPCError
from .spl_cli import CliOutputParseError, SplTokenCli, SplTokenError
from .wallet import Wallet, WalletError, load_wallet

__all__ = [
    "CliOutputParseError",
    "MetadataError",
    "OnChainMetadata",
    "SolanaRPCClient",
    "SolanaRPCError",
    "SplTokenCli",
    "SplTokenError",
    "Wallet",
    "WalletError",
    "find_metadata_pda",
    "load_wallet",
]
