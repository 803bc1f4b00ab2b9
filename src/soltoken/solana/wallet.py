"""Loading of Solana CLI keypair files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from solders.keypair import Keypair


class WalletError(RuntimeError):
    """Raised when a wallet keypair cannot be loaded."""


@dataclass
class Wallet:
    """A keypair loaded from disk together with its origin."""

    keypair: Keypair
    path: Path

    @property
    def public_key(self) -> str:
        return str(self.keypair.pubkey())


def load_keypair(path: Path) -> Keypair:
    """Read a JSON byte-array keypair (as written by ``solana-keygen``)."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise WalletError(f"Wallet keypair file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise WalletError(f"Failed to read wallet keypair file: {exc}") from exc
    if not isinstance(raw, list) or not all(isinstance(item, int) and 0 <= item <= 255 for item in raw):
        raise WalletError("Wallet keypair file must contain a JSON array of bytes.")
    secret = bytes(raw)
    if len(secret) == 64:
        try:
            return Keypair.from_bytes(secret)
        except ValueError as exc:
            raise WalletError(f"Invalid wallet keypair: {exc}") from exc
    if len(secret) == 32:
        return Keypair.from_seed(secret)
    raise WalletError("Secret key must be 32 or 64 bytes.")


def load_wallet(path: Path) -> Wallet:
    return Wallet(keypair=load_keypair(path), path=Path(path))


__all__ = ["Wallet", "WalletError", "load_keypair", "load_wallet"]
