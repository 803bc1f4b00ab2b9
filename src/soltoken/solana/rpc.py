"""Solana JSON-RPC helpers."""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable

import httpx
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.transaction import Transaction

logger = logging.getLogger(__name__)


class SolanaRPCError(RuntimeError):
    """Raised when Solana RPC calls fail."""


RequestFn = Callable[[str, Any], httpx.Response]


@dataclass(slots=True)
class TokenSupply:
    amount: int
    decimals: int
    ui_amount: float | None
    ui_amount_string: str


@dataclass(slots=True)
class ParsedMint:
    """Subset of a jsonParsed mint account."""

    address: str
    owner_program: str
    decimals: int
    mint_authority: str | None
    supply: int


@dataclass
class SolanaRPCClient:
    """Thin wrapper around Solana's JSON-RPC interface."""

    endpoint: str
    timeout: float = 10.0
    commitment: str = "confirmed"
    _request: RequestFn | None = None
    _sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self._request is None:
            self._request = httpx.post

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Execute a JSON-RPC method and return its ``result`` member."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params or [],
        }
        try:
            response = self._request(self.endpoint, json=payload, timeout=self.timeout)  # type: ignore[arg-type]
        except httpx.HTTPError as exc:
            raise SolanaRPCError(f"RPC request failed: {exc}") from exc
        try:
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SolanaRPCError(f"RPC request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:  # pragma: no cover - unexpected for compliant RPC
            raise SolanaRPCError("Invalid JSON in RPC response") from exc

        if "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                raise SolanaRPCError(error.get("message", "Unknown RPC error"))
            raise SolanaRPCError(str(error))
        if "result" not in data:
            raise SolanaRPCError(f"Malformed RPC response for {method}; missing result")
        logger.debug("RPC %s ok", method)
        return data["result"]

    def get_account_data(self, address: str) -> tuple[bytes, str] | None:
        """Return (raw data, owner program) for an account, or None if it does not exist."""
        result = self.call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            return None
        try:
            encoded, encoding = value["data"]
        except (KeyError, TypeError, ValueError) as exc:
            raise SolanaRPCError(f"Malformed account data for {address}") from exc
        if encoding != "base64":
            raise SolanaRPCError(f"Unexpected account encoding '{encoding}' for {address}")
        return base64.b64decode(encoded), str(value.get("owner", ""))

    def account_exists(self, address: str) -> bool:
        return self.get_account_data(address) is not None

    def get_parsed_mint(self, mint: str) -> ParsedMint:
        """Fetch and parse a mint account using the jsonParsed encoding."""
        result = self.call(
            "getAccountInfo",
            [mint, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not value or not value.get("data"):
            raise SolanaRPCError(f"Failed to fetch mint information for {mint}")
        data = value["data"]
        if not isinstance(data, dict) or "parsed" not in data:
            raise SolanaRPCError(f"Failed to parse mint data for {mint}")
        parsed = data["parsed"]
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise SolanaRPCError(f"Account {mint} is not a token mint")
        info = parsed.get("info") or {}
        try:
            decimals = int(info["decimals"])
            supply = int(info.get("supply", 0))
        except (KeyError, TypeError, ValueError) as exc:
            raise SolanaRPCError(f"Failed to parse mint data for {mint}") from exc
        return ParsedMint(
            address=mint,
            owner_program=str(value.get("owner", "")),
            decimals=decimals,
            mint_authority=info.get("mintAuthority"),
            supply=supply,
        )

    def get_token_supply(self, mint: str) -> TokenSupply:
        result = self.call("getTokenSupply", [mint, {"commitment": self.commitment}])
        try:
            value = result["value"]
            return TokenSupply(
                amount=int(value["amount"]),
                decimals=int(value["decimals"]),
                ui_amount=value.get("uiAmount"),
                ui_amount_string=str(value.get("uiAmountString", "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SolanaRPCError(f"Malformed token supply response for {mint}") from exc

    def get_latest_blockhash(self) -> str:
        result = self.call("getLatestBlockhash", [{"commitment": self.commitment}])
        try:
            return str(result["value"]["blockhash"])
        except (KeyError, TypeError) as exc:
            raise SolanaRPCError("Malformed RPC response; missing blockhash") from exc

    def send_transaction(self, raw_transaction: bytes) -> str:
        """Submit a signed, serialized transaction and return its signature."""
        encoded = base64.b64encode(raw_transaction).decode("ascii")
        signature = self.call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}],
        )
        if not isinstance(signature, str):
            raise SolanaRPCError(f"Unexpected sendTransaction result: {signature!r}")
        return signature

    def confirm_transaction(self, signature: str, *, timeout_secs: float = 60.0, poll_interval: float = 1.0) -> None:
        """Block until the signature reaches the client's commitment or fail."""
        deadline = time.monotonic() + timeout_secs
        wanted = {"confirmed", "finalized"} if self.commitment != "finalized" else {"finalized"}
        while True:
            result = self.call("getSignatureStatuses", [[signature], {"searchTransactionHistory": True}])
            statuses = result.get("value") if isinstance(result, dict) else None
            status = statuses[0] if statuses else None
            if status is not None:
                if status.get("err"):
                    raise SolanaRPCError(f"Transaction {signature} failed: {status['err']}")
                if status.get("confirmationStatus") in wanted:
                    logger.debug("Transaction %s confirmed", signature)
                    return
            if time.monotonic() >= deadline:
                raise SolanaRPCError(f"Timed out waiting for confirmation of {signature}")
            self._sleep(poll_interval)

    def send_and_confirm(self, instructions: Sequence[Instruction], signer: Keypair, *, timeout_secs: float = 60.0) -> str:
        """Sign ``instructions`` with ``signer`` as fee payer, submit them and wait for confirmation."""
        blockhash = Hash.from_string(self.get_latest_blockhash())
        transaction = Transaction.new_signed_with_payer(list(instructions), signer.pubkey(), [signer], blockhash)
        signature = self.send_transaction(bytes(transaction))
        logger.debug("Submitted transaction %s", signature)
        self.confirm_transaction(signature, timeout_secs=timeout_secs)
        return signature


__all__ = ["ParsedMint", "SolanaRPCClient", "SolanaRPCError", "TokenSupply"]
