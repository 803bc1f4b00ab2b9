from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import httpx
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from soltoken.core.config import SolTokenConfig
from soltoken.core.minting import MintError, mint_tokens, parse_amount, to_base_units
from soltoken.solana.constants import TOKEN_PROGRAM_ID
from soltoken.solana.rpc import SolanaRPCClient


def write_wallet(tmp_path: Path) -> tuple[Path, Keypair]:
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(keypair))))
    return path, keypair


def mint_rpc(authority: str | None, *, ata_exists: bool, calls: list[dict[str, Any]], decimals: int = 6) -> SolanaRPCClient:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        calls.append(json)
        method = json["method"]
        if method == "getAccountInfo" and json["params"][1]["encoding"] == "jsonParsed":
            result: Any = {
                "value": {
                    "owner": str(TOKEN_PROGRAM_ID),
                    "data": {
                        "program": "spl-token",
                        "parsed": {
                            "type": "mint",
                            "info": {"decimals": decimals, "mintAuthority": authority, "supply": "0"},
                        },
                    },
                }
            }
        elif method == "getAccountInfo":
            value = {"data": ["", "base64"], "owner": str(TOKEN_PROGRAM_ID)} if ata_exists else None
            result = {"value": value}
        elif method == "getLatestBlockhash":
            result = {"value": {"blockhash": "11111111111111111111111111111111"}}
        elif method == "sendTransaction":
            result = "MintSig111"
        else:
            result = {"value": [{"confirmationStatus": "finalized", "err": None}]}
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "result": result},
            request=httpx.Request("POST", "http://localhost:8899"),
        )

    return SolanaRPCClient(endpoint="http://localhost:8899", _request=request, _sleep=lambda _s: None)


def sent_methods(calls: list[dict[str, Any]]) -> list[str]:
    return [call["method"] for call in calls]


def test_to_base_units_is_exact() -> None:
    assert to_base_units(Decimal("1.5"), 6) == 1_500_000
    assert to_base_units(Decimal("0.1"), 9) == 100_000_000
    assert to_base_units(Decimal("1000000000"), 9) == 10**18


def test_to_base_units_rejects_excess_precision() -> None:
    with pytest.raises(MintError, match="more than 2 decimal places"):
        to_base_units(Decimal("1.001"), 2)


@pytest.mark.parametrize("raw", ["0", "-1", "abc", "NaN", ""])
def test_parse_amount_rejects_invalid(raw: str) -> None:
    with pytest.raises(MintError):
        parse_amount(raw)


def test_authority_mismatch_sends_nothing(tmp_path: Path) -> None:
    wallet, _ = write_wallet(tmp_path)
    other = str(Keypair().pubkey())
    calls: list[dict[str, Any]] = []

    result = mint_tokens(
        SolTokenConfig(),
        str(Keypair().pubkey()),
        "10",
        wallet_path=wallet,
        rpc=mint_rpc(other, ata_exists=True, calls=calls),
    )

    assert not result.success
    assert "Mint authority mismatch" in (result.error or "")
    assert other in (result.error or "")
    assert "sendTransaction" not in sent_methods(calls)


def test_mint_into_existing_account(tmp_path: Path) -> None:
    wallet, keypair = write_wallet(tmp_path)
    mint = Keypair().pubkey()
    calls: list[dict[str, Any]] = []

    result = mint_tokens(
        SolTokenConfig(),
        str(mint),
        "2.5",
        wallet_path=wallet,
        rpc=mint_rpc(str(keypair.pubkey()), ata_exists=True, calls=calls),
    )

    assert result.success, result.error
    assert result.base_units == 2_500_000
    assert result.signature == "MintSig111"
    assert result.token_account == str(get_associated_token_address(keypair.pubkey(), mint))
    assert result.explorer_url == "https://explorer.solana.com/tx/MintSig111?cluster=devnet"
    assert sent_methods(calls) == [
        "getAccountInfo",
        "getAccountInfo",
        "getLatestBlockhash",
        "sendTransaction",
        "getSignatureStatuses",
    ]


def test_mint_creates_missing_associated_account(tmp_path: Path) -> None:
    wallet, keypair = write_wallet(tmp_path)
    calls: list[dict[str, Any]] = []

    result = mint_tokens(
        SolTokenConfig(),
        str(Keypair().pubkey()),
        "1",
        wallet_path=wallet,
        rpc=mint_rpc(str(keypair.pubkey()), ata_exists=False, calls=calls, decimals=0),
    )

    assert result.success, result.error
    assert result.base_units == 1
    # ATA creation plus mint_to ends up in one transaction
    assert sent_methods(calls).count("sendTransaction") == 1


def test_excess_precision_is_rejected_before_sending(tmp_path: Path) -> None:
    wallet, keypair = write_wallet(tmp_path)
    calls: list[dict[str, Any]] = []

    result = mint_tokens(
        SolTokenConfig(),
        str(Keypair().pubkey()),
        "0.5",
        wallet_path=wallet,
        rpc=mint_rpc(str(keypair.pubkey()), ata_exists=True, calls=calls, decimals=0),
    )

    assert not result.success
    assert "decimal places" in (result.error or "")
    assert "sendTransaction" not in sent_methods(calls)


def test_invalid_mint_address(tmp_path: Path) -> None:
    wallet, _ = write_wallet(tmp_path)

    result = mint_tokens(SolTokenConfig(), "not-a-key", "1", wallet_path=wallet, rpc=mint_rpc(None, ata_exists=True, calls=[]))

    assert not result.success
    assert result.error == "Invalid mint address: not-a-key"


def test_disabled_mint_authority(tmp_path: Path) -> None:
    wallet, _ = write_wallet(tmp_path)

    result = mint_tokens(
        SolTokenConfig(),
        str(Pubkey.default()),
        "1",
        wallet_path=wallet,
        rpc=mint_rpc(None, ata_exists=True, calls=[]),
    )

    assert not result.success
    assert "minting is disabled" in (result.error or "")
