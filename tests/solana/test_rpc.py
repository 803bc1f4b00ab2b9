from __future__ import annotations

import base64
from typing import Any

import httpx
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from soltoken.solana.rpc import SolanaRPCClient, SolanaRPCError


def make_response(status_code: int, json_data: dict[str, Any]) -> httpx.Response:
    request = httpx.Request("POST", "https://rpc.example.com")
    return httpx.Response(status_code=status_code, json=json_data, request=request)


def routed(results: dict[str, Any], calls: list[dict[str, Any]] | None = None):
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        if calls is not None:
            calls.append(json)
        result = results[json["method"]]
        if callable(result):
            result = result(json["params"])
        return make_response(200, {"jsonrpc": "2.0", "result": result, "id": json["id"]})

    return request


def test_http_error_is_wrapped() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(500, {"error": {"message": "fail"}})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(SolanaRPCError):
        client.get_token_supply("TestPubkey")


def test_rpc_error_message_is_surfaced() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "error": {"message": "bad pubkey"}, "id": 1})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(SolanaRPCError, match="bad pubkey"):
        client.get_token_supply("BadPubkey")


def test_plain_string_rpc_error_is_surfaced() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "error": "rate limited", "id": 1})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(SolanaRPCError, match="rate limited"):
        client.get_token_supply("TestPubkey")


def test_get_parsed_mint_reads_authority_and_decimals() -> None:
    account = {
        "value": {
            "owner": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "mint",
                    "info": {"decimals": 6, "mintAuthority": "Auth111", "supply": "5000000", "isInitialized": True},
                },
            },
        }
    }
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=routed({"getAccountInfo": account}))

    parsed = client.get_parsed_mint("Mint111")

    assert parsed.decimals == 6
    assert parsed.mint_authority == "Auth111"
    assert parsed.supply == 5_000_000
    assert parsed.owner_program == "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def test_get_parsed_mint_missing_account() -> None:
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=routed({"getAccountInfo": {"value": None}}))

    with pytest.raises(SolanaRPCError, match="Failed to fetch mint information"):
        client.get_parsed_mint("Mint111")


def test_get_parsed_mint_rejects_raw_data() -> None:
    account = {"value": {"owner": "x", "data": ["AAAA", "base64"]}}
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=routed({"getAccountInfo": account}))

    with pytest.raises(SolanaRPCError, match="Failed to parse mint data"):
        client.get_parsed_mint("Mint111")


def test_get_account_data_decodes_base64() -> None:
    payload = base64.b64encode(b"\x04hello").decode()
    account = {"value": {"owner": "Owner111", "data": [payload, "base64"]}}
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=routed({"getAccountInfo": account}))

    assert client.get_account_data("Acc") == (b"\x04hello", "Owner111")


def test_confirm_transaction_polls_until_confirmed() -> None:
    statuses = iter(
        [
            {"value": [None]},
            {"value": [{"confirmationStatus": "processed", "err": None}]},
            {"value": [{"confirmationStatus": "confirmed", "err": None}]},
        ]
    )
    sleeps: list[float] = []
    client = SolanaRPCClient(
        endpoint="https://rpc.example.com",
        _request=routed({"getSignatureStatuses": lambda _params: next(statuses)}),
        _sleep=sleeps.append,
    )

    client.confirm_transaction("Sig111", timeout_secs=30)

    assert len(sleeps) == 2


def test_confirm_transaction_raises_on_error() -> None:
    client = SolanaRPCClient(
        endpoint="https://rpc.example.com",
        _request=routed({"getSignatureStatuses": {"value": [{"confirmationStatus": "confirmed", "err": {"x": 1}}]}}),
    )

    with pytest.raises(SolanaRPCError, match="failed"):
        client.confirm_transaction("Sig111")


def test_send_and_confirm_submits_signed_transaction() -> None:
    payer = Keypair()
    calls: list[dict[str, Any]] = []
    client = SolanaRPCClient(
        endpoint="https://rpc.example.com",
        _request=routed(
            {
                "getLatestBlockhash": {"value": {"blockhash": "11111111111111111111111111111111", "lastValidBlockHeight": 1}},
                "sendTransaction": "Sig111",
                "getSignatureStatuses": {"value": [{"confirmationStatus": "finalized", "err": None}]},
            },
            calls,
        ),
    )
    instruction = transfer(TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Pubkey.default(), lamports=1))

    signature = client.send_and_confirm([instruction], payer)

    assert signature == "Sig111"
    assert [call["method"] for call in calls] == ["getLatestBlockhash", "sendTransaction", "getSignatureStatuses"]
    raw = base64.b64decode(calls[1]["params"][0])
    transaction = Transaction.from_bytes(raw)
    assert transaction.message.account_keys[0] == payer.pubkey()
