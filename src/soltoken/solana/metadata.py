"""Metaplex Token Metadata layouts, PDA derivation and instruction builders."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal

from borsh_construct import Bool, CStruct, Enum, Option, String, U8, U16, U64, Vec
from construct import Bytes, ConstructError
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from soltoken.solana.constants import SYSTEM_PROGRAM_ID, TOKEN_METADATA_PROGRAM_ID

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200

CREATE_METADATA_ACCOUNT_V3 = 33
UPDATE_METADATA_ACCOUNT_V2 = 15

MetadataField = Literal["name", "symbol", "uri"]
FIELD_LIMITS: dict[str, int] = {"name": MAX_NAME_LENGTH, "symbol": MAX_SYMBOL_LENGTH, "uri": MAX_URI_LENGTH}


class MetadataError(RuntimeError):
    """Raised when metadata cannot be derived, decoded or encoded."""


CREATOR = CStruct("address" / Bytes(32), "verified" / Bool, "share" / U8)
COLLECTION = CStruct("verified" / Bool, "key" / Bytes(32))
USE_METHOD = Enum("Burn", "Multiple", "Single", enum_name="UseMethod")
USES = CStruct("use_method" / USE_METHOD, "remaining" / U64, "total" / U64)
COLLECTION_DETAILS = Enum("V1" / CStruct("size" / U64), enum_name="CollectionDetails")

DATA_V2 = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CREATOR)),
    "collection" / Option(COLLECTION),
    "uses" / Option(USES),
)

CREATE_METADATA_ACCOUNT_V3_ARGS = CStruct(
    "discriminator" / U8,
    "data" / DATA_V2,
    "is_mutable" / Bool,
    "collection_details" / Option(COLLECTION_DETAILS),
)

UPDATE_METADATA_ACCOUNT_V2_ARGS = CStruct(
    "discriminator" / U8,
    "data" / Option(DATA_V2),
    "new_update_authority" / Option(Bytes(32)),
    "primary_sale_happened" / Option(Bool),
    "is_mutable" / Option(Bool),
)

# Leading portion of the on-chain Metadata account; trailing fields are ignored.
METADATA_ACCOUNT = CStruct(
    "key" / U8,
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CREATOR)),
    "primary_sale_happened" / Bool,
    "is_mutable" / Bool,
    "edition_nonce" / Option(U8),
    "token_standard" / Option(U8),
    "collection" / Option(COLLECTION),
    "uses" / Option(USES),
)


@dataclass(frozen=True)
class OnChainMetadata:
    """Decoded metadata account."""

    update_authority: str
    mint: str
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: list[Any] | None
    primary_sale_happened: bool
    is_mutable: bool
    collection: Any = None
    uses: Any = None

    def with_field(self, field: MetadataField, value: str) -> "OnChainMetadata":
        if field not in FIELD_LIMITS:
            raise MetadataError(f"Unsupported metadata field '{field}'")
        return replace(self, **{field: value})

    def data_v2(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "uri": self.uri,
            "seller_fee_basis_points": self.seller_fee_basis_points,
            "creators": self.creators,
            "collection": self.collection,
            "uses": self.uses,
        }


def find_metadata_pda(mint: Pubkey) -> Pubkey:
    """Derive the metadata account for ``mint``: seeds ["metadata", program, mint]."""
    address, _bump = Pubkey.find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return address


def validate_field(field: str, value: str) -> None:
    limit = FIELD_LIMITS.get(field)
    if limit is None:
        raise MetadataError(f"Unsupported metadata field '{field}'")
    size = len(value.encode("utf-8"))
    if size > limit:
        raise MetadataError(f"Token {field} is {size} bytes; the maximum is {limit}.")


def decode_metadata_account(data: bytes) -> OnChainMetadata:
    try:
        parsed = METADATA_ACCOUNT.parse(data)
    except ConstructError as exc:
        raise MetadataError(f"Unable to decode metadata account: {exc}") from exc
    if parsed.key != 4:  # Key::MetadataV1
        raise MetadataError(f"Account is not a metadata account (key={parsed.key})")
    creators = None
    if parsed.creators is not None:
        creators = [
            {"address": bytes(item.address), "verified": bool(item.verified), "share": int(item.share)}
            for item in parsed.creators
        ]
    return OnChainMetadata(
        update_authority=str(Pubkey.from_bytes(bytes(parsed.update_authority))),
        mint=str(Pubkey.from_bytes(bytes(parsed.mint))),
        name=parsed.name.rstrip("\x00"),
        symbol=parsed.symbol.rstrip("\x00"),
        uri=parsed.uri.rstrip("\x00"),
        seller_fee_basis_points=int(parsed.seller_fee_basis_points),
        creators=creators,
        primary_sale_happened=bool(parsed.primary_sale_happened),
        is_mutable=bool(parsed.is_mutable),
        collection=parsed.collection,
        uses=parsed.uses,
    )


def create_metadata_instruction(
    *,
    metadata: Pubkey,
    mint: Pubkey,
    mint_authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    is_mutable: bool = True,
) -> Instruction:
    """Build ``CreateMetadataAccountV3`` for a fungible token without creators."""
    for field, value in (("name", name), ("symbol", symbol), ("uri", uri)):
        validate_field(field, value)
    data = CREATE_METADATA_ACCOUNT_V3_ARGS.build(
        {
            "discriminator": CREATE_METADATA_ACCOUNT_V3,
            "data": {
                "name": name,
                "symbol": symbol,
                "uri": uri,
                "seller_fee_basis_points": 0,
                "creators": None,
                "collection": None,
                "uses": None,
            },
            "is_mutable": is_mutable,
            "collection_details": None,
        }
    )
    accounts = [
        AccountMeta(pubkey=metadata, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint_authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(TOKEN_METADATA_PROGRAM_ID, data, accounts)


def update_metadata_instruction(
    *,
    metadata: Pubkey,
    update_authority: Pubkey,
    current: OnChainMetadata,
) -> Instruction:
    """Build ``UpdateMetadataAccountV2`` rewriting the DataV2 block of ``current``."""
    try:
        data = UPDATE_METADATA_ACCOUNT_V2_ARGS.build(
            {
                "discriminator": UPDATE_METADATA_ACCOUNT_V2,
                "data": current.data_v2(),
                "new_update_authority": None,
                "primary_sale_happened": None,
                "is_mutable": None,
            }
        )
    except ConstructError as exc:
        raise MetadataError(f"Unable to encode metadata update: {exc}") from exc
    accounts = [
        AccountMeta(pubkey=metadata, is_signer=False, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(TOKEN_METADATA_PROGRAM_ID, data, accounts)


__all__ = [
    "FIELD_LIMITS",
    "MAX_NAME_LENGTH",
    "MAX_SYMBOL_LENGTH",
    "MAX_URI_LENGTH",
    "MetadataError",
    "MetadataField",
    "OnChainMetadata",
    "create_metadata_instruction",
    "decode_metadata_account",
    "find_metadata_pda",
    "update_metadata_instruction",
    "validate_field",
]
