import json
from datetime import UTC, datetime
from pathlib import Path

from soltoken.core.records import ImageUploadRecord, ImageUploadStore, TokenRecord, TokenStore


def make_record(name: str, symbol: str, created: str | None, mint: str | None = None) -> TokenRecord:
    return TokenRecord(
        name=name,
        symbol=symbol,
        decimals=9,
        initial_supply=1_000_000,
        mint=mint or f"{symbol}Mint",
        created_at=datetime.fromisoformat(created) if created else None,
    )


def test_save_uses_symbol_slug_and_camel_case(tmp_path: Path) -> None:
    store = TokenStore(tmp_path)
    record = TokenRecord(
        name="My Token",
        symbol="My Tok",
        decimals=6,
        initial_supply=1000,
        description="demo",
        image_url="https://img.example/logo.png",
        mint="Mint111",
        transaction="Sig111",
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
        metadata_address="Meta111",
        metadata_uri="https://ipfs.io/ipfs/cid",
        explorer_url="https://explorer.solana.com/address/Mint111?cluster=devnet",
    )

    path = store.save(record)

    assert path.parent == tmp_path
    assert path.name.startswith("my-tok-")
    data = json.loads(path.read_text())
    assert data["initialSupply"] == 1000
    assert data["imageUrl"] == "https://img.example/logo.png"
    assert data["metadataAddress"] == "Meta111"
    assert data["createdAt"].startswith("2024-05-01")
    assert store.load_all() == [record]


def test_list_sorts_newest_first_and_filters(tmp_path: Path) -> None:
    store = TokenStore(tmp_path)
    store.save(make_record("Alpha", "ALP", "2024-01-01T00:00:00+00:00"))
    store.save(make_record("Beta", "BET", "2024-03-01T00:00:00+00:00"))
    store.save(make_record("Gamma", "alpha2", None))

    assert [record.symbol for record in store.list_records()] == ["BET", "ALP", "alpha2"]
    assert [record.symbol for record in store.list_records("ALPHA")] == ["ALP", "alpha2"]
    assert store.list_records("zzz") == []


def test_reads_original_record_format(tmp_path: Path) -> None:
    (tmp_path / "old-1.json").write_text(
        json.dumps(
            {
                "name": "Legacy",
                "symbol": "LEG",
                "decimals": 9,
                "initialSupply": 1e9,
                "mint": "LegacyMint",
                "createdAt": "2023-07-04T12:00:00.000Z",
                "somethingElse": True,
            }
        )
    )
    (tmp_path / "broken.json").write_text("{not json")
    (tmp_path / "partial.json").write_text(json.dumps({"name": "x"}))

    records = TokenStore(tmp_path).load_all()

    assert len(records) == 1
    assert records[0].mint == "LegacyMint"
    assert TokenStore(tmp_path).find_by_mint("LegacyMint").symbol == "LEG"


def test_symbol_with_path_separator_stays_in_store(tmp_path: Path) -> None:
    store = TokenStore(tmp_path)

    path = store.save(TokenRecord(name="USD Coin", symbol="USD/C", decimals=6, initial_supply=10, mint="UsdcMint"))

    assert path.parent == tmp_path
    assert path.name.startswith("usd-c-")
    assert store.find_by_mint("UsdcMint").symbol == "USD/C"


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    assert TokenStore(tmp_path / "nope").list_records() == []


def test_image_record_file(tmp_path: Path) -> None:
    store = ImageUploadStore(tmp_path)

    path = store.save(ImageUploadRecord(original_file="/pics/logo.final.png", url="https://ipfs.io/ipfs/cid"))

    assert path.name.startswith("logo-")
    data = json.loads(path.read_text())
    assert data["originalFile"] == "/pics/logo.final.png"
    assert data["url"] == "https://ipfs.io/ipfs/cid"
    assert "timestamp" in data
    assert "imgbbUrl" not in data
