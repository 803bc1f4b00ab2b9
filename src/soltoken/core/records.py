"""Local JSON records for created tokens and uploaded images."""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, UTC)


class TokenRecord(BaseModel):
    """A token created by this tool, as persisted under the token-output directory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str
    symbol: str
    decimals: int
    initial_supply: float | int
    description: str | None = None
    image_url: str | None = None
    mint: str | None = None
    transaction: str | None = None
    created_at: datetime | None = None
    metadata_address: str | None = None
    metadata_uri: str | None = None
    explorer_url: str | None = None
    token_account: str | None = None
    is_simulated: bool = False

    def sort_key(self) -> datetime:
        if self.created_at is None:
            return _EPOCH
        if self.created_at.tzinfo is None:
            return self.created_at.replace(tzinfo=UTC)
        return self.created_at

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on name or symbol."""
        lowered = needle.lower()
        return lowered in self.name.lower() or lowered in self.symbol.lower()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class ImageUploadRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_file: str
    url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    imgbb_url: str | None = None
    ipfs_url: str | None = None


def slugify(value: str) -> str:
    """File-name-safe form of a symbol: lowercase, anything outside [a-z0-9._-] collapsed to "-"."""
    return re.sub(r"[^a-z0-9._-]+", "-", value.strip().lower()).strip("-.") or "token"


def _write_atomic(path: Path, payload: str) -> None:
    tmp_path = path.with_suffix(".json.tmp")
    tmp_path.write_text(payload)
    tmp_path.replace(path)


class TokenStore:
    """Reads and writes token records; files are never rewritten once created."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def save(self, record: TokenRecord) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{slugify(record.symbol)}-{int(time.time() * 1000)}.json"
        while path.exists():
            time.sleep(0.001)
            path = self.root / f"{slugify(record.symbol)}-{int(time.time() * 1000)}.json"
        _write_atomic(path, record.to_json())
        logger.debug("Saved token record %s", path)
        return path

    def load_all(self) -> list[TokenRecord]:
        if not self.root.exists():
            return []
        records: list[TokenRecord] = []
        for path in sorted(self.root.glob("*.json")):
            record = self._load(path)
            if record is not None:
                records.append(record)
        return records

    def list_records(self, filter_text: str = "") -> list[TokenRecord]:
        """Return records newest first, optionally filtered by name/symbol."""
        records = self.load_all()
        if filter_text:
            records = [record for record in records if record.matches(filter_text)]
        records.sort(key=lambda record: record.sort_key(), reverse=True)
        return records

    def find_by_mint(self, mint: str) -> TokenRecord | None:
        for record in self.load_all():
            if record.mint == mint:
                return record
        return None

    def _load(self, path: Path) -> TokenRecord | None:
        try:
            data: Any = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Skipping unreadable token file %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            return None
        try:
            return TokenRecord.model_validate(data)
        except ValidationError as exc:
            logger.debug("Skipping token file %s: %s", path, exc)
            return None


class ImageUploadStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def save(self, record: ImageUploadRecord) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        stem = Path(record.original_file).name.split(".")[0] or "image"
        path = self.root / f"{stem}-{int(time.time() * 1000)}.json"
        payload = record.model_dump(mode="json", by_alias=True, exclude_none=True)
        _write_atomic(path, json.dumps(payload, indent=2))
        return path


__all__ = ["ImageUploadRecord", "ImageUploadStore", "TokenRecord", "TokenStore", "slugify"]
