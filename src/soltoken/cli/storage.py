"""Image and metadata uploads to ImgBB and NFT.Storage."""

from __future__ import annotations

import base64
import json
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import httpx

from soltoken.core.config import SolTokenConfig

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"
NFT_STORAGE_UPLOAD_URL = "https://api.nft.storage/upload"
IPFS_GATEWAY = "https://ipfs.io/ipfs"

IMGBB = "imgbb"
NFT_STORAGE = "nft.storage"


class UploadError(RuntimeError):
    """Raised when a file is rejected or a provider returns an unusable response."""


@dataclass(slots=True)
class ProviderResult:
    provider: str
    success: bool
    url: str | None = None
    error: str | None = None


@dataclass(slots=True)
class UploadResult:
    """Outcome of an upload across every configured provider."""

    success: bool
    url: str | None = None
    providers: list[ProviderResult] = field(default_factory=list)
    error: str | None = None

    def url_for(self, provider: str) -> str | None:
        for result in self.providers:
            if result.provider == provider and result.success:
                return result.url
        return None

    @property
    def imgbb_url(self) -> str | None:
        return self.url_for(IMGBB)

    @property
    def ipfs_url(self) -> str | None:
        return self.url_for(NFT_STORAGE)


def validate_image(file_path: Path) -> str:
    """Check ``file_path`` is an existing image of at most 10 MB and return its MIME type."""
    path = Path(file_path).expanduser()
    if not path.is_file():
        raise UploadError(f"File not found: {path}")
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise UploadError(f"Unsupported file type: {path.suffix or path.name}. Please provide an image file.")
    size = path.stat().st_size
    if size > MAX_IMAGE_BYTES:
        raise UploadError(f"File too large ({size / (1024 * 1024):.2f} MB). Maximum size is 10 MB.")
    return mime


@dataclass
class ImageUploader:
    """Uploads files to ImgBB and NFT.Storage, preferring the IPFS URL."""

    imgbb_api_key: str = ""
    nft_storage_api_key: str = ""
    timeout: float = 30.0
    _post: Callable[..., httpx.Response] | None = None

    def __post_init__(self) -> None:
        if self._post is None:
            self._post = httpx.post

    @classmethod
    def from_config(cls, config: SolTokenConfig, **kwargs: Any) -> "ImageUploader":
        return cls(imgbb_api_key=config.imgbb_api_key, nft_storage_api_key=config.nft_storage_api_key, **kwargs)

    @property
    def configured(self) -> bool:
        return bool(self.imgbb_api_key or self.nft_storage_api_key)

    def upload_image(self, file_path: Path) -> UploadResult:
        path = Path(file_path).expanduser()
        try:
            mime = validate_image(path)
        except UploadError as exc:
            return UploadResult(success=False, error=str(exc))
        if not self.configured:
            return UploadResult(
                success=False,
                error="No image upload service configured. Set IMGBB_API_KEY or NFT_STORAGE_API_KEY.",
            )
        content = path.read_bytes()
        providers: list[ProviderResult] = []
        if self.imgbb_api_key:
            providers.append(self._attempt(IMGBB, lambda: self._upload_imgbb_file(content, path.name, mime)))
        if self.nft_storage_api_key:
            providers.append(self._attempt(NFT_STORAGE, lambda: self._upload_nft_storage(content, mime)))
        return self._combine(providers)

    def upload_json(self, document: dict[str, Any], name: str = "metadata.json") -> UploadResult:
        """Upload a metadata document; NFT.Storage first, then ImgBB as a base64 payload."""
        if not self.configured:
            return UploadResult(success=False, error="No upload service configured for metadata.")
        content = json.dumps(document, indent=2).encode("utf-8")
        providers: list[ProviderResult] = []
        if self.nft_storage_api_key:
            providers.append(self._attempt(NFT_STORAGE, lambda: self._upload_nft_storage(content, "application/json")))
        if self.imgbb_api_key and not any(result.success for result in providers):
            encoded = base64.b64encode(content).decode("ascii")
            providers.append(self._attempt(IMGBB, lambda: self._post_imgbb(data={"image": encoded, "name": name})))
        return self._combine(providers)

    def _attempt(self, provider: str, upload: Callable[[], str]) -> ProviderResult:
        try:
            url = upload()
        except (httpx.HTTPError, UploadError, ValueError) as exc:
            logger.warning("Upload to %s failed: %s", provider, exc)
            return ProviderResult(provider=provider, success=False, error=str(exc))
        logger.debug("Uploaded to %s: %s", provider, url)
        return ProviderResult(provider=provider, success=True, url=url)

    @staticmethod
    def _combine(providers: list[ProviderResult]) -> UploadResult:
        by_name = {result.provider: result for result in providers if result.success}
        for preferred in (NFT_STORAGE, IMGBB):
            if preferred in by_name:
                return UploadResult(success=True, url=by_name[preferred].url, providers=providers)
        errors = "; ".join(f"{result.provider}: {result.error}" for result in providers)
        return UploadResult(success=False, providers=providers, error=f"All uploads failed ({errors})")

    def _upload_imgbb_file(self, content: bytes, filename: str, mime: str) -> str:
        return self._post_imgbb(files={"image": (filename, content, mime)})

    def _post_imgbb(self, **payload: Any) -> str:
        response = self._post(  # type: ignore[misc]
            IMGBB_UPLOAD_URL,
            params={"key": self.imgbb_api_key},
            timeout=self.timeout,
            **payload,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise UploadError(f"Unexpected ImgBB response: {data!r}")
        url = (data.get("data") or {}).get("url")
        if not data.get("success", True) or not url:
            raise UploadError(f"ImgBB response missing url: {data}")
        return url

    def _upload_nft_storage(self, content: bytes, content_type: str) -> str:
        response = self._post(  # type: ignore[misc]
            NFT_STORAGE_UPLOAD_URL,
            headers={"Authorization": f"Bearer {self.nft_storage_api_key}", "Content-Type": content_type},
            content=content,
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise UploadError(f"Unexpected nft.storage response: {data!r}")
        cid = (data.get("value") or {}).get("cid")
        if not data.get("ok", True) or not cid:
            raise UploadError(f"nft.storage response missing cid: {data}")
        return f"{IPFS_GATEWAY}/{cid}"


__all__ = [
    "IMGBB",
    "MAX_IMAGE_BYTES",
    "NFT_STORAGE",
    "ImageUploader",
    "ProviderResult",
    "UploadError",
    "UploadResult",
    "validate_image",
]
