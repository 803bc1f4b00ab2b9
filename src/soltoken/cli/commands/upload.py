"""Image uploads."""

from __future__ import annotations

from pathlib import Path

import typer

from soltoken.cli.storage import ImageUploader
from soltoken.cli.types import get_state
from soltoken.core.records import ImageUploadRecord


def register(app: typer.Typer) -> None:
    """Register the `upload-image` command."""

    @app.command("upload-image")
    def upload_image_command(
        ctx: typer.Context,
        path: Path = typer.Argument(..., help="Image file (10 MB max)"),  # noqa: B008
    ) -> None:
        """Upload an image to ImgBB and/or NFT.Storage and record the URL."""
        state = get_state(ctx)
        uploader = ImageUploader.from_config(state.config)
        with state.console.status(f"Uploading {path.name}…"):
            result = uploader.upload_image(path)
        for provider in result.providers:
            if not provider.success:
                state.warn(f"{provider.provider} upload failed: {provider.error}")
        if not result.success or not result.url:
            state.fail(f"Image upload failed: {result.error}")
        record = ImageUploadRecord(
            original_file=str(path),
            url=result.url,
            imgbb_url=result.imgbb_url,
            ipfs_url=result.ipfs_url,
        )
        saved = state.image_store.save(record)
        state.success(f"Image URL: {result.url}\nSaved to:  {saved}", title="Image uploaded")
