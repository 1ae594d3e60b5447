"""Filesystem attachment store, served by the app itself at /media."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote

from app.storage.base import AttachmentStoreError

logger = logging.getLogger(__name__)


class LocalAttachmentStore:
    """Stores attachments under ``root/<bucket>/<path>``.

    Public URLs point at ``{base_url}/{bucket}/{path}``; the app mounts the
    root directory read-only so they resolve in development and tests.
    """

    def __init__(self, root: str | Path, bucket: str, base_url: str):
        self._root = Path(root).resolve()
        self._bucket = bucket
        self._base_url = base_url.rstrip("/")
        (self._root / bucket).mkdir(parents=True, exist_ok=True)
        logger.debug("Local attachment store at %s", self._root / bucket)

    def _resolve(self, path: str) -> Path:
        bucket_dir = self._root / self._bucket
        target = (bucket_dir / path).resolve()
        if bucket_dir not in target.parents:
            raise AttachmentStoreError(f"Path '{path}' escapes the bucket", path=path)
        return target

    async def put(
        self, path: str, data: bytes, content_type: str, overwrite: bool = True
    ) -> str:
        target = self._resolve(path)

        def _write() -> None:
            if not overwrite and target.exists():
                raise AttachmentStoreError(f"Object '{path}' already exists", path=path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise AttachmentStoreError(f"Failed to write '{path}': {exc}", path=path) from exc
        return path

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{self._bucket}/{quote(path)}"

    async def delete(self, paths: Sequence[str]) -> None:
        def _remove() -> None:
            for path in paths:
                self._resolve(path).unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_remove)
        except OSError as exc:
            raise AttachmentStoreError(f"Failed to delete {list(paths)}: {exc}") from exc

    async def aclose(self) -> None:
        return None
