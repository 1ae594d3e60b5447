"""Attachment store protocol shared by all storage backends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class AttachmentStoreError(Exception):
    """Raised by a backend when a put or delete is rejected or fails."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class AttachmentStore(Protocol):
    """Keyed binary store with public-read URLs.

    Backends are created once per process and shared by every request.
    """

    async def put(
        self, path: str, data: bytes, content_type: str, overwrite: bool = True
    ) -> str:
        """Write *data* at *path* and return the stored path."""
        ...

    def public_url(self, path: str) -> str:
        """Return the public URL for *path* (does not check existence)."""
        ...

    async def delete(self, paths: Sequence[str]) -> None: ...

    async def aclose(self) -> None: ...
