"""Supabase Storage backend (REST API over httpx)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from urllib.parse import quote

import httpx

from app.storage.base import AttachmentStoreError

logger = logging.getLogger(__name__)


class SupabaseAttachmentStore:
    """Uploads to a public Supabase bucket.

    ``put`` maps to ``POST /object/{bucket}/{path}`` with ``x-upsert`` set from
    *overwrite*; public URLs use the ``/object/public`` route.
    """

    def __init__(
        self,
        url: str,
        key: str,
        bucket: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._storage_url = f"{url.rstrip('/')}/storage/v1"
        self._bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=self._storage_url,
            headers={"Authorization": f"Bearer {key}", "apikey": key},
            timeout=timeout,
            transport=transport,
        )

    async def put(
        self, path: str, data: bytes, content_type: str, overwrite: bool = True
    ) -> str:
        try:
            resp = await self._client.post(
                f"/object/{self._bucket}/{quote(path)}",
                content=data,
                headers={
                    "Content-Type": content_type,
                    "x-upsert": "true" if overwrite else "false",
                },
            )
        except httpx.HTTPError as exc:
            raise AttachmentStoreError(f"Upload of '{path}' failed: {exc}", path=path) from exc

        if resp.is_error:
            raise AttachmentStoreError(
                f"Upload of '{path}' rejected ({resp.status_code}): {_error_message(resp)}",
                path=path,
            )
        return path

    def public_url(self, path: str) -> str:
        return f"{self._storage_url}/object/public/{self._bucket}/{quote(path)}"

    async def delete(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        try:
            resp = await self._client.request(
                "DELETE", f"/object/{self._bucket}", json={"prefixes": list(paths)}
            )
        except httpx.HTTPError as exc:
            raise AttachmentStoreError(f"Delete of {list(paths)} failed: {exc}") from exc
        if resp.is_error:
            raise AttachmentStoreError(
                f"Delete of {list(paths)} rejected ({resp.status_code}): {_error_message(resp)}"
            )

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
