"""Attachment uploader — maps named file buffers to public URLs.

Paths are deterministic (``{user_id}/{category}/{slot filename}``) and every
put overwrites, so re-uploading a slot replaces its content in place.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping

from app.core.attachments import AttachmentSlot, object_path, slots_for
from app.core.exceptions import UploadFailedError
from app.storage.base import AttachmentStore, AttachmentStoreError

logger = logging.getLogger(__name__)


class AttachmentUploader:
    def __init__(self, store: AttachmentStore, category: str):
        self._store = store
        self.category = category
        self._slots = slots_for(category)

    async def upload(
        self,
        files: Mapping[str, bytes | None],
        user_id: str,
        *,
        compensate: bool = False,
    ) -> dict[str, str]:
        """Upload every populated slot and return ``{slot: public_url}``.

        Slots run concurrently. If any fails, :class:`UploadFailedError` is
        raised once all of them have settled; slots that did land are reported
        as orphans (and deleted when *compensate* is set).
        """
        pending: list[tuple[AttachmentSlot, bytes]] = []
        for name, data in files.items():
            path = object_path(user_id, self.category, name)  # rejects unknown slots
            if data:
                pending.append((self._slots[name], data))
            else:
                logger.debug("Skipping empty attachment %s", path)

        if not pending:
            return {}

        results = await asyncio.gather(
            *(self._put(user_id, slot, data) for slot, data in pending),
            return_exceptions=True,
        )

        urls: dict[str, str] = {}
        failures: list[BaseException] = []
        for (slot, _), result in zip(pending, results):
            if isinstance(result, BaseException):
                failures.append(result)
            else:
                urls[slot.name] = result

        if not failures:
            return urls

        await self.release(user_id, urls.keys(), compensate=compensate)
        first = failures[0]
        if not isinstance(first, AttachmentStoreError):
            raise first
        logger.error("Attachment upload for user %s failed: %s", user_id, first)
        raise UploadFailedError(f"Attachment upload failed: {first}") from first

    async def release(
        self, user_id: str, slot_names: Iterable[str], *, compensate: bool
    ) -> None:
        """Deal with attachments that no persisted record will reference.

        Without *compensate* the paths are only logged so operators can
        reconcile them; with it they are deleted from the store.
        """
        paths = [object_path(user_id, self.category, name) for name in slot_names]
        if not paths:
            return
        if not compensate:
            logger.warning("Orphaned attachments left in store: %s", ", ".join(paths))
            return
        try:
            await self._store.delete(paths)
        except AttachmentStoreError as exc:
            logger.error(
                "Failed to remove orphaned attachments %s: %s", ", ".join(paths), exc
            )
            return
        logger.info("Removed orphaned attachments: %s", ", ".join(paths))

    async def _put(self, user_id: str, slot: AttachmentSlot, data: bytes) -> str:
        path = object_path(user_id, self.category, slot.name)
        await self._store.put(path, data, slot.content_type, overwrite=True)
        logger.debug("Stored attachment %s (%d bytes)", path, len(data))
        return self._store.public_url(path)
