"""Record registrar — the create/update protocol shared by all record kinds.

Create runs, in order and without backtracking:
  1. uniqueness check on the natural key (and on user_id)
  2. attachment upload
  3. insert of ``{**fields, **uploaded_urls}``

Update skips step 1 and writes a patch keyed by user_id. Any failure aborts
the remaining steps. Uploads and the store write are not atomic: attachments
written before a later failure are logged as orphans, and on create they can
be deleted as a compensating step (COMPENSATE_ORPHANED_ATTACHMENTS).

Rule: No FastAPI here. Subclasses only declare what they register.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.attachments import validate_user_id
from app.core.config import settings
from app.core.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    StoreUnavailableError,
    StoreWriteFailedError,
    ValidationError,
)
from app.db.base import Base
from app.repositories.base import BaseRepository
from app.services.uniqueness import UniquenessGuard
from app.services.uploader import AttachmentUploader
from app.storage.base import AttachmentStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

_MANAGED_COLUMNS = {"created_at", "updated_at"}


class RecordRegistrar(Generic[ModelT]):
    entity_name: str
    repository_class: type[BaseRepository[ModelT]]
    natural_key: str
    category: str
    duplicate_message: str

    def __init__(
        self,
        session: AsyncSession,
        store: AttachmentStore,
        *,
        key_mutable_on_update: bool | None = None,
        compensate_orphans: bool | None = None,
    ):
        self._repo = self.repository_class(session)
        self._guard = UniquenessGuard(self._repo)
        self._uploader = AttachmentUploader(store, self.category)
        self._key_mutable = (
            settings.natural_key_mutable_on_update
            if key_mutable_on_update is None
            else key_mutable_on_update
        )
        self._compensate = (
            settings.compensate_orphaned_attachments
            if compensate_orphans is None
            else compensate_orphans
        )

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def list_all(self) -> list[ModelT]:
        try:
            return await self._repo.list_all()
        except SQLAlchemyError as exc:
            logger.error("Listing %s records failed: %s", self.entity_name, exc)
            raise StoreUnavailableError(f"Could not list {self.entity_name} records") from exc

    async def get(self, user_id: str) -> ModelT:
        try:
            row = await self._repo.get_by_key(user_id)
        except SQLAlchemyError as exc:
            logger.error("Fetching %s %s failed: %s", self.entity_name, user_id, exc)
            raise StoreUnavailableError(f"Could not fetch {self.entity_name} '{user_id}'") from exc
        if row is None:
            raise NotFoundError(self.entity_name, user_id)
        return row

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self,
        fields: Mapping[str, Any],
        files: Mapping[str, bytes | None] | None = None,
    ) -> ModelT:
        self._check_fields(fields)
        user_id = validate_user_id(fields.get("user_id"))
        key_value = fields.get(self.natural_key)
        if key_value is None or key_value == "":
            raise ValidationError(f"{self.natural_key} is required")

        if not await self._guard.is_available(self.natural_key, key_value):
            logger.info(
                "Rejected %s create: %s already registered", self.entity_name, self.natural_key
            )
            raise DuplicateKeyError(self.duplicate_message)
        if not await self._guard.is_available("user_id", user_id):
            logger.info("Rejected %s create: user_id %s exists", self.entity_name, user_id)
            raise DuplicateKeyError(self._user_id_message(user_id))

        urls = await self._uploader.upload(files or {}, user_id, compensate=self._compensate)

        try:
            return await self._repo.create(**{**fields, **urls})
        except IntegrityError as exc:
            # A saved row with this user_id shares the attachment paths: never delete them
            user_id_taken = await self._user_id_taken(user_id)
            await self._uploader.release(
                user_id, urls, compensate=self._compensate and not user_id_taken
            )
            logger.info("%s insert hit an integrity constraint: %s", self.entity_name, exc.orig)
            if user_id_taken:
                raise DuplicateKeyError(self._user_id_message(user_id)) from exc
            if await self._key_held_by_other(key_value, user_id):
                raise DuplicateKeyError(self.duplicate_message) from exc
            raise StoreWriteFailedError(f"Could not save {self.entity_name}") from exc
        except SQLAlchemyError as exc:
            await self._uploader.release(user_id, urls, compensate=self._compensate)
            logger.error("%s insert failed: %s", self.entity_name, exc)
            raise StoreWriteFailedError(f"Could not save {self.entity_name}") from exc

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update(
        self,
        user_id: str,
        fields: Mapping[str, Any],
        files: Mapping[str, bytes | None] | None = None,
    ) -> ModelT:
        """Patch the record for *user_id*; slots without a new file are left as they are.

        Updates are never compensated: the blob path is the one the stored
        record already points at, so its previous content is gone either way.
        """
        self._check_fields(fields, partial=True)
        validate_user_id(user_id)
        patch = {k: v for k, v in fields.items() if k != "user_id"}

        if not self._key_mutable and self.natural_key in patch:
            current = await self.get(user_id)
            if getattr(current, self.natural_key) != patch[self.natural_key]:
                raise ValidationError(f"{self.natural_key} cannot be changed once registered")

        urls = await self._uploader.upload(files or {}, user_id)
        patch.update(urls)
        if not patch:
            return await self.get(user_id)

        try:
            row = await self._repo.update(user_id, **patch)
        except IntegrityError as exc:
            await self._uploader.release(user_id, urls, compensate=False)
            logger.info("%s update hit an integrity constraint: %s", self.entity_name, exc.orig)
            if await self._key_held_by_other(patch.get(self.natural_key), user_id):
                raise DuplicateKeyError(self.duplicate_message) from exc
            raise StoreWriteFailedError(f"Could not update {self.entity_name} '{user_id}'") from exc
        except SQLAlchemyError as exc:
            await self._uploader.release(user_id, urls, compensate=False)
            logger.error("%s update for %s failed: %s", self.entity_name, user_id, exc)
            raise StoreWriteFailedError(f"Could not update {self.entity_name} '{user_id}'") from exc

        if row is None:
            await self._uploader.release(user_id, urls, compensate=False)
            raise NotFoundError(self.entity_name, user_id)
        return row

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _user_id_message(self, user_id: str) -> str:
        return f"{self.entity_name} already registered for user_id '{user_id}'"

    async def _user_id_taken(self, user_id: str) -> bool:
        """Whether a saved row owns *user_id*. Unknown counts as taken."""
        try:
            return await self._repo.get_by_key(user_id) is not None
        except SQLAlchemyError as exc:
            logger.error("Re-reading %s %s failed: %s", self.entity_name, user_id, exc)
            return True

    async def _key_held_by_other(self, key_value: Any, user_id: str) -> bool:
        if key_value is None:
            return False
        try:
            holder = await self._repo.find_one(**{self.natural_key: key_value})
        except SQLAlchemyError as exc:
            logger.error("Re-reading %s by %s failed: %s", self.entity_name, self.natural_key, exc)
            return False
        return holder is not None and holder.user_id != user_id

    def _check_fields(self, fields: Mapping[str, Any], *, partial: bool = False) -> None:
        table = self.repository_class.model.__table__
        columns = set(table.columns.keys()) - _MANAGED_COLUMNS
        unknown = sorted(set(fields) - columns)
        if unknown:
            raise ValidationError(
                f"Unknown {self.entity_name} field(s): {', '.join(unknown)}"
            )
        if partial:
            cleared = sorted(
                name for name, value in fields.items()
                if value is None and name != "user_id" and not table.columns[name].nullable
            )
            if cleared:
                raise ValidationError(f"{', '.join(cleared)} cannot be empty")
