"""Natural-key uniqueness guard, consulted before a record is created."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StoreUnavailableError
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UniquenessGuard:
    """Read-only check that no row already holds a given key value.

    The check and the later insert are not atomic: two concurrent creates can
    both pass. The unique constraints on the tables catch the loser at insert.
    """

    def __init__(self, repository: BaseRepository):
        self._repo = repository

    async def is_available(self, key_field: str, key_value: Any) -> bool:
        try:
            existing = await self._repo.find_one(**{key_field: key_value})
        except SQLAlchemyError as exc:
            logger.error("Uniqueness lookup on %s failed: %s", key_field, exc)
            raise StoreUnavailableError(f"Could not verify {key_field}: record store unavailable") from exc
        return existing is None
