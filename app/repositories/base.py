"""Generic async repository keyed by the caller-supplied ``user_id``.

This is the record store client used by the services: single-row lookup by
arbitrary equality filters, full listing, insert and keyed update. SQLAlchemy
errors propagate unchanged; services decide how to classify them.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. Writes commit immediately."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def find_one(self, **filters: Any) -> ModelT | None:
        """Return at most one row matching all equality *filters*."""
        q = select(self.model)
        for col_name, value in filters.items():
            q = q.where(getattr(self.model, col_name) == value)
        result = await self._session.execute(q.limit(1))
        return result.scalars().first()

    async def get_by_key(self, user_id: str) -> ModelT | None:
        return await self.find_one(user_id=user_id)

    async def list_all(self) -> list[ModelT]:
        result = await self._session.execute(
            select(self.model).order_by(self.model.created_at)
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        self._session.add(instance)
        try:
            await self._session.flush()
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        await self._session.refresh(instance)
        return instance

    async def update(self, user_id: str, **kwargs: Any) -> ModelT | None:
        """Apply *kwargs* to the row for *user_id*; None when no row matched."""
        from datetime import datetime, timezone

        kwargs.pop("user_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self._session.execute(
                update(self.model)
                .where(self.model.user_id == user_id)
                .values(**kwargs)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self._session.rollback()
                return None
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        instance = await self.get_by_key(user_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance
