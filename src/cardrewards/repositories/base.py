"""Base repository with generic CRUD operations."""
from datetime import date, datetime, time, timezone
from typing import Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


def day_start(day: date) -> datetime:
    """Midnight UTC at the start of `day`."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class BaseRepository(Generic[T]):
    """Generic repository for soft-deletable models."""

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: UUID, include_deleted: bool = False) -> T | None:
        """Get a single record by ID. Soft-deleted rows are hidden by default."""
        query = select(self.model).where(self.model.id == id)
        if not include_deleted:
            query = query.where(self.model.deleted_at.is_(None))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(self, id: UUID, data: dict) -> T | None:
        """Update a record by ID with provided data. Unknown keys are ignored."""
        obj = await self.get_by_id(id)
        if not obj:
            return None

        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def soft_delete(self, id: UUID) -> bool:
        """Soft delete a record by setting deleted_at."""
        obj = await self.get_by_id(id)
        if not obj:
            return False

        obj.mark_deleted()
        await self.db.commit()
        return True
