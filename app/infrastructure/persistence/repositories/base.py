"""Base repository: generic lookups and flush-on-write for ORM models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id and create.

    Writes are flushed, never committed: the application service commits the
    unit of work. Reads use populate_existing so rows changed by bulk UPDATE
    statements in the same session are never served stale from the identity map.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record (flush, then refresh server defaults)."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
