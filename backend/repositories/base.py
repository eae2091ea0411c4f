from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD helpers.

    No commits are performed here - commit responsibility is left to the
    service layer.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with an async session."""
        self.session = session

    async def add(self, entity: T) -> T:
        """Add an entity to the session and flush so generated keys are set."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get_by_id(self, model: Type[T], key: str | int) -> Optional[T]:
        """Row of ``model`` with primary key ``key`` (identity map first)."""
        return await self.session.get(model, key)

    async def delete(self, entity: T) -> None:
        """Delete an entity and flush (not committed)."""
        await self.session.delete(entity)
        await self.session.flush()
