from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.race import Race
from .base import BaseRepository


class RaceRepository(BaseRepository[Race]):
    """Repository for Race entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_by_date(self, date: str) -> List[Race]:
        """List races run on ``date`` (YYYY-MM-DD)."""
        stmt = select(Race).where(Race.date == date)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_from_date(self, date: str) -> List[Race]:
        """List races on or after ``date``."""
        stmt = select(Race).where(Race.date >= date)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, race_id: str) -> Optional[Race]:
        return await self.get_by_id(Race, race_id)
