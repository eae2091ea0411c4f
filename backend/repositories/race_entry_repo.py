from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.race_entry import RaceEntry
from .base import BaseRepository


class RaceEntryRepository(BaseRepository[RaceEntry]):
    """Repository for RaceEntry entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_by_race(self, race_id: str) -> List[RaceEntry]:
        """Runners of one race, by saddle-cloth number."""
        stmt = (
            select(RaceEntry)
            .where(RaceEntry.race_id == race_id)
            .order_by(RaceEntry.number, RaceEntry.horse_name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_races(self, race_ids: Iterable[str]) -> List[RaceEntry]:
        ids = list(race_ids)
        if not ids:
            return []
        stmt = select(RaceEntry).where(RaceEntry.race_id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
