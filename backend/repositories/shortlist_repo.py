from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.shortlist import ShortlistEntry
from .base import BaseRepository

_SORTABLE = {
    "race_time": ShortlistEntry.race_time,
    "created_at": ShortlistEntry.created_at,
    "horse_name": ShortlistEntry.horse_name,
}


class ShortlistRepository(BaseRepository[ShortlistEntry]):
    """Repository for shortlist rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_user(
        self, user_id: str, sort_by: str = "created_at", descending: bool = True
    ) -> List[ShortlistEntry]:
        column = _SORTABLE.get(sort_by, ShortlistEntry.created_at)
        order = column.desc() if descending else column.asc()
        stmt = (
            select(ShortlistEntry)
            .where(ShortlistEntry.user_id == user_id)
            .order_by(order, ShortlistEntry.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
