from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.market_movement import MarketMovementChange
from .base import BaseRepository


class MarketMovementRepository(BaseRepository[MarketMovementChange]):
    """Repository for the odds-change log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_between(
        self, start: datetime, end: datetime
    ) -> List[MarketMovementChange]:
        """Changes observed in ``[start, end)``, oldest first."""
        stmt = (
            select(MarketMovementChange)
            .where(MarketMovementChange.observed_at >= start)
            .where(MarketMovementChange.observed_at < end)
            .order_by(MarketMovementChange.observed_at, MarketMovementChange.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
