from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bet import BET_STATUS_PENDING, Bet
from .base import BaseRepository


class BetRepository(BaseRepository[Bet]):
    """Repository for Bet entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def create(self, bet: Bet) -> Bet:
        """Insert a bet; its id is available on return."""
        return await self.add(bet)

    async def get_for_user(self, bet_id: int, user_id: str) -> Optional[Bet]:
        """Bet ``bet_id`` if it belongs to ``user_id``."""
        stmt = select(Bet).where(Bet.id == bet_id).where(Bet.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending_for_race(self, race_id: str) -> List[Bet]:
        """Pending bets on ``race_id`` in placement order."""
        stmt = (
            select(Bet)
            .where(Bet.race_id == race_id)
            .where(Bet.status == BET_STATUS_PENDING)
            .order_by(Bet.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_status(self, bet: Bet, status: str) -> Bet:
        bet.status = status
        await self.session.flush()
        return bet
