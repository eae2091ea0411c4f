from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bankroll import Bankroll
from .base import BaseRepository


class BankrollRepository(BaseRepository[Bankroll]):
    """Repository for user bankrolls."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_for_user(self, user_id: str) -> Optional[Bankroll]:
        stmt = select(Bankroll).where(Bankroll.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def adjust(self, bankroll: Bankroll, delta: float) -> Bankroll:
        """Add ``delta`` (negative to deduct) and flush."""
        bankroll.current_amount = float(bankroll.current_amount) + float(delta)
        bankroll.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return bankroll
