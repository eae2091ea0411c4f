"""
Bet + bankroll unit of work.

A bet write (insert or delete) is the primary write; the matching bankroll
adjustment is a secondary write. How a failed secondary write is treated is
an explicit policy:

- PARTIAL_FAILURE_TOLERANT: the secondary write runs in a savepoint. A storage
  failure rolls back only that savepoint, is logged as a warning, and the bet
  write is still committed. The bankroll may then disagree with the bet
  ledger.
- STRICT: the failure propagates and nothing is committed.
"""

from __future__ import annotations

import enum
import logging
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.bankroll_repo import BankrollRepository
from repositories.bet_repo import BetRepository

logger = logging.getLogger(__name__)


class PartialFailurePolicy(str, enum.Enum):
    PARTIAL_FAILURE_TOLERANT = "partial-failure-tolerant"
    STRICT = "strict"

    @classmethod
    def parse(cls, value: str) -> "PartialFailurePolicy":
        """Policy from its setting value; unknown values fall back to tolerant."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            logger.warning("Unknown bankroll write policy %r, using %s", value, cls.PARTIAL_FAILURE_TOLERANT.value)
            return cls.PARTIAL_FAILURE_TOLERANT


class BetLedgerUnitOfWork:
    """Groups the bet and bankroll writes of one request."""

    def __init__(
        self,
        session: AsyncSession,
        policy: PartialFailurePolicy = PartialFailurePolicy.PARTIAL_FAILURE_TOLERANT,
    ) -> None:
        self.session = session
        self.policy = policy
        self.bets = BetRepository(session)
        self.bankrolls = BankrollRepository(session)

    async def apply_secondary(
        self, description: str, operation: Callable[[], Awaitable[object]]
    ) -> bool:
        """Run ``operation`` as a secondary write.

        Returns True when it succeeded, False when it failed and the policy
        tolerated the failure.
        """
        await self.session.flush()
        try:
            async with self.session.begin_nested():
                await operation()
        except SQLAlchemyError as e:
            if self.policy is PartialFailurePolicy.STRICT:
                raise
            logger.warning("Secondary write failed (%s), keeping primary write: %s", description, e)
            return False
        return True

    async def commit(self) -> None:
        await self.session.commit()
