"""Repository layer for DB access only (CRUD + simple queries).

Repositories operate on the models in backend/models/ and contain no business
logic. All repositories accept an AsyncSession explicitly and never commit.
"""

from .base import BaseRepository
from .bankroll_repo import BankrollRepository
from .bet_repo import BetRepository
from .market_movement_repo import MarketMovementRepository
from .race_entry_repo import RaceEntryRepository
from .race_repo import RaceRepository
from .shortlist_repo import ShortlistRepository

__all__ = [
    "BaseRepository",
    "BankrollRepository",
    "BetRepository",
    "MarketMovementRepository",
    "RaceEntryRepository",
    "RaceRepository",
    "ShortlistRepository",
]
