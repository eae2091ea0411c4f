"""SQLAlchemy models for the racing store.

The tables are owned by the hosted relational database; these mappings only
describe the columns this backend reads and writes.
"""

from .base import Base
from .bankroll import Bankroll
from .bet import Bet
from .market_movement import MarketMovementChange
from .race import Race
from .race_entry import RaceEntry
from .shortlist import ShortlistEntry

__all__ = [
    "Base",
    "Bankroll",
    "Bet",
    "MarketMovementChange",
    "Race",
    "RaceEntry",
    "ShortlistEntry",
]
