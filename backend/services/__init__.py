"""Services: orchestration of repositories and insight calculations."""

from .betting_service import BetRequest, cancel_bet, place_bet, settle_race
from .insights_service import (
    get_insider_report,
    get_race_probabilities,
    get_smart_signals,
    get_top_picks,
)
from .market_mover_service import get_market_movers
from .shortlist_service import get_shortlist
from .unit_of_work import BetLedgerUnitOfWork, PartialFailurePolicy

__all__ = [
    "BetLedgerUnitOfWork",
    "BetRequest",
    "PartialFailurePolicy",
    "cancel_bet",
    "get_insider_report",
    "get_market_movers",
    "get_race_probabilities",
    "get_shortlist",
    "get_smart_signals",
    "get_top_picks",
    "settle_race",
]
