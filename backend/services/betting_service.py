"""Bet placement, cancellation and race settlement with bankroll accounting."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.errors import ConflictError, NotFoundError, RequestValidationFailed
from core.identity import AuthenticatedUser
from insights.odds import parse_odds_to_decimal
from insights.race_time import local_today
from models.bet import BET_STATUS_LOST, BET_STATUS_PENDING, BET_STATUS_WON, Bet
from repositories.race_repo import RaceRepository
from .unit_of_work import BetLedgerUnitOfWork

logger = logging.getLogger(__name__)

BET_TYPE_WIN = "win"

# checked in order; the first blank one is reported
REQUIRED_FIELDS = ("horse_id", "horse_name", "race_id", "course", "off_time")


@dataclass
class BetRequest:
    """Validated bet slip as received from the client."""

    horse_name: str
    race_id: str
    course: str
    off_time: str
    bet_amount: float
    horse_id: Optional[str] = None
    trainer_name: str = ""
    jockey_name: str = ""
    current_odds: str = ""
    odds: Optional[float] = None


def resolve_decimal_odds(request: BetRequest) -> Optional[float]:
    """Explicit decimal odds, else parsed from the displayed price."""
    if request.odds is not None and request.odds > 0:
        return float(request.odds)
    return parse_odds_to_decimal(request.current_odds)


async def place_bet(
    uow: BetLedgerUnitOfWork,
    user: AuthenticatedUser,
    request: BetRequest,
    tz: str,
) -> Dict[str, Any]:
    """Insert a pending win bet and deduct its stake from the bankroll."""
    for name in REQUIRED_FIELDS:
        value = getattr(request, name)
        if value is None or not str(value).strip():
            raise RequestValidationFailed(f"Missing required field: {name}")
    if (
        request.bet_amount is None
        or not math.isfinite(request.bet_amount)
        or request.bet_amount <= 0
    ):
        raise RequestValidationFailed("bet_amount must be a finite number greater than 0")
    if request.odds is not None and not math.isfinite(request.odds):
        raise RequestValidationFailed("odds must be a finite number")

    bankroll = await uow.bankrolls.get_for_user(user.id)
    if bankroll is None:
        raise NotFoundError(
            "No bankroll found for user", code="BANKROLL_NOT_FOUND"
        )

    odds = resolve_decimal_odds(request)
    potential_return = round(request.bet_amount * odds, 2) if odds else None

    bet = Bet(
        user_id=user.id,
        race_id=request.race_id,
        race_date=local_today(tz),
        course=request.course,
        off_time=request.off_time,
        horse_id=request.horse_id,
        horse_name=request.horse_name,
        trainer_name=request.trainer_name or "",
        jockey_name=request.jockey_name or "",
        current_odds=request.current_odds or "",
        odds=odds,
        bet_amount=float(request.bet_amount),
        bet_type=BET_TYPE_WIN,
        status=BET_STATUS_PENDING,
        potential_return=potential_return,
        created_at=datetime.now(timezone.utc),
    )
    await uow.bets.create(bet)

    deducted = await uow.apply_secondary(
        f"deduct {request.bet_amount} from bankroll of {user.id}",
        lambda: uow.bankrolls.adjust(bankroll, -request.bet_amount),
    )
    await uow.commit()

    logger.info("Bet %s placed by %s: %s on %s", bet.id, user.id, request.bet_amount, request.horse_name)
    return {
        "bet": bet.to_dict(),
        "bankroll_updated": deducted,
        "new_bankroll": float(bankroll.current_amount) if deducted else None,
    }


async def cancel_bet(
    uow: BetLedgerUnitOfWork,
    user: AuthenticatedUser,
    bet_id: int,
) -> Dict[str, Any]:
    """Delete a pending bet owned by ``user`` and refund its stake."""
    bet = await uow.bets.get_for_user(bet_id, user.id)
    if bet is None:
        raise NotFoundError("Bet not found", code="BET_NOT_FOUND")
    if bet.status != BET_STATUS_PENDING:
        raise ConflictError("Can only cancel pending bets", code="BET_NOT_CANCELLABLE")

    refund = float(bet.bet_amount)
    cancelled = bet.to_dict()
    await uow.bets.delete(bet)

    bankroll = await uow.bankrolls.get_for_user(user.id)
    refunded = False
    if bankroll is None:
        logger.warning("No bankroll for %s, bet %s cancelled without refund", user.id, bet_id)
    else:
        refunded = await uow.apply_secondary(
            f"refund {refund} to bankroll of {user.id}",
            lambda: uow.bankrolls.adjust(bankroll, refund),
        )
    await uow.commit()

    logger.info("Bet %s cancelled by %s, refund %s", bet_id, user.id, refund)
    return {
        "bet": cancelled,
        "refund_amount": refund,
        "bankroll_updated": refunded,
        "new_bankroll": float(bankroll.current_amount) if refunded else None,
    }


async def settle_race(
    uow: BetLedgerUnitOfWork,
    race_id: str,
    winner_horse_id: str,
) -> Dict[str, Any]:
    """Settle the pending bets of a finished race and pay out the winners.

    Bets on ``winner_horse_id`` become ``won`` and credit their
    ``potential_return``; every other pending bet becomes ``lost``. Payouts
    are secondary writes, so a failed credit follows the unit of work's
    policy.
    """
    winner = (winner_horse_id or "").strip()
    if not winner:
        raise RequestValidationFailed("Missing required field: winner_horse_id")
    if await RaceRepository(uow.session).get(race_id) is None:
        raise NotFoundError(f"Race {race_id} not found", code="RACE_NOT_FOUND")

    bets = await uow.bets.list_pending_for_race(race_id)
    won: List[Bet] = []
    lost: List[Bet] = []
    for bet in bets:
        if str(bet.horse_id).strip() == winner:
            await uow.bets.set_status(bet, BET_STATUS_WON)
            won.append(bet)
        else:
            await uow.bets.set_status(bet, BET_STATUS_LOST)
            lost.append(bet)

    payouts: List[Dict[str, Any]] = []
    for bet in won:
        amount = bet.potential_return
        if amount is None:
            logger.warning("Bet %s won without potential_return, no payout", bet.id)
            continue
        # re-read per bet: a rolled-back savepoint expires the row
        bankroll = await uow.bankrolls.get_for_user(bet.user_id)
        if bankroll is None:
            logger.warning("No bankroll for %s, bet %s settled without payout", bet.user_id, bet.id)
            credited = False
        else:
            credited = await uow.apply_secondary(
                f"pay {amount} to bankroll of {bet.user_id}",
                lambda bankroll=bankroll, amount=amount: uow.bankrolls.adjust(bankroll, amount),
            )
        payouts.append(
            {"bet_id": bet.id, "user_id": bet.user_id, "amount": float(amount), "bankroll_updated": credited}
        )
    await uow.commit()

    total_paid_out = round(sum(p["amount"] for p in payouts if p["bankroll_updated"]), 2)
    logger.info(
        "Race %s settled: winner %s, %d won, %d lost, paid out %s",
        race_id, winner, len(won), len(lost), total_paid_out,
    )
    return {
        "race_id": race_id,
        "winner_horse_id": winner,
        "bets_settled": len(won) + len(lost),
        "won": [b.to_dict() for b in won],
        "lost": [b.to_dict() for b in lost],
        "payouts": payouts,
        "total_paid_out": total_paid_out,
    }
