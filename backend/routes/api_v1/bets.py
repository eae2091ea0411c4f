"""POST /api/v1/bets/place and /api/v1/bets/cancel."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from core.dependencies import get_current_user, get_db_session
from core.errors import success_envelope
from core.identity import AuthenticatedUser
from services.betting_service import BetRequest, cancel_bet, place_bet
from services.unit_of_work import BetLedgerUnitOfWork, PartialFailurePolicy

router = APIRouter(prefix="/bets", tags=["bets"])


class PlaceBetBody(BaseModel):
    """Body for POST /bets/place. ``horse_id`` comes from the race card."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "horse_id": "hrs_123",
                "horse_name": "Sea The Stars",
                "race_id": "rac_456",
                "course": "Ascot",
                "off_time": "02:30",
                "trainer_name": "J Oxx",
                "jockey_name": "M Kinane",
                "current_odds": "4/1",
                "odds": 5.0,
                "bet_amount": 10,
            }
        }
    )

    horse_name: str = Field(..., min_length=1)
    race_id: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    off_time: str = Field(..., min_length=1)
    bet_amount: float = Field(..., gt=0, allow_inf_nan=False)
    horse_id: Optional[str] = None
    trainer_name: str = ""
    jockey_name: str = ""
    current_odds: str = ""
    odds: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Decimal odds; parsed from current_odds when omitted",
    )


class CancelBetBody(BaseModel):
    bet_id: int


def get_bet_ledger(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> BetLedgerUnitOfWork:
    return BetLedgerUnitOfWork(session, PartialFailurePolicy.parse(settings.bankroll_write_policy))


@router.post("/place", summary="Place a win bet and deduct the stake")
async def post_place_bet(
    body: PlaceBetBody,
    user: AuthenticatedUser = Depends(get_current_user),
    uow: BetLedgerUnitOfWork = Depends(get_bet_ledger),
    settings: Settings = Depends(get_settings),
):
    result = await place_bet(uow, user, BetRequest(**body.model_dump()), settings.timezone)
    return success_envelope(result)


@router.post("/cancel", summary="Cancel a pending bet and refund the stake")
async def post_cancel_bet(
    body: CancelBetBody,
    user: AuthenticatedUser = Depends(get_current_user),
    uow: BetLedgerUnitOfWork = Depends(get_bet_ledger),
):
    """Only ``pending`` bets owned by the caller can be cancelled."""
    result = await cancel_bet(uow, user, body.bet_id)
    return success_envelope(result, message="Bet cancelled successfully")
