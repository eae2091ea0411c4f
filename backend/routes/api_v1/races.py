"""Per-race endpoints: normalized probabilities and result settlement."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from core.dependencies import get_db_session, require_service_key
from core.errors import success_envelope
from services.betting_service import settle_race
from services.insights_service import get_race_probabilities
from services.unit_of_work import BetLedgerUnitOfWork
from .bets import get_bet_ledger

router = APIRouter(prefix="/races", tags=["races"])


class SettleRaceBody(BaseModel):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={"example": {"winner_horse_id": "hrs_123"}},
    )

    winner_horse_id: str = Field(..., min_length=1)


@router.get("/{race_id}/probabilities", summary="Normalized win probabilities")
async def race_probabilities(
    race_id: str,
    session: AsyncSession = Depends(get_db_session),
):
    return success_envelope(await get_race_probabilities(session, race_id))


@router.post(
    "/{race_id}/settle",
    summary="Settle pending bets once the result is known",
    dependencies=[Depends(require_service_key)],
)
async def post_settle_race(
    race_id: str,
    body: SettleRaceBody,
    uow: BetLedgerUnitOfWork = Depends(get_bet_ledger),
):
    """Winning bets are paid ``potential_return``; the rest are marked lost."""
    result = await settle_race(uow, race_id, body.winner_horse_id)
    return success_envelope(result, message="Race results processed successfully")
