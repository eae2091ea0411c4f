"""GET/POST /api/v1/market-movers: today's steaming horses."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from core.dependencies import get_db_session
from core.errors import success_envelope
from services.market_mover_service import get_market_movers

router = APIRouter(prefix="/market-movers", tags=["market-movers"])


@router.api_route("", methods=["GET", "POST"], summary="Market movers for a day")
async def market_movers(
    date: Optional[dt.date] = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Horses shortening by at least 10%, one row per horse and race, plus a per-race view."""
    day = date.isoformat() if date else None
    report = await get_market_movers(session, settings.timezone, day)
    return success_envelope(report.to_dict())
