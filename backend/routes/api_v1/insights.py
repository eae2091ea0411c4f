"""GET /api/v1/insights/*: top picks, insider report and smart signals."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from core.dependencies import get_db_session
from core.errors import success_envelope
from insights.top_picks import DEFAULT_MIN_AGREE
from services.insights_service import get_insider_report, get_smart_signals, get_top_picks

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("/top-picks", summary="Horses several models agree on")
async def top_picks(
    date: Optional[dt.date] = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    min_agree: int = Query(default=DEFAULT_MIN_AGREE, description="Clamped to 1..5"),
    min_prob: float = Query(default=0.0, ge=0.0, le=1.0),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    day = date.isoformat() if date else None
    data = await get_top_picks(session, settings.timezone, day, min_agree=min_agree, min_prob=min_prob)
    return success_envelope(data)


@router.get("/insider", summary="Course specialists, trainer intent and market alerts")
async def insider(
    date: Optional[dt.date] = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    day = date.isoformat() if date else None
    return success_envelope(await get_insider_report(session, settings.timezone, day))


@router.get("/smart-signals", summary="Market movers backed by models or trainer intent")
async def smart_signals(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    return success_envelope(await get_smart_signals(session, settings.timezone))
