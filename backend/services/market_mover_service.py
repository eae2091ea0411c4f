"""Today's market movers from the odds-change log."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import RequestValidationFailed
from insights.market_movers import MarketMoverReport, build_market_mover_report
from insights.race_time import local_today
from repositories.market_movement_repo import MarketMovementRepository
from repositories.race_entry_repo import RaceEntryRepository
from repositories.race_repo import RaceRepository

logger = logging.getLogger(__name__)


def resolve_day(day: Optional[str], tz: str) -> str:
    """``day`` as a checked ``YYYY-MM-DD`` string; today in ``tz`` when empty."""
    if not day:
        return local_today(tz)
    try:
        return date.fromisoformat(day).isoformat()
    except ValueError:
        raise RequestValidationFailed(f"Invalid value for date: {day!r} is not a calendar date (YYYY-MM-DD)") from None


def local_day_bounds(day: str, tz: str) -> Tuple[datetime, datetime]:
    """UTC ``[start, end)`` of the local calendar day ``day`` (YYYY-MM-DD)."""
    calendar_day = date.fromisoformat(resolve_day(day, tz))
    start_local = datetime.combine(calendar_day, time.min, tzinfo=ZoneInfo(tz))
    end_local = start_local + timedelta(days=1)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


async def get_market_movers(
    session: AsyncSession, tz: str, day: Optional[str] = None
) -> MarketMoverReport:
    """Derive the movers of ``day`` (default: today in ``tz``)."""
    day = resolve_day(day, tz)
    start, end = local_day_bounds(day, tz)
    changes = await MarketMovementRepository(session).list_between(start, end)

    races = await RaceRepository(session).list_by_date(day)
    entries = await RaceEntryRepository(session).list_by_races(r.race_id for r in races)
    entries_by_horse = {str(e.horse_id): e for e in entries}

    report = build_market_mover_report(changes, entries_by_horse)
    logger.info(
        "Market movers for %s: %d changes -> %d movers in %d races",
        day, len(changes), len(report.market_movers), len(report.race_groups),
    )
    return report
