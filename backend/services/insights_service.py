"""Race probabilities and the AI insight feeds (top picks, insider, smart signals)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError
from insights.course_specialists import find_course_specialists
from insights.market_alerts import find_market_alerts, supported
from insights.normalize import (
    ENSEMBLE_FIELD,
    format_normalized,
    get_normalized_color,
    get_normalized_stars,
    normalize_all_models,
)
from insights.odds import decimal_to_fractional
from insights.race_time import format_race_time, local_now
from insights.smart_signals import STRENGTH_STRONG, build_smart_signals
from insights.top_picks import DEFAULT_MIN_AGREE, find_top_picks
from insights.trainer_intent import find_trainer_intents
from repositories.race_entry_repo import RaceEntryRepository
from repositories.race_repo import RaceRepository
from .market_mover_service import get_market_movers, resolve_day

logger = logging.getLogger(__name__)


async def get_race_probabilities(session: AsyncSession, race_id: str) -> Dict[str, Any]:
    """Every runner of a race with each model's score normalized across the field."""
    race = await RaceRepository(session).get(race_id)
    if race is None:
        raise NotFoundError(f"Race {race_id} not found", code="RACE_NOT_FOUND")
    entries = await RaceEntryRepository(session).list_by_race(race_id)
    normalized = normalize_all_models(entries)

    runners = []
    for entry in entries:
        horse_id = str(entry.horse_id)
        ensemble = normalized[ENSEMBLE_FIELD].get(horse_id, 0.0)
        runners.append(
            {
                "horse_id": horse_id,
                "horse_name": entry.horse_name,
                "number": entry.number,
                "trainer_name": entry.trainer_name,
                "jockey_name": entry.jockey_name,
                "current_odds": entry.current_odds,
                "current_odds_display": decimal_to_fractional(entry.current_odds),
                "normalized": {field: values.get(horse_id, 0.0) for field, values in normalized.items()},
                "normalized_ensemble": ensemble,
                "display": format_normalized(ensemble),
                "color": get_normalized_color(ensemble),
                "stars": get_normalized_stars(ensemble),
            }
        )
    runners.sort(key=lambda r: r["normalized_ensemble"], reverse=True)

    return {
        "race_id": race.race_id,
        "course_name": race.course_name,
        "off_time": race.off_time,
        "off_time_24h": format_race_time(race.off_time),
        "field_size": len(entries),
        "runners": runners,
    }


async def get_top_picks(
    session: AsyncSession,
    tz: str,
    day: Optional[str] = None,
    min_agree: int = DEFAULT_MIN_AGREE,
    min_prob: float = 0.0,
) -> Dict[str, Any]:
    day = resolve_day(day, tz)
    races = await RaceRepository(session).list_by_date(day)
    entries = await RaceEntryRepository(session).list_by_races(r.race_id for r in races)
    picks = find_top_picks(races, entries, min_agree=min_agree, min_prob=min_prob)
    logger.info("Top picks for %s: %d from %d races", day, len(picks), len(races))
    return {
        "date": day,
        "picks": [p.to_dict() for p in picks],
        "total": len(picks),
        "races_analyzed": len(races),
    }


async def get_insider_report(
    session: AsyncSession, tz: str, day: Optional[str] = None
) -> Dict[str, Any]:
    """Course specialists, single-runner trainers and market alerts from ``day`` on."""
    day = resolve_day(day, tz)
    races = await RaceRepository(session).list_from_date(day)
    entries = await RaceEntryRepository(session).list_by_races(r.race_id for r in races)

    specialists = find_course_specialists(races, entries)
    intents = find_trainer_intents(races, entries)
    alerts = find_market_alerts(races, entries)
    logger.info(
        "Insider report from %s: %d specialists, %d intents, %d alerts",
        day, len(specialists), len(intents), len(alerts),
    )
    return {
        "course_specialists": [s.to_dict() for s in specialists],
        "trainer_intents": [i.to_dict() for i in intents],
        "market_alerts": [a.to_dict() for a in alerts],
        "summary": {
            "total_specialists": len(specialists),
            "total_trainer_intents": len(intents),
            "total_alerts": len(alerts),
            "total_market_support": len(supported(alerts)),
            "last_updated": datetime.now(timezone.utc).isoformat(),
        },
    }


async def get_smart_signals(
    session: AsyncSession,
    tz: str,
    day: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    day = resolve_day(day, tz)
    now = now or local_now(tz)
    report = await get_market_movers(session, tz, day)

    races = await RaceRepository(session).list_by_date(day)
    entries = await RaceEntryRepository(session).list_by_races(r.race_id for r in races)
    signals = build_smart_signals(report.market_movers, races, entries, now, tz)
    strong = sum(1 for s in signals if s.signal_strength == STRENGTH_STRONG)
    logger.info("Smart signals for %s: %d (%d strong)", day, len(signals), strong)
    return {
        "signals": [s.to_dict() for s in signals],
        "total": len(signals),
        "strong_count": strong,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
