"""Shortlist retrieval with upcoming/past classification."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from core.identity import AuthenticatedUser
from insights.race_time import is_race_upcoming, local_now, parse_off_time
from models.shortlist import ShortlistEntry
from repositories.shortlist_repo import ShortlistRepository

logger = logging.getLogger(__name__)

STATUS_UPCOMING = "upcoming"
STATUS_PAST = "past"
SORT_FIELDS = ("race_time", "created_at")


def _local_date(value: datetime, tz: str):
    # SQLite returns naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz)).date()


def classify_entry(entry: ShortlistEntry, now: datetime, tz: str) -> str:
    """``past`` for rows added yesterday or whose race has gone off, else ``upcoming``."""
    if entry.created_at is not None:
        yesterday = now.date() - timedelta(days=1)
        if _local_date(entry.created_at, tz) == yesterday:
            return STATUS_PAST
    if parse_off_time(entry.race_time) is None:
        return STATUS_UPCOMING
    return STATUS_UPCOMING if is_race_upcoming(entry.race_time, now) else STATUS_PAST


async def get_shortlist(
    session: AsyncSession,
    user: AuthenticatedUser,
    tz: str,
    status: Optional[str] = None,
    sort_by: str = "created_at",
    descending: bool = True,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """The caller's shortlist, each row tagged with ``race_status``."""
    now = now or local_now(tz)
    rows = await ShortlistRepository(session).list_for_user(user.id, sort_by=sort_by, descending=descending)

    entries: List[Dict[str, Any]] = []
    counts = {STATUS_UPCOMING: 0, STATUS_PAST: 0}
    for row in rows:
        race_status = classify_entry(row, now, tz)
        counts[race_status] += 1
        if status and race_status != status:
            continue
        item = row.to_dict()
        item["race_status"] = race_status
        entries.append(item)

    logger.info(
        "Shortlist for %s: %d upcoming, %d past", user.id, counts[STATUS_UPCOMING], counts[STATUS_PAST]
    )
    return {
        "entries": entries,
        "counts": {**counts, "total": len(rows)},
    }
