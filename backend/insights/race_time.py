"""
Race off-time handling.

Off-times are stored as ``HH:MM`` on a 12-hour clock without a meridiem, so an
afternoon race at 1:30pm is stored as ``01:30``. The stored hour is mapped to a
24-hour hour by normalize_race_hour(): hours 1-9 are taken as PM, hours 10-12
as morning/noon, and 0 or 13+ are left untouched. This is a heuristic: a real
race before 1am, or a 24-hour value below 10, is mis-ordered. Every ordering
and upcoming/past decision goes through this module so the rule can be swapped
in one place.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Europe/London"

# Stored hours in this inclusive range are afternoon/evening races.
PM_HOUR_RANGE: Tuple[int, int] = (1, 9)


def normalize_race_hour(hour: int) -> int:
    """Map a stored hour to a 24-hour hour using the PM heuristic."""
    low, high = PM_HOUR_RANGE
    if low <= hour <= high:
        return hour + 12
    return hour


def parse_off_time(off_time: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into ``(hour, minute)`` as stored."""
    if not off_time:
        return None
    parts = str(off_time).strip()[:5].split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def race_time_to_minutes(off_time: Optional[str]) -> int:
    """Minutes since midnight after the PM adjustment; unparseable -> 0."""
    parsed = parse_off_time(off_time)
    if parsed is None:
        return 0
    hour, minute = parsed
    return normalize_race_hour(hour) * 60 + minute


def compare_race_times(a: Optional[str], b: Optional[str]) -> int:
    """Comparator for off-times (negative when ``a`` runs first)."""
    return race_time_to_minutes(a) - race_time_to_minutes(b)


def format_race_time(off_time: Optional[str]) -> str:
    """Adjusted 24-hour ``HH:MM`` for display; empty for unparseable input."""
    parsed = parse_off_time(off_time)
    if parsed is None:
        return ""
    hour, minute = parsed
    return f"{normalize_race_hour(hour):02d}:{minute:02d}"


def _minutes_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def is_race_upcoming(off_time: Optional[str], now: datetime) -> bool:
    """True when the adjusted off-time is later than ``now``'s time of day."""
    if parse_off_time(off_time) is None:
        return False
    return race_time_to_minutes(off_time) > _minutes_of_day(now)


def local_now(tz: str = DEFAULT_TIMEZONE) -> datetime:
    """Current time in the racing timezone (aware)."""
    return datetime.now(ZoneInfo(tz))


def local_today(tz: str = DEFAULT_TIMEZONE) -> str:
    """Current date in the racing timezone as ``YYYY-MM-DD``."""
    return local_now(tz).date().isoformat()


def race_start(race_date: Optional[str], off_time: Optional[str], tz: str = DEFAULT_TIMEZONE) -> Optional[datetime]:
    """Aware start datetime of a race from its date and stored off-time."""
    parsed = parse_off_time(off_time)
    if parsed is None or not race_date:
        return None
    try:
        day = date.fromisoformat(race_date)
    except ValueError:
        return None
    hour, minute = parsed
    return datetime(day.year, day.month, day.day, normalize_race_hour(hour), minute, tzinfo=ZoneInfo(tz))
