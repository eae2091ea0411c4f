"""
Market-mover derivation: horses whose odds shortened ("steaming") by at least
MOVER_THRESHOLD_PCT during the day, grouped by race.

Rules:
- Only changes with direction == "in" count; "out" (drifting) never does.
- movement_pct = abs(change_pct); kept when movement_pct >= MOVER_THRESHOLD_PCT.
- One record per (horse_id, race_id). The first change seeds it; later ones
  update current odds and last_updated, keep the maximum movement_pct and
  increment total_movements.
- Records are grouped by (course, off_time); groups are ordered by the
  race-time heuristic in insights.race_time.
"""

from __future__ import annotations

import functools
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .odds import decimal_to_fractional
from .race_time import compare_race_times

DIRECTION_IN = "in"

MOVER_THRESHOLD_PCT = 10.0

MOVEMENT_STEAMING = "steaming"
INSIGHT_TYPE = "market_movement"


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


def _iso(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return None if value is None else str(value)


@dataclass
class MarketMover:
    """One steaming horse in one race."""

    horse_id: str
    race_id: str
    horse_name: str
    course: Optional[str]
    off_time: Optional[str]
    jockey_name: Optional[str]
    trainer_name: Optional[str]
    bookmaker: Optional[str]
    initial_odds: Optional[float]
    current_odds: Optional[float]
    initial_odds_display: str
    current_odds_display: str
    odds_movement_pct: float
    first_detected_at: Optional[str]
    last_updated: Optional[str]
    total_movements: int = 1
    odds_movement: str = MOVEMENT_STEAMING
    insight_type: str = INSIGHT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RaceMoverGroup:
    """Movers of one race, keyed by course and off-time."""

    race_id: str
    course_name: Optional[str]
    off_time: Optional[str]
    movers: List[MarketMover] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "race_id": self.race_id,
            "course_name": self.course_name,
            "off_time": self.off_time,
            "movers": [m.to_dict() for m in self.movers],
        }


@dataclass
class MarketMoverReport:
    market_movers: List[MarketMover]
    race_groups: List[RaceMoverGroup]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_movers": [m.to_dict() for m in self.market_movers],
            "race_groups": [g.to_dict() for g in self.race_groups],
            "total_movers": len(self.market_movers),
            "total_races": len(self.race_groups),
        }


def movement_pct(change: Any) -> float:
    """Absolute size of a change in percent (missing -> 0)."""
    raw = _get(change, "change_pct")
    try:
        return abs(float(raw or 0))
    except (TypeError, ValueError):
        return 0.0


def is_significant_steamer(change: Any, threshold: float = MOVER_THRESHOLD_PCT) -> bool:
    """Inward move of at least ``threshold`` percent (boundary inclusive)."""
    return _get(change, "direction") == DIRECTION_IN and movement_pct(change) >= threshold


def derive_market_movers(
    changes: Iterable[Any],
    entries_by_horse: Optional[Mapping[str, Any]] = None,
    threshold: float = MOVER_THRESHOLD_PCT,
) -> List[MarketMover]:
    """Collapse the change log into one record per steaming (horse, race).

    ``changes`` must be in observation order. ``entries_by_horse`` supplies
    horse/jockey/trainer names; a horse without an entry keeps a placeholder
    name.
    """
    entries_by_horse = entries_by_horse or {}
    movers: Dict[Tuple[str, str], MarketMover] = {}

    for change in changes:
        if not is_significant_steamer(change, threshold):
            continue
        pct = movement_pct(change)
        horse_id = str(_get(change, "horse_id"))
        race_id = str(_get(change, "race_id"))
        key = (horse_id, race_id)
        current = _get(change, "current_odds")
        observed = _iso(_get(change, "observed_at"))

        existing = movers.get(key)
        if existing is None:
            entry = entries_by_horse.get(horse_id)
            initial = _get(change, "initial_odds")
            movers[key] = MarketMover(
                horse_id=horse_id,
                race_id=race_id,
                horse_name=_get(entry, "horse_name") or f"Horse {horse_id}",
                course=_get(change, "course"),
                off_time=_get(change, "off_time"),
                jockey_name=_get(entry, "jockey_name"),
                trainer_name=_get(entry, "trainer_name"),
                bookmaker=_get(change, "bookmaker"),
                initial_odds=initial,
                current_odds=current,
                initial_odds_display=decimal_to_fractional(initial),
                current_odds_display=decimal_to_fractional(current),
                odds_movement_pct=pct,
                first_detected_at=observed,
                last_updated=observed,
            )
        else:
            existing.current_odds = current
            existing.current_odds_display = decimal_to_fractional(current)
            existing.odds_movement_pct = max(existing.odds_movement_pct, pct)
            existing.total_movements += 1
            existing.last_updated = observed

    return list(movers.values())


def group_by_race(movers: Iterable[MarketMover]) -> List[RaceMoverGroup]:
    """Bucket movers by (course, off_time) in race-time order."""
    groups: Dict[str, RaceMoverGroup] = {}
    for mover in movers:
        race_key = f"{mover.course}_{mover.off_time}"
        group = groups.get(race_key)
        if group is None:
            group = RaceMoverGroup(
                race_id=f"mover_{race_key}",
                course_name=mover.course,
                off_time=mover.off_time,
            )
            groups[race_key] = group
        group.movers.append(mover)

    return sorted(
        groups.values(),
        key=functools.cmp_to_key(lambda a, b: compare_race_times(a.off_time, b.off_time)),
    )


def build_market_mover_report(
    changes: Iterable[Any],
    entries_by_horse: Optional[Mapping[str, Any]] = None,
    threshold: float = MOVER_THRESHOLD_PCT,
) -> MarketMoverReport:
    """Flat list and race-grouped view of the day's market movers."""
    movers = derive_market_movers(changes, entries_by_horse, threshold)
    return MarketMoverReport(market_movers=movers, race_groups=group_by_race(movers))
