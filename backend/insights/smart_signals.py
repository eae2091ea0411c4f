"""
Smart signals: today's steamers backed by a model top pick or a trainer's
single runner.

A signal is ``strong`` when the horse is any model's top pick in its race or
its trainer's only runner at the meeting, else ``medium``. Races that have
already gone off are skipped.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .market_movers import MarketMover
from .normalize import ENSEMBLE_FIELD, raw_score
from .race_time import DEFAULT_TIMEZONE, race_start
from .top_picks import model_top_picks
from .trainer_intent import single_runner_keys

STRENGTH_STRONG = "strong"
STRENGTH_MEDIUM = "medium"


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


@dataclass
class SmartSignal:
    horse_id: str
    race_id: str
    horse_name: str
    course_name: str
    off_time: str
    current_odds: Optional[float]
    initial_odds: Optional[float]
    current_odds_display: str
    initial_odds_display: str
    movement_pct: float
    is_ml_top_pick: bool
    ml_models_agreeing: List[str]
    ml_top_probability: float
    is_single_trainer_entry: bool
    signal_strength: str
    trainer_name: str = ""
    jockey_name: str = ""
    silk_url: str = ""
    number: Optional[int] = None
    change_count: int = 0
    last_updated: Optional[str] = None
    signal_types: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_smart_signals(
    movers: Sequence[MarketMover],
    races: Iterable[Any],
    entries: Iterable[Any],
    now: datetime,
    tz: str = DEFAULT_TIMEZONE,
) -> List[SmartSignal]:
    """Cross-reference ``movers`` with model top picks and single runners.

    ``now`` must be timezone-aware. Movers without a known race or entry are
    dropped.
    """
    races = list(races)
    entries = list(entries)
    race_lookup = {str(_get(r, "race_id")): r for r in races}
    entry_lookup = {(str(_get(e, "race_id")), str(_get(e, "horse_id"))): e for e in entries}

    by_race: Dict[str, List[Any]] = {}
    for entry in entries:
        by_race.setdefault(str(_get(entry, "race_id")), []).append(entry)

    top_picks: Dict[tuple, List[str]] = {}
    for race_id, rows in by_race.items():
        for horse_id, models in model_top_picks(rows, require_positive=True).items():
            top_picks[(race_id, horse_id)] = models

    single_runners = single_runner_keys(races, entries)

    signals: List[SmartSignal] = []
    for mover in movers:
        race = race_lookup.get(mover.race_id)
        if race is None:
            continue
        start = race_start(_get(race, "date"), _get(race, "off_time"), tz)
        if start is not None and start <= now:
            continue
        key = (mover.race_id, mover.horse_id)
        entry = entry_lookup.get(key)
        if entry is None:
            continue

        models = top_picks.get(key, [])
        is_single = key in single_runners
        signal_types = []
        if models:
            signal_types.append("ml_top_pick")
        if is_single:
            signal_types.append("single_trainer_entry")
        signal_types.append("market_mover")

        signals.append(
            SmartSignal(
                horse_id=mover.horse_id,
                race_id=mover.race_id,
                horse_name=_get(entry, "horse_name") or mover.horse_name,
                course_name=_get(race, "course_name") or mover.course or "Unknown",
                off_time=_get(race, "off_time") or mover.off_time or "",
                current_odds=mover.current_odds,
                initial_odds=mover.initial_odds,
                current_odds_display=mover.current_odds_display,
                initial_odds_display=mover.initial_odds_display,
                movement_pct=mover.odds_movement_pct,
                is_ml_top_pick=bool(models),
                ml_models_agreeing=models,
                ml_top_probability=raw_score(entry, ENSEMBLE_FIELD),
                is_single_trainer_entry=is_single,
                signal_strength=STRENGTH_STRONG if models or is_single else STRENGTH_MEDIUM,
                trainer_name=_get(entry, "trainer_name") or "",
                jockey_name=_get(entry, "jockey_name") or "",
                silk_url=_get(entry, "silk_url") or "",
                number=_get(entry, "number"),
                change_count=mover.total_movements,
                last_updated=mover.last_updated,
                signal_types=signal_types,
            )
        )

    signals.sort(key=lambda s: (s.signal_strength != STRENGTH_STRONG, -s.movement_pct))
    return signals
