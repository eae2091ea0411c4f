"""Single-runner trainer intent."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

INTENT_NOTE = "Single runner shows trainer intent"
INTENT_CONFIDENCE = "High"


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


@dataclass
class TrainerIntent:
    trainer_id: Optional[str]
    trainer_name: str
    horse_id: str
    race_id: str
    horse_name: str
    course: Optional[str]
    confidence: str = INTENT_CONFIDENCE
    analysis: str = INTENT_NOTE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _single_runners(races: Iterable[Any], entries: Iterable[Any]) -> List[Tuple[Any, Any]]:
    """``(entry, race)`` for each trainer with one runner at a meeting (course and date)."""
    race_lookup = {str(_get(r, "race_id")): r for r in races}
    meetings: Dict[Tuple[Any, Any, Any], List[Tuple[Any, Any]]] = {}
    for entry in entries:
        race = race_lookup.get(str(_get(entry, "race_id")))
        if race is None:
            continue
        key = (_get(race, "course_id"), _get(race, "date"), _get(entry, "trainer_id"))
        meetings.setdefault(key, []).append((entry, race))
    return [runners[0] for runners in meetings.values() if len(runners) == 1]


def single_runner_keys(races: Iterable[Any], entries: Iterable[Any]) -> Set[Tuple[str, str]]:
    """``(race_id, horse_id)`` of every single-runner entry."""
    return {
        (str(_get(entry, "race_id")), str(_get(entry, "horse_id")))
        for entry, _ in _single_runners(races, entries)
    }


def find_trainer_intents(races: Iterable[Any], entries: Iterable[Any]) -> List[TrainerIntent]:
    """Named trainers with exactly one runner at a meeting, ordered by trainer name."""
    intents: List[TrainerIntent] = []
    for entry, race in _single_runners(races, entries):
        trainer_name = _get(entry, "trainer_name")
        if not trainer_name:
            continue
        horse_id = str(_get(entry, "horse_id"))
        intents.append(
            TrainerIntent(
                trainer_id=_get(entry, "trainer_id"),
                trainer_name=trainer_name,
                horse_id=horse_id,
                race_id=str(_get(entry, "race_id")),
                horse_name=_get(entry, "horse_name") or f"Horse {horse_id}",
                course=_get(race, "course_name"),
            )
        )

    intents.sort(key=lambda i: i.trainer_name)
    return intents
