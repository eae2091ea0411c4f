"""
Course/distance specialists: horses with a notable win rate at today's trip.

``horse_win_percentage_at_distance`` is a 0-1 fraction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

SPECIALIST_MIN_RATE = 0.05
HIGH_RATE = 0.15
MEDIUM_RATE = 0.08


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


def specialist_confidence(rate: float) -> str:
    if rate >= HIGH_RATE:
        return "High"
    if rate >= MEDIUM_RATE:
        return "Medium"
    return "Low"


@dataclass
class CourseSpecialist:
    horse_id: str
    race_id: str
    horse_name: str
    course_name: Optional[str]
    distance: Optional[str]
    win_rate: float
    win_percentage: int
    confidence: str

    @property
    def analysis(self) -> str:
        return f"{self.win_percentage}% win rate at {self.course_name} over {self.distance}"

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out.pop("win_rate")
        out["analysis"] = self.analysis
        return out


def find_course_specialists(races: Iterable[Any], entries: Iterable[Any]) -> List[CourseSpecialist]:
    """Entries above SPECIALIST_MIN_RATE, best win rate first."""
    race_lookup = {str(_get(r, "race_id")): r for r in races}
    found: List[CourseSpecialist] = []
    for entry in entries:
        rate = _get(entry, "horse_win_percentage_at_distance")
        if rate is None or rate <= SPECIALIST_MIN_RATE:
            continue
        race = race_lookup.get(str(_get(entry, "race_id")))
        horse_id = str(_get(entry, "horse_id"))
        found.append(
            CourseSpecialist(
                horse_id=horse_id,
                race_id=str(_get(entry, "race_id")),
                horse_name=_get(entry, "horse_name") or f"Horse {horse_id}",
                course_name=_get(race, "course_name"),
                distance=_get(race, "distance"),
                win_rate=rate,
                win_percentage=int(round(rate * 100)),
                confidence=specialist_confidence(rate),
            )
        )

    found.sort(key=lambda s: s.win_rate, reverse=True)
    return found
