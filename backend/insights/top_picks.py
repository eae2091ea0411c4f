"""
Model agreement: horses that several models rate as the top pick of their race.

For every race each model nominates its highest-scoring runner (scores below
``min_prob`` are ignored). Ties go to the higher ensemble score, then the
shorter price, then the horse name. A horse nominated by at least
``min_agree`` models is returned.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .normalize import ENSEMBLE_FIELD, normalize_field, raw_score
from .race_time import race_time_to_minutes

MODELS: Tuple[Tuple[str, str], ...] = (
    ("mlp", "mlp_proba"),
    ("rf", "rf_proba"),
    ("xgboost", "xgboost_proba"),
    ("benter", "benter_proba"),
    ("ensemble", "ensemble_proba"),
)

DEFAULT_MIN_AGREE = 3


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


def clamp_min_agree(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_MIN_AGREE
    return max(1, min(len(MODELS), int(value)))


def _tie_rank(entry: Any) -> Tuple[float, float, str]:
    odds = _get(entry, "current_odds")
    try:
        odds_value = float(odds) if odds is not None else math.inf
    except (TypeError, ValueError):
        odds_value = math.inf
    return (-raw_score(entry, ENSEMBLE_FIELD), odds_value, str(_get(entry, "horse_name") or ""))


def top_entry_for(
    entries: Sequence[Any], field: str, min_prob: float = 0.0
) -> Optional[Tuple[Any, float]]:
    """Highest-scoring entry for ``field`` and its score, or None."""
    best: Optional[Any] = None
    best_prob = -math.inf
    for entry in entries:
        prob = raw_score(entry, field)
        if prob < min_prob:
            continue
        if prob > best_prob or (prob == best_prob and best is not None and _tie_rank(entry) < _tie_rank(best)):
            best, best_prob = entry, prob
    if best is None:
        return None
    return best, round(best_prob, 6)


def model_top_picks(
    entries: Sequence[Any], min_prob: float = 0.0, require_positive: bool = False
) -> Dict[str, List[str]]:
    """Map ``horse_id`` to the models naming it top of this field."""
    picks: Dict[str, List[str]] = {}
    for key, field_name in MODELS:
        top = top_entry_for(entries, field_name, min_prob)
        if top is None:
            continue
        entry, prob = top
        if require_positive and prob <= 0:
            continue
        picks.setdefault(str(_get(entry, "horse_id")), []).append(key)
    return picks


@dataclass
class TopPick:
    race_id: str
    off_time: Optional[str]
    course_name: str
    horse_id: str
    horse_name: str
    models_agree: int
    models: List[str]
    max_probability: float
    normalized_probability: float
    trainer_name: Optional[str] = None
    jockey_name: Optional[str] = None
    current_odds: Optional[float] = None
    silk_url: Optional[str] = None
    number: Optional[int] = None
    race_details: Dict[str, Any] = field(default_factory=dict)
    source: str = "ai_top_picks"

    @property
    def ai_reason(self) -> str:
        return f"{self.models_agree} model top pick"

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["ai_reason"] = self.ai_reason
        return out


def find_top_picks(
    races: Iterable[Any],
    entries: Iterable[Any],
    min_agree: int = DEFAULT_MIN_AGREE,
    min_prob: float = 0.0,
) -> List[TopPick]:
    """Agreement picks across ``races``, ordered by race time then strength."""
    min_agree = clamp_min_agree(min_agree)
    by_race: Dict[str, List[Any]] = {}
    for entry in entries:
        by_race.setdefault(str(_get(entry, "race_id")), []).append(entry)

    results: List[TopPick] = []
    for race in races:
        race_id = str(_get(race, "race_id"))
        rows = by_race.get(race_id, [])
        if not rows:
            continue

        # (models, best prob among those models) per horse
        agreement: Dict[str, Tuple[List[str], float, Any]] = {}
        for key, field_name in MODELS:
            top = top_entry_for(rows, field_name, min_prob)
            if top is None:
                continue
            entry, prob = top
            horse_id = str(_get(entry, "horse_id"))
            models, first_prob, row = agreement.get(horse_id, ([], prob, entry))
            models.append(key)
            agreement[horse_id] = (models, first_prob, row)

        normalized = normalize_field(rows, ENSEMBLE_FIELD)
        agreed = [
            (horse_id, models, prob, row)
            for horse_id, (models, prob, row) in agreement.items()
            if len(models) >= min_agree
        ]
        agreed.sort(key=lambda a: (-len(a[1]), -a[2]))

        for horse_id, models, prob, row in agreed:
            results.append(
                TopPick(
                    race_id=race_id,
                    off_time=_get(race, "off_time"),
                    course_name=_get(race, "course_name") or "Unknown",
                    horse_id=horse_id,
                    horse_name=_get(row, "horse_name") or f"Horse {horse_id}",
                    models_agree=len(models),
                    models=sorted(models),
                    max_probability=prob,
                    normalized_probability=normalized.get(horse_id, 0.0),
                    trainer_name=_get(row, "trainer_name"),
                    jockey_name=_get(row, "jockey_name"),
                    current_odds=_get(row, "current_odds"),
                    silk_url=_get(row, "silk_url"),
                    number=_get(row, "number"),
                    race_details={
                        "race_class": _get(race, "race_class"),
                        "distance": _get(race, "distance"),
                        "field_size": _get(race, "field_size") or len(rows),
                        "prize": _get(race, "prize"),
                        "surface": _get(race, "surface"),
                    },
                )
            )

    results.sort(
        key=lambda r: (race_time_to_minutes(r.off_time), -r.models_agree, -r.max_probability)
    )
    return results
