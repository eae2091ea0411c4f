"""
Probability normalization for per-horse model scores.

Raw model outputs are independent per-horse confidences (0-1) that do not sum
to 1 across a race field. Normalizing divides each by the field total:

    normalized(horse) = raw(horse) / sum(raw(h) for h in field)

An all-zero (or empty) field normalizes to zeros; nothing is ever dropped.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Sequence

ENSEMBLE_FIELD = "ensemble_proba"

PROBA_FIELDS: tuple[str, ...] = (
    "ensemble_proba",
    "benter_proba",
    "mlp_proba",
    "rf_proba",
    "xgboost_proba",
)

COLOR_HIGH = "green"
COLOR_MEDIUM = "yellow"
COLOR_LOW = "gray"


def _get(entry: Any, key: str) -> Any:
    """Read ``key`` from a mapping or an object (ORM row)."""
    if isinstance(entry, Mapping):
        return entry.get(key)
    return getattr(entry, key, None)


def raw_score(entry: Any, field: str) -> float:
    """Raw score for ``field``; missing, non-numeric or non-finite values count as 0."""
    value = _get(entry, field)
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def normalize_field(
    entries: Sequence[Any], field: str, id_field: str = "horse_id"
) -> Dict[str, float]:
    """Normalize one score field across all entries of a race.

    Returns a mapping of ``str(entry[id_field])`` to its normalized value.
    """
    total = sum(raw_score(e, field) for e in entries)
    out: Dict[str, float] = {}
    for e in entries:
        raw = raw_score(e, field)
        out[str(_get(e, id_field))] = raw / total if total > 0 else 0.0
    return out


def normalize_all_models(
    entries: Sequence[Any], id_field: str = "horse_id"
) -> Dict[str, Dict[str, float]]:
    """Normalize every model field (ensemble included) independently."""
    return {field: normalize_field(entries, field, id_field) for field in PROBA_FIELDS}


def with_normalized_ensemble(
    entries: Iterable[Mapping[str, Any]], id_field: str = "horse_id"
) -> List[Dict[str, Any]]:
    """Copy each entry and add its ``normalized_ensemble`` value."""
    rows = [dict(e) for e in entries]
    normalized = normalize_field(rows, ENSEMBLE_FIELD, id_field)
    for row in rows:
        row["normalized_ensemble"] = normalized.get(str(row.get(id_field)), 0.0)
    return rows


# Display helpers. Thresholds are calibrated for real fields of 5-20 runners.


def get_normalized_color(prob: float) -> str:
    """Three-tier colour for a normalized win probability."""
    if prob >= 0.25:
        return COLOR_HIGH
    if prob >= 0.12:
        return COLOR_MEDIUM
    return COLOR_LOW


def get_normalized_stars(prob: float) -> int:
    """Star rating (1-5) for a normalized win probability."""
    if prob >= 0.30:
        return 5
    if prob >= 0.22:
        return 4
    if prob >= 0.14:
        return 3
    if prob >= 0.08:
        return 2
    return 1


def format_normalized(prob: float) -> str:
    """Percentage with one decimal place, e.g. ``0.1234 -> "12.3%"``."""
    return f"{prob * 100:.1f}%"
