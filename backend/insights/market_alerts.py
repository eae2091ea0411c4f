"""
Market alerts from opening vs current prices on the race card.

A shortening price (current < opening) is market support; a lengthening one
is a drift.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .odds import MOVEMENT_STEAMING, calculate_odds_movement

ALERT_SUPPORT = "Market Support"
ALERT_DRIFT = "Odds Drift"

HIGH_CHANGE_PCT = 20
MEDIUM_CHANGE_PCT = 10


def _get(row: Any, key: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, default)
    return getattr(row, key, default)


def alert_confidence(percentage_change: float) -> str:
    size = abs(percentage_change)
    if size >= HIGH_CHANGE_PCT:
        return "High"
    if size >= MEDIUM_CHANGE_PCT:
        return "Medium"
    return "Low"


@dataclass
class MarketAlert:
    horse_id: str
    race_id: str
    horse_name: str
    course: Optional[str]
    current_odds: float
    opening_odds: float
    percentage_change: float
    alert_type: str
    confidence: str
    movement_class: str

    @property
    def movement(self) -> str:
        sign = "+" if self.percentage_change > 0 else ""
        return f"{sign}{self.percentage_change}%"

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["movement"] = self.movement
        return out


def find_market_alerts(races: Iterable[Any], entries: Iterable[Any]) -> List[MarketAlert]:
    """Entries whose price moved off its opening show, largest move first."""
    race_lookup = {str(_get(r, "race_id")): r for r in races}
    alerts: List[MarketAlert] = []
    for entry in entries:
        opening = _get(entry, "opening_odds")
        current = _get(entry, "current_odds")
        if opening is None or current is None or opening <= 0 or current == opening:
            continue
        percentage_change = round((current - opening) / opening * 100, 1)
        movement = calculate_odds_movement(opening, current)
        race = race_lookup.get(str(_get(entry, "race_id")))
        horse_id = str(_get(entry, "horse_id"))
        alerts.append(
            MarketAlert(
                horse_id=horse_id,
                race_id=str(_get(entry, "race_id")),
                horse_name=_get(entry, "horse_name") or f"Horse {horse_id}",
                course=_get(race, "course_name"),
                current_odds=current,
                opening_odds=opening,
                percentage_change=percentage_change,
                alert_type=ALERT_SUPPORT if current < opening else ALERT_DRIFT,
                confidence=alert_confidence(percentage_change),
                movement_class=movement.movement,
            )
        )

    alerts.sort(key=lambda a: abs(a.percentage_change), reverse=True)
    return alerts


def supported(alerts: Iterable[MarketAlert]) -> List[MarketAlert]:
    """Alerts where the price has shortened enough to classify as steaming."""
    return [a for a in alerts if a.movement_class == MOVEMENT_STEAMING]
