"""
Odds parsing, UK fractional display and movement classification.

Every odds value shown to users goes through decimal_to_fractional().
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

# (decimal - 1) profit -> traditional UK fraction
COMMON_FRACTIONS: tuple[tuple[float, str], ...] = (
    (0.1, "1/10"), (0.11, "1/9"), (0.13, "1/8"), (0.14, "1/7"),
    (0.17, "1/6"), (0.2, "1/5"), (0.22, "2/9"), (0.25, "1/4"),
    (0.29, "2/7"), (0.3, "3/10"), (0.33, "1/3"), (0.36, "4/11"),
    (0.4, "2/5"), (0.44, "4/9"), (0.45, "9/20"), (0.5, "1/2"),
    (0.53, "8/15"), (0.57, "4/7"), (0.6, "3/5"), (0.62, "8/13"),
    (0.67, "2/3"), (0.73, "8/11"), (0.75, "3/4"), (0.8, "4/5"),
    (0.83, "5/6"), (0.91, "10/11"), (1.0, "EVS"), (1.1, "11/10"),
    (1.2, "6/5"), (1.25, "5/4"), (1.3, "13/10"), (1.33, "4/3"),
    (1.4, "7/5"), (1.5, "6/4"), (1.67, "5/3"), (1.8, "9/5"),
    (2.0, "2/1"), (2.25, "9/4"), (2.5, "5/2"), (2.75, "11/4"),
    (3.0, "3/1"), (3.5, "7/2"), (4.0, "4/1"), (4.5, "9/2"),
    (5.0, "5/1"), (5.5, "11/2"), (6.0, "6/1"), (7.0, "7/1"),
    (8.0, "8/1"), (9.0, "9/1"), (10.0, "10/1"), (11.0, "11/1"),
    (12.0, "12/1"), (14.0, "14/1"), (16.0, "16/1"), (18.0, "18/1"),
    (20.0, "20/1"), (22.0, "22/1"), (25.0, "25/1"), (28.0, "28/1"),
    (33.0, "33/1"), (40.0, "40/1"), (50.0, "50/1"), (66.0, "66/1"),
    (80.0, "80/1"), (100.0, "100/1"),
)

# Max distance (in profit units) to snap to a table fraction.
FRACTION_TOLERANCE = 0.15

# Minimum absolute decimal change that counts as a move.
MOVEMENT_MIN_CHANGE = 0.1

ODDS_UNKNOWN = "TBC"
ODDS_EVENS = "EVS"

_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_LEADING_DECIMAL_RE = re.compile(r"^(\d+\.?\d*)")


def decimal_to_fractional(value: Any) -> str:
    """Convert decimal odds (``5.0``) to UK fractional display (``"4/1"``).

    - ``None``/empty/invalid/<=0 -> ``"TBC"``
    - fractional strings (``"5/2"``) and ``"EVS"`` pass through
    - ``<= 1`` -> ``"EVS"``
    - otherwise the nearest table fraction, or ``"<n>/1"`` when the nearest
      is further than FRACTION_TOLERANCE away
    """
    if value is None or isinstance(value, bool):
        return ODDS_UNKNOWN
    text = str(value).strip()
    if not text:
        return ODDS_UNKNOWN
    if _FRACTION_RE.match(text) or text.upper() == ODDS_EVENS:
        return text
    try:
        decimal = float(text)
    except ValueError:
        return ODDS_UNKNOWN
    if not math.isfinite(decimal) or decimal <= 0:
        return ODDS_UNKNOWN
    if decimal <= 1:
        return ODDS_EVENS

    profit = decimal - 1
    best_profit, best_label = min(COMMON_FRACTIONS, key=lambda c: abs(profit - c[0]))
    if abs(profit - best_profit) <= FRACTION_TOLERANCE:
        return best_label

    rounded = int(round(profit))
    return ODDS_EVENS if rounded <= 0 else f"{rounded}/1"


def parse_odds_to_decimal(value: Any) -> Optional[float]:
    """Parse a stored odds string into decimal odds.

    Accepts ``"11"``, ``"11 (10/1)"``, ``"5/2"`` and ``"evens"``; returns None
    for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) and value > 0 else None
    text = str(value).strip()
    if not text or text in ("-", "NaN"):
        return None

    fraction = _FRACTION_RE.match(text)
    if fraction:
        numerator, denominator = int(fraction.group(1)), int(fraction.group(2))
        if denominator > 0:
            return numerator / denominator + 1
        return None

    leading = _LEADING_DECIMAL_RE.match(text)
    if leading:
        decimal = float(leading.group(1))
        if decimal > 0:
            return decimal

    if text.lower() in ("evn", "evens", "evs"):
        return 2.0
    return None


MOVEMENT_STEAMING = "steaming"
MOVEMENT_DRIFTING = "drifting"
MOVEMENT_STABLE = "stable"


@dataclass(frozen=True)
class OddsMovement:
    change: float
    movement: str  # steaming | drifting | stable
    percentage: float


def calculate_odds_movement(
    initial: Optional[float], current: Optional[float]
) -> OddsMovement:
    """Classify a price move between two decimal odds.

    Shortening by at least MOVEMENT_MIN_CHANGE is ``steaming``, lengthening is
    ``drifting``. ``percentage`` is relative to the initial price (negative when
    steaming).
    """
    if not initial or not current or initial <= 0 or current <= 0:
        return OddsMovement(change=0.0, movement=MOVEMENT_STABLE, percentage=0.0)

    change = current - initial
    percentage = change / initial * 100
    movement = MOVEMENT_STABLE
    if abs(change) >= MOVEMENT_MIN_CHANGE:
        movement = MOVEMENT_STEAMING if change < 0 else MOVEMENT_DRIFTING
    return OddsMovement(
        change=round(change, 2), movement=movement, percentage=round(percentage, 2)
    )
