"""Numeric helpers shared by every scorer.

One rounding rule (round-half-up) is applied everywhere so snapshots computed
by different scorers stay comparable. Python's built-in ``round`` uses
banker's rounding and must not be used for scores.
"""

import math
from typing import Optional, Sequence

# Float products like 30 * 0.35 land a hair under .5; snap before rounding.
_SNAP_DIGITS = 9


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(round(value, _SNAP_DIGITS) + 0.5)


def safe_number(value: Optional[float]) -> float:
    """None, NaN and infinities count as zero."""
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def clamp_score(value: Optional[float], lo: int = 0, hi: int = 100) -> int:
    """Round half-up and clamp into [lo, hi]."""
    return max(lo, min(hi, round_half_up(safe_number(value))))


def mean_score(values: Sequence[float], default: int = 50) -> int:
    """Rounded mean of scores; ``default`` for an empty sequence."""
    if not values:
        return default
    return clamp_score(sum(values) / len(values))


def percent(part: int, whole: int) -> float:
    """Unrounded percentage; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def interpolate_score(value: float, knots: Sequence[Sequence[float]]) -> float:
    """Piecewise-linear interpolation between (value, score) knots.

    Knots must be sorted by the first element (value). Values outside the
    knot range clamp to the end knots.

    Example:
        knots = [(0, 0), (20, 30), (60, 70), (100, 100)]
        interpolate_score(40, knots) → 50.0  (halfway between 30 and 70)
    """
    if value <= knots[0][0]:
        return knots[0][1]
    if value >= knots[-1][0]:
        return knots[-1][1]
    for i in range(len(knots) - 1):
        x0, y0 = knots[i]
        x1, y1 = knots[i + 1]
        if x0 <= value <= x1:
            t = (value - x0) / (x1 - x0)
            return y0 + t * (y1 - y0)
    return knots[-1][1]
