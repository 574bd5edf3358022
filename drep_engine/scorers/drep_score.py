"""
DRep Score - composite 0-100 reputation score.

Four weighted pillars measuring accountability:
- Participation (30%): Do they show up? Uses effective participation, which
  is already discounted for rubber-stamping, when available.
- Rationale (35%): Do they explain their votes? Passed through a
  diminishing-returns curve first.
- Reliability (20%): Do they stay engaged over time?
- Profile completeness (15%): Can delegators tell who they are?

Weights and curve knots come from config/scoring.yaml.
"""

from typing import Optional

from drep_engine.config import DEFAULT_COMPOSITE_WEIGHTS, get_scoring_config
from drep_engine.schemas.governance import EnrichedDRep
from drep_engine.scorers.scoring_math import clamp_score, interpolate_score, safe_number

DEFAULT_WEIGHTS = dict(DEFAULT_COMPOSITE_WEIGHTS)


def apply_rationale_curve(raw_rate: Optional[float]) -> float:
    """Map raw rationale rate (0-100) onto the diminishing-returns curve.

    Piecewise-linear through the configured knots, default
    (0,0) (20,30) (60,70) (100,100): early effort is rewarded (10% raw
    scores 15) and the last 40 points of raw rate are worth only 30.
    Input is clamped to [0, 100].
    """
    value = min(100.0, max(0.0, safe_number(raw_rate)))
    return interpolate_score(value, get_scoring_config().rationale_curve_knots)


def calculate_drep_score(drep: EnrichedDRep, weights: Optional[dict[str, float]] = None) -> int:
    """
    Calculate the composite DRep Score.

    Missing or NaN pillars count as 0, so a sparse snapshot scores low
    rather than failing.

    Args:
        drep: Snapshot of the DRep's aggregate stats
        weights: Pillar weights; defaults to the configured composite weights

    Returns:
        Integer score 0-100
    """
    if weights is None:
        weights = get_scoring_config().composite_weights

    participation = drep.effective_participation
    if participation is None:
        participation = drep.participation_rate

    raw = (
        safe_number(participation) * weights["participation"]
        + apply_rationale_curve(drep.rationale_rate) * weights["rationale"]
        + safe_number(drep.reliability_score) * weights["reliability"]
        + safe_number(drep.profile_completeness) * weights["profile_completeness"]
    )
    return clamp_score(raw)
