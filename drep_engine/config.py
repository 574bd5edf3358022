"""
Central configuration for the scoring engine.

Tunable weights and thresholds are read from ``config/scoring.yaml`` and
cached for the life of the process. The engine never writes configuration.

Environment variables:
  - DREP_ENGINE_CONFIG (default: <repo>/config/scoring.yaml)
  - DREP_ENGINE_LOG_LEVEL (default: INFO)

Usage:
    from drep_engine.config import get_scoring_config

    config = get_scoring_config()
    config.composite_weights["rationale"]  # 0.35
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

COMPOSITE_WEIGHT_KEYS = ("participation", "rationale", "reliability", "profile_completeness")

DEFAULT_COMPOSITE_WEIGHTS = {
    "participation": 0.30,
    "rationale": 0.35,
    "reliability": 0.20,
    "profile_completeness": 0.15,
}

DEFAULT_RATIONALE_CURVE_KNOTS = ((0, 0), (20, 30), (60, 70), (100, 100))

DEFAULT_INNOVATION_KEYWORDS = ("defi", "innovation", "growth")


@dataclass(frozen=True)
class ScoringConfig:
    """Validated, read-only engine tunables."""

    scoring_version: str = "2.1.0"
    composite_weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_COMPOSITE_WEIGHTS))
    rationale_curve_knots: tuple[tuple[float, float], ...] = DEFAULT_RATIONALE_CURVE_KNOTS
    security_vote_weight: float = 0.5
    innovation_keywords: tuple[str, ...] = DEFAULT_INNOVATION_KEYWORDS
    shift_threshold: int = 8
    category_shift_threshold: int = 5
    min_poll_responses: int = 3
    min_redelegation_overlap: int = 3
    redelegation_limit: int = 100


# Module-level cache
_config_cache: Optional[ScoringConfig] = None


def get_config_path() -> Path:
    """Config file path, overridable with DREP_ENGINE_CONFIG."""
    env_path = os.environ.get("DREP_ENGINE_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path(__file__).parent.parent / "config" / "scoring.yaml"


def get_log_level() -> str:
    return os.environ.get("DREP_ENGINE_LOG_LEVEL", "INFO").upper()


def get_scoring_config() -> ScoringConfig:
    """Load and cache the scoring config. Missing file falls back to defaults."""
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_path = get_config_path()
    if not config_path.exists():
        logger.warning(f"Scoring config not found at {config_path}, using defaults")
        _config_cache = ScoringConfig()
        return _config_cache

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    _config_cache = build_config(raw)
    logger.info(f"Loaded scoring config v{_config_cache.scoring_version} from {config_path}")
    return _config_cache


def build_config(raw: dict) -> ScoringConfig:
    """Build a ScoringConfig from a parsed YAML mapping, validating as we go."""
    defaults = ScoringConfig()

    weights = raw.get("composite_weights", defaults.composite_weights)
    _validate_weights(weights)

    knots = tuple(tuple(k) for k in raw.get("rationale_curve_knots", defaults.rationale_curve_knots))
    _validate_knots(knots)

    security_vote_weight = float(raw.get("security_vote_weight", defaults.security_vote_weight))
    if not 0.0 <= security_vote_weight <= 1.0:
        raise ValueError(f"security_vote_weight must be within [0, 1], got {security_vote_weight}")

    keywords = tuple(str(k).lower() for k in raw.get("innovation_keywords", defaults.innovation_keywords))

    shift = raw.get("alignment_shift", {})
    representation = raw.get("representation", {})
    redelegation = raw.get("redelegation", {})

    return ScoringConfig(
        scoring_version=str(raw.get("scoring_version", defaults.scoring_version)),
        composite_weights={k: float(weights[k]) for k in COMPOSITE_WEIGHT_KEYS},
        rationale_curve_knots=knots,
        security_vote_weight=security_vote_weight,
        innovation_keywords=keywords,
        shift_threshold=int(shift.get("overall_threshold", defaults.shift_threshold)),
        category_shift_threshold=int(shift.get("category_threshold", defaults.category_shift_threshold)),
        min_poll_responses=int(representation.get("min_poll_responses", defaults.min_poll_responses)),
        min_redelegation_overlap=int(redelegation.get("min_overlap", defaults.min_redelegation_overlap)),
        redelegation_limit=int(redelegation.get("limit", defaults.redelegation_limit)),
    )


def _validate_weights(weights: dict) -> None:
    """Weights must cover exactly the four pillars and sum to 1.0."""
    missing = set(COMPOSITE_WEIGHT_KEYS) - set(weights.keys())
    if missing:
        raise ValueError(f"composite_weights missing keys: {missing}")
    extra = set(weights.keys()) - set(COMPOSITE_WEIGHT_KEYS)
    if extra:
        raise ValueError(f"composite_weights has unexpected keys: {extra}")
    total = sum(float(v) for v in weights.values())
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"composite_weights sum to {total}, expected 1.0")


def _validate_knots(knots: tuple) -> None:
    """Knots must be (x, y) pairs with strictly increasing x and non-decreasing y."""
    if len(knots) < 2:
        raise ValueError("rationale_curve_knots needs at least two knots")
    for knot in knots:
        if len(knot) != 2:
            raise ValueError(f"Malformed knot {knot!r}, expected [raw, adjusted]")
    for (x0, y0), (x1, y1) in zip(knots, knots[1:]):
        if x1 <= x0:
            raise ValueError(f"rationale_curve_knots not sorted at {x0} -> {x1}")
        if y1 < y0:
            raise ValueError(f"rationale_curve_knots not monotonic at {x0} -> {x1}")


def clear_cache():
    """Clear the config cache (useful for testing)."""
    global _config_cache
    _config_cache = None
