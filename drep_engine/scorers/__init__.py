"""Alignment, reputation and representation scoring."""

from drep_engine.scorers.batch import BatchResult, DRepJob, score_dreps
from drep_engine.scorers.category_scorers import (
    CATEGORY_SCORERS,
    CategoryScorer,
    calculate_decentralization_score,
    calculate_innovation_score,
    calculate_security_score,
    calculate_transparency_score,
    calculate_treasury_conservative_score,
    calculate_treasury_growth_score,
    compute_all_category_scores,
)
from drep_engine.scorers.drep_metrics import (
    MIN_RATIONALE_LENGTH,
    calculate_abstention_penalty,
    calculate_deliberation_modifier,
    calculate_effective_participation,
    calculate_participation_rate,
    calculate_profile_completeness,
    calculate_rationale_rate,
    calculate_reliability,
    calculate_weighted_rationale_rate,
    get_missing_profile_fields,
    get_size_tier,
    get_vote_distribution,
    has_quality_rationale,
    lovelace_to_ada,
)
from drep_engine.scorers.drep_score import DEFAULT_WEIGHTS, apply_rationale_curve, calculate_drep_score
from drep_engine.scorers.matching import match_votes_to_proposals
from drep_engine.scorers.redelegation import find_best_match_dreps
from drep_engine.scorers.representation import calculate_delegator_alignment, calculate_representation_match
from drep_engine.scorers.scorecard import (
    calculate_alignment,
    calculate_scorecard,
    compute_overall_alignment,
    get_precomputed_breakdown,
)
from drep_engine.scorers.shift_detector import ScoreHistory, detect_alignment_shift
from drep_engine.scorers.vote_alignment import evaluate_vote_alignment, evaluate_votes, summarize_alignments

__all__ = [
    "BatchResult",
    "CATEGORY_SCORERS",
    "CategoryScorer",
    "DEFAULT_WEIGHTS",
    "DRepJob",
    "MIN_RATIONALE_LENGTH",
    "ScoreHistory",
    "apply_rationale_curve",
    "calculate_abstention_penalty",
    "calculate_alignment",
    "calculate_decentralization_score",
    "calculate_deliberation_modifier",
    "calculate_delegator_alignment",
    "calculate_drep_score",
    "calculate_effective_participation",
    "calculate_innovation_score",
    "calculate_participation_rate",
    "calculate_profile_completeness",
    "calculate_rationale_rate",
    "calculate_reliability",
    "calculate_representation_match",
    "calculate_scorecard",
    "calculate_security_score",
    "calculate_transparency_score",
    "calculate_treasury_conservative_score",
    "calculate_treasury_growth_score",
    "calculate_weighted_rationale_rate",
    "compute_all_category_scores",
    "compute_overall_alignment",
    "detect_alignment_shift",
    "evaluate_vote_alignment",
    "evaluate_votes",
    "find_best_match_dreps",
    "get_missing_profile_fields",
    "get_precomputed_breakdown",
    "get_size_tier",
    "get_vote_distribution",
    "has_quality_rationale",
    "lovelace_to_ada",
    "match_votes_to_proposals",
    "score_dreps",
    "summarize_alignments",
]
