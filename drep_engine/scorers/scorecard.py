"""
Scorecard Aggregator - per-delegator alignment view of one DRep.

Folds the category scorer registry over a delegator's selected preference
keys. Every category starts at 50; only categories whose key is selected are
scored and averaged into ``overall``. Treasury is a single category fed by
the conservative scorer when selected, else by the growth scorer.
"""

import logging
import time
from typing import Iterable, Optional

from drep_engine.schemas.common import PreferenceKey
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote, EnrichedDRep
from drep_engine.schemas.results import AlignmentBreakdown, Scorecard
from drep_engine.scorers.category_scorers import CATEGORY_SCORERS, NEUTRAL_SCORE, CategoryScorer
from drep_engine.scorers.matching import match_votes_to_proposals
from drep_engine.scorers.scoring_math import mean_score
from drep_engine.utils.scoring_audit import ScoringAuditLog

logger = logging.getLogger(__name__)


def normalize_prefs(prefs: Optional[Iterable]) -> set[PreferenceKey]:
    """Coerce raw preference strings to keys. Unknown values are dropped with a warning."""
    keys = set()
    for pref in prefs or []:
        try:
            keys.add(PreferenceKey(pref))
        except ValueError:
            logger.warning(f"Ignoring unknown preference key: {pref!r}")
    return keys


def active_scorers(prefs: Iterable) -> list[CategoryScorer]:
    """Scorers for the selected keys, one per scorecard category."""
    selected = normalize_prefs(prefs)
    scorers = []
    seen_categories = set()
    # Registry order puts treasury-conservative ahead of smart-treasury-growth
    for pref, scorer in CATEGORY_SCORERS.items():
        if pref in selected and scorer.category not in seen_categories:
            scorers.append(scorer)
            seen_categories.add(scorer.category)
    return scorers


def calculate_scorecard(
    drep: EnrichedDRep,
    votes: list[DRepVote],
    proposals: list[ClassifiedProposal],
    prefs: Iterable,
    calculated_at: Optional[int] = None,
    epoch: Optional[int] = None,
    audit_log: Optional[ScoringAuditLog] = None,
) -> Scorecard:
    """
    Calculate a full scorecard for a DRep against a delegator's preferences.

    Args:
        drep: DRep aggregate snapshot
        votes: The DRep's votes
        proposals: Classified proposals the votes may refer to
        prefs: Selected preference keys (enum members or raw strings)
        calculated_at: Snapshot time in epoch milliseconds (defaults to now)
        epoch: Chain epoch the snapshot belongs to
        audit_log: Optional audit trail for fallback paths

    Returns:
        Scorecard with per-category scores and overall mean
    """
    pairs = match_votes_to_proposals(votes, proposals)

    scores = {}
    for scorer in active_scorers(prefs):
        scores[scorer.category] = scorer.score(pairs, drep, audit_log)

    overall = mean_score(list(scores.values()), default=NEUTRAL_SCORE)

    return Scorecard(
        drep_id=drep.drep_id,
        scores=AlignmentBreakdown(**scores, overall=overall),
        votes_analyzed=len(votes),
        calculated_at=calculated_at if calculated_at is not None else int(time.time() * 1000),
        epoch=epoch,
    )


def calculate_alignment(drep: EnrichedDRep, votes: list[DRepVote], prefs: Iterable) -> int:
    """Overall alignment without proposal classification (vote-driven categories stay neutral)."""
    if not normalize_prefs(prefs):
        return NEUTRAL_SCORE
    return calculate_scorecard(drep, votes, [], prefs).scores.overall


# =============================================================================
# Precomputed alignment (fields stored on the DRep profile)
# =============================================================================


def _treasury_precomputed(drep: EnrichedDRep, selected: set[PreferenceKey]) -> Optional[int]:
    if PreferenceKey.TREASURY_CONSERVATIVE in selected and drep.alignment_treasury_conservative is not None:
        return drep.alignment_treasury_conservative
    if PreferenceKey.SMART_TREASURY_GROWTH in selected:
        return drep.alignment_treasury_growth
    return None


def compute_overall_alignment(drep: EnrichedDRep, prefs: Iterable) -> int:
    """Overall alignment from the precomputed ``alignment_*`` fields. Null fields are skipped."""
    selected = normalize_prefs(prefs)
    if not selected:
        return NEUTRAL_SCORE

    active = []
    for scorer in active_scorers(selected):
        if scorer.category == "treasury":
            value = _treasury_precomputed(drep, selected)
        else:
            value = getattr(drep, scorer.field_name)
        if value is not None:
            active.append(value)

    return mean_score(active, default=NEUTRAL_SCORE)


def get_precomputed_breakdown(drep: EnrichedDRep, prefs: Iterable) -> AlignmentBreakdown:
    """
    Profile-page view of the precomputed fields.

    Treasury follows the selected keys; the other categories show their stored
    value whatever the selection. Nulls show as 50.
    """
    selected = normalize_prefs(prefs)

    scores = {}
    for scorer in CATEGORY_SCORERS.values():
        if scorer.category == "treasury":
            value = _treasury_precomputed(drep, selected)
        else:
            value = getattr(drep, scorer.field_name)
        if value is not None:
            scores.setdefault(scorer.category, value)

    return AlignmentBreakdown(**scores, overall=compute_overall_alignment(drep, selected))

