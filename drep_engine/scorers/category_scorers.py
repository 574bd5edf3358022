"""
Category Scorers - one 0-100 score per delegator preference.

Six independent scorers, each reducing a DRep's relevant votes and/or
aggregate stats to an integer score:

1. Treasury conservative - rewards No on large withdrawals
2. Treasury growth - rewards reasoned Yes on larger withdrawals
3. Decentralization - lookup on voting-power size tier
4. Security - caution (No/Abstain) and rationale on security proposals
5. Innovation - Yes rate on innovation proposals plus participation
6. Transparency - pass-through of rationale rate

Scorers never raise on thin data. With zero relevant votes they return a
defined neutral (50) or fallback value and, when an audit log is attached,
record which path was taken.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from drep_engine.config import get_scoring_config
from drep_engine.schemas.common import PreferenceKey, SizeTier, TreasuryTier, VoteChoice
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote, EnrichedDRep
from drep_engine.schemas.results import CategoryScores, VoteWithProposal
from drep_engine.scorers.matching import match_votes_to_proposals, relevant_pairs
from drep_engine.scorers.scoring_math import clamp_score, percent, safe_number
from drep_engine.utils.scoring_audit import ScoreSource, ScoringAuditLog, record_if

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50

# =============================================================================
# Point Tables
# =============================================================================

# Treasury conservative: (vote, tier) -> points. Abstain is always neutral.
TREASURY_CONSERVATIVE_POINTS = {
    (VoteChoice.NO, TreasuryTier.MAJOR): 100,
    (VoteChoice.NO, TreasuryTier.SIGNIFICANT): 90,
    (VoteChoice.NO, TreasuryTier.ROUTINE): 50,
    (VoteChoice.YES, TreasuryTier.MAJOR): 10,
    (VoteChoice.YES, TreasuryTier.SIGNIFICANT): 30,
    (VoteChoice.YES, TreasuryTier.ROUTINE): 50,
}

# Treasury growth: a reasoned Yes scales with spend size
TREASURY_GROWTH_YES_WITH_RATIONALE = {
    TreasuryTier.MAJOR: 90,
    TreasuryTier.SIGNIFICANT: 85,
    TreasuryTier.ROUTINE: 70,
}
TREASURY_GROWTH_YES_NO_RATIONALE = 60
TREASURY_GROWTH_NO_WITH_RATIONALE = 40
TREASURY_GROWTH_NO_NO_RATIONALE = 20

# Smaller voting power structurally reduces concentration risk
SIZE_TIER_SCORES = {
    SizeTier.SMALL.value: 95,
    SizeTier.MEDIUM.value: 72,
    SizeTier.LARGE.value: 40,
    SizeTier.WHALE.value: 12,
}

# Security
SECURITY_PARTICIPATION_WEIGHT = 0.6
SECURITY_RATIONALE_WEIGHT = 0.4
SECURITY_CAUTION_WEIGHT = 0.6
SECURITY_VOTE_RATIONALE_WEIGHT = 0.4

# Innovation
INNOVATION_PARTICIPATION_WEIGHT = 0.5
INNOVATION_YES_WEIGHT = 0.5
INNOVATION_NO_VOTES_BASELINE = 25


# =============================================================================
# Scorers
# =============================================================================


def _tier(pair: VoteWithProposal) -> TreasuryTier:
    # Unknown tier is scored as routine
    return pair.proposal.treasury_tier or TreasuryTier.ROUTINE


def treasury_conservative_points(vote: VoteChoice, tier: TreasuryTier) -> int:
    return TREASURY_CONSERVATIVE_POINTS.get((vote, tier), NEUTRAL_SCORE)


def treasury_growth_points(vote: VoteChoice, tier: TreasuryTier, has_rationale: bool) -> int:
    if vote == VoteChoice.YES:
        if has_rationale:
            return TREASURY_GROWTH_YES_WITH_RATIONALE[tier]
        return TREASURY_GROWTH_YES_NO_RATIONALE
    if vote == VoteChoice.NO:
        return TREASURY_GROWTH_NO_WITH_RATIONALE if has_rationale else TREASURY_GROWTH_NO_NO_RATIONALE
    return NEUTRAL_SCORE


def calculate_treasury_conservative_score(pairs: Iterable[VoteWithProposal]) -> int:
    """Mean of per-vote points on treasury proposals; 50 with none."""
    treasury = relevant_pairs(pairs, PreferenceKey.TREASURY_CONSERVATIVE)
    if not treasury:
        return NEUTRAL_SCORE
    total = sum(treasury_conservative_points(p.vote.vote, _tier(p)) for p in treasury)
    return clamp_score(total / len(treasury))


def calculate_treasury_growth_score(pairs: Iterable[VoteWithProposal]) -> int:
    """Mean of per-vote points on treasury proposals; 50 with none."""
    treasury = relevant_pairs(pairs, PreferenceKey.SMART_TREASURY_GROWTH)
    if not treasury:
        return NEUTRAL_SCORE
    total = sum(treasury_growth_points(p.vote.vote, _tier(p), p.vote.has_rationale) for p in treasury)
    return clamp_score(total / len(treasury))


def calculate_decentralization_score(drep: EnrichedDRep) -> int:
    return SIZE_TIER_SCORES.get(drep.size_tier, NEUTRAL_SCORE)


def _security_fallback(drep: EnrichedDRep) -> float:
    return (
        safe_number(drep.participation_rate) * SECURITY_PARTICIPATION_WEIGHT
        + safe_number(drep.rationale_rate) * SECURITY_RATIONALE_WEIGHT
    )


def calculate_security_score(drep: EnrichedDRep, pairs: Iterable[VoteWithProposal]) -> int:
    """Cautious, reasoned votes on security proposals, blended with the profile fallback.

    Without security-tagged votes the score is the fallback alone:
    participation * 0.6 + rationale * 0.4.
    """
    fallback = _security_fallback(drep)
    security = relevant_pairs(pairs, PreferenceKey.PROTOCOL_SECURITY_FIRST)
    if not security:
        return clamp_score(fallback)

    caution = sum(1 for p in security if p.vote.vote in (VoteChoice.NO, VoteChoice.ABSTAIN))
    reasoned = sum(1 for p in security if p.vote.has_rationale)
    vote_component = (
        percent(caution, len(security)) * SECURITY_CAUTION_WEIGHT
        + percent(reasoned, len(security)) * SECURITY_VOTE_RATIONALE_WEIGHT
    )

    weight = get_scoring_config().security_vote_weight
    return clamp_score(vote_component * weight + fallback * (1 - weight))


def calculate_innovation_score(drep: EnrichedDRep, pairs: Iterable[VoteWithProposal]) -> int:
    participation = safe_number(drep.participation_rate)
    innovation = relevant_pairs(pairs, PreferenceKey.INNOVATION_DEFI_GROWTH)
    if not innovation:
        return clamp_score(participation * INNOVATION_PARTICIPATION_WEIGHT + INNOVATION_NO_VOTES_BASELINE)

    yes_rate = percent(sum(1 for p in innovation if p.vote.vote == VoteChoice.YES), len(innovation))
    return clamp_score(participation * INNOVATION_PARTICIPATION_WEIGHT + yes_rate * INNOVATION_YES_WEIGHT)


def calculate_transparency_score(drep: EnrichedDRep) -> int:
    return clamp_score(drep.rationale_rate)


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class CategoryScorer:
    """One registered scorer.

    Attributes:
        pref: Preference key whose proposals feed this scorer
        category: Scorecard field the score lands in
        field_name: Precomputed ``EnrichedDRep`` field holding the score
        compute: ``(pairs, drep) -> int``
        uses_votes: False for scorers driven purely by DRep aggregates
        empty_source: Audit source when no relevant votes exist
    """

    pref: PreferenceKey
    category: str
    field_name: str
    compute: Callable[[list[VoteWithProposal], EnrichedDRep], int]
    uses_votes: bool = True
    empty_source: ScoreSource = ScoreSource.NEUTRAL

    def score(
        self,
        pairs: list[VoteWithProposal],
        drep: EnrichedDRep,
        audit_log: Optional[ScoringAuditLog] = None,
    ) -> int:
        value = self.compute(pairs, drep)

        if not self.uses_votes:
            record_if(audit_log, drep.drep_id, self.field_name, value, ScoreSource.PROFILE)
            return value

        considered = len(relevant_pairs(pairs, self.pref))
        if considered:
            record_if(audit_log, drep.drep_id, self.field_name, value, ScoreSource.VOTES, considered)
        else:
            record_if(
                audit_log,
                drep.drep_id,
                self.field_name,
                value,
                self.empty_source,
                reason=f"No votes on {self.pref.value} proposals",
            )
        return value


CATEGORY_SCORERS: dict[PreferenceKey, CategoryScorer] = {
    PreferenceKey.TREASURY_CONSERVATIVE: CategoryScorer(
        pref=PreferenceKey.TREASURY_CONSERVATIVE,
        category="treasury",
        field_name="alignment_treasury_conservative",
        compute=lambda pairs, drep: calculate_treasury_conservative_score(pairs),
    ),
    PreferenceKey.SMART_TREASURY_GROWTH: CategoryScorer(
        pref=PreferenceKey.SMART_TREASURY_GROWTH,
        category="treasury",
        field_name="alignment_treasury_growth",
        compute=lambda pairs, drep: calculate_treasury_growth_score(pairs),
    ),
    PreferenceKey.STRONG_DECENTRALIZATION: CategoryScorer(
        pref=PreferenceKey.STRONG_DECENTRALIZATION,
        category="decentralization",
        field_name="alignment_decentralization",
        compute=lambda pairs, drep: calculate_decentralization_score(drep),
        uses_votes=False,
    ),
    PreferenceKey.PROTOCOL_SECURITY_FIRST: CategoryScorer(
        pref=PreferenceKey.PROTOCOL_SECURITY_FIRST,
        category="security",
        field_name="alignment_security",
        compute=lambda pairs, drep: calculate_security_score(drep, pairs),
        empty_source=ScoreSource.FALLBACK,
    ),
    PreferenceKey.INNOVATION_DEFI_GROWTH: CategoryScorer(
        pref=PreferenceKey.INNOVATION_DEFI_GROWTH,
        category="innovation",
        field_name="alignment_innovation",
        compute=lambda pairs, drep: calculate_innovation_score(drep, pairs),
        empty_source=ScoreSource.FALLBACK,
    ),
    PreferenceKey.RESPONSIBLE_GOVERNANCE: CategoryScorer(
        pref=PreferenceKey.RESPONSIBLE_GOVERNANCE,
        category="transparency",
        field_name="alignment_transparency",
        compute=lambda pairs, drep: calculate_transparency_score(drep),
        uses_votes=False,
    ),
}


def compute_all_category_scores(
    drep: EnrichedDRep,
    votes: list[DRepVote],
    classified_proposals: list[ClassifiedProposal],
    audit_log: Optional[ScoringAuditLog] = None,
) -> CategoryScores:
    """All six category scores, for storing on the DRep profile between passes."""
    pairs = match_votes_to_proposals(votes, classified_proposals)
    scores = {
        scorer.field_name: scorer.score(pairs, drep, audit_log) for scorer in CATEGORY_SCORERS.values()
    }
    last_vote_time = max((v.block_time for v in votes), default=None)
    logger.debug(f"Category scores for {drep.drep_id}: {scores}")
    return CategoryScores(**scores, last_vote_time=last_vote_time)
