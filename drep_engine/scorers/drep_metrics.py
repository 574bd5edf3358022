"""
DRep Metrics - the per-DRep aggregates behind the composite score.

These functions turn a DRep's raw voting record and profile metadata into
the pillar values carried on ``EnrichedDRep``: participation, rationale
rate, reliability, profile completeness, and voting-power size tier. The
ingestion collaborator calls them when building each snapshot; the scorers
only read the results.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from drep_engine.schemas.common import (
    CRITICAL_PROPOSAL_TYPES,
    ProposalType,
    SizeTier,
    TreasuryTier,
    VoteChoice,
)
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote
from drep_engine.schemas.results import ReliabilityResult
from drep_engine.scorers.scoring_math import clamp_score, percent, round_half_up
from drep_engine.utils.url_helpers import is_social_link, normalize_url

logger = logging.getLogger(__name__)

LOVELACE_PER_ADA = 1_000_000

# =============================================================================
# Size Tiers (voting power in ADA)
# =============================================================================

SIZE_TIER_THRESHOLDS = [
    (100_000, SizeTier.SMALL),
    (5_000_000, SizeTier.MEDIUM),
    (50_000_000, SizeTier.LARGE),
]


def get_size_tier(voting_power_ada: float) -> SizeTier:
    for upper, tier in SIZE_TIER_THRESHOLDS:
        if voting_power_ada < upper:
            return tier
    return SizeTier.WHALE


def lovelace_to_ada(value: Any) -> Optional[float]:
    """Lovelace (string or int) to ADA. Unparseable input gives None."""
    try:
        return int(value) / LOVELACE_PER_ADA
    except (TypeError, ValueError):
        return None


# =============================================================================
# Participation
# =============================================================================


def calculate_participation_rate(votes_count: int, total_proposals: int) -> int:
    if total_proposals <= 0:
        return 0
    return min(100, round_half_up(percent(votes_count, total_proposals)))


# Rubber-stamp detection: share of the dominant vote direction -> multiplier
DELIBERATION_MIN_VOTES = 10
DELIBERATION_BUCKETS = [
    (0.95, 0.70),
    (0.90, 0.85),
    (0.85, 0.95),
]


def calculate_deliberation_modifier(yes_votes: int, no_votes: int, abstain_votes: int) -> float:
    """Penalty multiplier for voting overwhelmingly in one direction.

    DReps with 10 or fewer votes are exempt; the sample is too small to
    call it rubber-stamping.
    """
    total = yes_votes + no_votes + abstain_votes
    if total <= DELIBERATION_MIN_VOTES:
        return 1.0

    dominant_share = max(yes_votes, no_votes, abstain_votes) / total
    for threshold, modifier in DELIBERATION_BUCKETS:
        if dominant_share > threshold:
            return modifier
    return 1.0


def calculate_effective_participation(participation_rate: float, deliberation_modifier: float) -> int:
    return round_half_up(participation_rate * deliberation_modifier)


def get_vote_distribution(votes: Iterable[DRepVote]) -> dict[str, int]:
    distribution = {"yes": 0, "no": 0, "abstain": 0, "total": 0}
    for vote in votes:
        distribution[vote.vote.value.lower()] += 1
        distribution["total"] += 1
    return distribution


def calculate_abstention_penalty(votes: list[DRepVote]) -> int:
    """Scaled abstain rate: occasional abstention is penalized at half weight."""
    if not votes:
        return 0
    abstain_rate = percent(sum(1 for v in votes if v.vote == VoteChoice.ABSTAIN), len(votes))
    if abstain_rate < 25:
        return round_half_up(abstain_rate * 0.5)
    if abstain_rate < 50:
        return round_half_up(abstain_rate * 0.75)
    return round_half_up(abstain_rate)


# =============================================================================
# Rationale
# =============================================================================

MIN_RATIONALE_LENGTH = 50

# Critical governance actions count triple, major treasury spends double
CRITICAL_RATIONALE_WEIGHT = 3
MAJOR_TREASURY_RATIONALE_WEIGHT = 2
DEFAULT_RATIONALE_WEIGHT = 1


def vote_has_rationale(vote: DRepVote) -> bool:
    """A rationale URL or any inline rationale/comment text."""
    return vote.has_rationale or vote.inline_rationale is not None


def calculate_rationale_rate(votes: list[DRepVote]) -> int:
    if not votes:
        return 0
    return round_half_up(percent(sum(1 for v in votes if vote_has_rationale(v)), len(votes)))


def has_quality_rationale(vote: DRepVote, resolved_text: Optional[str] = None) -> bool:
    """Whether a vote carries a substantive rationale.

    Resolved text (fetched from the rationale URL) is authoritative when
    supplied. Otherwise inline metadata text must meet the minimum length,
    and a bare rationale URL gets the benefit of the doubt.
    """
    if resolved_text is not None:
        return len(resolved_text.strip()) >= MIN_RATIONALE_LENGTH

    inline = vote.inline_rationale
    if inline and len(inline.strip()) >= MIN_RATIONALE_LENGTH:
        return True

    return bool(vote.meta_url)


def rationale_weight(proposal: Optional[ClassifiedProposal]) -> int:
    """Importance weight of explaining a vote on this proposal. InfoAction is exempt (0)."""
    if proposal is None:
        return DEFAULT_RATIONALE_WEIGHT
    if proposal.type == ProposalType.INFO_ACTION:
        return 0
    if proposal.type in CRITICAL_PROPOSAL_TYPES:
        return CRITICAL_RATIONALE_WEIGHT
    if proposal.type == ProposalType.TREASURY_WITHDRAWALS and proposal.treasury_tier == TreasuryTier.MAJOR:
        return MAJOR_TREASURY_RATIONALE_WEIGHT
    return DEFAULT_RATIONALE_WEIGHT


def calculate_weighted_rationale_rate(
    votes: list[DRepVote],
    proposal_info: Mapping[tuple[str, int], ClassifiedProposal],
    resolved_texts: Optional[Mapping[str, str]] = None,
) -> int:
    """Rationale rate with each vote weighted by how much the proposal matters.

    Args:
        votes: DRep votes
        proposal_info: Classified proposals keyed by (tx hash, index)
        resolved_texts: Optional fetched rationale text keyed by vote tx hash
    """
    resolved_texts = resolved_texts or {}
    total_weight = 0
    explained_weight = 0

    for vote in votes:
        weight = rationale_weight(proposal_info.get(vote.proposal_key))
        if weight == 0:
            continue
        total_weight += weight
        if has_quality_rationale(vote, resolved_texts.get(vote.vote_tx_hash or "")):
            explained_weight += weight

    if total_weight == 0:
        return 0
    return round_half_up(percent(explained_weight, total_weight))


# =============================================================================
# Reliability
# =============================================================================

# Component maxima (sum to 100) and the epoch counts at which they saturate
RELIABILITY_STREAK_POINTS = 35
RELIABILITY_RECENCY_POINTS = 30
RELIABILITY_GAP_POINTS = 20
RELIABILITY_TENURE_POINTS = 15
RELIABILITY_STREAK_SATURATION = 10
RELIABILITY_RECENCY_WINDOW = 10
RELIABILITY_GAP_WINDOW = 10
RELIABILITY_TENURE_SATURATION = 20


def calculate_reliability(
    epoch_vote_counts: list[int],
    first_epoch: Optional[int],
    current_epoch: int,
    proposal_epochs: Optional[Mapping[int, int]] = None,
) -> ReliabilityResult:
    """Score how steadily a DRep has voted across epochs.

    Args:
        epoch_vote_counts: Votes cast per epoch, index 0 == ``first_epoch``
        first_epoch: Epoch of the DRep's first vote
        current_epoch: Epoch the snapshot is computed for
        proposal_epochs: Optional proposals-open count per epoch. When given,
            epochs with nothing to vote on are ignored for streak and gaps.

    Returns:
        ReliabilityResult with score and streak/recency/longest_gap/tenure
    """
    if not epoch_vote_counts or first_epoch is None or not any(epoch_vote_counts):
        return ReliabilityResult()

    epochs = [(first_epoch + i, count) for i, count in enumerate(epoch_vote_counts)]
    if proposal_epochs is not None:
        epochs = [(epoch, count) for epoch, count in epochs if proposal_epochs.get(epoch, 0) > 0]

    streak = 0
    for _, count in reversed(epochs):
        if count <= 0:
            break
        streak += 1

    longest_gap = 0
    current_gap = 0
    for _, count in epochs:
        if count > 0:
            current_gap = 0
        else:
            current_gap += 1
            longest_gap = max(longest_gap, current_gap)

    last_vote_epoch = max(first_epoch + i for i, count in enumerate(epoch_vote_counts) if count > 0)
    recency = max(0, current_epoch - last_vote_epoch)
    tenure = max(0, current_epoch - first_epoch)

    raw = (
        RELIABILITY_STREAK_POINTS * min(streak / RELIABILITY_STREAK_SATURATION, 1.0)
        + RELIABILITY_RECENCY_POINTS * max(0.0, 1 - recency / RELIABILITY_RECENCY_WINDOW)
        + RELIABILITY_GAP_POINTS * max(0.0, 1 - longest_gap / RELIABILITY_GAP_WINDOW)
        + RELIABILITY_TENURE_POINTS * min(tenure / RELIABILITY_TENURE_SATURATION, 1.0)
    )

    return ReliabilityResult(
        score=clamp_score(raw),
        streak=streak,
        recency=recency,
        longest_gap=longest_gap,
        tenure=tenure,
    )


# =============================================================================
# Profile Completeness
# =============================================================================

# (metadata key(s), points); first non-empty key wins
PROFILE_FIELD_POINTS = [
    (("givenName", "name"), 15),
    (("objectives",), 20),
    (("motivations",), 15),
    (("qualifications",), 10),
    (("bio",), 10),
]
SOCIAL_ONE_LINK_POINTS = 25
SOCIAL_TWO_LINKS_POINTS = 30


def _unwrap(value: Any) -> Any:
    """JSON-LD metadata wraps literals as ``{"@value": ...}``."""
    if isinstance(value, dict) and "@value" in value:
        return value["@value"]
    return value


def _has_text(metadata: Mapping[str, Any], keys: tuple[str, ...]) -> bool:
    for key in keys:
        value = _unwrap(metadata.get(key))
        if isinstance(value, str) and value.strip():
            return True
    return False


def count_social_links(metadata: Mapping[str, Any], broken_uris: Optional[set[str]] = None) -> int:
    """Distinct, working references that point at a known social platform."""
    broken = {normalize_url(u) for u in (broken_uris or set())}
    references = _unwrap(metadata.get("references"))
    if not isinstance(references, list):
        return 0

    seen = set()
    for ref in references:
        if not isinstance(ref, dict):
            continue
        uri = _unwrap(ref.get("uri"))
        if not isinstance(uri, str) or not is_social_link(uri):
            continue
        normalized = normalize_url(uri)
        if normalized in broken:
            continue
        seen.add(normalized)
    return len(seen)


def calculate_profile_completeness(
    metadata: Optional[Mapping[str, Any]], broken_uris: Optional[set[str]] = None
) -> int:
    if not metadata:
        return 0

    score = sum(points for keys, points in PROFILE_FIELD_POINTS if _has_text(metadata, keys))

    social = count_social_links(metadata, broken_uris)
    if social >= 2:
        score += SOCIAL_TWO_LINKS_POINTS
    elif social == 1:
        score += SOCIAL_ONE_LINK_POINTS

    return min(100, score)


def get_missing_profile_fields(metadata: Optional[Mapping[str, Any]]) -> list[str]:
    """Profile fields still worth filling in, in point order."""
    metadata = metadata or {}
    missing = [keys[0] for keys, _ in PROFILE_FIELD_POINTS if not _has_text(metadata, keys)]
    if count_social_links(metadata) < 2:
        missing.append("references")
    return missing
