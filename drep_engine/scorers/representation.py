"""
Representation Scorer - delegator poll votes versus DRep on-chain votes.

Two views:
- ``calculate_representation_match``: one delegator against one DRep
- ``calculate_delegator_alignment``: all of a DRep's delegators, using the
  community majority per proposal once enough responses exist
"""

import logging
from collections import Counter
from typing import Iterable, Mapping, Optional

from drep_engine.config import get_scoring_config
from drep_engine.schemas.common import VoteChoice
from drep_engine.schemas.governance import DRepVote
from drep_engine.schemas.results import (
    DelegatorAlignment,
    MajorityComparison,
    PollVote,
    RepresentationResult,
    VoteComparison,
)
from drep_engine.scorers.scoring_math import percent, round_half_up

logger = logging.getLogger(__name__)

# Majority ties resolve in this order
MAJORITY_TIE_ORDER = (VoteChoice.YES, VoteChoice.NO, VoteChoice.ABSTAIN)

ProposalKey = tuple[str, int]


def drep_vote_map(drep_votes: Iterable[DRepVote | PollVote]) -> dict[ProposalKey, VoteChoice]:
    """DRep vote per proposal. A later vote on the same proposal wins."""
    return {v.proposal_key: VoteChoice.normalize(v.vote) for v in drep_votes}


def match_rate_score(matched: int, total: int) -> Optional[int]:
    if total == 0:
        return None
    return round_half_up(percent(matched, total))


def calculate_representation_match(
    poll_votes: Iterable[PollVote],
    drep_votes: Iterable[DRepVote | PollVote],
    proposal_titles: Optional[Mapping[ProposalKey, Optional[str]]] = None,
) -> RepresentationResult:
    """
    How well a single DRep represents a delegator's own poll votes.

    Only proposals both voted on are compared. Every poll vote is its own
    comparison, duplicates included. Disagreements sort first, then by
    proposal identity and poll vote, so the result does not depend on input
    order.
    """
    drep_map = drep_vote_map(drep_votes)
    proposal_titles = proposal_titles or {}

    comparisons = []
    for poll_vote in poll_votes:
        drep_vote = drep_map.get(poll_vote.proposal_key)
        if drep_vote is None:
            continue
        user_vote = VoteChoice.normalize(poll_vote.vote)
        comparisons.append(
            VoteComparison(
                proposal_tx_hash=poll_vote.proposal_tx_hash,
                proposal_index=poll_vote.proposal_index,
                proposal_title=proposal_titles.get(poll_vote.proposal_key),
                user_vote=user_vote,
                drep_vote=drep_vote,
                agreed=user_vote == drep_vote,
            )
        )

    comparisons.sort(key=lambda c: (c.agreed, c.proposal_tx_hash, c.proposal_index, c.user_vote.value))
    aligned = sum(1 for c in comparisons if c.agreed)

    return RepresentationResult(
        score=match_rate_score(aligned, len(comparisons)),
        aligned=aligned,
        misaligned=len(comparisons) - aligned,
        total=len(comparisons),
        comparisons=comparisons,
    )


def majority_vote(counts: Mapping[VoteChoice, int]) -> VoteChoice:
    return max(MAJORITY_TIE_ORDER, key=lambda choice: (counts.get(choice, 0), -MAJORITY_TIE_ORDER.index(choice)))


def calculate_delegator_alignment(
    poll_responses: Iterable[PollVote],
    drep_votes: Iterable[DRepVote],
    proposal_titles: Optional[Mapping[ProposalKey, Optional[str]]] = None,
    min_responses: Optional[int] = None,
) -> DelegatorAlignment:
    """
    Compare a DRep's votes with the majority of its delegators' poll responses.

    Proposals with fewer than ``min_responses`` responses (default from
    config, 3) are skipped; a thin majority is not a community signal.
    """
    if min_responses is None:
        min_responses = get_scoring_config().min_poll_responses
    drep_map = drep_vote_map(drep_votes)
    proposal_titles = proposal_titles or {}

    tallies: dict[ProposalKey, Counter] = {}
    for response in poll_responses:
        if response.proposal_key not in drep_map:
            continue
        tallies.setdefault(response.proposal_key, Counter())[VoteChoice.normalize(response.vote)] += 1

    comparisons = []
    for key in sorted(tallies):
        counts = tallies[key]
        total = sum(counts.values())
        if total < min_responses:
            logger.debug(f"Skipping {key[0]}#{key[1]}: {total} responses < {min_responses}")
            continue

        majority = majority_vote(counts)
        drep_vote = drep_map[key]
        comparisons.append(
            MajorityComparison(
                proposal_tx_hash=key[0],
                proposal_index=key[1],
                title=proposal_titles.get(key) or f"Proposal {key[0][:8]}...",
                drep_vote=drep_vote,
                delegator_majority=majority,
                delegator_majority_pct=round_half_up(percent(counts[majority], total)),
                total_responses=total,
                aligned=drep_vote == majority,
            )
        )

    aligned_count = sum(1 for c in comparisons if c.aligned)
    return DelegatorAlignment(
        alignment=match_rate_score(aligned_count, len(comparisons)),
        total_compared=len(comparisons),
        aligned_count=aligned_count,
        proposals=comparisons,
    )
