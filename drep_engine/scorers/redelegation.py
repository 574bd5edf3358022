"""
Redelegation Recommender - rank DReps by how often they voted like the delegator.

For each candidate DRep, compare its on-chain votes with the delegator's
poll votes on the same proposals. Candidates with fewer than ``min_overlap``
comparable proposals are dropped rather than shown with a rate built on one
or two votes.

Ranking: match rate desc, then composite DRep score desc, then DRep id.
"""

import logging
from typing import Iterable, Mapping, Optional

from drep_engine.config import get_scoring_config
from drep_engine.schemas.common import VoteChoice
from drep_engine.schemas.governance import DRepVote, EnrichedDRep
from drep_engine.schemas.results import PollVote, RedelegationCandidate, RedelegationResult, RepresentationResult
from drep_engine.scorers.representation import drep_vote_map, match_rate_score

logger = logging.getLogger(__name__)


def _match_stats(
    polls: list[tuple[tuple[str, int], VoteChoice]], drep_votes: Iterable[DRepVote | PollVote]
) -> tuple[int, int]:
    """(matched, comparable) over the delegator's poll votes the DRep also voted on."""
    drep_map = drep_vote_map(drep_votes)
    matched = 0
    total = 0
    for key, user_vote in polls:
        drep_vote = drep_map.get(key)
        if drep_vote is None:
            continue
        total += 1
        if user_vote == drep_vote:
            matched += 1
    return matched, total


def find_best_match_dreps(
    poll_votes: Iterable[PollVote],
    candidate_votes: Mapping[str, Iterable[DRepVote | PollVote]],
    drep_profiles: Optional[Mapping[str, EnrichedDRep]] = None,
    exclude_drep_id: Optional[str] = None,
    min_overlap: Optional[int] = None,
    min_match_rate: float = 0.0,
    limit: Optional[int] = None,
) -> RedelegationResult:
    """
    Find the DReps whose voting record best matches a delegator's poll votes.

    Args:
        poll_votes: The delegator's own poll votes
        candidate_votes: On-chain votes keyed by DRep id
        drep_profiles: DRep snapshots keyed by id, for names and tie-breaking score
        exclude_drep_id: Current DRep; reported separately as ``current_drep_match``
        min_overlap: Minimum comparable proposals (default from config, 3)
        min_match_rate: Minimum match rate as a fraction 0-1
        limit: Maximum candidates returned (default from config, 100)

    Returns:
        RedelegationResult with ranked matches
    """
    config = get_scoring_config()
    if min_overlap is None:
        min_overlap = config.min_redelegation_overlap
    if limit is None:
        limit = config.redelegation_limit
    drep_profiles = drep_profiles or {}

    polls = [(pv.proposal_key, VoteChoice.normalize(pv.vote)) for pv in poll_votes]
    if not polls:
        return RedelegationResult()

    current_drep_match = None
    candidates = []
    for drep_id, votes in candidate_votes.items():
        matched, total = _match_stats(polls, votes)

        if drep_id == exclude_drep_id:
            if total > 0:
                current_drep_match = RepresentationResult(
                    score=match_rate_score(matched, total),
                    aligned=matched,
                    misaligned=total - matched,
                    total=total,
                )
            continue

        if total < min_overlap:
            continue
        rate = matched / total
        if rate < min_match_rate:
            continue

        profile = drep_profiles.get(drep_id)
        candidates.append(
            RedelegationCandidate(
                drep_id=drep_id,
                drep_name=profile.name if profile else None,
                drep_score=profile.drep_score if profile else 0,
                match_score=match_rate_score(matched, total),
                match_rate=rate,
                agreed=matched,
                overlapping=total,
            )
        )

    candidates.sort(key=lambda c: (-c.match_rate, -c.drep_score, c.drep_id))
    logger.debug(f"Redelegation: {len(candidates)} candidates over min overlap {min_overlap}")

    return RedelegationResult(matches=candidates[:limit], current_drep_match=current_drep_match)
