"""Join a DRep's votes to classified proposals by (tx hash, index)."""

from typing import Iterable

from drep_engine.schemas.common import PreferenceKey
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote
from drep_engine.schemas.results import VoteWithProposal


def match_votes_to_proposals(
    votes: Iterable[DRepVote], proposals: Iterable[ClassifiedProposal]
) -> list[VoteWithProposal]:
    """One pair per vote, in vote order. Votes on unknown proposals get ``proposal=None``."""
    proposal_map = {p.key: p for p in proposals}
    return [VoteWithProposal(vote=vote, proposal=proposal_map.get(vote.proposal_key)) for vote in votes]


def relevant_pairs(pairs: Iterable[VoteWithProposal], pref: PreferenceKey) -> list[VoteWithProposal]:
    """Matched pairs whose proposal carries ``pref``."""
    return [pair for pair in pairs if pair.proposal is not None and pref in pair.proposal.relevant_prefs]
