"""
Per-Vote Alignment - verdict for one vote against a delegator's preferences.

This is the atomic unit behind the match score shown next to each vote.
Each preference key has a fixed rule that yields aligned, unaligned, or no
verdict, plus a short reason. The vote is aligned when aligned verdicts are
at least as many as unaligned ones; with no verdicts at all it is neutral.
"""

import logging
from typing import Callable, Iterable, Optional

from drep_engine.schemas.common import AlignmentStatus, PreferenceKey, ProposalType, TreasuryTier, VoteChoice
from drep_engine.schemas.results import AlignmentSummary, VoteAlignment, VoteWithProposal
from drep_engine.scorers.scorecard import normalize_prefs

logger = logging.getLogger(__name__)

# (aligned?, reason) or None for no verdict
Verdict = Optional[tuple[bool, str]]


def _treasury_reason(text: str, tier: Optional[TreasuryTier]) -> str:
    if tier is None:
        return text
    return f"{text} ({tier.value} tier)"


def _treasury_conservative(
    vote: VoteChoice, has_rationale: bool, proposal_type: ProposalType, tier: Optional[TreasuryTier]
) -> Verdict:
    if proposal_type != ProposalType.TREASURY_WITHDRAWALS:
        return None
    if vote == VoteChoice.NO:
        return True, _treasury_reason("Voted No on treasury spend", tier)
    if vote == VoteChoice.YES:
        return False, _treasury_reason("Voted Yes on treasury spend", tier)
    return None


def _smart_treasury_growth(
    vote: VoteChoice, has_rationale: bool, proposal_type: ProposalType, tier: Optional[TreasuryTier]
) -> Verdict:
    if proposal_type != ProposalType.TREASURY_WITHDRAWALS:
        return None
    if vote == VoteChoice.YES and has_rationale:
        return True, _treasury_reason("Supported treasury spend with rationale", tier)
    if vote == VoteChoice.YES:
        return False, _treasury_reason("Supported treasury spend without rationale", tier)
    if vote == VoteChoice.NO and not has_rationale:
        return False, _treasury_reason("Rejected treasury spend without rationale", tier)
    return None


def _protocol_security_first(vote: VoteChoice, has_rationale: bool, *_) -> Verdict:
    if vote in (VoteChoice.NO, VoteChoice.ABSTAIN):
        return True, "Cautious vote on security-relevant proposal"
    return False, "Approved security-relevant proposal"


def _innovation_defi_growth(vote: VoteChoice, has_rationale: bool, *_) -> Verdict:
    if vote == VoteChoice.YES:
        return True, "Supported innovation/growth proposal"
    if vote == VoteChoice.NO:
        return False, "Voted against innovation/growth proposal"
    return None


def _responsible_governance(vote: VoteChoice, has_rationale: bool, *_) -> Verdict:
    if has_rationale:
        return True, "Provided on-chain rationale"
    return False, "No on-chain rationale provided"


# strong-decentralization is a DRep-level property with no per-vote rule
VOTE_RULES: dict[PreferenceKey, Callable[..., Verdict]] = {
    PreferenceKey.TREASURY_CONSERVATIVE: _treasury_conservative,
    PreferenceKey.SMART_TREASURY_GROWTH: _smart_treasury_growth,
    PreferenceKey.PROTOCOL_SECURITY_FIRST: _protocol_security_first,
    PreferenceKey.INNOVATION_DEFI_GROWTH: _innovation_defi_growth,
    PreferenceKey.RESPONSIBLE_GOVERNANCE: _responsible_governance,
}


def evaluate_vote_alignment(
    vote: VoteChoice | str,
    has_rationale: bool,
    proposal_type: Optional[ProposalType | str],
    treasury_tier: Optional[TreasuryTier | str],
    relevant_prefs: Iterable,
    user_prefs: Iterable,
) -> VoteAlignment:
    """
    Evaluate a single vote's alignment with a delegator's preferences.

    Args:
        vote: Yes/No/Abstain (case-insensitive)
        has_rationale: Whether the DRep attached a rationale
        proposal_type: Type of the proposal voted on
        treasury_tier: Spend tier for treasury proposals, else None
        relevant_prefs: Preference keys the proposal was tagged with
        user_prefs: Preference keys the delegator selected

    Returns:
        VoteAlignment with status and one reason per verdict
    """
    selected = normalize_prefs(user_prefs)
    matching = [p for p in PreferenceKey if p in selected and p in normalize_prefs(relevant_prefs)]
    if not matching:
        return VoteAlignment(status=AlignmentStatus.NEUTRAL)

    choice = VoteChoice.normalize(vote)
    ptype = ProposalType.parse(proposal_type)
    tier = TreasuryTier.parse(treasury_tier)
    if tier is None and treasury_tier:
        logger.debug(f"Ignoring unrecognized treasury tier: {treasury_tier!r}")

    reasons = []
    aligned = 0
    unaligned = 0
    for pref in matching:
        rule = VOTE_RULES.get(pref)
        verdict = rule(choice, has_rationale, ptype, tier) if rule else None
        if verdict is None:
            continue
        is_aligned, reason = verdict
        reasons.append(reason)
        if is_aligned:
            aligned += 1
        else:
            unaligned += 1

    if aligned == 0 and unaligned == 0:
        return VoteAlignment(status=AlignmentStatus.NEUTRAL, reasons=reasons)

    status = AlignmentStatus.ALIGNED if aligned >= unaligned else AlignmentStatus.UNALIGNED
    return VoteAlignment(status=status, reasons=reasons)


def evaluate_votes(pairs: Iterable[VoteWithProposal], user_prefs: Iterable) -> list[VoteAlignment]:
    """Evaluate every vote in order. Votes on unknown proposals are neutral."""
    selected = normalize_prefs(user_prefs)
    results = []
    for pair in pairs:
        if pair.proposal is None:
            results.append(VoteAlignment(status=AlignmentStatus.NEUTRAL))
            continue
        results.append(
            evaluate_vote_alignment(
                pair.vote.vote,
                pair.vote.has_rationale,
                pair.proposal.type,
                pair.proposal.treasury_tier,
                pair.proposal.relevant_prefs,
                selected,
            )
        )
    return results


def summarize_alignments(alignments: Iterable[VoteAlignment]) -> AlignmentSummary:
    counts = {status: 0 for status in AlignmentStatus}
    for alignment in alignments:
        counts[alignment.status] += 1
    return AlignmentSummary(
        aligned=counts[AlignmentStatus.ALIGNED],
        unaligned=counts[AlignmentStatus.UNALIGNED],
        neutral=counts[AlignmentStatus.NEUTRAL],
    )
