"""Proposal Classifier - tags governance actions with the preferences they touch.

Classification is deterministic and driven by the CIP-1694 action type:

- TreasuryWithdrawals: treasury-conservative + smart-treasury-growth, plus a
  spend-size tier from the total withdrawal amount
- ParameterChange: protocol-security-first
- HardForkInitiation: protocol-security-first + innovation-defi-growth
- NoConfidence: strong-decentralization + protocol-security-first
- InfoAction: keyword scan of title/abstract for innovation terms, otherwise
  responsible-governance
- Anything else: responsible-governance

Malformed metadata never raises; missing fields degrade to None/defaults.
"""

import logging
from typing import Any, Iterable, Optional

from drep_engine.config import get_scoring_config
from drep_engine.schemas.common import PreferenceKey, ProposalType, TreasuryTier
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote, RawProposal

logger = logging.getLogger(__name__)

LOVELACE_PER_ADA = 1_000_000

# Treasury amount tiers (in ADA)
TREASURY_TIER_ROUTINE = 1_000_000  # < 1M ADA
TREASURY_TIER_SIGNIFICANT = 20_000_000  # 1M - 20M ADA
# >= 20M ADA = major

TYPE_PREFERENCES: dict[ProposalType, frozenset[PreferenceKey]] = {
    ProposalType.TREASURY_WITHDRAWALS: frozenset(
        {PreferenceKey.TREASURY_CONSERVATIVE, PreferenceKey.SMART_TREASURY_GROWTH}
    ),
    ProposalType.PARAMETER_CHANGE: frozenset({PreferenceKey.PROTOCOL_SECURITY_FIRST}),
    ProposalType.HARD_FORK_INITIATION: frozenset(
        {PreferenceKey.PROTOCOL_SECURITY_FIRST, PreferenceKey.INNOVATION_DEFI_GROWTH}
    ),
    ProposalType.NO_CONFIDENCE: frozenset(
        {PreferenceKey.STRONG_DECENTRALIZATION, PreferenceKey.PROTOCOL_SECURITY_FIRST}
    ),
}

DEFAULT_PREFERENCES = frozenset({PreferenceKey.RESPONSIBLE_GOVERNANCE})

# Legacy heuristic for votes whose proposal was never classified
TREASURY_KEYWORDS = ["treasury", "withdrawal", "budget", "fund", "spend", "grant", "funding"]


# =============================================================================
# Metadata extraction
# =============================================================================


def _meta_field(meta: Optional[dict], key: str) -> Optional[str]:
    """Read a string field from ``meta.body`` first, then ``meta``."""
    if not isinstance(meta, dict):
        return None
    body = meta.get("body")
    if isinstance(body, dict):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
    value = meta.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_title(proposal: RawProposal) -> str:
    """Structured metadata title, else a placeholder built from the tx hash."""
    title = _meta_field(proposal.meta_json, "title")
    if title:
        return title
    return f"Proposal {proposal.proposal_tx_hash[:8]}..."


def extract_abstract(proposal: RawProposal) -> Optional[str]:
    return (
        _meta_field(proposal.meta_json, "abstract")
        or proposal.proposal_description
        or _meta_field(proposal.meta_json, "motivation")
    )


# =============================================================================
# Treasury tiers
# =============================================================================


def total_withdrawal_ada(proposal: RawProposal) -> Optional[int]:
    """Sum of withdrawal amounts in whole ADA; None when there are no entries."""
    if not proposal.withdrawal:
        return None
    total_lovelace = sum(entry.lovelace for entry in proposal.withdrawal)
    return total_lovelace // LOVELACE_PER_ADA


def determine_treasury_tier(amount_ada: Optional[int]) -> Optional[TreasuryTier]:
    if amount_ada is None:
        return None
    if amount_ada < TREASURY_TIER_ROUTINE:
        return TreasuryTier.ROUTINE
    if amount_ada < TREASURY_TIER_SIGNIFICANT:
        return TreasuryTier.SIGNIFICANT
    return TreasuryTier.MAJOR


# =============================================================================
# Classification
# =============================================================================


def _info_action_preferences(title: Optional[str], abstract: Optional[str]) -> frozenset[PreferenceKey]:
    search_text = " ".join(t for t in (title, abstract) if t).lower()
    keywords = get_scoring_config().innovation_keywords
    if any(keyword in search_text for keyword in keywords):
        return frozenset({PreferenceKey.INNOVATION_DEFI_GROWTH})
    return DEFAULT_PREFERENCES


def classify_proposal(proposal: RawProposal) -> ClassifiedProposal:
    """Classify one proposal by CIP-1694 type and metadata."""
    withdrawal_amount_ada = None
    treasury_tier = None

    if proposal.proposal_type == ProposalType.TREASURY_WITHDRAWALS:
        relevant_prefs = TYPE_PREFERENCES[ProposalType.TREASURY_WITHDRAWALS]
        withdrawal_amount_ada = total_withdrawal_ada(proposal)
        treasury_tier = determine_treasury_tier(withdrawal_amount_ada)
    elif proposal.proposal_type == ProposalType.INFO_ACTION:
        # Keyword scan uses the metadata title only, never the hash placeholder
        relevant_prefs = _info_action_preferences(
            _meta_field(proposal.meta_json, "title"),
            _meta_field(proposal.meta_json, "abstract"),
        )
    else:
        relevant_prefs = TYPE_PREFERENCES.get(proposal.proposal_type, DEFAULT_PREFERENCES)

    if proposal.proposal_type == ProposalType.UNKNOWN:
        logger.debug(f"Unrecognized proposal type for {proposal.proposal_tx_hash}#{proposal.proposal_index}")

    return ClassifiedProposal(
        tx_hash=proposal.proposal_tx_hash,
        index=proposal.proposal_index,
        type=proposal.proposal_type,
        title=extract_title(proposal),
        abstract=extract_abstract(proposal),
        withdrawal_amount_ada=withdrawal_amount_ada,
        treasury_tier=treasury_tier,
        param_changes=proposal.param_proposal,
        relevant_prefs=relevant_prefs,
        proposed_epoch=proposal.proposed_epoch,
        block_time=proposal.block_time,
    )


def classify_proposals(proposals: Iterable[RawProposal]) -> list[ClassifiedProposal]:
    return [classify_proposal(p) for p in proposals]


def get_proposals_for_pref(
    classified_proposals: Iterable[ClassifiedProposal], pref: PreferenceKey
) -> list[ClassifiedProposal]:
    """Proposals tagged with a specific preference."""
    return [p for p in classified_proposals if pref in p.relevant_prefs]


def is_treasury_vote(vote: DRepVote) -> bool:
    """Keyword check on vote metadata for votes whose proposal is unknown."""
    meta: dict[str, Any] = vote.meta_json or {}
    search_text = " ".join(
        str(meta.get(key)) for key in ("title", "abstract", "motivation", "rationale") if meta.get(key)
    ).lower()
    return any(keyword in search_text for keyword in TREASURY_KEYWORDS)
