"""Proposal classification."""

from drep_engine.classifiers.proposal_classifier import (
    TREASURY_TIER_ROUTINE,
    TREASURY_TIER_SIGNIFICANT,
    classify_proposal,
    classify_proposals,
    determine_treasury_tier,
    extract_abstract,
    extract_title,
    get_proposals_for_pref,
    is_treasury_vote,
    total_withdrawal_ada,
)

__all__ = [
    "TREASURY_TIER_ROUTINE",
    "TREASURY_TIER_SIGNIFICANT",
    "classify_proposal",
    "classify_proposals",
    "determine_treasury_tier",
    "extract_abstract",
    "extract_title",
    "get_proposals_for_pref",
    "is_treasury_vote",
    "total_withdrawal_ada",
]
