"""Typed records consumed and produced by the scoring engine."""

from drep_engine.schemas.common import (
    CRITICAL_PROPOSAL_TYPES,
    AlignmentStatus,
    PreferenceKey,
    ProposalType,
    SizeTier,
    TreasuryTier,
    VoteChoice,
    get_pref_label,
)
from drep_engine.schemas.governance import (
    ClassifiedProposal,
    DRepVote,
    EnrichedDRep,
    RawProposal,
    WithdrawalEntry,
)
from drep_engine.schemas.results import (
    AlignmentBreakdown,
    AlignmentShift,
    AlignmentSummary,
    CategoryScores,
    CategoryShift,
    DelegatorAlignment,
    MajorityComparison,
    PollVote,
    RedelegationCandidate,
    RedelegationResult,
    ReliabilityResult,
    RepresentationResult,
    Scorecard,
    VoteAlignment,
    VoteComparison,
    VoteWithProposal,
)

__all__ = [
    # Enums
    "AlignmentStatus",
    "CRITICAL_PROPOSAL_TYPES",
    "PreferenceKey",
    "ProposalType",
    "SizeTier",
    "TreasuryTier",
    "VoteChoice",
    "get_pref_label",
    # Inputs
    "ClassifiedProposal",
    "DRepVote",
    "EnrichedDRep",
    "RawProposal",
    "WithdrawalEntry",
    # Results
    "AlignmentBreakdown",
    "AlignmentShift",
    "AlignmentSummary",
    "CategoryScores",
    "CategoryShift",
    "DelegatorAlignment",
    "MajorityComparison",
    "PollVote",
    "RedelegationCandidate",
    "RedelegationResult",
    "ReliabilityResult",
    "RepresentationResult",
    "Scorecard",
    "VoteAlignment",
    "VoteComparison",
    "VoteWithProposal",
]
