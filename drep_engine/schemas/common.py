"""Shared enums for governance scoring.

Closed sets are modelled as ``(str, Enum)`` so values serialize as their
plain string form and unhandled cases are easy to spot in the scorers.
"""

from enum import Enum
from typing import Optional

# =============================================================================
# Proposal Types (CIP-1694 governance actions)
# =============================================================================


class ProposalType(str, Enum):
    """Governance action type as reported by the chain indexer."""

    TREASURY_WITHDRAWALS = "TreasuryWithdrawals"
    PARAMETER_CHANGE = "ParameterChange"
    HARD_FORK_INITIATION = "HardForkInitiation"
    INFO_ACTION = "InfoAction"
    NO_CONFIDENCE = "NoConfidence"
    NEW_COMMITTEE = "NewCommittee"
    NEW_CONSTITUTIONAL_COMMITTEE = "NewConstitutionalCommittee"
    NEW_CONSTITUTION = "NewConstitution"
    UPDATE_CONSTITUTION = "UpdateConstitution"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value) -> "ProposalType":
        """Map a raw type string to a member; unrecognized values become UNKNOWN."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN

    @property
    def is_critical(self) -> bool:
        """Actions that change the constitution, committee, or protocol version."""
        return self in CRITICAL_PROPOSAL_TYPES


CRITICAL_PROPOSAL_TYPES = frozenset(
    {
        ProposalType.HARD_FORK_INITIATION,
        ProposalType.NO_CONFIDENCE,
        ProposalType.NEW_COMMITTEE,
        ProposalType.NEW_CONSTITUTIONAL_COMMITTEE,
        ProposalType.NEW_CONSTITUTION,
        ProposalType.UPDATE_CONSTITUTION,
    }
)


# =============================================================================
# Delegator Preferences
# =============================================================================


class PreferenceKey(str, Enum):
    """Values a delegator can declare. Selected as a subset."""

    TREASURY_CONSERVATIVE = "treasury-conservative"
    SMART_TREASURY_GROWTH = "smart-treasury-growth"
    PROTOCOL_SECURITY_FIRST = "protocol-security-first"
    INNOVATION_DEFI_GROWTH = "innovation-defi-growth"
    STRONG_DECENTRALIZATION = "strong-decentralization"
    RESPONSIBLE_GOVERNANCE = "responsible-governance"

    @property
    def label(self) -> str:
        return PREFERENCE_LABELS[self]


PREFERENCE_LABELS = {
    PreferenceKey.TREASURY_CONSERVATIVE: "Treasury Conservative",
    PreferenceKey.SMART_TREASURY_GROWTH: "Treasury Growth-Oriented",
    PreferenceKey.STRONG_DECENTRALIZATION: "Decentralization First",
    PreferenceKey.PROTOCOL_SECURITY_FIRST: "Protocol Security & Stability",
    PreferenceKey.INNOVATION_DEFI_GROWTH: "Innovation & DeFi Growth",
    PreferenceKey.RESPONSIBLE_GOVERNANCE: "Transparency & Accountability",
}


def get_pref_label(pref) -> str:
    """Human-readable label for a preference key (raw strings pass through)."""
    try:
        return PreferenceKey(pref).label
    except ValueError:
        return str(pref)


# =============================================================================
# Vote / Tier Enums
# =============================================================================


class TreasuryTier(str, Enum):
    """Spend-size tier of a treasury withdrawal."""

    ROUTINE = "routine"
    SIGNIFICANT = "significant"
    MAJOR = "major"

    @classmethod
    def parse(cls, value) -> Optional["TreasuryTier"]:
        """Case-insensitive parse; empty or unrecognized values become None."""
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return None


class VoteChoice(str, Enum):
    """On-chain (or poll) vote direction."""

    YES = "Yes"
    NO = "No"
    ABSTAIN = "Abstain"

    @classmethod
    def normalize(cls, value) -> "VoteChoice":
        """Case-insensitive parse: 'yes', 'YES' and 'Yes' are the same vote."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        return cls(text[:1].upper() + text[1:].lower())


class SizeTier(str, Enum):
    """Voting-power bucket of a DRep."""

    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    WHALE = "Whale"


class AlignmentStatus(str, Enum):
    """Verdict for one vote against a delegator's preferences."""

    ALIGNED = "aligned"
    UNALIGNED = "unaligned"
    NEUTRAL = "neutral"
