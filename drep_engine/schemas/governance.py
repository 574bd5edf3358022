"""Pydantic models for governance input records.

These are the immutable snapshots handed to the engine by the ingestion
collaborator: raw proposals, DRep votes, and enriched DRep aggregates.
Field names follow the chain indexer's wire format so collaborator rows can
be passed through ``model_validate`` without renaming.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from drep_engine.schemas.common import PreferenceKey, ProposalType, TreasuryTier, VoteChoice

# Rationale text may live at the top level or under a CIP-100 style "body"
_INLINE_RATIONALE_KEYS = ("rationale", "comment")


def _body_or_root(meta: Optional[dict], key: str) -> Any:
    """Read ``meta.body.<key>`` falling back to ``meta.<key>``. Malformed shapes yield None."""
    if not isinstance(meta, dict):
        return None
    body = meta.get("body")
    if isinstance(body, dict) and body.get(key):
        return body.get(key)
    return meta.get(key) or None


# =============================================================================
# Proposals
# =============================================================================


class WithdrawalEntry(BaseModel):
    """One treasury withdrawal target. Amount is lovelace."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    stake_address: Optional[str] = None
    amount: Optional[str | int] = None

    @property
    def lovelace(self) -> int:
        """Amount as an integer; non-numeric amounts count as zero."""
        if self.amount is None:
            return 0
        try:
            return int(self.amount)
        except (TypeError, ValueError):
            return 0


class RawProposal(BaseModel):
    """Governance proposal as recorded on chain. Identified by (tx hash, index)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    proposal_tx_hash: str = Field(..., min_length=1)
    proposal_index: int = Field(..., ge=0)
    proposal_type: ProposalType = ProposalType.UNKNOWN
    withdrawal: Optional[list[WithdrawalEntry]] = None
    meta_json: Optional[dict[str, Any]] = None
    proposal_description: Optional[str] = None
    param_proposal: Optional[dict[str, Any]] = None
    proposed_epoch: Optional[int] = None
    ratified_epoch: Optional[int] = None
    enacted_epoch: Optional[int] = None
    dropped_epoch: Optional[int] = None
    expired_epoch: Optional[int] = None
    block_time: Optional[int] = None

    @field_validator("proposal_type", mode="before")
    @classmethod
    def _parse_type(cls, v):
        return ProposalType.parse(v)

    @field_validator("meta_json", "param_proposal", mode="before")
    @classmethod
    def _drop_non_dict(cls, v):
        # Indexer occasionally returns strings or lists here
        return v if isinstance(v, dict) else None

    @field_validator("proposal_description", mode="before")
    @classmethod
    def _stringify_description(cls, v):
        if v is None or isinstance(v, str):
            return v
        return None

    @property
    def key(self) -> tuple[str, int]:
        return (self.proposal_tx_hash, self.proposal_index)


class ClassifiedProposal(BaseModel):
    """Derived view of a RawProposal tagged with the preferences it touches."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    index: int
    type: ProposalType
    title: str
    abstract: Optional[str] = None
    withdrawal_amount_ada: Optional[int] = None
    treasury_tier: Optional[TreasuryTier] = None
    param_changes: Optional[dict[str, Any]] = None
    relevant_prefs: frozenset[PreferenceKey] = frozenset()
    proposed_epoch: Optional[int] = None
    block_time: Optional[int] = None

    @field_validator("treasury_tier", mode="before")
    @classmethod
    def _parse_tier(cls, v):
        return TreasuryTier.parse(v)

    @field_serializer("relevant_prefs")
    def _serialize_prefs(self, prefs: frozenset[PreferenceKey]) -> list[str]:
        return sorted(p.value for p in prefs)

    @property
    def key(self) -> tuple[str, int]:
        return (self.tx_hash, self.index)

    def is_relevant_to(self, pref: PreferenceKey) -> bool:
        return pref in self.relevant_prefs


# =============================================================================
# Votes
# =============================================================================


class DRepVote(BaseModel):
    """A DRep's on-chain vote on one proposal. Append-only."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    proposal_tx_hash: str = Field(..., min_length=1)
    proposal_index: int = Field(..., ge=0)
    vote_tx_hash: Optional[str] = None
    vote: VoteChoice
    block_time: int = 0
    epoch_no: Optional[int] = None
    meta_url: Optional[str] = None
    meta_hash: Optional[str] = None
    meta_json: Optional[dict[str, Any]] = None

    @field_validator("vote", mode="before")
    @classmethod
    def _normalize_vote(cls, v):
        return VoteChoice.normalize(v)

    @field_validator("meta_json", mode="before")
    @classmethod
    def _drop_non_dict(cls, v):
        return v if isinstance(v, dict) else None

    @property
    def proposal_key(self) -> tuple[str, int]:
        return (self.proposal_tx_hash, self.proposal_index)

    @property
    def inline_rationale(self) -> Optional[str]:
        """Rationale text embedded in vote metadata, if any."""
        for key in _INLINE_RATIONALE_KEYS:
            value = _body_or_root(self.meta_json, key)
            if isinstance(value, str) and value.strip():
                return value
        return None

    @property
    def has_rationale(self) -> bool:
        """A rationale URL or an inline rationale field counts."""
        if self.meta_url:
            return True
        return _body_or_root(self.meta_json, "rationale") is not None


# =============================================================================
# DRep Aggregates
# =============================================================================

_PILLAR_FIELDS = (
    "participation_rate",
    "rationale_rate",
    "reliability_score",
    "profile_completeness",
)


class EnrichedDRep(BaseModel):
    """Snapshot of one DRep's aggregate stats for a scoring pass.

    Produced wholesale by the ingestion collaborator on each pass; the engine
    never patches individual fields.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    drep_id: str = Field(..., min_length=1)
    name: Optional[str] = None

    # Pillars (0-100)
    participation_rate: Optional[float] = 0.0
    effective_participation: Optional[float] = None
    rationale_rate: Optional[float] = 0.0
    reliability_score: Optional[float] = 0.0
    profile_completeness: Optional[float] = 0.0

    # Reliability sub-metrics
    reliability_streak: int = 0
    reliability_recency: int = 0
    reliability_longest_gap: int = 0
    reliability_tenure: int = 0

    # Voting power (string so unknown tiers survive; scorers fall back to 50)
    size_tier: str = "Unknown"
    voting_power_ada: float = 0.0
    yes_votes: int = 0
    no_votes: int = 0
    abstain_votes: int = 0

    # Precomputed per-category alignment (nullable until first scoring pass)
    alignment_treasury_conservative: Optional[int] = None
    alignment_treasury_growth: Optional[int] = None
    alignment_decentralization: Optional[int] = None
    alignment_security: Optional[int] = None
    alignment_innovation: Optional[int] = None
    alignment_transparency: Optional[int] = None

    drep_score: int = 0

    @field_validator(*_PILLAR_FIELDS, "effective_participation", mode="before")
    @classmethod
    def _nan_to_none(cls, v):
        if isinstance(v, float) and math.isnan(v):
            return None
        return v

    @field_validator("size_tier", mode="before")
    @classmethod
    def _tier_to_str(cls, v):
        if v is None:
            return "Unknown"
        return getattr(v, "value", v)

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes + self.abstain_votes
