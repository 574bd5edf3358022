"""Pydantic models for engine outputs.

All results are frozen: recomputation produces a new value, never a patched
one. ``model_dump(mode="json")`` gives the plain wire shape consumed by the
API and storage collaborators.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drep_engine.schemas.common import AlignmentStatus, PreferenceKey, VoteChoice
from drep_engine.schemas.governance import ClassifiedProposal, DRepVote

_FROZEN = ConfigDict(frozen=True)


class VoteWithProposal(BaseModel):
    """A vote joined to its classified proposal (None when unmatched)."""

    model_config = _FROZEN

    vote: DRepVote
    proposal: Optional[ClassifiedProposal] = None


# =============================================================================
# Scorecards
# =============================================================================


class AlignmentBreakdown(BaseModel):
    """Per-category alignment scores (0-100) plus the overall mean."""

    model_config = _FROZEN

    treasury: int = Field(50, ge=0, le=100)
    decentralization: int = Field(50, ge=0, le=100)
    security: int = Field(50, ge=0, le=100)
    innovation: int = Field(50, ge=0, le=100)
    transparency: int = Field(50, ge=0, le=100)
    overall: int = Field(50, ge=0, le=100)


class Scorecard(BaseModel):
    """One alignment snapshot for a DRep at a point in time."""

    model_config = _FROZEN

    drep_id: str
    scores: AlignmentBreakdown
    votes_analyzed: int = 0
    calculated_at: int = Field(..., description="Epoch milliseconds")
    epoch: Optional[int] = None


class CategoryScores(BaseModel):
    """All six per-category scores, stored on the DRep profile between passes."""

    model_config = _FROZEN

    alignment_treasury_conservative: int
    alignment_treasury_growth: int
    alignment_decentralization: int
    alignment_security: int
    alignment_innovation: int
    alignment_transparency: int
    last_vote_time: Optional[int] = None


class CategoryShift(BaseModel):
    model_config = _FROZEN

    pref: PreferenceKey
    previous: int
    current: int


class AlignmentShift(BaseModel):
    """Material negative movement between two scorecards."""

    model_config = _FROZEN

    drep_id: str
    drep_name: str
    previous_match: int
    current_match: int
    delta: int
    category_shifts: list[CategoryShift] = Field(default_factory=list)


# =============================================================================
# Per-vote Alignment
# =============================================================================


class VoteAlignment(BaseModel):
    model_config = _FROZEN

    status: AlignmentStatus
    reasons: list[str] = Field(default_factory=list)


class AlignmentSummary(BaseModel):
    """Counts of per-vote verdicts across a DRep's voting record."""

    model_config = _FROZEN

    aligned: int = 0
    unaligned: int = 0
    neutral: int = 0

    @property
    def evaluated(self) -> int:
        return self.aligned + self.unaligned


# =============================================================================
# Representation / Redelegation
# =============================================================================


class PollVote(BaseModel):
    """A delegator's own stated vote on a proposal (from a sentiment poll)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    proposal_tx_hash: str = Field(..., min_length=1)
    proposal_index: int = Field(..., ge=0)
    vote: VoteChoice

    @field_validator("vote", mode="before")
    @classmethod
    def _normalize_vote(cls, v):
        return VoteChoice.normalize(v)

    @property
    def proposal_key(self) -> tuple[str, int]:
        return (self.proposal_tx_hash, self.proposal_index)


class VoteComparison(BaseModel):
    model_config = _FROZEN

    proposal_tx_hash: str
    proposal_index: int
    proposal_title: Optional[str] = None
    user_vote: VoteChoice
    drep_vote: VoteChoice
    agreed: bool


class RepresentationResult(BaseModel):
    """How well one DRep's votes matched one delegator's poll votes."""

    model_config = _FROZEN

    score: Optional[int] = None
    aligned: int = 0
    misaligned: int = 0
    total: int = 0
    comparisons: list[VoteComparison] = Field(default_factory=list)


class MajorityComparison(BaseModel):
    """DRep vote versus the majority of its delegators' poll responses."""

    model_config = _FROZEN

    proposal_tx_hash: str
    proposal_index: int
    title: str
    drep_vote: VoteChoice
    delegator_majority: VoteChoice
    delegator_majority_pct: int
    total_responses: int
    aligned: bool


class DelegatorAlignment(BaseModel):
    model_config = _FROZEN

    alignment: Optional[int] = None
    total_compared: int = 0
    aligned_count: int = 0
    proposals: list[MajorityComparison] = Field(default_factory=list)


class RedelegationCandidate(BaseModel):
    model_config = _FROZEN

    drep_id: str
    drep_name: Optional[str] = None
    drep_score: int = 0
    match_score: int
    match_rate: float
    agreed: int
    overlapping: int


class RedelegationResult(BaseModel):
    model_config = _FROZEN

    matches: list[RedelegationCandidate] = Field(default_factory=list)
    current_drep_match: Optional[RepresentationResult] = None


# =============================================================================
# DRep Metrics
# =============================================================================


class ReliabilityResult(BaseModel):
    """Reliability pillar and the sub-metrics it is built from."""

    model_config = _FROZEN

    score: int = 0
    streak: int = 0
    recency: int = 0
    longest_gap: int = 0
    tenure: int = 0
