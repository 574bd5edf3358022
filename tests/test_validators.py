"""Tests for structural input validation."""

import pytest

from drep_engine.schemas import DRepVote, ProposalType, VoteChoice
from drep_engine.validators import (
    ValidationError,
    check_pillar_bounds,
    parse_drep,
    parse_poll_votes,
    parse_proposals,
    parse_votes,
)


class TestParseProposals:
    def test_valid(self, treasury_proposal_raw):
        (proposal,) = parse_proposals([treasury_proposal_raw])
        assert proposal.proposal_type == ProposalType.TREASURY_WITHDRAWALS
        assert proposal.withdrawal[0].lovelace == 25_000_000 * 1_000_000
        assert proposal.key == ("aaaa1111bbbb2222", 0)

    def test_unknown_type_degrades(self):
        (proposal,) = parse_proposals([{"proposal_tx_hash": "x", "proposal_index": 0, "proposal_type": "Mystery"}])
        assert proposal.proposal_type == ProposalType.UNKNOWN

    def test_malformed_metadata_dropped(self):
        (proposal,) = parse_proposals([{"proposal_tx_hash": "x", "proposal_index": 0, "meta_json": "not json"}])
        assert proposal.meta_json is None

    def test_missing_identity_reports_index(self, treasury_proposal_raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_proposals([treasury_proposal_raw, {"proposal_index": 0}])
        err = exc_info.value
        assert err.record_type == "RawProposal"
        assert err.index == 1
        assert any("proposal_tx_hash" in e["loc"] for e in err.errors)

    def test_negative_index(self):
        with pytest.raises(ValidationError):
            parse_proposals([{"proposal_tx_hash": "x", "proposal_index": -1}])

    def test_non_mapping(self):
        with pytest.raises(ValidationError, match="expected a mapping"):
            parse_proposals(["not a record"])

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_proposals([None])


class TestParseVotes:
    def test_normalizes_case(self):
        (vote,) = parse_votes([{"proposal_tx_hash": "x", "proposal_index": 0, "vote": "abstain"}])
        assert vote.vote == VoteChoice.ABSTAIN

    def test_invalid_choice(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_votes([{"proposal_tx_hash": "x", "proposal_index": 0, "vote": "Maybe"}])
        assert exc_info.value.record_type == "DRepVote"

    def test_model_instances_pass_through(self):
        vote = DRepVote(proposal_tx_hash="x", proposal_index=0, vote="Yes")
        assert parse_votes([vote])[0] is vote

    def test_poll_votes(self):
        (poll,) = parse_poll_votes([{"proposal_tx_hash": "x", "proposal_index": 2, "vote": "NO"}])
        assert poll.vote == VoteChoice.NO
        assert poll.proposal_key == ("x", 2)

    def test_poll_vote_requires_proposal(self):
        with pytest.raises(ValidationError):
            parse_poll_votes([{"vote": "Yes"}])


class TestParseDRep:
    def test_valid(self):
        drep = parse_drep({"drep_id": "drep1v", "participation_rate": 55.5, "size_tier": None})
        assert drep.participation_rate == 55.5
        assert drep.size_tier == "Unknown"

    def test_nan_pillar_becomes_none(self):
        drep = parse_drep({"drep_id": "drep1v", "rationale_rate": float("nan")})
        assert drep.rationale_rate is None

    def test_out_of_bounds_warns_not_raises(self):
        drep = parse_drep({"drep_id": "drep1v", "participation_rate": 120, "reliability_score": -5})
        assert check_pillar_bounds(drep) == ["participation_rate", "reliability_score"]

    def test_in_bounds(self):
        drep = parse_drep({"drep_id": "drep1v", "participation_rate": 100, "profile_completeness": 0})
        assert check_pillar_bounds(drep) == []

    def test_missing_id(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_drep({"participation_rate": 50})
        assert exc_info.value.index is None
