"""Tests for per-vote alignment verdicts."""

import pytest

from drep_engine.classifiers import classify_proposal
from drep_engine.schemas import AlignmentStatus, ClassifiedProposal, DRepVote, PreferenceKey, RawProposal, TreasuryTier
from drep_engine.scorers import evaluate_vote_alignment, evaluate_votes, match_votes_to_proposals, summarize_alignments

TREASURY_PREFS = ["treasury-conservative", "smart-treasury-growth"]


def _evaluate(vote, prefs, relevant=TREASURY_PREFS, has_rationale=False, ptype="TreasuryWithdrawals", tier="major"):
    return evaluate_vote_alignment(vote, has_rationale, ptype, tier, relevant, prefs)


class TestNeutralCases:
    def test_no_user_prefs(self):
        result = _evaluate("No", [])
        assert result.status == AlignmentStatus.NEUTRAL
        assert result.reasons == []

    def test_no_intersection(self):
        result = _evaluate("No", ["innovation-defi-growth"])
        assert result.status == AlignmentStatus.NEUTRAL
        assert result.reasons == []

    def test_decentralization_has_no_per_vote_rule(self):
        result = _evaluate(
            "No", ["strong-decentralization"], relevant=["strong-decentralization"], ptype="NoConfidence", tier=None
        )
        assert result.status == AlignmentStatus.NEUTRAL

    def test_abstain_on_treasury_conservative(self):
        assert _evaluate("Abstain", ["treasury-conservative"]).status == AlignmentStatus.NEUTRAL


class TestTreasuryRules:
    def test_conservative_no(self):
        result = _evaluate("No", ["treasury-conservative"])
        assert result.status == AlignmentStatus.ALIGNED
        assert result.reasons == ["Voted No on treasury spend (major tier)"]

    def test_conservative_yes(self):
        result = _evaluate("Yes", ["treasury-conservative"], tier=None)
        assert result.status == AlignmentStatus.UNALIGNED
        assert result.reasons == ["Voted Yes on treasury spend"]

    def test_growth_yes_with_rationale(self):
        result = _evaluate("Yes", ["smart-treasury-growth"], has_rationale=True)
        assert result.status == AlignmentStatus.ALIGNED

    def test_growth_yes_without_rationale(self):
        assert _evaluate("Yes", ["smart-treasury-growth"]).status == AlignmentStatus.UNALIGNED

    def test_growth_no_without_rationale(self):
        assert _evaluate("No", ["smart-treasury-growth"]).status == AlignmentStatus.UNALIGNED

    def test_growth_no_with_rationale_no_verdict(self):
        result = _evaluate("No", ["smart-treasury-growth"], has_rationale=True)
        assert result.status == AlignmentStatus.NEUTRAL

    def test_treasury_rules_require_treasury_type(self):
        result = _evaluate("No", ["treasury-conservative"], ptype="ParameterChange", tier=None)
        assert result.status == AlignmentStatus.NEUTRAL

    def test_tie_counts_as_aligned(self):
        # conservative aligned (No), growth unaligned (No without rationale)
        result = _evaluate("No", TREASURY_PREFS)
        assert result.status == AlignmentStatus.ALIGNED
        assert len(result.reasons) == 2


class TestOtherRules:
    @pytest.mark.parametrize("vote,status", [("No", "aligned"), ("Abstain", "aligned"), ("Yes", "unaligned")])
    def test_security(self, vote, status):
        result = _evaluate(
            vote, ["protocol-security-first"], relevant=["protocol-security-first"], ptype="ParameterChange", tier=None
        )
        assert result.status == AlignmentStatus(status)

    @pytest.mark.parametrize("vote,status", [("Yes", "aligned"), ("No", "unaligned"), ("Abstain", "neutral")])
    def test_innovation(self, vote, status):
        result = _evaluate(
            vote, ["innovation-defi-growth"], relevant=["innovation-defi-growth"], ptype="InfoAction", tier=None
        )
        assert result.status == AlignmentStatus(status)

    @pytest.mark.parametrize("vote", ["Yes", "No", "Abstain"])
    def test_responsible_governance_ignores_direction(self, vote):
        prefs = ["responsible-governance"]
        with_rationale = _evaluate(vote, prefs, relevant=prefs, has_rationale=True, ptype="InfoAction", tier=None)
        without = _evaluate(vote, prefs, relevant=prefs, ptype="InfoAction", tier=None)
        assert with_rationale.status == AlignmentStatus.ALIGNED
        assert without.status == AlignmentStatus.UNALIGNED

    def test_tier_case_insensitive(self):
        result = _evaluate("No", ["treasury-conservative"], tier="Major")
        assert result.status == AlignmentStatus.ALIGNED
        assert result.reasons == ["Voted No on treasury spend (major tier)"]

    def test_unknown_tier_dropped_from_reason(self):
        result = _evaluate("No", ["treasury-conservative"], tier="Colossal")
        assert result.status == AlignmentStatus.ALIGNED
        assert result.reasons == ["Voted No on treasury spend"]

    def test_case_insensitive_vote(self):
        assert _evaluate("no", ["treasury-conservative"]).status == AlignmentStatus.ALIGNED

    def test_accepts_enum_prefs(self):
        result = _evaluate("No", [PreferenceKey.TREASURY_CONSERVATIVE], relevant=[PreferenceKey.TREASURY_CONSERVATIVE])
        assert result.status == AlignmentStatus.ALIGNED


class TestEvaluateVotes:
    def test_evaluates_pairs_and_summarizes(self):
        proposal = classify_proposal(
            RawProposal(
                proposal_tx_hash="tw",
                proposal_index=0,
                proposal_type="TreasuryWithdrawals",
                withdrawal=[{"amount": "5000000"}],
            )
        )
        votes = [
            DRepVote(proposal_tx_hash="tw", proposal_index=0, vote="No"),
            DRepVote(proposal_tx_hash="unknown", proposal_index=0, vote="Yes"),
        ]
        results = evaluate_votes(match_votes_to_proposals(votes, [proposal]), ["treasury-conservative"])
        assert [r.status for r in results] == [AlignmentStatus.ALIGNED, AlignmentStatus.NEUTRAL]
        assert results[0].reasons == ["Voted No on treasury spend (routine tier)"]

        summary = summarize_alignments(results)
        assert (summary.aligned, summary.unaligned, summary.neutral) == (1, 0, 1)
        assert summary.evaluated == 1


class TestTierParsing:
    @pytest.mark.parametrize(
        "raw,expected", [("MAJOR", TreasuryTier.MAJOR), (" Routine ", TreasuryTier.ROUTINE), ("huge", None)]
    )
    def test_classified_proposal_tier(self, raw, expected):
        proposal = ClassifiedProposal(
            tx_hash="tw", index=0, type="TreasuryWithdrawals", title="Grant", treasury_tier=raw
        )
        assert proposal.treasury_tier == expected
