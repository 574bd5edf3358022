"""Tests for representation matching, delegator majority alignment and redelegation."""

import random

from drep_engine.schemas import DRepVote, EnrichedDRep, PollVote, VoteChoice
from drep_engine.scorers import calculate_delegator_alignment, calculate_representation_match, find_best_match_dreps

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _poll(tx: str, vote: str, index: int = 0) -> PollVote:
    return PollVote(proposal_tx_hash=tx, proposal_index=index, vote=vote)


def _drep_vote(tx: str, vote: str, index: int = 0) -> DRepVote:
    return DRepVote(proposal_tx_hash=tx, proposal_index=index, vote=vote)


# ─── Single delegator ────────────────────────────────────────────────────────


class TestRepresentationMatch:
    def test_two_of_three(self):
        polls = [_poll("a", "Yes"), _poll("b", "Yes"), _poll("c", "Yes")]
        drep = [_drep_vote("a", "Yes"), _drep_vote("b", "Yes"), _drep_vote("c", "No")]
        result = calculate_representation_match(polls, drep)
        assert result.score == 67
        assert (result.aligned, result.misaligned, result.total) == (2, 1, 3)

    def test_no_overlap(self):
        result = calculate_representation_match([_poll("a", "Yes")], [_drep_vote("b", "Yes")])
        assert result.score is None
        assert result.total == 0
        assert result.comparisons == []

    def test_disagreements_first(self):
        polls = [_poll("a", "Yes"), _poll("b", "No")]
        drep = [_drep_vote("a", "Yes"), _drep_vote("b", "Yes")]
        result = calculate_representation_match(polls, drep)
        assert [c.agreed for c in result.comparisons] == [False, True]

    def test_order_independent(self):
        polls = [_poll(tx, v) for tx, v in [("a", "Yes"), ("b", "No"), ("c", "Abstain"), ("d", "Yes")]]
        drep = [_drep_vote(tx, v) for tx, v in [("a", "No"), ("b", "No"), ("c", "Abstain"), ("d", "No")]]
        baseline = calculate_representation_match(polls, drep)

        shuffled_polls = polls[:]
        shuffled_drep = drep[:]
        random.Random(7).shuffle(shuffled_polls)
        random.Random(11).shuffle(shuffled_drep)
        assert calculate_representation_match(shuffled_polls, shuffled_drep) == baseline

    def test_duplicate_poll_votes_each_compared(self):
        polls = [_poll("a", "Yes"), _poll("a", "No")]
        drep = [_drep_vote("a", "Yes")]
        forward = calculate_representation_match(polls, drep)
        backward = calculate_representation_match(polls[::-1], drep)

        assert forward == backward
        assert forward.score == 50
        assert (forward.aligned, forward.misaligned, forward.total) == (1, 1, 2)
        assert [c.user_vote for c in forward.comparisons] == [VoteChoice.NO, VoteChoice.YES]

    def test_case_normalized_poll_votes(self):
        result = calculate_representation_match([_poll("a", "yes")], [_drep_vote("a", "Yes")])
        assert result.comparisons[0].user_vote == VoteChoice.YES
        assert result.score == 100

    def test_titles(self):
        result = calculate_representation_match(
            [_poll("a", "Yes")], [_drep_vote("a", "Yes")], proposal_titles={("a", 0): "Treasury grant"}
        )
        assert result.comparisons[0].proposal_title == "Treasury grant"

    def test_index_distinguishes_proposals(self):
        result = calculate_representation_match([_poll("a", "Yes", index=1)], [_drep_vote("a", "Yes", index=0)])
        assert result.total == 0


# ─── Delegator majority ──────────────────────────────────────────────────────


class TestDelegatorAlignment:
    def test_min_responses_gate(self):
        responses = [_poll("a", "Yes"), _poll("a", "Yes")]
        result = calculate_delegator_alignment(responses, [_drep_vote("a", "Yes")])
        assert result.alignment is None
        assert result.total_compared == 0

    def test_majority_comparison(self):
        responses = [_poll("a", "Yes"), _poll("a", "Yes"), _poll("a", "No")] + [_poll("b", "No")] * 3
        drep = [_drep_vote("a", "Yes"), _drep_vote("b", "Yes")]
        result = calculate_delegator_alignment(responses, drep, proposal_titles={("a", 0): "Budget"})

        assert result.total_compared == 2
        assert result.aligned_count == 1
        assert result.alignment == 50
        first, second = result.proposals
        assert first.title == "Budget"
        assert first.delegator_majority == VoteChoice.YES
        assert first.delegator_majority_pct == 67
        assert first.total_responses == 3
        assert first.aligned
        assert second.title == "Proposal b..."
        assert not second.aligned

    def test_tie_breaks_yes_over_no(self):
        responses = [_poll("a", "No"), _poll("a", "Yes"), _poll("a", "Abstain"), _poll("a", "Yes"), _poll("a", "No")]
        result = calculate_delegator_alignment(responses, [_drep_vote("a", "No")])
        assert result.proposals[0].delegator_majority == VoteChoice.YES
        assert result.proposals[0].delegator_majority_pct == 40

    def test_custom_minimum(self):
        result = calculate_delegator_alignment([_poll("a", "No")], [_drep_vote("a", "No")], min_responses=1)
        assert result.alignment == 100


# ─── Redelegation ────────────────────────────────────────────────────────────


class TestFindBestMatchDReps:
    POLLS = [_poll("a", "Yes"), _poll("b", "No"), _poll("c", "Yes"), _poll("d", "No")]

    def _votes(self, choices: str) -> list[DRepVote]:
        # "YNYN" -> votes on a, b, c, d; "-" skips a proposal
        out = []
        for tx, c in zip("abcd", choices):
            if c != "-":
                out.append(_drep_vote(tx, {"Y": "Yes", "N": "No", "A": "Abstain"}[c]))
        return out

    def test_ranked_by_match_rate(self):
        candidates = {
            "drep1low": self._votes("NNNN"),
            "drep1high": self._votes("YNYN"),
            "drep1mid": self._votes("YNYY"),
        }
        result = find_best_match_dreps(self.POLLS, candidates)
        assert [m.drep_id for m in result.matches] == ["drep1high", "drep1mid", "drep1low"]
        assert result.matches[0].match_score == 100
        assert result.matches[0].overlapping == 4

    def test_min_overlap_excludes(self):
        candidates = {"drep1thin": self._votes("YN--"), "drep1full": self._votes("NNNN")}
        result = find_best_match_dreps(self.POLLS, candidates)
        assert [m.drep_id for m in result.matches] == ["drep1full"]

    def test_ties_broken_by_drep_score_then_id(self):
        candidates = {"drep1b": self._votes("YNYN"), "drep1a": self._votes("YNYN"), "drep1c": self._votes("YNYN")}
        profiles = {
            "drep1b": EnrichedDRep(drep_id="drep1b", name="Bee", drep_score=80),
            "drep1a": EnrichedDRep(drep_id="drep1a", drep_score=60),
            "drep1c": EnrichedDRep(drep_id="drep1c", drep_score=80),
        }
        result = find_best_match_dreps(self.POLLS, candidates, drep_profiles=profiles)
        assert [m.drep_id for m in result.matches] == ["drep1b", "drep1c", "drep1a"]
        assert result.matches[0].drep_name == "Bee"

    def test_current_drep_reported_separately(self):
        candidates = {"drep1current": self._votes("Y---"), "drep1other": self._votes("YNYN")}
        result = find_best_match_dreps(self.POLLS, candidates, exclude_drep_id="drep1current")
        assert [m.drep_id for m in result.matches] == ["drep1other"]
        assert result.current_drep_match.score == 100
        assert result.current_drep_match.total == 1

    def test_min_match_rate_and_limit(self):
        candidates = {
            "drep1a": self._votes("YNYN"),
            "drep1b": self._votes("YNYY"),
            "drep1c": self._votes("NYNY"),
        }
        result = find_best_match_dreps(self.POLLS, candidates, min_match_rate=0.5, limit=1)
        assert [m.drep_id for m in result.matches] == ["drep1a"]

    def test_duplicate_poll_votes_order_independent(self):
        polls = self.POLLS + [_poll("a", "No")]
        candidates = {"drep1a": self._votes("YNYN")}
        forward = find_best_match_dreps(polls, candidates)
        shuffled = polls[:]
        random.Random(3).shuffle(shuffled)
        backward = find_best_match_dreps(shuffled, candidates)

        assert forward == backward
        assert forward.matches[0].match_score == 80
        assert (forward.matches[0].agreed, forward.matches[0].overlapping) == (4, 5)

    def test_no_poll_votes(self):
        result = find_best_match_dreps([], {"drep1a": self._votes("YNYN")})
        assert result.matches == []
        assert result.current_drep_match is None
