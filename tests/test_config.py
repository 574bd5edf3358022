"""Tests for scoring config loading and validation."""

import pytest

from drep_engine.config import (
    DEFAULT_COMPOSITE_WEIGHTS,
    ScoringConfig,
    build_config,
    get_config_path,
    get_scoring_config,
)
from drep_engine.schemas import AlignmentBreakdown, Scorecard
from drep_engine.scorers import detect_alignment_shift


class TestLoading:
    def test_repo_config_matches_defaults(self):
        config = get_scoring_config()
        assert config.composite_weights == DEFAULT_COMPOSITE_WEIGHTS
        assert config.shift_threshold == 8
        assert config.category_shift_threshold == 5
        assert config.min_poll_responses == 3
        assert config.min_redelegation_overlap == 3
        assert config.rationale_curve_knots == ((0, 0), (20, 30), (60, 70), (100, 100))

    def test_cached(self):
        assert get_scoring_config() is get_scoring_config()

    def test_missing_file_uses_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DREP_ENGINE_CONFIG", str(tmp_path / "missing.yaml"))
        assert get_scoring_config() == ScoringConfig()

    def test_env_override(self, monkeypatch, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("scoring_version: '9.9.9'\nalignment_shift:\n  overall_threshold: 20\n")
        monkeypatch.setenv("DREP_ENGINE_CONFIG", str(path))

        assert get_config_path() == path.resolve()
        config = get_scoring_config()
        assert config.scoring_version == "9.9.9"
        assert config.shift_threshold == 20
        # Unspecified sections keep defaults
        assert config.category_shift_threshold == 5
        assert config.composite_weights == DEFAULT_COMPOSITE_WEIGHTS

    def test_empty_file(self, monkeypatch, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("")
        monkeypatch.setenv("DREP_ENGINE_CONFIG", str(path))
        assert get_scoring_config() == ScoringConfig()

    def test_threshold_flows_into_shift_detection(self, monkeypatch, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("alignment_shift:\n  overall_threshold: 20\n")
        monkeypatch.setenv("DREP_ENGINE_CONFIG", str(path))

        def card(overall):
            return Scorecard(drep_id="drep1cfg", scores=AlignmentBreakdown(overall=overall), calculated_at=1)

        assert detect_alignment_shift(card(70), card(55), "Alice", []) is None
        assert detect_alignment_shift(card(70), card(50), "Alice", []) is not None


class TestValidation:
    def test_weights_must_sum_to_one(self):
        weights = dict(DEFAULT_COMPOSITE_WEIGHTS, participation=0.5)
        with pytest.raises(ValueError, match="sum"):
            build_config({"composite_weights": weights})

    def test_weights_missing_key(self):
        weights = {k: v for k, v in DEFAULT_COMPOSITE_WEIGHTS.items() if k != "rationale"}
        with pytest.raises(ValueError, match="missing"):
            build_config({"composite_weights": weights})

    def test_weights_unexpected_key(self):
        weights = dict(DEFAULT_COMPOSITE_WEIGHTS, charisma=0.0)
        with pytest.raises(ValueError, match="unexpected"):
            build_config({"composite_weights": weights})

    def test_knots_must_increase(self):
        with pytest.raises(ValueError, match="sorted"):
            build_config({"rationale_curve_knots": [[0, 0], [50, 60], [40, 70], [100, 100]]})

    def test_knots_must_not_decrease(self):
        with pytest.raises(ValueError, match="monotonic"):
            build_config({"rationale_curve_knots": [[0, 0], [50, 60], [100, 50]]})

    def test_too_few_knots(self):
        with pytest.raises(ValueError):
            build_config({"rationale_curve_knots": [[0, 0]]})

    def test_security_weight_range(self):
        with pytest.raises(ValueError, match="security_vote_weight"):
            build_config({"security_vote_weight": 1.5})

    def test_keywords_lowercased(self):
        config = build_config({"innovation_keywords": ["DeFi", "Smart Contracts"]})
        assert config.innovation_keywords == ("defi", "smart contracts")
