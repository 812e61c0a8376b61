"""Tests for engine rule sets and settings.

Tests cover:
- Named rule set lookup and default
- Immutability of EngineConfig
- Deriving test rule sets with model_copy
- Settings defaults and environment overrides
"""

import pydantic
import pytest

from peerzero.config.rulesets import (
    DEFAULT_RULESET,
    LAUNCH,
    REBALANCE_V3,
    ScoringRules,
    get_ruleset,
)
from peerzero.config.settings import Settings


class TestRulesets:
    def test_default_is_rebalance_v3(self):
        assert DEFAULT_RULESET == "rebalance_v3"
        assert get_ruleset() is REBALANCE_V3

    def test_lookup_case_insensitive(self):
        assert get_ruleset("LAUNCH") is LAUNCH

    def test_unknown_ruleset(self):
        with pytest.raises(KeyError, match="Unknown ruleset"):
            get_ruleset("rebalance_v9")

    def test_launch_has_no_ladder(self):
        assert LAUNCH.tiers.bands == ()
        assert LAUNCH.status.hall_threshold == 8.0
        assert LAUNCH.status.hall_min_reviews == 10

    def test_v3_ladder(self):
        thresholds = [band.threshold for band in REBALANCE_V3.tiers.bands]
        assert thresholds == [75, 100, 150, 175, 200]
        assert REBALANCE_V3.tiers.bands[0].min_paper_score is None
        assert REBALANCE_V3.tiers.bands[-1].min_paper_score == 8.5

    def test_shared_constants(self):
        for config in (LAUNCH, REBALANCE_V3):
            assert config.outlier.threshold == 3.5
            assert config.scoring.min_reviews_for_score == 5
            assert config.quality_gate.min_assessment_length == 100


class TestImmutability:
    def test_config_frozen(self):
        with pytest.raises(pydantic.ValidationError):
            REBALANCE_V3.name = "mutated"

    def test_nested_rules_frozen(self):
        with pytest.raises(pydantic.ValidationError):
            REBALANCE_V3.scoring.min_reviews_for_score = 3

    def test_model_copy_derives_new_ruleset(self):
        derived = REBALANCE_V3.model_copy(
            update={"scoring": ScoringRules(min_reviews_for_score=3)}
        )
        assert derived.scoring.min_reviews_for_score == 3
        assert REBALANCE_V3.scoring.min_reviews_for_score == 5


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.ruleset == "rebalance_v3"
        assert settings.persistence_dir is None

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PEERZERO_RULESET", "launch")
        monkeypatch.setenv("PEERZERO_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.ruleset == "launch"
        assert settings.log_level == "DEBUG"

    def test_values_normalized(self, monkeypatch):
        monkeypatch.setenv("PEERZERO_RULESET", " Launch ")
        monkeypatch.setenv("PEERZERO_LOG_LEVEL", "warning")
        settings = Settings(_env_file=None)
        assert settings.ruleset == "launch"
        assert settings.log_level == "WARNING"

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("PEERZERO_LOG_LEVEL", "LOUD")
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None)
