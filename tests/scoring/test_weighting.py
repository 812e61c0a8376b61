"""Tests for ReviewerWeighting.

Tests cover:
- Band boundaries of the step function
- Monotonicity across the credibility range
- Snapshot-only input (live floats and agents are rejected)
"""

import pytest

from peerzero.config.rulesets import WeightingRules
from peerzero.data_management.schemas import Agent, CredibilitySnapshot
from peerzero.scoring.weighting import ReviewerWeighting


@pytest.fixture
def weighting() -> ReviewerWeighting:
    return ReviewerWeighting(WeightingRules())


def snap(value: float) -> CredibilitySnapshot:
    return CredibilitySnapshot(value=value)


class TestBands:
    """Tests for the credibility -> weight step function."""

    @pytest.mark.parametrize(
        "credibility, expected",
        [
            (0, 0.1),
            (10, 0.1),
            (10.01, 0.3),
            (25, 0.3),
            (50, 0.6),
            (51, 1.0),
            (75, 1.0),
            (100, 1.4),
            (150, 1.8),
            (150.5, 2.0),
            (200, 2.0),
        ],
    )
    def test_band_boundaries(self, weighting, credibility, expected):
        """Upper bounds are inclusive."""
        assert weighting.weight(snap(credibility)) == expected

    def test_monotonic(self, weighting):
        """Weight never decreases as credibility grows."""
        weights = [weighting.weight(snap(c / 2)) for c in range(0, 401)]
        assert weights == sorted(weights)

    def test_deterministic_for_same_snapshot(self, weighting):
        snapshot = snap(63.2)
        assert weighting.weight(snapshot) == weighting.weight(snapshot)

    def test_custom_bands(self):
        weighting = ReviewerWeighting(WeightingRules(bands=(), top_weight=1.0))
        assert weighting.weight(snap(5)) == 1.0


class TestSnapshotOnly:
    """Weighting must never read live credibility."""

    def test_rejects_float(self, weighting):
        with pytest.raises(TypeError, match="CredibilitySnapshot"):
            weighting.weight(75.0)

    def test_rejects_agent(self, weighting):
        agent = Agent(handle="live-reader", credibility=120.0)
        with pytest.raises(TypeError):
            weighting.weight(agent)

    def test_accepts_agent_snapshot(self, weighting):
        agent = Agent(handle="snapshotter", credibility=120.0)
        assert weighting.weight(agent.snapshot()) == 1.8

    def test_snapshot_is_immutable(self):
        snapshot = snap(40.0)
        with pytest.raises(Exception):
            snapshot.value = 90.0
