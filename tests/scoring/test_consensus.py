"""Tests for ConsensusScorer.

Tests cover:
- Weighted score from credibility snapshots
- Minimum review threshold (score) and variance threshold
- Population standard deviation of raw scores
- Order independence
- Quality-gate filtering
- Debug summary per scored paper
"""

import random

import pytest

from peerzero.config.rulesets import ScoringRules, WeightingRules
from peerzero.data_management.schemas import CredibilitySnapshot, Review
from peerzero.scoring.consensus import ConsensusScorer
from peerzero.scoring.weighting import ReviewerWeighting


def make_review(score: int, credibility: float = 50.0, passed: bool = True) -> Review:
    snapshot = CredibilitySnapshot(value=credibility)
    return Review(
        paper_id="paper-1",
        reviewer_id=f"reviewer-{random.random()}",
        score=score,
        reviewer_credibility_at_time=snapshot,
        weight=ReviewerWeighting(WeightingRules()).weight(snapshot),
        passed_quality_gate=passed,
    )


@pytest.fixture
def scorer() -> ConsensusScorer:
    return ConsensusScorer(ScoringRules(), ReviewerWeighting(WeightingRules()))


class TestWeightedScore:
    """Tests for the weighted consensus."""

    def test_equal_weights_is_mean(self, scorer):
        """Five reviewers at credibility 50 scoring [8,8,8,8,2] -> 6.8."""
        result = scorer.score([make_review(s) for s in (8, 8, 8, 8, 2)])
        assert result.weighted_score == 6.8
        assert result.review_count == 5

    def test_high_credibility_pulls_score(self, scorer):
        reviews = [make_review(9, 160.0)] + [make_review(5, 50.0) for _ in range(4)]
        result = scorer.score(reviews)
        # (9 * 2.0 + 5 * 0.6 * 4) / (2.0 + 2.4)
        assert result.weighted_score == round((18 + 12) / 4.4, 2)
        assert result.weighted_score > result.mean_score

    def test_summary_logged(self, scorer, loguru_records):
        scorer.score([make_review(s) for s in (8, 8, 8, 8, 2)])
        summaries = [r for r in loguru_records if r["extra"].get("component") == "ConsensusScorer"]
        assert len(summaries) == 1
        assert summaries[0]["level"].name == "DEBUG"
        assert "weighted=6.8" in summaries[0]["message"]

    def test_below_threshold_is_null(self, scorer):
        result = scorer.score([make_review(s) for s in (9, 9, 9, 9)])
        assert result.weighted_score is None
        assert result.variance == 0.0

    def test_configurable_threshold(self):
        scorer = ConsensusScorer(
            ScoringRules(min_reviews_for_score=3), ReviewerWeighting(WeightingRules())
        )
        assert scorer.score([make_review(s) for s in (6, 7, 8)]).weighted_score == 7.0

    def test_no_reviews(self, scorer):
        result = scorer.score([])
        assert result.weighted_score is None
        assert result.variance is None
        assert result.review_count == 0

    def test_failed_reviews_ignored(self, scorer):
        reviews = [make_review(8) for _ in range(5)] + [make_review(1, passed=False)]
        result = scorer.score(reviews)
        assert result.weighted_score == 8.0
        assert result.review_count == 5

    def test_order_independent(self, scorer):
        reviews = [
            make_review(s, c)
            for s, c in ((3, 12), (9, 180), (7, 64), (5, 90), (8, 30), (2, 140))
        ]
        expected = scorer.score(reviews)
        for seed in range(5):
            shuffled = reviews[:]
            random.Random(seed).shuffle(shuffled)
            result = scorer.score(shuffled)
            assert result.weighted_score == expected.weighted_score
            assert result.variance == expected.variance


class TestVariance:
    """Tests for the population standard deviation."""

    def test_scenario_std_dev(self, scorer):
        result = scorer.score([make_review(s) for s in (8, 8, 8, 8, 2)])
        assert result.variance == pytest.approx(2.4)

    def test_variance_needs_three_reviews(self, scorer):
        assert scorer.score([make_review(2), make_review(9)]).variance is None

    def test_variance_unweighted(self, scorer):
        """Credibility does not affect the spread."""
        low = scorer.score([make_review(s, 5) for s in (2, 5, 8)])
        high = scorer.score([make_review(s, 190) for s in (2, 5, 8)])
        assert low.variance == high.variance

    def test_min_max(self, scorer):
        result = scorer.score([make_review(s) for s in (4, 9, 6)])
        assert result.min_score == 4
        assert result.max_score == 9
