"""Tests for the truth anchor blend.

Tests cover:
- No rebuttal evidence leaves the truth exactly at consensus
- Rebut and support claims
- Review-depth scaling of evidence weight
- Influence saturation
- Neutral responses ignored
"""

import pytest

from peerzero.config.rulesets import ReconciliationRules
from peerzero.data_management.schemas import ResponseStance
from peerzero.reconciliation.truth_anchor import RebuttalEvidence, TruthAnchorCalculator


@pytest.fixture
def calculator():
    return TruthAnchorCalculator(ReconciliationRules())


def rebut(score: float, reviews: int = 5, paper_id: str = "rebut-1") -> RebuttalEvidence:
    return RebuttalEvidence(paper_id=paper_id, stance=ResponseStance.REBUT, score=score, review_count=reviews)


class TestTruthAnchor:
    def test_no_rebuttals_equals_consensus(self, calculator):
        result = calculator.compute([8, 8, 8, 8, 2], [])
        assert result.truth_anchor == result.original_consensus
        assert result.truth_anchor == pytest.approx(6.8)
        assert result.influence == 0.0
        assert result.direction == 0
        assert result.rebuttal_truth is None

    def test_single_rebut(self, calculator):
        result = calculator.compute([8, 8, 8, 8, 2], [rebut(8.0)])

        # claimed = 10 - 8 x 0.9 = 2.8, weight 0.8, influence 0.24
        assert result.contributions[0].claimed_score == pytest.approx(2.8)
        assert result.total_weight == pytest.approx(0.8)
        assert result.influence == pytest.approx(0.24)
        assert result.truth_anchor == pytest.approx(5.84)
        assert result.direction == -1

    def test_support_claim_moves_up(self, calculator):
        support = RebuttalEvidence(
            paper_id="support-1", stance=ResponseStance.SUPPORT, score=6.0, review_count=5
        )
        result = calculator.compute([5, 5, 5, 5, 5], [support])

        # claimed = 5 + 6 x 0.3 = 6.8, weight 0.6, influence 0.18
        assert result.contributions[0].claimed_score == pytest.approx(6.8)
        assert result.truth_anchor == pytest.approx(5.324)
        assert result.direction == 1

    def test_support_claim_capped_at_ten(self, calculator):
        support = RebuttalEvidence(
            paper_id="support-1", stance=ResponseStance.SUPPORT, score=10.0, review_count=5
        )
        result = calculator.compute([9, 9, 9, 9, 9], [support])
        assert result.contributions[0].claimed_score == 10.0
        assert result.truth_anchor <= 10.0

    def test_shallow_rebuttal_weighs_less(self, calculator):
        deep = calculator.compute([8, 8, 8, 8, 8], [rebut(8.0, reviews=5)])
        shallow = calculator.compute([8, 8, 8, 8, 8], [rebut(8.0, reviews=2)])

        assert shallow.total_weight == pytest.approx(0.32)
        assert shallow.influence < deep.influence
        assert shallow.truth_anchor > deep.truth_anchor

    def test_influence_saturates(self, calculator):
        rebuttals = [rebut(10.0, paper_id=f"rebut-{i}") for i in range(4)]
        result = calculator.compute([8, 8, 8, 8, 2], rebuttals)

        assert result.total_weight == pytest.approx(4.0)
        assert result.influence == pytest.approx(0.8)
        # consensus keeps 20% of the blend
        assert result.truth_anchor == pytest.approx(6.8 * 0.2 + 1.0 * 0.8)

    def test_neutral_ignored(self, calculator):
        neutral = RebuttalEvidence(
            paper_id="neutral-1", stance=ResponseStance.NEUTRAL, score=9.0, review_count=5
        )
        result = calculator.compute([7, 7, 7, 7, 7], [neutral])
        assert result.contributions == []
        assert result.truth_anchor == 7.0

    def test_empty_scores_rejected(self, calculator):
        with pytest.raises(ValueError):
            calculator.compute([], [rebut(8.0)])
