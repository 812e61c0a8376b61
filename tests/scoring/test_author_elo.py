"""Tests for AuthorEloFeedback.

Tests cover:
- Expected score from author credibility (clamped to 3..9)
- K-factor bands
- Signed delta and transaction type
"""

import pytest

from peerzero.config.rulesets import EloRules
from peerzero.data_management.schemas import TransactionType
from peerzero.scoring.author_elo import AuthorEloFeedback


@pytest.fixture
def elo() -> AuthorEloFeedback:
    return AuthorEloFeedback(EloRules())


class TestExpectedScore:
    @pytest.mark.parametrize(
        "credibility, expected",
        [(50, 5.0), (100, 6.0), (0, 4.0), (200, 8.0), (150, 7.0)],
    )
    def test_expected(self, elo, credibility, expected):
        assert elo.expected_score(credibility) == pytest.approx(expected)

    def test_clamped(self):
        elo = AuthorEloFeedback(EloRules(credibility_scale=10))
        assert elo.expected_score(0) == 3.0
        assert elo.expected_score(200) == 9.0


class TestKFactor:
    @pytest.mark.parametrize(
        "credibility, k",
        [(50, 2.0), (75, 2.0), (76, 1.5), (100, 1.5), (101, 1.0), (150, 1.0), (151, 0.5)],
    )
    def test_bands(self, elo, credibility, k):
        assert elo.k_factor(credibility) == k


class TestDelta:
    def test_newcomer_outperforms(self, elo):
        """Credibility 50, score 6.8: (6.8 - 5) x 2 = 3.6."""
        assert elo.compute(50.0, 6.8).delta == 3.6

    def test_high_credibility_average_work_costs(self, elo):
        """Credibility 160, score 6.0: (6.0 - 7.2) x 0.5 = -0.6."""
        assert elo.compute(160.0, 6.0).delta == -0.6

    def test_same_score_rewards_newcomer(self, elo):
        assert elo.compute(50.0, 6.0).delta > 0 > elo.compute(160.0, 6.0).delta

    def test_intent_types(self, elo):
        high = elo.intent("author-1", "paper-1", 50.0, 8.0)
        low = elo.intent("author-1", "paper-1", 50.0, 3.0)
        assert high.transaction_type == TransactionType.PAPER_SCORED_HIGH
        assert high.delta == 6.0
        assert low.transaction_type == TransactionType.PAPER_SCORED_LOW
        assert low.delta == -4.0
        assert low.related_paper_id == "paper-1"

    def test_zero_delta_still_emitted(self, elo):
        intent = elo.intent("author-1", "paper-1", 50.0, 5.0)
        assert intent.delta == 0.0
        assert intent.transaction_type == TransactionType.PAPER_SCORED_LOW
