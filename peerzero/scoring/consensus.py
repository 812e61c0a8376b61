"""Consensus scoring for papers.

weighted_score = sum(score x weight(snapshot)) / sum(weight), rounded.
variance is the population standard deviation of the raw scores and is
only used for contested detection, never for the score itself.
"""

import statistics
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from peerzero.config.rulesets import ScoringRules
from peerzero.data_management.schemas import Review
from peerzero.scoring.weighting import ReviewerWeighting


@dataclass
class ConsensusResult:
    """Scoring summary for one paper.

    Attributes:
        weighted_score: Weighted consensus (None below the review threshold)
        variance: Population std dev of raw scores (None below 3 reviews)
        review_count: Number of passing reviews considered
        mean_score: Unweighted mean (None without reviews)
        min_score: Lowest raw score
        max_score: Highest raw score
        total_weight: Sum of reviewer weights
    """

    weighted_score: Optional[float]
    variance: Optional[float]
    review_count: int
    mean_score: Optional[float] = None
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    total_weight: float = 0.0


class ConsensusScorer:
    """
    Computes a paper's weighted score and variance from accepted reviews.

    The result depends only on the set of reviews, never their order.

    Usage:
        scorer = ConsensusScorer(config.scoring, ReviewerWeighting(config.weighting))
        result = scorer.score(reviews)
    """

    def __init__(self, rules: ScoringRules, weighting: ReviewerWeighting):
        self.min_reviews_for_score = rules.min_reviews_for_score
        self.min_reviews_for_variance = rules.min_reviews_for_variance
        self.precision = rules.score_precision
        self.weighting = weighting
        self._logger = logger.bind(component="ConsensusScorer")

    def score(self, reviews: Sequence[Review]) -> ConsensusResult:
        """
        Score a paper from its reviews.

        Reviews that did not pass the quality gate are ignored.

        Args:
            reviews: Reviews of a single paper

        Returns:
            ConsensusResult with nullable score and variance
        """
        passing = [r for r in reviews if r.passed_quality_gate]
        count = len(passing)
        if count == 0:
            return ConsensusResult(weighted_score=None, variance=None, review_count=0)

        scores = [r.score for r in passing]
        weights = [self.weighting.weight(r.reviewer_credibility_at_time) for r in passing]
        total_weight = sum(weights)

        weighted_score: Optional[float] = None
        if count >= self.min_reviews_for_score and total_weight > 0:
            weighted_sum = sum(s * w for s, w in zip(scores, weights))
            weighted_score = round(weighted_sum / total_weight, self.precision)

        variance: Optional[float] = None
        if count >= self.min_reviews_for_variance:
            variance = round(statistics.pstdev(scores), self.precision)

        self._logger.debug(
            f"Scored {count} reviews: weighted={weighted_score} variance={variance} "
            f"weight={total_weight:.2f}"
        )

        return ConsensusResult(
            weighted_score=weighted_score,
            variance=variance,
            review_count=count,
            mean_score=round(statistics.fmean(scores), self.precision),
            min_score=min(scores),
            max_score=max(scores),
            total_weight=round(total_weight, 4),
        )
