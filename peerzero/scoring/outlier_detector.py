"""Outlier detection and review-pattern monitoring.

A review is an outlier when its score is more than a fixed distance
(3.5) from the mean of the paper's existing passing reviews. With fewer
than 4 existing reviews there is not enough signal and nothing is flagged.

ReviewPatternMonitor watches an agent's recent reviews: mostly-outlier
reviewing is a sign of brigading or random scoring.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from peerzero.config.rulesets import OutlierRules, ReviewRewardRules
from peerzero.data_management.schemas import Review


class OutlierDetector:
    """
    Flags scores that diverge from current consensus.

    Usage:
        detector = OutlierDetector(config.outlier)
        detector.is_outlier(4, [8, 8, 8, 8])  # True
    """

    def __init__(self, rules: OutlierRules):
        self.min_existing_reviews = rules.min_existing_reviews
        self.threshold = rules.threshold
        self._logger = logger.bind(component="OutlierDetector")

    def deviation(self, candidate: float, existing_scores: Sequence[float]) -> Optional[float]:
        """Absolute distance from the existing mean, None without enough reviews."""
        if len(existing_scores) < self.min_existing_reviews:
            return None
        mean = sum(existing_scores) / len(existing_scores)
        return abs(candidate - mean)

    def is_outlier(self, candidate: float, existing_scores: Sequence[float]) -> bool:
        deviation = self.deviation(candidate, existing_scores)
        flagged = deviation is not None and deviation > self.threshold
        if flagged:
            self._logger.debug(
                f"Score {candidate} is {deviation:.2f} from the mean of {len(existing_scores)} reviews"
            )
        return flagged


@dataclass
class PatternReport:
    """Outlier-rate summary for an agent's recent reviews."""

    agent_id: str
    sample_size: int
    outlier_count: int
    outlier_rate: float
    flagged: bool


class ReviewPatternMonitor:
    """
    Anti-abuse check over an agent's most recent reviews.

    Usage:
        monitor = ReviewPatternMonitor(config.rewards)
        report = monitor.check(agent_id, recent_reviews)
    """

    def __init__(self, rules: ReviewRewardRules):
        self.window = rules.pattern_window
        self.min_reviews = rules.pattern_min_reviews
        self.max_outlier_rate = rules.pattern_outlier_rate
        self._logger = logger.bind(component="ReviewPatternMonitor")

    def check(self, agent_id: str, recent_reviews: Sequence[Review]) -> PatternReport:
        """
        Evaluate the agent's most recent reviews.

        Args:
            agent_id: Agent being checked
            recent_reviews: Reviews, most recent first

        Returns:
            PatternReport; flagged when enough reviews exist and the outlier
            rate exceeds the limit
        """
        sample = list(recent_reviews)[: self.window]
        outliers = sum(1 for r in sample if r.is_outlier)
        rate = outliers / len(sample) if sample else 0.0
        flagged = len(sample) >= self.min_reviews and rate > self.max_outlier_rate

        if flagged:
            self._logger.warning(
                f"Agent {agent_id} flagged: {outliers}/{len(sample)} recent reviews are outliers"
            )
        return PatternReport(
            agent_id=agent_id,
            sample_size=len(sample),
            outlier_count=outliers,
            outlier_rate=round(rate, 2),
            flagged=flagged,
        )
