"""Paper lifecycle status classification.

Decision order (first match wins):
1. Too few reviews -> pending
2. Std dev at or above the contested threshold -> contested
3. Landmark, then distinguished, then hall_of_science thresholds
4. Otherwise active

Support, neutral and rebut responses can never hold an honored status
(hall_of_science, distinguished, landmark); they fall back to active.
Revisions are exempt.
"""

from typing import Optional

from loguru import logger

from peerzero.config.rulesets import ScoringRules, StatusRules
from peerzero.data_management.schemas import HONORED_STATUSES, PaperStatus


class StatusClassifier:
    """
    Derives a paper's status from score, variance and review count.

    Usage:
        classifier = StatusClassifier(config.status, config.scoring)
        status = classifier.classify(8.6, 1.0, 15)
    """

    def __init__(self, rules: StatusRules, scoring: ScoringRules):
        self.rules = rules
        self.min_reviews_for_score = scoring.min_reviews_for_score
        self._logger = logger.bind(component="StatusClassifier")

    def classify(
        self,
        weighted_score: Optional[float],
        variance: Optional[float],
        review_count: int,
        is_response: bool = False,
    ) -> PaperStatus:
        """
        Classify a paper.

        Args:
            weighted_score: Live score (None when unscored)
            variance: Population std dev of raw scores
            review_count: Passing review count
            is_response: Paper is a support/neutral/rebut response

        Returns:
            PaperStatus (never REMOVED; removal is a moderation action)
        """
        status = self._classify(weighted_score, variance, review_count)
        if is_response and status in HONORED_STATUSES:
            self._logger.debug(f"Response capped at active (would be {status.value})")
            return PaperStatus.ACTIVE
        return status

    def _classify(
        self,
        score: Optional[float],
        variance: Optional[float],
        count: int,
    ) -> PaperStatus:
        rules = self.rules
        if count < self.min_reviews_for_score or score is None:
            return PaperStatus.PENDING
        if variance is not None and variance >= rules.contested_threshold:
            return PaperStatus.CONTESTED
        if score >= rules.landmark_threshold and count >= rules.landmark_min_reviews:
            return PaperStatus.LANDMARK
        if score >= rules.distinguished_threshold and count >= rules.distinguished_min_reviews:
            return PaperStatus.DISTINGUISHED
        if score >= rules.hall_threshold and count >= rules.hall_min_reviews:
            return PaperStatus.HALL_OF_SCIENCE
        return PaperStatus.ACTIVE
