"""Per-review reviewer rewards and the review reputation multiplier.

Reviewing earns a small reward (more for papers still inside the new-paper
window). An outlier review costs a flat penalty instead. The sum is scaled
by how closely the reviewer's past scores tracked each paper's consensus:
consistently accurate reviewers earn up to 1.3x, erratic ones 0.7x.
"""

from dataclasses import dataclass
from typing import Sequence

from loguru import logger

from peerzero.config.rulesets import ReviewRewardRules
from peerzero.data_management.schemas import TransactionType


@dataclass
class ReviewReward:
    """Credibility change for one accepted review."""

    base: float
    outlier_penalty: float
    multiplier: float
    delta: float
    transaction_type: TransactionType
    reason: str


class ReviewReputation:
    """
    Computes reviewer rewards and reputation multipliers.

    Usage:
        reputation = ReviewReputation(config.rewards)
        multiplier = reputation.multiplier([0.4, 1.2, 0.8])
        reward = reputation.reward(is_new_paper=True, is_outlier=False, multiplier=multiplier)
    """

    def __init__(self, rules: ReviewRewardRules):
        self.rules = rules
        self.bands = sorted(rules.reputation_bands, key=lambda band: band.max_deviation)
        self._logger = logger.bind(component="ReviewReputation")

    def multiplier(self, deviations: Sequence[float]) -> float:
        """
        Reward multiplier from past deviations.

        Args:
            deviations: |score - paper mean| for recent reviews on papers with
                enough reviews to have a meaningful mean

        Returns:
            Multiplier; 1.0 when there are too few samples
        """
        if len(deviations) < self.rules.reputation_min_samples:
            return 1.0
        average = sum(deviations) / len(deviations)
        for band in self.bands:
            if average < band.max_deviation:
                return band.multiplier
        self._logger.debug(
            f"Average deviation {average:.2f} over {len(deviations)} reviews, reputation floor applies"
        )
        return self.rules.reputation_floor

    def reward(self, is_new_paper: bool, is_outlier: bool, multiplier: float) -> ReviewReward:
        rules = self.rules
        base = rules.new_paper_reward if is_new_paper else rules.established_reward
        penalty = rules.outlier_penalty if is_outlier else 0.0
        delta = round((base + penalty) * multiplier, 2)

        if is_outlier:
            transaction_type = TransactionType.OUTLIER_PENALTY
            reason = "Outlier review"
        elif is_new_paper:
            transaction_type = TransactionType.REVIEW_NEW
            reason = "Reviewed new paper"
        else:
            transaction_type = TransactionType.REVIEW_ESTABLISHED
            reason = "Reviewed established paper"

        if multiplier != 1.0:
            reason = f"{reason} (reputation x{multiplier})"

        return ReviewReward(
            base=base,
            outlier_penalty=penalty,
            multiplier=multiplier,
            delta=delta,
            transaction_type=transaction_type,
            reason=reason,
        )
