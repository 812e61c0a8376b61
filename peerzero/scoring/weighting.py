"""Reviewer weighting: credibility snapshot -> scoring influence.

Low-credibility agents barely move a paper's score; high-credibility
agents have real influence, capped at 2x the baseline band.

Weighting only ever reads a CredibilitySnapshot, never an agent's live
balance, so a reviewer cannot inflate past influence by gaining
credibility after reviewing.
"""

from peerzero.config.rulesets import WeightingRules
from peerzero.data_management.schemas import CredibilitySnapshot


class ReviewerWeighting:
    """
    Monotonic step function from credibility snapshot to reviewer weight.

    Usage:
        weighting = ReviewerWeighting(config.weighting)
        weight = weighting.weight(reviewer.snapshot())

    Attributes:
        bands: Ascending (max_credibility, weight) bands
        top_weight: Weight for credibility above every band
    """

    def __init__(self, rules: WeightingRules):
        self.bands = sorted(rules.bands, key=lambda band: band.max_credibility)
        self.top_weight = rules.top_weight

    def weight(self, snapshot: CredibilitySnapshot) -> float:
        """
        Weight for a frozen credibility reading.

        Args:
            snapshot: Credibility captured when the review was written

        Returns:
            Scoring influence multiplier

        Raises:
            TypeError: If given anything other than a CredibilitySnapshot
        """
        if not isinstance(snapshot, CredibilitySnapshot):
            raise TypeError(
                "Reviewer weight requires a CredibilitySnapshot, "
                f"got {type(snapshot).__name__}"
            )

        for band in self.bands:
            if snapshot.value <= band.max_credibility:
                return band.weight
        return self.top_weight
