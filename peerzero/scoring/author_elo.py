"""Author Elo feedback.

When a paper first becomes scored, its author's credibility moves by how
far the paper beat (or missed) the score expected from the author's own
standing:

    expected = clamp(5 + (credibility - 50) / 50, 3, 9)
    delta = round((actual - expected) x K(credibility), 2)

K shrinks as credibility grows, so established authors move slowly while
merely average work from a high-credibility author still costs them.
"""

from dataclasses import dataclass

from loguru import logger

from peerzero.config.rulesets import EloRules
from peerzero.data_management.schemas import CredibilityIntent, TransactionType


@dataclass
class EloAdjustment:
    """Components of one author Elo event.

    Attributes:
        author_credibility: Author's credibility when the event fired
        expected: Score the author's standing implies
        actual: Paper's weighted score
        k_factor: Step size for the author's band
        delta: Signed credibility change
    """

    author_credibility: float
    expected: float
    actual: float
    k_factor: float
    delta: float


class AuthorEloFeedback:
    """
    Computes the one-time author adjustment for a newly scored paper.

    Usage:
        elo = AuthorEloFeedback(config.elo)
        adjustment = elo.compute(author_credibility=50.0, actual_score=6.8)
    """

    def __init__(self, rules: EloRules):
        self.rules = rules
        self.k_bands = sorted(rules.k_bands, key=lambda band: band.above, reverse=True)
        self._logger = logger.bind(component="AuthorEloFeedback")

    def expected_score(self, credibility: float) -> float:
        rules = self.rules
        expected = rules.base_expected + (
            (credibility - rules.credibility_pivot) / rules.credibility_scale
        )
        return max(rules.expected_floor, min(rules.expected_ceiling, expected))

    def k_factor(self, credibility: float) -> float:
        for band in self.k_bands:
            if credibility > band.above:
                return band.k
        return self.rules.default_k

    def compute(self, author_credibility: float, actual_score: float) -> EloAdjustment:
        expected = self.expected_score(author_credibility)
        k = self.k_factor(author_credibility)
        delta = round((actual_score - expected) * k, 2)
        return EloAdjustment(
            author_credibility=author_credibility,
            expected=round(expected, 4),
            actual=actual_score,
            k_factor=k,
            delta=delta,
        )

    def intent(
        self,
        author_id: str,
        paper_id: str,
        author_credibility: float,
        actual_score: float,
    ) -> CredibilityIntent:
        """Build the ledger intent for a paper's Elo event.

        Zero deltas are still emitted so the event is auditable.
        """
        adjustment = self.compute(author_credibility, actual_score)
        transaction_type = (
            TransactionType.PAPER_SCORED_HIGH
            if adjustment.delta > 0
            else TransactionType.PAPER_SCORED_LOW
        )
        self._logger.info(
            f"Paper {paper_id} scored {actual_score} vs expected "
            f"{adjustment.expected:.2f} (K={adjustment.k_factor}): delta {adjustment.delta:+.2f}"
        )
        return CredibilityIntent(
            agent_id=author_id,
            delta=adjustment.delta,
            reason=(
                f"Paper scored {actual_score:.2f} against expected "
                f"{adjustment.expected:.2f}"
            ),
            transaction_type=transaction_type,
            related_paper_id=paper_id,
        )
