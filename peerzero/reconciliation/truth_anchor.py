"""Truth anchor computation.

Each scored rebuttal implies a score for the disputed paper:
- rebut stance: claimed = 10 - rebuttal_score x 0.9 (a strong rebuttal
  implies the original deserves a low score)
- support stance: claimed = min(10, consensus + rebuttal_score x 0.3)

Claims are weighted by community agreement (rebuttal_score / 10) scaled by
review depth (full weight at 5 reviews), then blended with the original
consensus:

    influence = min(0.8, total_weight x 0.3)
    truth = consensus x (1 - influence) + rebuttal_truth x influence

Influence saturates so no paper can be fully overridden by rebuttals.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from loguru import logger

from peerzero.config.rulesets import ReconciliationRules
from peerzero.data_management.schemas import ResponseStance


@dataclass
class RebuttalEvidence:
    """A scored response paper used as evidence.

    Attributes:
        paper_id: Response paper id
        stance: REBUT or SUPPORT
        score: Response paper's weighted score
        review_count: Passing reviews the response received
    """

    paper_id: str
    stance: ResponseStance
    score: float
    review_count: int


@dataclass
class RebuttalContribution:
    """How one rebuttal fed into the truth anchor."""

    paper_id: str
    stance: ResponseStance
    claimed_score: float
    weight: float


@dataclass
class TruthAnchorResult:
    """Outcome of the truth anchor blend.

    Attributes:
        original_consensus: Unweighted mean of the original review scores
        truth_anchor: Blended estimate of the paper's deserved score
        influence: Share of the blend given to rebuttals (0 - max_influence)
        rebuttal_truth: Weighted mean of claimed scores (None without rebuttals)
        total_weight: Sum of rebuttal weights
        contributions: Per-rebuttal claims and weights
    """

    original_consensus: float
    truth_anchor: float
    influence: float = 0.0
    rebuttal_truth: Optional[float] = None
    total_weight: float = 0.0
    contributions: List[RebuttalContribution] = field(default_factory=list)

    @property
    def direction(self) -> int:
        """-1 if truth sits below consensus, +1 above, 0 unchanged."""
        if self.truth_anchor < self.original_consensus:
            return -1
        if self.truth_anchor > self.original_consensus:
            return 1
        return 0


class TruthAnchorCalculator:
    """
    Blends original consensus with rebuttal claims.

    Usage:
        calculator = TruthAnchorCalculator(config.reconciliation)
        result = calculator.compute([8, 8, 8, 8, 2], rebuttals)
    """

    def __init__(self, rules: ReconciliationRules, min_score: float = 1.0, max_score: float = 10.0):
        self.rules = rules
        self.min_score = min_score
        self.max_score = max_score
        self._logger = logger.bind(component="TruthAnchorCalculator")

    def claimed_score(self, evidence: RebuttalEvidence, consensus: float) -> float:
        if evidence.stance == ResponseStance.REBUT:
            return self.max_score - evidence.score * self.rules.rebut_claim_factor
        return min(self.max_score, consensus + evidence.score * self.rules.support_claim_factor)

    def evidence_weight(self, evidence: RebuttalEvidence) -> float:
        depth = min(1.0, evidence.review_count / self.rules.full_weight_reviews)
        return (evidence.score / 10.0) * depth

    def compute(
        self,
        original_scores: Sequence[float],
        rebuttals: Sequence[RebuttalEvidence],
    ) -> TruthAnchorResult:
        """
        Compute the truth anchor for a disputed paper.

        Args:
            original_scores: Raw scores of the paper's passing reviews
            rebuttals: Scored rebut/support responses to the paper

        Returns:
            TruthAnchorResult; equals the original consensus when there is no
            usable rebuttal evidence

        Raises:
            ValueError: If the paper has no review scores
        """
        if not original_scores:
            raise ValueError("Cannot compute a truth anchor without review scores")

        consensus = sum(original_scores) / len(original_scores)

        contributions = []
        for evidence in rebuttals:
            if evidence.stance not in (ResponseStance.REBUT, ResponseStance.SUPPORT):
                continue
            weight = self.evidence_weight(evidence)
            if weight <= 0:
                continue
            contributions.append(
                RebuttalContribution(
                    paper_id=evidence.paper_id,
                    stance=evidence.stance,
                    claimed_score=self.claimed_score(evidence, consensus),
                    weight=weight,
                )
            )

        total_weight = sum(c.weight for c in contributions)
        if not contributions:
            return TruthAnchorResult(original_consensus=consensus, truth_anchor=consensus)

        rebuttal_truth = sum(c.claimed_score * c.weight for c in contributions) / total_weight
        influence = min(self.rules.max_influence, total_weight * self.rules.influence_per_weight)
        truth = consensus * (1 - influence) + rebuttal_truth * influence
        truth = max(self.min_score, min(self.max_score, truth))

        self._logger.debug(
            f"Truth anchor {truth:.2f} from consensus {consensus:.2f} "
            f"and {len(contributions)} rebuttal(s) (influence {influence:.2f})"
        )
        return TruthAnchorResult(
            original_consensus=consensus,
            truth_anchor=truth,
            influence=influence,
            rebuttal_truth=rebuttal_truth,
            total_weight=total_weight,
            contributions=contributions,
        )
