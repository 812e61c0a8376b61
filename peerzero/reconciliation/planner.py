"""Reconciliation planning for validated bounties.

The planner is pure: it reads a frozen ReconciliationSnapshot and returns a
ReconciliationPlan holding the truth anchor, the paper score nudge and a
list of credibility intents. Applying the plan (ledger writes, paper
adjustment) is the bounty service's job.

Redistribution rules:
1. Challenger: min(3.0, score_drop x 1.5)
2. Diversity bonus: the challenger's own review was an outlier on the side
   the challenge argued for -> gap x 0.15 x agreement x consistency x drop,
   capped at 2.0
3. Original reviewers, against the truth anchor:
   - vindicated outlier (flagged, on the side truth moved to): min(2.5, dev x 0.45)
   - far (> 1.5): -min(1.0, distance x 0.2)
   - close (<= 1.0): +0.5
4. Rebuttal voters: score >= 6 agrees with the rebuttal. A rebuttal is
   correct when the anchor moved to its side. Correct votes +0.3,
   incorrect votes -0.15.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

from peerzero.config.rulesets import EngineConfig
from peerzero.data_management.schemas import (
    Bounty,
    CredibilityIntent,
    Paper,
    ResponseStance,
    Review,
    TransactionType,
)
from peerzero.reconciliation.truth_anchor import (
    RebuttalEvidence,
    TruthAnchorCalculator,
    TruthAnchorResult,
)

_STANCE_DIRECTION = {ResponseStance.REBUT: -1, ResponseStance.SUPPORT: 1}


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


@dataclass
class ReconciliationSnapshot:
    """Read-only inputs for one bounty reconciliation.

    Attributes:
        bounty: The bounty that just validated
        target: Disputed paper as read at validation time
        target_reviews: Passing reviews of the disputed paper
        challenge_paper: Response paper backing the bounty (None if missing)
        rebuttals: Scored rebut/support responses to the target
        rebuttal_reviews: Passing reviews per rebuttal paper id
        current_score: Target's live score at validation time
    """

    bounty: Bounty
    target: Paper
    target_reviews: List[Review]
    challenge_paper: Optional[Paper]
    rebuttals: List[Paper]
    rebuttal_reviews: Dict[str, List[Review]]
    current_score: float


@dataclass
class ReconciliationPlan:
    """Everything a validated bounty changes."""

    bounty_id: str
    target_paper_id: str
    score_drop: float
    current_score: float
    truth: TruthAnchorResult
    paper_adjustment: float
    intents: List[CredibilityIntent] = field(default_factory=list)

    @property
    def truth_anchor(self) -> float:
        return self.truth.truth_anchor


class ReconciliationPlanner:
    """
    Turns a validated bounty into a truth anchor and credibility intents.

    Usage:
        planner = ReconciliationPlanner(config)
        plan = planner.plan(snapshot)
        for intent in plan.intents:
            await ledger.apply(intent)
    """

    def __init__(self, config: EngineConfig):
        self.rules = config.reconciliation
        self.bounty_rules = config.bounty
        self.calculator = TruthAnchorCalculator(
            config.reconciliation,
            min_score=config.scoring.min_score,
            max_score=config.scoring.max_score,
        )
        self._logger = logger.bind(component="ReconciliationPlanner")

    def plan(self, snapshot: ReconciliationSnapshot) -> ReconciliationPlan:
        bounty = snapshot.bounty
        score_drop = round((bounty.score_before or snapshot.current_score) - snapshot.current_score, 2)

        evidence = [
            RebuttalEvidence(
                paper_id=paper.paper_id,
                stance=paper.response_stance,
                score=paper.weighted_score,
                review_count=len(snapshot.rebuttal_reviews.get(paper.paper_id, [])),
            )
            for paper in snapshot.rebuttals
            if paper.weighted_score is not None
            and paper.response_stance in _STANCE_DIRECTION
        ]
        truth = self.calculator.compute([r.score for r in snapshot.target_reviews], evidence)

        intents: List[CredibilityIntent] = []
        intents.append(self._challenger_reward(bounty, score_drop))
        diversity = self._diversity_bonus(snapshot, truth, score_drop)
        if diversity is not None:
            intents.append(diversity)
        intents.extend(self._reviewer_intents(snapshot, truth))
        intents.extend(self._voter_intents(snapshot, truth))

        paper_adjustment = round(
            (truth.truth_anchor - snapshot.current_score) * self.rules.paper_nudge, 2
        )

        self._logger.info(
            f"Bounty {bounty.bounty_id}: truth anchor {truth.truth_anchor:.2f} "
            f"(consensus {truth.original_consensus:.2f}), paper nudge {paper_adjustment:+.2f}, "
            f"{len(intents)} credibility intent(s)"
        )
        return ReconciliationPlan(
            bounty_id=bounty.bounty_id,
            target_paper_id=snapshot.target.paper_id,
            score_drop=score_drop,
            current_score=snapshot.current_score,
            truth=truth,
            paper_adjustment=paper_adjustment,
            intents=intents,
        )

    def _challenger_reward(self, bounty: Bounty, score_drop: float) -> CredibilityIntent:
        gain = round(
            min(self.bounty_rules.challenger_cap, score_drop * self.bounty_rules.challenger_multiplier),
            2,
        )
        return CredibilityIntent(
            agent_id=bounty.challenger_id,
            delta=gain,
            reason=f"Bounty validated: score dropped {score_drop:.2f}",
            transaction_type=TransactionType.BOUNTY_VALIDATED,
            related_paper_id=bounty.target_paper_id,
            related_bounty_id=bounty.bounty_id,
        )

    def _diversity_bonus(
        self,
        snapshot: ReconciliationSnapshot,
        truth: TruthAnchorResult,
        score_drop: float,
    ) -> Optional[CredibilityIntent]:
        bounty = snapshot.bounty
        challenge = snapshot.challenge_paper
        if challenge is None or challenge.response_stance not in _STANCE_DIRECTION:
            return None

        own_review = next(
            (r for r in snapshot.target_reviews if r.reviewer_id == bounty.challenger_id),
            None,
        )
        if own_review is None:
            return None

        deviation = own_review.score - truth.original_consensus
        if _sign(deviation) != _STANCE_DIRECTION[challenge.response_stance]:
            return None
        gap = abs(deviation)
        if not (own_review.is_outlier or gap > self.rules.outlier_deviation):
            return None

        agreement = (challenge.weighted_score or 0.0) / 10.0
        consistency = max(0.0, 1 - abs(own_review.score - truth.truth_anchor) / 10.0)
        bonus = round(
            min(
                self.rules.diversity_cap,
                gap * self.rules.diversity_gap_factor * agreement * consistency * score_drop,
            ),
            2,
        )
        if bonus <= 0:
            return None
        return CredibilityIntent(
            agent_id=bounty.challenger_id,
            delta=bonus,
            reason=f"Diversity bonus: outlier review ({own_review.score}) backed by challenge",
            transaction_type=TransactionType.DIVERSITY_BONUS,
            related_paper_id=bounty.target_paper_id,
            related_review_id=own_review.review_id,
            related_bounty_id=bounty.bounty_id,
        )

    def _reviewer_intents(
        self,
        snapshot: ReconciliationSnapshot,
        truth: TruthAnchorResult,
    ) -> List[CredibilityIntent]:
        rules = self.rules
        consensus = truth.original_consensus
        anchor = truth.truth_anchor
        intents = []

        for review in snapshot.target_reviews:
            deviation = review.score - consensus
            distance = abs(review.score - anchor)
            was_outlier = review.is_outlier or abs(deviation) > rules.outlier_deviation
            vindicated = (
                was_outlier
                and truth.direction != 0
                and _sign(deviation) == truth.direction
            )

            if vindicated:
                delta = round(min(rules.vindicated_cap, abs(deviation) * rules.vindicated_factor), 2)
                transaction_type = TransactionType.VINDICATED_OUTLIER
                reason = f"Vindicated outlier: scored {review.score}, truth {anchor:.2f}"
            elif distance > rules.distance_penalty_threshold:
                delta = -round(min(rules.distance_penalty_cap, distance * rules.distance_penalty_factor), 2)
                transaction_type = TransactionType.TRUTH_DISTANCE_PENALTY
                reason = f"Review {distance:.2f} from truth anchor {anchor:.2f}"
            elif distance <= rules.accuracy_threshold:
                delta = rules.accuracy_reward
                transaction_type = TransactionType.TRUTH_ACCURACY_REWARD
                reason = f"Review within {rules.accuracy_threshold} of truth anchor {anchor:.2f}"
            else:
                continue

            intents.append(
                CredibilityIntent(
                    agent_id=review.reviewer_id,
                    delta=delta,
                    reason=reason,
                    transaction_type=transaction_type,
                    related_paper_id=review.paper_id,
                    related_review_id=review.review_id,
                    related_bounty_id=snapshot.bounty.bounty_id,
                )
            )
        return intents

    def _voter_intents(
        self,
        snapshot: ReconciliationSnapshot,
        truth: TruthAnchorResult,
    ) -> List[CredibilityIntent]:
        if truth.direction == 0:
            return []

        rules = self.rules
        intents = []
        for rebuttal in snapshot.rebuttals:
            direction = _STANCE_DIRECTION.get(rebuttal.response_stance)
            if direction is None or rebuttal.weighted_score is None:
                continue
            rebuttal_correct = direction == truth.direction

            for review in snapshot.rebuttal_reviews.get(rebuttal.paper_id, []):
                agreed = review.score >= rules.vote_agree_threshold
                if agreed == rebuttal_correct:
                    delta = rules.vote_reward
                    transaction_type = TransactionType.REBUTTAL_VOTE_REWARD
                    reason = f"Correct vote on {rebuttal.response_stance.value} response"
                else:
                    delta = -rules.vote_penalty
                    transaction_type = TransactionType.REBUTTAL_VOTE_PENALTY
                    reason = f"Incorrect vote on {rebuttal.response_stance.value} response"
                intents.append(
                    CredibilityIntent(
                        agent_id=review.reviewer_id,
                        delta=delta,
                        reason=reason,
                        transaction_type=transaction_type,
                        related_paper_id=rebuttal.paper_id,
                        related_review_id=review.review_id,
                        related_bounty_id=snapshot.bounty.bounty_id,
                    )
                )
        return intents
