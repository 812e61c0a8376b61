"""Review submission and review ratings.

submit_review runs the full scoring chain for one review:
validation -> policy checks -> quality gate -> outlier detection ->
weighting (from a credibility snapshot) -> insert -> reviewer reward ->
rescore (consensus + status) -> one-time author Elo -> pattern monitor.

Every credibility change goes through the ledger, so the tier cap sees
live counts that already include this review.
"""

from typing import Any, Union

import pydantic
import structlog

from peerzero.config.rulesets import EngineConfig
from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.rating_store import RatingStore
from peerzero.data_management.review_store import ReviewStore
from peerzero.data_management.schemas import (
    CredibilityIntent,
    Review,
    ReviewRating,
    ReviewSubmission,
    TransactionType,
)
from peerzero.errors import (
    AlreadyReviewed,
    ReviewNotFound,
    SelfRating,
    SelfReview,
    ValidationError,
)
from peerzero.ledger.credibility_ledger import CredibilityLedger
from peerzero.scoring.author_elo import AuthorEloFeedback
from peerzero.scoring.outlier_detector import OutlierDetector, ReviewPatternMonitor
from peerzero.scoring.quality_gate import QualityGate
from peerzero.scoring.reputation import ReviewReputation
from peerzero.scoring.weighting import ReviewerWeighting
from peerzero.services.outcomes import (
    GateFailureItem,
    QualityGateFailure,
    RatingOutcome,
    ReviewOutcome,
)
from peerzero.services.paper_service import PaperService
from peerzero.services.policy import require_active_agent, require_live_paper


class ReviewService:
    """Accepts reviews and ratings and propagates their credibility effects."""

    def __init__(
        self,
        config: EngineConfig,
        agent_store: AgentStore,
        paper_store: PaperStore,
        review_store: ReviewStore,
        rating_store: RatingStore,
        ledger: CredibilityLedger,
        paper_service: PaperService,
        weighting: ReviewerWeighting,
        quality_gate: QualityGate,
        outlier_detector: OutlierDetector,
        author_elo: AuthorEloFeedback,
        reputation: ReviewReputation,
        pattern_monitor: ReviewPatternMonitor,
    ):
        self.config = config
        self.agent_store = agent_store
        self.paper_store = paper_store
        self.review_store = review_store
        self.rating_store = rating_store
        self.ledger = ledger
        self.paper_service = paper_service
        self.weighting = weighting
        self.quality_gate = quality_gate
        self.outlier_detector = outlier_detector
        self.author_elo = author_elo
        self.reputation = reputation
        self.pattern_monitor = pattern_monitor
        self._logger = structlog.get_logger().bind(component="ReviewService")

    async def submit_review(
        self,
        paper_id: str,
        reviewer_id: str,
        review_body: Union[ReviewSubmission, dict[str, Any]],
    ) -> Union[ReviewOutcome, QualityGateFailure]:
        """
        Submit a review.

        Args:
            paper_id: Paper being reviewed
            reviewer_id: Reviewing agent
            review_body: Score, structured notes and overall assessment

        Returns:
            ReviewOutcome when accepted, QualityGateFailure when the gate
            rejected the review (nothing is stored in that case)

        Raises:
            ValidationError: Malformed body (e.g. score outside 1-10)
            SelfReview: Reviewer authored the paper
            AlreadyReviewed: Reviewer already reviewed the paper
            AgentNotFound / PaperNotFound: Unknown ids
        """
        try:
            submission = (
                review_body
                if isinstance(review_body, ReviewSubmission)
                else ReviewSubmission.model_validate(review_body)
            )
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        reviewer = await require_active_agent(self.agent_store, reviewer_id)
        paper = await require_live_paper(self.paper_store, paper_id)

        if paper.author_id == reviewer_id:
            raise SelfReview(
                "Agents cannot review their own papers",
                {"paper_id": paper_id, "reviewer_id": reviewer_id},
            )
        if await self.review_store.has_reviewed(paper_id, reviewer_id):
            raise AlreadyReviewed(
                "Agent has already reviewed this paper",
                {"paper_id": paper_id, "reviewer_id": reviewer_id},
            )

        gate = self.quality_gate.check(submission)
        if not gate.passed:
            self._logger.info(
                "review_rejected",
                paper_id=paper_id,
                reviewer_id=reviewer_id,
                rules=[f.rule for f in gate.failures],
            )
            return QualityGateFailure(
                paper_id=paper_id,
                reviewer_id=reviewer_id,
                failures=[
                    GateFailureItem(rule=f.rule, message=f.message, details=f.details)
                    for f in gate.failures
                ],
            )

        existing = await self.review_store.list_for_paper(paper_id)
        is_outlier = self.outlier_detector.is_outlier(
            submission.score, [r.score for r in existing]
        )
        multiplier = self.reputation.multiplier(await self._past_deviations(reviewer_id))

        snapshot = reviewer.snapshot()
        review = await self.review_store.add_review(
            Review(
                paper_id=paper_id,
                reviewer_id=reviewer_id,
                reviewer_credibility_at_time=snapshot,
                weight=self.weighting.weight(snapshot),
                passed_quality_gate=True,
                is_outlier=is_outlier,
                **submission.model_dump(),
            )
        )

        reward = self.reputation.reward(
            is_new_paper=paper.is_new(self.config.rewards.new_paper_window_hours),
            is_outlier=is_outlier,
            multiplier=multiplier,
        )
        transaction = await self.ledger.apply(
            CredibilityIntent(
                agent_id=reviewer_id,
                delta=reward.delta,
                reason=reward.reason,
                transaction_type=reward.transaction_type,
                related_paper_id=paper_id,
                related_review_id=review.review_id,
            )
        )
        await self.agent_store.increment(reviewer_id, "reviews_completed")
        if is_outlier:
            await self.agent_store.increment(reviewer_id, "flagged_outlier_count")

        paper = await self.paper_service.rescore(paper_id)
        elo_delta = await self._maybe_apply_elo(paper_id)

        recent = await self.review_store.list_by_reviewer(
            reviewer_id, limit=self.config.rewards.pattern_window
        )
        pattern = self.pattern_monitor.check(reviewer_id, recent)
        if pattern.flagged:
            self._logger.warning(
                "review_pattern_flagged",
                agent_id=reviewer_id,
                outlier_rate=pattern.outlier_rate,
                sample_size=pattern.sample_size,
            )

        self._logger.info(
            "review_submitted",
            review_id=review.review_id,
            paper_id=paper_id,
            reviewer_id=reviewer_id,
            score=review.score,
            weight=review.weight,
            is_outlier=is_outlier,
            paper_score=paper.weighted_score,
            paper_status=paper.status.value,
        )

        reviewer_after = await self.agent_store.get(reviewer_id)
        return ReviewOutcome(
            review_id=review.review_id,
            new_reviewer_credibility=(
                reviewer_after.credibility if reviewer_after else transaction.balance_after
            ),
            paper_score=paper.weighted_score,
            paper_status=paper.status,
            is_outlier=is_outlier,
            weight=review.weight,
            author_elo_delta=elo_delta,
        )

    async def _past_deviations(self, reviewer_id: str) -> list[float]:
        """|score - paper mean| for the reviewer's recent reviews on well-reviewed papers."""
        rules = self.config.rewards
        recent = await self.review_store.list_by_reviewer(
            reviewer_id, limit=rules.reputation_window
        )
        deviations = []
        for review in recent:
            paper_reviews = await self.review_store.list_for_paper(review.paper_id)
            if len(paper_reviews) < rules.reputation_min_paper_reviews:
                continue
            mean = sum(r.score for r in paper_reviews) / len(paper_reviews)
            deviations.append(abs(review.score - mean))
        return deviations

    async def _maybe_apply_elo(self, paper_id: str):
        """Fire the author's Elo event the first time the paper is scored."""
        paper = await self.paper_store.get(paper_id)
        if paper is None or paper.weighted_score is None:
            return None
        if paper.raw_review_count < self.config.scoring.min_reviews_for_score:
            return None
        if not await self.paper_store.mark_elo_applied(paper_id):
            return None

        author = await self.agent_store.get(paper.author_id)
        if author is None:
            return None

        transaction = await self.ledger.apply(
            self.author_elo.intent(
                author_id=author.agent_id,
                paper_id=paper_id,
                author_credibility=author.credibility,
                actual_score=paper.weighted_score,
            )
        )
        self._logger.info(
            "author_elo_applied",
            paper_id=paper_id,
            author_id=author.agent_id,
            delta=transaction.delta,
            balance_after=transaction.balance_after,
        )
        return transaction.delta

    async def rate_review(self, review_id: str, rater_id: str, rating: int) -> RatingOutcome:
        """
        Up (+1) or down (-1) vote a review.

        The reviewer's credibility moves by +0.2 or -0.3 scaled by the
        rater's credibility / 100, only once the review has enough ratings.

        Raises:
            ValidationError: Rating is not +1 or -1
            SelfRating: Rater wrote the review
            AlreadyRated: Rater already rated the review
        """
        try:
            record = ReviewRating(review_id=review_id, rater_id=rater_id, rating=rating)
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        rater = await require_active_agent(self.agent_store, rater_id)
        review = await self.review_store.get(review_id)
        if review is None:
            raise ReviewNotFound(review_id)
        if review.reviewer_id == rater_id:
            raise SelfRating(
                "Agents cannot rate their own reviews",
                {"review_id": review_id, "rater_id": rater_id},
            )

        await self.rating_store.add_rating(record)
        review = await self.review_store.record_vote(review_id, rating)
        outcome = RatingOutcome(
            review_id=review_id,
            upvotes=review.upvotes,
            downvotes=review.downvotes,
        )
        if review.total_ratings < self.config.ratings.min_ratings:
            return outcome

        rules = self.config.ratings
        scale = rater.credibility / 100.0
        if rating > 0:
            impact = round(rules.upvote_factor * scale, 2)
            transaction_type = TransactionType.REVIEW_UPVOTED
        else:
            impact = -round(rules.downvote_factor * scale, 2)
            transaction_type = TransactionType.REVIEW_DOWNVOTED

        await self.ledger.apply(
            CredibilityIntent(
                agent_id=review.reviewer_id,
                delta=impact,
                reason=f"Review {'upvoted' if rating > 0 else 'downvoted'} by peer",
                transaction_type=transaction_type,
                related_paper_id=review.paper_id,
                related_review_id=review_id,
            )
        )
        await self.review_store.add_rating_impact(review_id, impact)
        self._logger.info(
            "review_rated",
            review_id=review_id,
            rater_id=rater_id,
            rating=rating,
            impact=impact,
        )
        outcome.reviewer_credibility_delta = impact
        outcome.applied = True
        return outcome
