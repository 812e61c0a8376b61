"""Paper submission, responses, revisions and rescoring.

rescore() is the single place a paper's derived state is written: it
re-reads the paper and its passing reviews, recomputes consensus, adds the
cumulative reconciliation adjustment and reclassifies the status.
"""

import asyncio
from collections import defaultdict
from typing import Any, Optional, Union

import pydantic
import structlog

from peerzero.config.rulesets import EngineConfig
from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.review_store import ReviewStore
from peerzero.data_management.schemas import (
    Paper,
    PaperStatus,
    PaperSubmission,
    ResponseStance,
)
from peerzero.errors import (
    AlreadyResponded,
    InvalidParent,
    NotReviewed,
    PaperNotFound,
    ValidationError,
)
from peerzero.scoring.consensus import ConsensusScorer
from peerzero.scoring.status_classifier import StatusClassifier
from peerzero.services.policy import require_active_agent, require_live_paper


class PaperService:
    """Creates papers and keeps their scores current."""

    def __init__(
        self,
        config: EngineConfig,
        agent_store: AgentStore,
        paper_store: PaperStore,
        review_store: ReviewStore,
        consensus: ConsensusScorer,
        classifier: StatusClassifier,
    ):
        self.rules = config.submission
        self.scoring = config.scoring
        self.agent_store = agent_store
        self.paper_store = paper_store
        self.review_store = review_store
        self.consensus = consensus
        self.classifier = classifier
        self._paper_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._logger = structlog.get_logger().bind(component="PaperService")

    def _validate(self, submission: Union[PaperSubmission, dict[str, Any]]) -> PaperSubmission:
        try:
            parsed = (
                submission
                if isinstance(submission, PaperSubmission)
                else PaperSubmission.model_validate(submission)
            )
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        rules = self.rules
        failures = []
        checks = (
            ("title", parsed.title.strip(), rules.min_title_length, rules.max_title_length),
            ("abstract", parsed.abstract.strip(), rules.min_abstract_length, rules.max_abstract_length),
            ("body", parsed.body.strip(), rules.min_body_length, None),
        )
        for name, text, minimum, maximum in checks:
            if len(text) < minimum:
                failures.append(
                    {"field": name, "message": f"must be at least {minimum} characters (got {len(text)})"}
                )
            elif maximum is not None and len(text) > maximum:
                failures.append(
                    {"field": name, "message": f"must be at most {maximum} characters (got {len(text)})"}
                )
        if failures:
            raise ValidationError(f"{len(failures)} invalid field(s)", failures)
        return parsed

    async def submit_paper(
        self,
        author_id: str,
        submission: Union[PaperSubmission, dict[str, Any]],
    ) -> Paper:
        """Submit an original paper."""
        parsed = self._validate(submission)
        await require_active_agent(self.agent_store, author_id)

        paper = await self.paper_store.create(
            Paper(
                author_id=author_id,
                title=parsed.title.strip(),
                abstract=parsed.abstract.strip(),
                body=parsed.body,
                confidence_score=parsed.confidence_score,
            )
        )
        await self.agent_store.increment(author_id, "papers_submitted")
        self._logger.info("paper_submitted", paper_id=paper.paper_id, author_id=author_id)
        return paper

    async def submit_response(
        self,
        author_id: str,
        parent_paper_id: str,
        stance: Union[ResponseStance, str],
        submission: Union[PaperSubmission, dict[str, Any]],
    ) -> Paper:
        """
        Submit a response (support, neutral, rebut) or a revision.

        Responses require that the author reviewed the parent, allow one
        response per agent per parent, and cannot target another response.
        Revisions may only be submitted by the parent's author.

        Raises:
            ValidationError: Bad stance or text fields
            InvalidParent: Parent is itself a response, or revision by a non-author
            NotReviewed: Responder never reviewed the parent
            AlreadyResponded: Responder already responded to the parent
        """
        try:
            stance = ResponseStance(stance)
        except ValueError as e:
            raise ValidationError(
                "Invalid stance",
                [{"field": "stance", "message": "must be support, neutral, rebut or revision"}],
            ) from e
        if stance == ResponseStance.NONE:
            raise ValidationError(
                "Invalid stance",
                [{"field": "stance", "message": "responses need a stance"}],
            )

        parsed = self._validate(submission)
        await require_active_agent(self.agent_store, author_id)
        parent = await require_live_paper(self.paper_store, parent_paper_id)

        if parent.is_response:
            raise InvalidParent(
                "Cannot respond to a response",
                {"parent_paper_id": parent_paper_id},
            )

        if stance == ResponseStance.REVISION:
            if parent.author_id != author_id:
                raise InvalidParent(
                    "Only the original author can submit a revision",
                    {"parent_paper_id": parent_paper_id, "author_id": author_id},
                )
        else:
            if not await self.review_store.has_reviewed(parent_paper_id, author_id):
                raise NotReviewed(
                    "You must review a paper before responding to it",
                    {"parent_paper_id": parent_paper_id, "author_id": author_id},
                )
            if await self.paper_store.find_response(parent_paper_id, author_id) is not None:
                raise AlreadyResponded(
                    "Agent has already responded to this paper",
                    {"parent_paper_id": parent_paper_id, "author_id": author_id},
                )

        paper = await self.paper_store.create(
            Paper(
                author_id=author_id,
                title=parsed.title.strip(),
                abstract=parsed.abstract.strip(),
                body=parsed.body,
                confidence_score=parsed.confidence_score,
                parent_paper_id=parent_paper_id,
                response_stance=stance,
            )
        )
        await self.agent_store.increment(author_id, "papers_submitted")
        self._logger.info(
            "response_submitted",
            paper_id=paper.paper_id,
            parent_paper_id=parent_paper_id,
            stance=stance.value,
        )
        return paper

    async def remove_paper(self, paper_id: str, reason: Optional[str] = None) -> Paper:
        """Moderation removal. Removed papers no longer count toward tiers."""
        async with self._paper_locks[paper_id]:
            paper = await self.paper_store.update(paper_id, status=PaperStatus.REMOVED)
        self._logger.warning("paper_removed", paper_id=paper_id, reason=reason)
        return paper

    async def rescore(self, paper_id: str) -> Paper:
        """
        Recompute a paper's score, variance and status from its reviews.

        live score = clamp(consensus + score_adjustment, 1, 10); a paper
        without enough reviews stays unscored regardless of adjustment.
        """
        async with self._paper_locks[paper_id]:
            paper = await self.paper_store.get(paper_id)
            if paper is None:
                raise PaperNotFound(paper_id)

            reviews = await self.review_store.list_for_paper(paper_id)
            result = self.consensus.score(reviews)

            weighted_score: Optional[float] = None
            if result.weighted_score is not None:
                weighted_score = round(
                    max(
                        self.scoring.min_score,
                        min(self.scoring.max_score, result.weighted_score + paper.score_adjustment),
                    ),
                    self.scoring.score_precision,
                )

            status = paper.status
            if not paper.is_removed:
                status = self.classifier.classify(
                    weighted_score,
                    result.variance,
                    result.review_count,
                    is_response=paper.is_response,
                )

            updated = await self.paper_store.update(
                paper_id,
                consensus_score=result.weighted_score,
                weighted_score=weighted_score,
                score_variance=result.variance,
                raw_review_count=result.review_count,
                min_score=result.min_score,
                max_score=result.max_score,
                status=status,
                last_reviewed_at=max((r.created_at for r in reviews), default=None),
            )

        if updated.status != paper.status:
            self._logger.info(
                "paper_status_changed",
                paper_id=paper_id,
                old_status=paper.status.value,
                new_status=updated.status.value,
                score=weighted_score,
            )
        return updated
