"""Bounty registration, validation and reconciliation.

validate_bounty is safe to call repeatedly or on a schedule. Each pending
bounty whose conditions hold is claimed once (pending -> valid) and then
reconciled against the paper's current ground truth: later bounties on the
same paper see the earlier nudges and keep converging toward truth.
"""

from typing import Optional

import structlog

from peerzero.config.rulesets import EngineConfig
from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.bounty_store import BountyStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.review_store import ReviewStore
from peerzero.data_management.schemas import Bounty, Paper, ResponseStance
from peerzero.errors import (
    AlreadyChallenged,
    CoordinationDetected,
    NotReviewed,
    PaperNotFound,
    SelfChallenge,
    ValidationError,
)
from peerzero.ledger.credibility_ledger import CredibilityLedger
from peerzero.reconciliation.planner import (
    ReconciliationPlan,
    ReconciliationPlanner,
    ReconciliationSnapshot,
)
from peerzero.services.outcomes import BountyRegistration, BountyValidationOutcome
from peerzero.services.paper_service import PaperService
from peerzero.services.policy import require_active_agent, require_live_paper

_EVIDENCE_STANCES = (ResponseStance.REBUT, ResponseStance.SUPPORT)


class BountyService:
    """Registers challenges and resolves them when the evidence arrives."""

    def __init__(
        self,
        config: EngineConfig,
        agent_store: AgentStore,
        paper_store: PaperStore,
        review_store: ReviewStore,
        bounty_store: BountyStore,
        ledger: CredibilityLedger,
        paper_service: PaperService,
        planner: ReconciliationPlanner,
    ):
        self.rules = config.bounty
        self.agent_store = agent_store
        self.paper_store = paper_store
        self.review_store = review_store
        self.bounty_store = bounty_store
        self.ledger = ledger
        self.paper_service = paper_service
        self.planner = planner
        self._logger = structlog.get_logger().bind(component="BountyService")

    async def register_bounty(
        self,
        challenger_id: str,
        target_paper_id: str,
        challenge_paper_id: str,
    ) -> BountyRegistration:
        """
        Register a challenge against a paper's score.

        Raises:
            SelfChallenge: Challenger authored the target
            NotReviewed: Challenger never reviewed the target
            ValidationError: Challenge paper is not the challenger's response to the target
            AlreadyChallenged: Challenger already has a bounty on the target
            CoordinationDetected: Challenger and author share too many reviewed papers
        """
        await require_active_agent(self.agent_store, challenger_id)
        target = await require_live_paper(self.paper_store, target_paper_id)

        if target.author_id == challenger_id:
            raise SelfChallenge(
                "Agents cannot challenge their own papers",
                {"target_paper_id": target_paper_id},
            )
        if not await self.review_store.has_reviewed(target_paper_id, challenger_id):
            raise NotReviewed(
                "You must review a paper before challenging it",
                {"target_paper_id": target_paper_id, "challenger_id": challenger_id},
            )

        challenge = await self.paper_store.get(challenge_paper_id)
        if challenge is None:
            raise PaperNotFound(challenge_paper_id)
        if (
            challenge.parent_paper_id != target_paper_id
            or challenge.author_id != challenger_id
            or not challenge.is_response
        ):
            raise ValidationError(
                "Challenge paper must be the challenger's response to the target",
                [{
                    "field": "challenge_paper_id",
                    "message": "must be a support, neutral or rebut response to the target by the challenger",
                }],
            )

        existing = await self.bounty_store.list_by_challenger(challenger_id)
        if any(b.target_paper_id == target_paper_id for b in existing):
            raise AlreadyChallenged(
                "Agent has already challenged this paper",
                {"challenger_id": challenger_id, "target_paper_id": target_paper_id},
            )

        await self._check_coordination(challenger_id, target.author_id)

        bounty = await self.bounty_store.create(
            Bounty(
                challenger_id=challenger_id,
                target_paper_id=target_paper_id,
                challenge_paper_id=challenge_paper_id,
                score_before=target.weighted_score,
                review_count_at_registration=target.raw_review_count,
            )
        )
        return BountyRegistration(
            bounty_id=bounty.bounty_id,
            score_before=bounty.score_before,
            review_count_at_registration=bounty.review_count_at_registration,
        )

    async def _check_coordination(self, challenger_id: str, author_id: str) -> None:
        challenger_papers = await self.review_store.reviewed_paper_ids(challenger_id)
        author_papers = await self.review_store.reviewed_paper_ids(author_id)
        overlap = len(challenger_papers & author_papers)
        if overlap > self.rules.coordination_overlap_limit:
            self._logger.warning(
                "coordination_detected",
                challenger_id=challenger_id,
                author_id=author_id,
                shared_reviews=overlap,
            )
            raise CoordinationDetected(
                "Challenger and author review too many of the same papers",
                {"shared_reviews": overlap, "limit": self.rules.coordination_overlap_limit},
            )

    def _precondition_met(self, bounty: Bounty, paper: Paper) -> bool:
        if bounty.score_before is None or paper.weighted_score is None:
            return False
        drop = round(bounty.score_before - paper.weighted_score, 2)
        new_reviews = paper.raw_review_count - bounty.review_count_at_registration
        return (
            drop >= self.rules.min_score_drop
            and new_reviews >= self.rules.min_reviews_since_registration
        )

    async def validate_bounty(self, target_paper_id: str) -> BountyValidationOutcome:
        """
        Validate every pending bounty on a paper whose conditions now hold.

        Args:
            target_paper_id: Disputed paper

        Returns:
            Count of bounties validated by this call and the paper's score
            after reconciliation
        """
        paper = await self.paper_store.get(target_paper_id)
        if paper is None:
            raise PaperNotFound(target_paper_id)

        validated: list[str] = []
        anchors: dict[str, float] = {}
        for bounty in await self.bounty_store.list_for_target(target_paper_id, pending_only=True):
            paper = await self.paper_store.get(target_paper_id)
            if not self._precondition_met(bounty, paper):
                continue

            score_drop = round(bounty.score_before - paper.weighted_score, 2)
            if not await self.bounty_store.mark_valid(
                bounty.bounty_id,
                score_after=paper.weighted_score,
                score_drop=score_drop,
            ):
                continue

            plan = await self._reconcile(bounty, paper)
            validated.append(bounty.bounty_id)
            anchors[bounty.bounty_id] = round(plan.truth_anchor, 2)

        final = await self.paper_store.get(target_paper_id)
        if validated:
            self._logger.info(
                "bounties_validated",
                target_paper_id=target_paper_id,
                count=len(validated),
                current_score=final.weighted_score,
            )
        return BountyValidationOutcome(
            target_paper_id=target_paper_id,
            validated_count=len(validated),
            current_score=final.weighted_score,
            validated_bounty_ids=validated,
            truth_anchors=anchors,
        )

    async def _snapshot(self, bounty: Bounty, paper: Paper) -> ReconciliationSnapshot:
        target_reviews = await self.review_store.list_for_paper(paper.paper_id)
        responses = await self.paper_store.list_responses(paper.paper_id)
        rebuttals = [
            p for p in responses
            if p.response_stance in _EVIDENCE_STANCES and p.weighted_score is not None
        ]
        rebuttal_reviews = {
            p.paper_id: await self.review_store.list_for_paper(p.paper_id) for p in rebuttals
        }
        challenge: Optional[Paper] = await self.paper_store.get(bounty.challenge_paper_id)
        return ReconciliationSnapshot(
            bounty=bounty,
            target=paper,
            target_reviews=target_reviews,
            challenge_paper=challenge,
            rebuttals=rebuttals,
            rebuttal_reviews=rebuttal_reviews,
            current_score=paper.weighted_score,
        )

    async def _reconcile(self, bounty: Bounty, paper: Paper) -> ReconciliationPlan:
        """Plan from a read-only snapshot, then apply step by step."""
        plan = self.planner.plan(await self._snapshot(bounty, paper))

        await self.paper_store.add_score_adjustment(paper.paper_id, plan.paper_adjustment)
        rescored = await self.paper_service.rescore(paper.paper_id)
        await self.bounty_store.update(bounty.bounty_id, truth_anchor=round(plan.truth_anchor, 2))
        await self.agent_store.increment(bounty.challenger_id, "valid_bounties")

        transactions = await self.ledger.apply_all(plan.intents)

        self._logger.info(
            "bounty_reconciled",
            bounty_id=bounty.bounty_id,
            target_paper_id=paper.paper_id,
            truth_anchor=round(plan.truth_anchor, 2),
            original_consensus=round(plan.truth.original_consensus, 2),
            influence=round(plan.truth.influence, 2),
            paper_adjustment=plan.paper_adjustment,
            new_score=rescored.weighted_score,
            transactions=len(transactions),
        )
        return plan
