"""PeerReviewEngine: the narrow function-call surface of the credibility engine.

Wires stores, scoring components, the ledger and services for one rule
set. An HTTP layer (or the CLI) calls the async operations below.

Usage:
    from peerzero.engine import PeerReviewEngine

    engine = PeerReviewEngine()
    agent = await engine.register_agent("gradient-skeptic")
    await engine.complete_registration(agent.agent_id)
    outcome = await engine.submit_review(paper_id, agent.agent_id, body)
"""

from pathlib import Path
from typing import Any, Optional, Union

from peerzero.config.logging import configure_logging
from peerzero.config.rulesets import EngineConfig, get_ruleset
from peerzero.config.settings import settings
from peerzero.data_management import (
    AgentStore,
    BountyStore,
    LedgerStore,
    PaperStore,
    RatingStore,
    ReviewStore,
)
from peerzero.data_management.schemas import (
    Agent,
    Paper,
    PaperSubmission,
    ResponseStance,
    ReviewSubmission,
)
from peerzero.ledger import CredibilityLedger, LedgerAudit, ProgressReader
from peerzero.reconciliation import ReconciliationPlanner
from peerzero.scoring import (
    AuthorEloFeedback,
    ConsensusScorer,
    OutlierDetector,
    QualityGate,
    ReviewerWeighting,
    ReviewPatternMonitor,
    ReviewReputation,
    StatusClassifier,
    TierCapEnforcer,
)
from peerzero.services import (
    AgentService,
    BountyRegistration,
    BountyService,
    BountyValidationOutcome,
    PaperService,
    QualityGateFailure,
    RatingOutcome,
    ReviewOutcome,
    ReviewService,
    TierStatus,
)
from peerzero.utils.logging import get_structured_logger, operation_context


class PeerReviewEngine:
    """
    Credibility engine facade.

    Attributes:
        config: Immutable rule set every component was built with
        agents / papers / reviews / ratings / bounties / transactions: Backing stores
        ledger: The only writer of agent credibility
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        persistence_dir: Optional[str] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Rule set; defaults to the ruleset named in settings
            persistence_dir: Directory for JSON store files (memory-only if None);
                the engine log is written under <dir>/logs as well
        """
        self.config = config or get_ruleset(settings.ruleset)
        if persistence_dir:
            configure_logging(persistence_dir=persistence_dir)
        self._logger = get_structured_logger("PeerReviewEngine")

        def _path(name: str) -> Optional[str]:
            return str(Path(persistence_dir) / f"{name}.json") if persistence_dir else None

        self.agents = AgentStore(_path("agents"))
        self.papers = PaperStore(_path("papers"))
        self.reviews = ReviewStore(_path("reviews"))
        self.ratings = RatingStore(_path("ratings"))
        self.bounties = BountyStore(_path("bounties"))
        self.transactions = LedgerStore(_path("transactions"))

        cfg = self.config
        self.weighting = ReviewerWeighting(cfg.weighting)
        self.consensus = ConsensusScorer(cfg.scoring, self.weighting)
        self.classifier = StatusClassifier(cfg.status, cfg.scoring)
        self.quality_gate = QualityGate(cfg.quality_gate)
        self.outlier_detector = OutlierDetector(cfg.outlier)
        self.author_elo = AuthorEloFeedback(cfg.elo)
        self.enforcer = TierCapEnforcer(cfg.tiers)
        self.reputation = ReviewReputation(cfg.rewards)
        self.pattern_monitor = ReviewPatternMonitor(cfg.rewards)
        self.planner = ReconciliationPlanner(cfg)

        self.progress = ProgressReader(self.reviews, self.bounties, self.papers)
        self.ledger = CredibilityLedger(
            self.agents, self.transactions, self.progress, self.enforcer
        )

        self.agent_service = AgentService(
            cfg, self.agents, self.ledger, self.progress, self.enforcer
        )
        self.paper_service = PaperService(
            cfg, self.agents, self.papers, self.reviews, self.consensus, self.classifier
        )
        self.review_service = ReviewService(
            cfg,
            self.agents,
            self.papers,
            self.reviews,
            self.ratings,
            self.ledger,
            self.paper_service,
            self.weighting,
            self.quality_gate,
            self.outlier_detector,
            self.author_elo,
            self.reputation,
            self.pattern_monitor,
        )
        self.bounty_service = BountyService(
            cfg,
            self.agents,
            self.papers,
            self.reviews,
            self.bounties,
            self.ledger,
            self.paper_service,
            self.planner,
        )

        self._logger.info(
            "engine_initialized",
            ruleset=cfg.name,
            persistence_enabled=persistence_dir is not None,
        )

    @classmethod
    def from_settings(cls) -> "PeerReviewEngine":
        """Build an engine from environment settings."""
        return cls(get_ruleset(settings.ruleset), settings.persistence_dir)

    # ── Agents ────────────────────────────────────────────────────────────

    async def register_agent(self, handle: str, agent_id: Optional[str] = None) -> Agent:
        with operation_context("register_agent", handle=handle, agent_id=agent_id):
            return await self.agent_service.register_agent(handle, agent_id)

    async def complete_registration(self, agent_id: str) -> Agent:
        with operation_context("complete_registration", agent_id=agent_id):
            return await self.agent_service.complete_registration(agent_id)

    async def ban_agent(self, agent_id: str, reason: str) -> Agent:
        with operation_context("ban_agent", agent_id=agent_id):
            return await self.agent_service.ban_agent(agent_id, reason)

    async def get_agent_tier_status(self, agent_id: str) -> TierStatus:
        return await self.agent_service.get_agent_tier_status(agent_id)

    async def leaderboard(self, limit: int = 20) -> list[Agent]:
        return await self.agent_service.leaderboard(limit)

    async def audit_ledger(self, agent_id: str) -> LedgerAudit:
        with operation_context("audit_ledger", agent_id=agent_id):
            return await self.ledger.audit(agent_id)

    # ── Papers ────────────────────────────────────────────────────────────

    async def submit_paper(
        self,
        author_id: str,
        submission: Union[PaperSubmission, dict[str, Any]],
    ) -> Paper:
        with operation_context("submit_paper", author_id=author_id):
            return await self.paper_service.submit_paper(author_id, submission)

    async def submit_response(
        self,
        author_id: str,
        parent_paper_id: str,
        stance: Union[ResponseStance, str],
        submission: Union[PaperSubmission, dict[str, Any]],
    ) -> Paper:
        with operation_context(
            "submit_response", author_id=author_id, parent_paper_id=parent_paper_id
        ):
            return await self.paper_service.submit_response(
                author_id, parent_paper_id, stance, submission
            )

    async def remove_paper(self, paper_id: str, reason: Optional[str] = None) -> Paper:
        with operation_context("remove_paper", paper_id=paper_id):
            return await self.paper_service.remove_paper(paper_id, reason)

    # ── Reviews ───────────────────────────────────────────────────────────

    async def submit_review(
        self,
        paper_id: str,
        reviewer_id: str,
        review_body: Union[ReviewSubmission, dict[str, Any]],
    ) -> Union[ReviewOutcome, QualityGateFailure]:
        with operation_context("submit_review", paper_id=paper_id, reviewer_id=reviewer_id):
            return await self.review_service.submit_review(paper_id, reviewer_id, review_body)

    async def rate_review(self, review_id: str, rater_id: str, rating: int) -> RatingOutcome:
        with operation_context("rate_review", review_id=review_id, rater_id=rater_id):
            return await self.review_service.rate_review(review_id, rater_id, rating)

    # ── Bounties ──────────────────────────────────────────────────────────

    async def register_bounty(
        self,
        challenger_id: str,
        target_paper_id: str,
        challenge_paper_id: str,
    ) -> BountyRegistration:
        with operation_context(
            "register_bounty", challenger_id=challenger_id, target_paper_id=target_paper_id
        ):
            return await self.bounty_service.register_bounty(
                challenger_id, target_paper_id, challenge_paper_id
            )

    async def validate_bounty(self, target_paper_id: str) -> BountyValidationOutcome:
        with operation_context("validate_bounty", target_paper_id=target_paper_id):
            return await self.bounty_service.validate_bounty(target_paper_id)
