"""Agent lifecycle: registration, bans, tier status and leaderboard."""

from typing import Optional

import structlog

from peerzero.config.rulesets import EngineConfig
from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.schemas import Agent, CredibilityIntent, TransactionType
from peerzero.errors import AgentNotFound, ValidationError
from peerzero.ledger.credibility_ledger import CredibilityLedger
from peerzero.ledger.progress import ProgressReader
from peerzero.scoring.tier_cap import TierCapEnforcer
from peerzero.services.outcomes import RequirementItem, TierStatus


class AgentService:
    """Creates agents and reports their standing."""

    def __init__(
        self,
        config: EngineConfig,
        agent_store: AgentStore,
        ledger: CredibilityLedger,
        progress_reader: ProgressReader,
        enforcer: TierCapEnforcer,
    ):
        self.rules = config.registration
        self.agent_store = agent_store
        self.ledger = ledger
        self.progress_reader = progress_reader
        self.enforcer = enforcer
        self._logger = structlog.get_logger().bind(component="AgentService")

    async def register_agent(self, handle: str, agent_id: Optional[str] = None) -> Agent:
        """Create an agent at the starting credibility.

        Raises:
            ValidationError: Handle length out of range or already taken
        """
        handle = handle.strip()
        if not self.rules.min_handle_length <= len(handle) <= self.rules.max_handle_length:
            raise ValidationError(
                "Invalid handle",
                [{
                    "field": "handle",
                    "message": (
                        f"must be {self.rules.min_handle_length}-"
                        f"{self.rules.max_handle_length} characters"
                    ),
                }],
            )
        fields = {"handle": handle, "credibility": self.rules.starting_credibility}
        if agent_id:
            fields["agent_id"] = agent_id
        agent = await self.agent_store.create(Agent(**fields))
        self._logger.info("agent_registered", agent_id=agent.agent_id, handle=handle)
        return agent

    async def complete_registration(self, agent_id: str) -> Agent:
        """Mark registration passed and grant the one-time bonus.

        Calling again for an already registered agent changes nothing.
        """
        agent = await self.agent_store.get(agent_id)
        if agent is None:
            raise AgentNotFound(agent_id)
        if agent.registration_passed:
            return agent

        await self.agent_store.update(agent_id, registration_passed=True)
        await self.ledger.apply(
            CredibilityIntent(
                agent_id=agent_id,
                delta=self.rules.registration_bonus,
                reason="Passed registration",
                transaction_type=TransactionType.REGISTRATION_BONUS,
            )
        )
        self._logger.info("registration_completed", agent_id=agent_id)
        return await self.agent_store.get(agent_id)

    async def ban_agent(self, agent_id: str, reason: str) -> Agent:
        agent = await self.agent_store.update(agent_id, banned=True, ban_reason=reason)
        self._logger.warning("agent_banned", agent_id=agent_id, reason=reason)
        return agent

    async def get_agent_tier_status(self, agent_id: str) -> TierStatus:
        """Current tier plus every unmet requirement of the next band."""
        agent = await self.agent_store.get(agent_id)
        if agent is None:
            raise AgentNotFound(agent_id)

        progress = await self.progress_reader.progress_for(agent_id)
        evaluation = self.enforcer.evaluate(agent.credibility, progress)
        return TierStatus(
            agent_id=agent_id,
            credibility=agent.credibility,
            tier=evaluation.tier,
            ceiling=evaluation.ceiling,
            blocked=evaluation.blocked,
            next_threshold=evaluation.next_threshold,
            next_tier=evaluation.next_tier,
            next_requirements=[
                RequirementItem(
                    name=gap.name,
                    required=gap.required,
                    current=gap.current,
                    remaining=gap.remaining,
                )
                for gap in evaluation.next_requirements
            ],
        )

    async def leaderboard(self, limit: int = 20) -> list[Agent]:
        return await self.agent_store.leaderboard(limit)
