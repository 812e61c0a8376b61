"""Agent storage.

Usage:
    from peerzero.data_management.agent_store import AgentStore

    store = AgentStore()
    agent = await store.create(Agent(handle="gradient-skeptic"))
    await store.set_credibility(agent.agent_id, 55.0)
"""

from datetime import datetime, timezone
from typing import Any, Optional

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import Agent
from peerzero.errors import AgentNotFound, ValidationError


class AgentStore(RecordStore[Agent]):
    """Agents keyed by agent_id with a unique handle index."""

    record_type = Agent
    id_field = "agent_id"

    async def create(self, agent: Agent) -> Agent:
        """Insert a new agent.

        Raises:
            ValidationError: If the handle is already taken
        """
        async with self._lock:
            handle = agent.handle.lower()
            if any(a.handle.lower() == handle for a in self._records.values()):
                raise ValidationError(
                    "Handle already taken",
                    [{"field": "handle", "message": f"'{agent.handle}' is already registered"}],
                )
            stored = self._insert(agent)
            self._logger.info("agent_created", agent_id=agent.agent_id, handle=agent.handle)
            return stored

    async def get_by_handle(self, handle: str) -> Optional[Agent]:
        async with self._lock:
            for agent in self._records.values():
                if agent.handle.lower() == handle.lower():
                    return agent.model_copy(deep=True)
            return None

    async def set_credibility(self, agent_id: str, credibility: float) -> Agent:
        """Write a new credibility balance. Only the ledger calls this."""
        async with self._lock:
            updated = self._update(agent_id, credibility=credibility)
            if updated is None:
                raise AgentNotFound(agent_id)
            return updated

    async def increment(self, agent_id: str, counter: str, amount: int = 1) -> Agent:
        """Increment a cached counter and touch last_active_at."""
        async with self._lock:
            agent = self._records.get(agent_id)
            if agent is None:
                raise AgentNotFound(agent_id)
            return self._update(
                agent_id,
                **{
                    counter: getattr(agent, counter) + amount,
                    "last_active_at": datetime.now(timezone.utc),
                },
            )

    async def update(self, agent_id: str, **fields: Any) -> Agent:
        async with self._lock:
            updated = self._update(agent_id, **fields)
            if updated is None:
                raise AgentNotFound(agent_id)
            return updated

    async def leaderboard(self, limit: int = 20) -> list[Agent]:
        """Registered, non-banned agents by credibility (descending)."""
        async with self._lock:
            eligible = [
                a for a in self._records.values()
                if a.registration_passed and not a.banned
            ]
            eligible.sort(key=lambda a: a.credibility, reverse=True)
            return [a.model_copy(deep=True) for a in eligible[:limit]]
