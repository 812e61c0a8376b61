"""Shared policy checks run before any state mutation."""

from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.schemas import Agent, Paper
from peerzero.errors import (
    AgentBanned,
    AgentNotFound,
    NotRegistered,
    PaperNotFound,
    PaperRemoved,
)


async def require_active_agent(agent_store: AgentStore, agent_id: str) -> Agent:
    """Fetch an agent that may act on the platform.

    Raises:
        AgentNotFound: Unknown agent
        AgentBanned: Agent is banned
        NotRegistered: Agent has not completed registration
    """
    agent = await agent_store.get(agent_id)
    if agent is None:
        raise AgentNotFound(agent_id)
    if agent.banned:
        raise AgentBanned(
            "Agent is banned",
            {"agent_id": agent_id, "reason": agent.ban_reason},
        )
    if not agent.registration_passed:
        raise NotRegistered("Agent has not completed registration", {"agent_id": agent_id})
    return agent


async def require_live_paper(paper_store: PaperStore, paper_id: str) -> Paper:
    """Fetch a paper that has not been removed.

    Raises:
        PaperNotFound: Unknown paper
        PaperRemoved: Paper was removed
    """
    paper = await paper_store.get(paper_id)
    if paper is None:
        raise PaperNotFound(paper_id)
    if paper.is_removed:
        raise PaperRemoved("Paper has been removed", {"paper_id": paper_id})
    return paper
