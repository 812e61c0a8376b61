"""Credibility ledger: the only writer of agent credibility.

Each intent is applied under a per-agent lock:
1. Read the agent fresh
2. Clamp prior + delta to [0, 200]
3. Derive live tier progress and enforce the tier cap
4. Write the new balance and append a transaction

The transaction records the ceiling that was in force, so every balance
can be re-derived from the log by the audit.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, List

import structlog

from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.ledger_store import LedgerStore
from peerzero.data_management.schemas import CredibilityIntent, CredibilityTransaction
from peerzero.errors import AgentNotFound
from peerzero.ledger.progress import ProgressReader
from peerzero.scoring.tier_cap import TierCapEnforcer


@dataclass
class LedgerAudit:
    """Result of replaying an agent's transaction chain.

    Attributes:
        agent_id: Audited agent
        transaction_count: Transactions replayed
        live_balance: Agent's current credibility
        breaks: Human-readable description of each inconsistency
    """

    agent_id: str
    transaction_count: int
    live_balance: float
    breaks: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.breaks


class CredibilityLedger:
    """
    Applies credibility intents through clamping and the tier cap.

    Usage:
        ledger = CredibilityLedger(agent_store, ledger_store, progress_reader, enforcer)
        transaction = await ledger.apply(intent)
    """

    def __init__(
        self,
        agent_store: AgentStore,
        ledger_store: LedgerStore,
        progress_reader: ProgressReader,
        enforcer: TierCapEnforcer,
    ):
        self.agent_store = agent_store
        self.ledger_store = ledger_store
        self.progress_reader = progress_reader
        self.enforcer = enforcer
        self._agent_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._logger = structlog.get_logger().bind(component="CredibilityLedger")

    async def apply(self, intent: CredibilityIntent) -> CredibilityTransaction:
        """
        Apply one intent.

        Args:
            intent: Requested change

        Returns:
            The appended CredibilityTransaction

        Raises:
            AgentNotFound: If the agent does not exist
        """
        async with self._agent_locks[intent.agent_id]:
            agent = await self.agent_store.get(intent.agent_id)
            if agent is None:
                raise AgentNotFound(intent.agent_id)

            before = agent.credibility
            progress = await self.progress_reader.progress_for(intent.agent_id)
            ceiling = self.enforcer.ceiling(progress)
            after = self.enforcer.apply_ceiling(before + intent.delta, before, ceiling)

            await self.agent_store.set_credibility(intent.agent_id, after)
            transaction = await self.ledger_store.append(
                CredibilityTransaction(
                    agent_id=intent.agent_id,
                    delta=intent.delta,
                    balance_before=before,
                    balance_after=after,
                    tier_ceiling=ceiling,
                    reason=intent.reason,
                    transaction_type=intent.transaction_type,
                    related_paper_id=intent.related_paper_id,
                    related_review_id=intent.related_review_id,
                    related_bounty_id=intent.related_bounty_id,
                )
            )

        self._logger.info(
            "credibility_applied",
            agent_id=intent.agent_id,
            type=intent.transaction_type.value,
            delta=intent.delta,
            balance_before=before,
            balance_after=after,
            capped=transaction.was_capped,
        )
        return transaction

    async def apply_all(self, intents: Iterable[CredibilityIntent]) -> List[CredibilityTransaction]:
        """Apply intents one at a time, each through the tier cap."""
        return [await self.apply(intent) for intent in intents]

    async def audit(self, agent_id: str) -> LedgerAudit:
        """
        Replay an agent's transactions and report inconsistencies.

        Checks that every transaction's balance_after equals the clamped,
        capped result of its delta, that consecutive transactions chain, and
        that the last balance matches the live agent.
        """
        agent = await self.agent_store.get(agent_id)
        if agent is None:
            raise AgentNotFound(agent_id)

        transactions = await self.ledger_store.list_for_agent(agent_id)
        breaks: List[str] = []
        previous = None
        for txn in transactions:
            expected = self.enforcer.apply_ceiling(
                txn.balance_before + txn.delta, txn.balance_before, txn.tier_ceiling
            )
            if expected != txn.balance_after:
                breaks.append(
                    f"{txn.transaction_id}: balance_after {txn.balance_after} != recomputed {expected}"
                )
            if previous is not None and previous.balance_after != txn.balance_before:
                breaks.append(
                    f"{txn.transaction_id}: balance_before {txn.balance_before} "
                    f"does not follow {previous.balance_after}"
                )
            previous = txn

        if previous is not None and previous.balance_after != agent.credibility:
            breaks.append(
                f"live balance {agent.credibility} != last balance_after {previous.balance_after}"
            )

        if breaks:
            self._logger.warning("ledger_audit_failed", agent_id=agent_id, breaks=len(breaks))
        return LedgerAudit(
            agent_id=agent_id,
            transaction_count=len(transactions),
            live_balance=agent.credibility,
            breaks=breaks,
        )
