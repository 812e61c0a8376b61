"""Append-only storage for credibility transactions."""

from typing import Optional

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import CredibilityTransaction, TransactionType


class LedgerStore(RecordStore[CredibilityTransaction]):
    """Transactions keyed by transaction_id. Records are never updated or deleted."""

    record_type = CredibilityTransaction
    id_field = "transaction_id"

    async def append(self, transaction: CredibilityTransaction) -> CredibilityTransaction:
        async with self._lock:
            stored = self._insert(transaction)
            self._logger.debug(
                "transaction_appended",
                transaction_id=transaction.transaction_id,
                agent_id=transaction.agent_id,
                delta=transaction.delta,
                balance_after=transaction.balance_after,
                type=transaction.transaction_type.value,
            )
            return stored

    async def list_for_agent(
        self,
        agent_id: str,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[CredibilityTransaction]:
        """An agent's transactions in the order they were applied."""
        async with self._lock:
            return [
                t.model_copy(deep=True)
                for t in self._records.values()
                if t.agent_id == agent_id
                and (transaction_type is None or t.transaction_type == transaction_type)
            ]

    async def last_for_agent(self, agent_id: str) -> Optional[CredibilityTransaction]:
        async with self._lock:
            for t in reversed(self._records.values()):
                if t.agent_id == agent_id:
                    return t.model_copy(deep=True)
            return None
