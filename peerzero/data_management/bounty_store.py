"""Bounty storage.

The pending -> valid transition is claimed atomically by mark_valid, so a
bounty can be validated at most once no matter how often validation runs.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import Bounty
from peerzero.errors import AlreadyChallenged


class BountyStore(RecordStore[Bounty]):
    """Bounties keyed by bounty_id."""

    record_type = Bounty
    id_field = "bounty_id"

    async def create(self, bounty: Bounty) -> Bounty:
        """Insert a bounty unless the challenger already challenged the target.

        Raises:
            AlreadyChallenged: If (challenger_id, target_paper_id) already exists
        """
        async with self._lock:
            for existing in self._records.values():
                if (
                    existing.challenger_id == bounty.challenger_id
                    and existing.target_paper_id == bounty.target_paper_id
                ):
                    raise AlreadyChallenged(
                        "Agent has already challenged this paper",
                        {
                            "challenger_id": bounty.challenger_id,
                            "target_paper_id": bounty.target_paper_id,
                            "bounty_id": existing.bounty_id,
                        },
                    )
            stored = self._insert(bounty)
            self._logger.info(
                "bounty_registered",
                bounty_id=bounty.bounty_id,
                challenger_id=bounty.challenger_id,
                target_paper_id=bounty.target_paper_id,
                score_before=bounty.score_before,
            )
            return stored

    async def list_for_target(
        self,
        target_paper_id: str,
        pending_only: bool = False,
    ) -> list[Bounty]:
        async with self._lock:
            return [
                b.model_copy(deep=True)
                for b in self._records.values()
                if b.target_paper_id == target_paper_id and (not pending_only or not b.is_valid)
            ]

    async def list_by_challenger(self, challenger_id: str) -> list[Bounty]:
        async with self._lock:
            return [
                b.model_copy(deep=True)
                for b in self._records.values()
                if b.challenger_id == challenger_id
            ]

    async def count_valid_by_challenger(self, challenger_id: str) -> int:
        async with self._lock:
            return sum(
                1
                for b in self._records.values()
                if b.challenger_id == challenger_id and b.is_valid
            )

    async def mark_valid(
        self,
        bounty_id: str,
        score_after: float,
        score_drop: float,
    ) -> bool:
        """Claim the one-time pending -> valid transition.

        Returns:
            True if this call validated the bounty, False if it was already
            valid or does not exist.
        """
        async with self._lock:
            bounty = self._records.get(bounty_id)
            if bounty is None or bounty.is_valid:
                return False
            self._update(
                bounty_id,
                is_valid=True,
                score_after=score_after,
                score_drop=score_drop,
                validated_at=datetime.now(timezone.utc),
            )
            self._logger.info(
                "bounty_marked_valid",
                bounty_id=bounty_id,
                score_after=score_after,
                score_drop=score_drop,
            )
            return True

    async def update(self, bounty_id: str, **fields: Any) -> Optional[Bounty]:
        """Update bookkeeping fields. is_valid can never be reset."""
        fields.pop("is_valid", None)
        async with self._lock:
            return self._update(bounty_id, **fields)
