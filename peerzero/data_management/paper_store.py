"""Paper storage with parent/response linkage queries.

Usage:
    from peerzero.data_management.paper_store import PaperStore

    store = PaperStore()
    paper = await store.create(paper)
    responses = await store.list_responses(paper.paper_id)
"""

from typing import Any, Optional

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import Paper, PaperStatus, ResponseStance
from peerzero.errors import PaperNotFound


class PaperStore(RecordStore[Paper]):
    """Papers keyed by paper_id."""

    record_type = Paper
    id_field = "paper_id"

    async def create(self, paper: Paper) -> Paper:
        async with self._lock:
            stored = self._insert(paper)
            self._logger.info(
                "paper_created",
                paper_id=paper.paper_id,
                author_id=paper.author_id,
                stance=paper.response_stance.value,
            )
            return stored

    async def update(self, paper_id: str, **fields: Any) -> Paper:
        async with self._lock:
            updated = self._update(paper_id, **fields)
            if updated is None:
                raise PaperNotFound(paper_id)
            return updated

    async def list_by_author(
        self,
        author_id: str,
        include_removed: bool = False,
    ) -> list[Paper]:
        async with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._records.values()
                if p.author_id == author_id and (include_removed or not p.is_removed)
            ]

    async def list_responses(
        self,
        parent_paper_id: str,
        include_removed: bool = False,
    ) -> list[Paper]:
        """Papers whose parent is ``parent_paper_id`` (responses and revisions)."""
        async with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._records.values()
                if p.parent_paper_id == parent_paper_id
                and (include_removed or not p.is_removed)
            ]

    async def find_response(
        self,
        parent_paper_id: str,
        author_id: str,
    ) -> Optional[Paper]:
        """An existing non-revision response by ``author_id`` to the parent."""
        async with self._lock:
            for p in self._records.values():
                if (
                    p.parent_paper_id == parent_paper_id
                    and p.author_id == author_id
                    and p.response_stance != ResponseStance.REVISION
                ):
                    return p.model_copy(deep=True)
            return None

    async def add_score_adjustment(self, paper_id: str, delta: float) -> Paper:
        """Atomically add to the cumulative reconciliation adjustment."""
        async with self._lock:
            paper = self._records.get(paper_id)
            if paper is None:
                raise PaperNotFound(paper_id)
            return self._update(
                paper_id,
                score_adjustment=round(paper.score_adjustment + delta, 2),
            )

    async def mark_elo_applied(self, paper_id: str) -> bool:
        """Claim the one-time author Elo event for a paper.

        Returns:
            True if this call set the flag, False if it was already set.
        """
        async with self._lock:
            paper = self._records.get(paper_id)
            if paper is None:
                raise PaperNotFound(paper_id)
            if paper.elo_applied:
                return False
            self._update(paper_id, elo_applied=True)
            return True

    async def get_stats(self) -> dict[str, Any]:
        """Paper counts by status."""
        async with self._lock:
            status_counts = {status.value: 0 for status in PaperStatus}
            for paper in self._records.values():
                status_counts[paper.status.value] += 1
            return {"total": len(self._records), "status_counts": status_counts}
