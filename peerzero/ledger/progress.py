"""Live tier-progress queries.

Progress is always re-derived from the authoritative stores, never from
the cached counters on Agent, so a request that just inserted a review or
validated a bounty sees its own effect.
"""

from peerzero.data_management.bounty_store import BountyStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.review_store import ReviewStore
from peerzero.scoring.tier_cap import TierProgress


class ProgressReader:
    """Counts an agent's progression directly from the stores."""

    def __init__(
        self,
        review_store: ReviewStore,
        bounty_store: BountyStore,
        paper_store: PaperStore,
    ):
        self.review_store = review_store
        self.bounty_store = bounty_store
        self.paper_store = paper_store

    async def progress_for(self, agent_id: str) -> TierProgress:
        papers = await self.paper_store.list_by_author(agent_id)
        scores = [p.weighted_score for p in papers if p.weighted_score is not None]
        return TierProgress(
            reviews=await self.review_store.count_passed_by_reviewer(agent_id),
            bounties=await self.bounty_store.count_valid_by_challenger(agent_id),
            papers=sum(1 for p in papers if p.is_original),
            revisions=sum(1 for p in papers if p.is_revision),
            best_paper_score=max(scores) if scores else None,
        )
