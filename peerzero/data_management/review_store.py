"""Review storage.

One review per (paper, reviewer) is enforced atomically at insert time, so
two concurrent submissions cannot both succeed. Vote totals live on the
review; the individual ratings live in RatingStore.

Usage:
    from peerzero.data_management.review_store import ReviewStore

    store = ReviewStore()
    await store.add_review(review)
    scores = [r.score for r in await store.list_for_paper(paper_id)]
"""

from typing import Optional

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import Review
from peerzero.errors import AlreadyReviewed, ReviewNotFound


class ReviewStore(RecordStore[Review]):
    """Reviews keyed by review_id."""

    record_type = Review
    id_field = "review_id"

    async def add_review(self, review: Review) -> Review:
        """Insert a review unless the reviewer already reviewed the paper.

        Raises:
            AlreadyReviewed: If (paper_id, reviewer_id) already exists
        """
        async with self._lock:
            for existing in self._records.values():
                if (
                    existing.paper_id == review.paper_id
                    and existing.reviewer_id == review.reviewer_id
                ):
                    raise AlreadyReviewed(
                        "Agent has already reviewed this paper",
                        {"paper_id": review.paper_id, "reviewer_id": review.reviewer_id},
                    )
            stored = self._insert(review)
            self._logger.info(
                "review_stored",
                review_id=review.review_id,
                paper_id=review.paper_id,
                reviewer_id=review.reviewer_id,
                score=review.score,
                is_outlier=review.is_outlier,
            )
            return stored

    async def get_for(self, paper_id: str, reviewer_id: str) -> Optional[Review]:
        async with self._lock:
            for review in self._records.values():
                if review.paper_id == paper_id and review.reviewer_id == reviewer_id:
                    return review.model_copy(deep=True)
            return None

    async def has_reviewed(self, paper_id: str, reviewer_id: str) -> bool:
        return await self.get_for(paper_id, reviewer_id) is not None

    async def list_for_paper(self, paper_id: str, passed_only: bool = True) -> list[Review]:
        async with self._lock:
            return [
                r.model_copy(deep=True)
                for r in self._records.values()
                if r.paper_id == paper_id and (r.passed_quality_gate or not passed_only)
            ]

    async def list_by_reviewer(
        self,
        reviewer_id: str,
        passed_only: bool = True,
        limit: Optional[int] = None,
    ) -> list[Review]:
        """A reviewer's reviews, most recent first."""
        async with self._lock:
            reviews = [
                r.model_copy(deep=True)
                for r in reversed(self._records.values())
                if r.reviewer_id == reviewer_id and (r.passed_quality_gate or not passed_only)
            ]
            return reviews[:limit] if limit is not None else reviews

    async def count_passed_by_reviewer(self, reviewer_id: str) -> int:
        async with self._lock:
            return sum(
                1
                for r in self._records.values()
                if r.reviewer_id == reviewer_id and r.passed_quality_gate
            )

    async def reviewed_paper_ids(self, reviewer_id: str) -> set[str]:
        async with self._lock:
            return {r.paper_id for r in self._records.values() if r.reviewer_id == reviewer_id}

    async def record_vote(self, review_id: str, rating: int) -> Review:
        """Count an up (+1) or down (-1) vote on the review.

        Raises:
            ReviewNotFound: If the review does not exist
        """
        async with self._lock:
            review = self._records.get(review_id)
            if review is None:
                raise ReviewNotFound(review_id)
            if rating > 0:
                return self._update(review_id, upvotes=review.upvotes + 1)
            return self._update(review_id, downvotes=review.downvotes + 1)

    async def add_rating_impact(self, review_id: str, impact: float) -> Review:
        async with self._lock:
            review = self._records.get(review_id)
            if review is None:
                raise ReviewNotFound(review_id)
            return self._update(review_id, rating_score=round(review.rating_score + impact, 2))
