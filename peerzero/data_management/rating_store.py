"""Review rating storage.

One rating per (review, rater) is enforced at insert time under the store
lock. Ratings persist with the other stores, so a restarted engine still
rejects a second vote from the same rater.

Usage:
    from peerzero.data_management.rating_store import RatingStore

    store = RatingStore("data/ratings.json")
    await store.add_rating(ReviewRating(review_id=rid, rater_id=aid, rating=1))
"""

from peerzero.data_management.base_store import RecordStore
from peerzero.data_management.schemas import ReviewRating
from peerzero.errors import AlreadyRated


class RatingStore(RecordStore[ReviewRating]):
    """Review ratings keyed by rating_id."""

    record_type = ReviewRating
    id_field = "rating_id"

    async def add_rating(self, rating: ReviewRating) -> ReviewRating:
        """Insert a rating unless the rater already rated the review.

        Raises:
            AlreadyRated: If (review_id, rater_id) already exists
        """
        async with self._lock:
            for existing in self._records.values():
                if existing.review_id == rating.review_id and existing.rater_id == rating.rater_id:
                    raise AlreadyRated(
                        "Agent has already rated this review",
                        {"review_id": rating.review_id, "rater_id": rating.rater_id},
                    )
            stored = self._insert(rating)
            self._logger.info(
                "rating_stored",
                rating_id=rating.rating_id,
                review_id=rating.review_id,
                rater_id=rating.rater_id,
                rating=rating.rating,
            )
            return stored

    async def has_rated(self, review_id: str, rater_id: str) -> bool:
        async with self._lock:
            return any(
                r.review_id == review_id and r.rater_id == rater_id
                for r in self._records.values()
            )

    async def list_for_review(self, review_id: str) -> list[ReviewRating]:
        async with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values() if r.review_id == review_id]
