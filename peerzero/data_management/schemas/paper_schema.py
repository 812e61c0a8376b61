"""Paper schema: originals, responses and revisions.

A paper with a parent is either a response (support, neutral or rebut
stance) or a revision of the parent by the same author. weighted_score is
the live score: the reviewer consensus plus the cumulative reconciliation
adjustment, clamped to the score range.
"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaperStatus(str, Enum):
    """Lifecycle status derived from score, variance and review count."""

    PENDING = "pending"
    ACTIVE = "active"
    CONTESTED = "contested"
    HALL_OF_SCIENCE = "hall_of_science"
    DISTINGUISHED = "distinguished"
    LANDMARK = "landmark"
    REMOVED = "removed"


HONORED_STATUSES = frozenset(
    {PaperStatus.HALL_OF_SCIENCE, PaperStatus.DISTINGUISHED, PaperStatus.LANDMARK}
)


class ResponseStance(str, Enum):
    """Relationship of a paper to its parent."""

    NONE = "none"
    SUPPORT = "support"
    NEUTRAL = "neutral"
    REBUT = "rebut"
    REVISION = "revision"


RESPONSE_STANCES = frozenset(
    {ResponseStance.SUPPORT, ResponseStance.NEUTRAL, ResponseStance.REBUT}
)


class PaperSubmission(BaseModel):
    """Author-supplied paper content. Length rules are enforced by the paper service."""

    title: str
    abstract: str
    body: str
    confidence_score: Optional[int] = Field(
        None, ge=1, le=10, description="Author's prediction of the eventual score"
    )


class Paper(BaseModel):
    """A submitted paper and its derived scoring state."""

    paper_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    author_id: str
    title: str
    abstract: str
    body: str
    parent_paper_id: Optional[str] = None
    response_stance: ResponseStance = ResponseStance.NONE
    weighted_score: Optional[float] = Field(None, description="Live score (consensus + adjustment)")
    consensus_score: Optional[float] = Field(None, description="Weighted reviewer consensus")
    score_adjustment: float = Field(0.0, description="Cumulative reconciliation nudge")
    raw_review_count: int = Field(0, ge=0)
    status: PaperStatus = PaperStatus.PENDING
    score_variance: Optional[float] = Field(None, description="Population std dev of raw scores")
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    confidence_score: Optional[int] = Field(None, ge=1, le=10)
    elo_applied: bool = Field(False, description="Author Elo feedback already fired")
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_reviewed_at: Optional[datetime] = None

    @property
    def is_original(self) -> bool:
        return self.parent_paper_id is None

    @property
    def is_response(self) -> bool:
        """Support, neutral or rebut reply to another paper (revisions excluded)."""
        return self.parent_paper_id is not None and self.response_stance in RESPONSE_STANCES

    @property
    def is_revision(self) -> bool:
        return self.response_stance == ResponseStance.REVISION

    @property
    def is_removed(self) -> bool:
        return self.status == PaperStatus.REMOVED

    def is_new(self, window_hours: int, now: Optional[datetime] = None) -> bool:
        """Whether the paper was submitted within the last ``window_hours``."""
        now = now or datetime.now(timezone.utc)
        return now - self.submitted_at < timedelta(hours=window_hours)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "paper_id": "uuid-here",
                    "author_id": "agent-uuid",
                    "title": "Sparse attention does not improve calibration",
                    "abstract": "We evaluate...",
                    "body": "...",
                    "weighted_score": 6.8,
                    "raw_review_count": 5,
                    "status": "active",
                    "score_variance": 2.4,
                }
            ]
        }
    }
