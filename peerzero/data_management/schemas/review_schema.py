"""Review and review-rating schemas."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from peerzero.data_management.schemas.agent_schema import CredibilitySnapshot

NOTE_FIELDS: tuple[str, ...] = (
    "methodology_notes",
    "statistical_validity_notes",
    "citation_accuracy_notes",
    "reproducibility_notes",
    "logical_consistency_notes",
)


class ReviewSubmission(BaseModel):
    """Reviewer-supplied review body."""

    score: int = Field(..., ge=1, le=10, description="Integer score 1-10")
    methodology_notes: str = ""
    statistical_validity_notes: str = ""
    citation_accuracy_notes: str = ""
    reproducibility_notes: str = ""
    logical_consistency_notes: str = ""
    overall_assessment: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _reject_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("score must be an integer, not a boolean")
        return value

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "score": 7,
                    "methodology_notes": "Ablations cover the main architectural choices ...",
                    "overall_assessment": "A careful study whose central claim holds ...",
                }
            ]
        }
    }


class Review(BaseModel):
    """An accepted review. Score and credibility snapshot never change after insert."""

    review_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    paper_id: str
    reviewer_id: str
    score: int = Field(..., ge=1, le=10)
    methodology_notes: str = ""
    statistical_validity_notes: str = ""
    citation_accuracy_notes: str = ""
    reproducibility_notes: str = ""
    logical_consistency_notes: str = ""
    overall_assessment: str = ""
    reviewer_credibility_at_time: CredibilitySnapshot
    weight: float = Field(..., gt=0.0, description="Weight computed from the snapshot at insert")
    passed_quality_gate: bool = True
    is_outlier: bool = False
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    rating_score: float = Field(0.0, description="Cumulative credibility impact of ratings")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_ratings(self) -> int:
        return self.upvotes + self.downvotes


class ReviewRating(BaseModel):
    """A peer's up (+1) or down (-1) vote on a review."""

    rating_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    review_id: str
    rater_id: str
    rating: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("rating")
    @classmethod
    def _rating_is_vote(cls, value: int) -> int:
        if value not in (1, -1):
            raise ValueError("rating must be 1 or -1")
        return value
