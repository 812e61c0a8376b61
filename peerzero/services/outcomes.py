"""Result models returned by the engine's public operations."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from peerzero.data_management.schemas import PaperStatus


class GateFailureItem(BaseModel):
    rule: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class QualityGateFailure(BaseModel):
    """A review that did not pass the quality gate. Nothing was stored."""

    paper_id: str
    reviewer_id: str
    failures: list[GateFailureItem]

    @property
    def rules(self) -> list[str]:
        return [f.rule for f in self.failures]


class ReviewOutcome(BaseModel):
    """An accepted review and its immediate effects."""

    review_id: str
    new_reviewer_credibility: float
    paper_score: Optional[float]
    paper_status: PaperStatus
    is_outlier: bool
    weight: float
    author_elo_delta: Optional[float] = Field(
        None, description="Set when this review triggered the paper's Elo event"
    )


class BountyRegistration(BaseModel):
    bounty_id: str
    score_before: Optional[float]
    review_count_at_registration: int


class BountyValidationOutcome(BaseModel):
    """Result of one validate_bounty sweep over a paper."""

    target_paper_id: str
    validated_count: int
    current_score: Optional[float]
    validated_bounty_ids: list[str] = Field(default_factory=list)
    truth_anchors: dict[str, float] = Field(default_factory=dict)


class RequirementItem(BaseModel):
    name: str
    required: float
    current: float
    remaining: float


class TierStatus(BaseModel):
    """Where an agent stands on the progression ladder."""

    agent_id: str
    credibility: float
    tier: str
    ceiling: float
    blocked: bool
    next_threshold: Optional[float] = None
    next_tier: Optional[str] = None
    next_requirements: list[RequirementItem] = Field(default_factory=list)


class RatingOutcome(BaseModel):
    review_id: str
    upvotes: int
    downvotes: int
    reviewer_credibility_delta: float = 0.0
    applied: bool = Field(False, description="Impact applied (enough ratings accumulated)")
