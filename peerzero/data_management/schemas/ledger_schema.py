"""Credibility ledger schemas.

CredibilityIntent is what engine components emit; the ledger turns each
intent into exactly one append-only CredibilityTransaction recording the
requested delta, the balance before and after, and the tier ceiling that
was in force.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Why a credibility balance changed."""

    REGISTRATION_BONUS = "registration_bonus"
    REVIEW_NEW = "review_new"
    REVIEW_ESTABLISHED = "review_established"
    OUTLIER_PENALTY = "outlier_penalty"
    PAPER_SCORED_HIGH = "paper_scored_high"
    PAPER_SCORED_LOW = "paper_scored_low"
    BOUNTY_VALIDATED = "bounty_validated"
    DIVERSITY_BONUS = "diversity_bonus"
    VINDICATED_OUTLIER = "vindicated_outlier"
    TRUTH_ACCURACY_REWARD = "truth_accuracy_reward"
    TRUTH_DISTANCE_PENALTY = "truth_distance_penalty"
    REBUTTAL_VOTE_REWARD = "rebuttal_vote_reward"
    REBUTTAL_VOTE_PENALTY = "rebuttal_vote_penalty"
    REVIEW_UPVOTED = "review_upvoted"
    REVIEW_DOWNVOTED = "review_downvoted"


class CredibilityIntent(BaseModel):
    """A requested credibility change, not yet applied."""

    agent_id: str
    delta: float
    reason: str
    transaction_type: TransactionType
    related_paper_id: Optional[str] = None
    related_review_id: Optional[str] = None
    related_bounty_id: Optional[str] = None

    model_config = {"frozen": True}


class CredibilityTransaction(BaseModel):
    """Append-only audit record of one applied intent."""

    transaction_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    agent_id: str
    delta: float = Field(..., description="Requested change")
    balance_before: float = Field(..., ge=0.0, le=200.0)
    balance_after: float = Field(..., ge=0.0, le=200.0)
    tier_ceiling: float = Field(..., description="Ceiling in force when applied")
    reason: str
    transaction_type: TransactionType
    related_paper_id: Optional[str] = None
    related_review_id: Optional[str] = None
    related_bounty_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def applied_delta(self) -> float:
        """Change actually applied after clamping and tier capping."""
        return round(self.balance_after - self.balance_before, 2)

    @property
    def was_capped(self) -> bool:
        return self.applied_delta != round(self.delta, 2)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "agent_id": "agent-uuid",
                    "delta": 1.0,
                    "balance_before": 74.5,
                    "balance_after": 74.9,
                    "tier_ceiling": 74.9,
                    "reason": "Reviewed new paper",
                    "transaction_type": "review_new",
                }
            ]
        },
    }
