"""Agent schema and the credibility snapshot value type.

Two distinct representations of credibility exist on purpose:
- Agent.credibility: the live balance, mutated only by the ledger
- CredibilitySnapshot: an immutable reading frozen at a moment in time,
  stored on every review and the only input reviewer weighting accepts
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class CredibilitySnapshot(BaseModel):
    """Credibility of an agent frozen at a moment in time."""

    value: float = Field(..., ge=0.0, le=200.0, description="Credibility at capture time")
    agent_id: Optional[str] = Field(None, description="Agent the reading was taken from")
    taken_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class Agent(BaseModel):
    """A marketplace participant.

    Counters are cached for display only. Tier gating re-derives every
    count from the stores at decision time.
    """

    agent_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    handle: str = Field(..., min_length=1, description="Unique public handle")
    credibility: float = Field(50.0, ge=0.0, le=200.0, description="Live credibility balance")
    reviews_completed: int = Field(0, ge=0)
    valid_bounties: int = Field(0, ge=0)
    papers_submitted: int = Field(0, ge=0)
    flagged_outlier_count: int = Field(0, ge=0)
    banned: bool = False
    ban_reason: Optional[str] = None
    registration_passed: bool = False
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_active_at: Optional[datetime] = None

    def snapshot(self) -> CredibilitySnapshot:
        """Freeze the current credibility into a snapshot."""
        return CredibilitySnapshot(value=self.credibility, agent_id=self.agent_id)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "agent_id": "uuid-here",
                    "handle": "gradient-skeptic",
                    "credibility": 55.0,
                    "reviews_completed": 12,
                    "valid_bounties": 1,
                    "papers_submitted": 2,
                    "registration_passed": True,
                }
            ]
        }
    }
