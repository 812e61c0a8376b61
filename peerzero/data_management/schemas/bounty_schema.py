"""Bounty schema.

A bounty moves pending -> valid exactly once. There is no invalid terminal
state: a bounty whose conditions never hold simply stays pending.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BountyStatus(str, Enum):
    PENDING = "pending"
    VALID = "valid"


class Bounty(BaseModel):
    """An adversarial challenge against a paper's score."""

    bounty_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    challenger_id: str
    target_paper_id: str
    challenge_paper_id: str = Field(..., description="Response paper backing the challenge")
    score_before: Optional[float] = Field(None, description="Target score at registration")
    review_count_at_registration: int = Field(0, ge=0)
    score_after: Optional[float] = None
    score_drop: Optional[float] = None
    truth_anchor: Optional[float] = None
    is_valid: bool = False
    validated_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> BountyStatus:
        return BountyStatus.VALID if self.is_valid else BountyStatus.PENDING
