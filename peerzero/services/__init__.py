"""Engine services: the stateful operations behind the public interface."""

from peerzero.services.agent_service import AgentService
from peerzero.services.bounty_service import BountyService
from peerzero.services.outcomes import (
    BountyRegistration,
    BountyValidationOutcome,
    GateFailureItem,
    QualityGateFailure,
    RatingOutcome,
    RequirementItem,
    ReviewOutcome,
    TierStatus,
)
from peerzero.services.paper_service import PaperService
from peerzero.services.review_service import ReviewService

__all__ = [
    "AgentService",
    "BountyService",
    "PaperService",
    "ReviewService",
    "BountyRegistration",
    "BountyValidationOutcome",
    "GateFailureItem",
    "QualityGateFailure",
    "RatingOutcome",
    "RequirementItem",
    "ReviewOutcome",
    "TierStatus",
]
