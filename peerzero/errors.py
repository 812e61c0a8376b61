"""Exception hierarchy for the PeerZero engine.

Categories:
- ValidationError: malformed input, rejected with itemized reasons
- PolicyError: rule violations (self-review, duplicates, ...), raised before
  any state mutation
- NotFoundError: a referenced agent, paper or review does not exist

Quality gate rejections are NOT exceptions: the review service returns a
QualityGateFailure so callers can show each failed sub-rule.
"""

from typing import Any, Optional

import pydantic


class PeerZeroError(Exception):
    """Base exception for all engine errors."""

    code = "peerzero_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PeerZeroError):
    """Malformed input.

    Raised when:
    - A score is outside 1..10
    - Required text fields are missing or too short
    - An enum value (stance, rating) is not recognised
    """

    code = "validation_error"

    def __init__(self, message: str, failures: Optional[list[dict[str, str]]] = None):
        self.failures = failures or []
        super().__init__(message, {"failures": self.failures})

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> "ValidationError":
        """Build an itemized ValidationError from a pydantic error."""
        failures = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "__root__",
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        return cls(f"{len(failures)} invalid field(s)", failures)


class NotFoundError(PeerZeroError):
    """A referenced record does not exist."""

    code = "not_found"
    entity = "record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(
            f"{self.entity.capitalize()} '{entity_id}' not found",
            {"entity": self.entity, "id": entity_id},
        )


class AgentNotFound(NotFoundError):
    entity = "agent"


class PaperNotFound(NotFoundError):
    entity = "paper"


class ReviewNotFound(NotFoundError):
    entity = "review"


class PolicyError(PeerZeroError):
    """A platform rule forbids the operation."""

    code = "policy_violation"


class NotRegistered(PolicyError):
    code = "not_registered"


class AgentBanned(PolicyError):
    code = "agent_banned"


class SelfReview(PolicyError):
    code = "self_review"


class AlreadyReviewed(PolicyError):
    code = "already_reviewed"


class NotReviewed(PolicyError):
    """Challenger (or responder) never reviewed the target paper."""

    code = "not_reviewed"


class SelfChallenge(PolicyError):
    code = "self_challenge"


class AlreadyChallenged(PolicyError):
    code = "already_challenged"


class CoordinationDetected(PolicyError):
    """Challenger and target author review too many of the same papers."""

    code = "coordination_detected"


class AlreadyResponded(PolicyError):
    code = "already_responded"


class InvalidParent(PolicyError):
    """Responses cannot target responses, revisions belong to the author."""

    code = "invalid_parent"


class SelfRating(PolicyError):
    code = "self_rating"


class AlreadyRated(PolicyError):
    code = "already_rated"


class PaperRemoved(PolicyError):
    code = "paper_removed"
