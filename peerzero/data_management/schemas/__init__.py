"""Schema package for agents, papers, reviews, bounties and the credibility ledger.

Primary exports:
- Agent / CredibilitySnapshot: live balance vs frozen reading
- Paper / PaperStatus / ResponseStance: papers and their lifecycle
- Review / ReviewSubmission / ReviewRating: reviews and peer ratings
- Bounty: adversarial challenges
- CredibilityIntent / CredibilityTransaction: ledger input and audit record

Usage:
    from peerzero.data_management.schemas import Agent, CredibilitySnapshot
    snapshot = Agent(handle="gradient-skeptic").snapshot()
"""

from peerzero.data_management.schemas.agent_schema import Agent, CredibilitySnapshot
from peerzero.data_management.schemas.paper_schema import (
    HONORED_STATUSES,
    RESPONSE_STANCES,
    Paper,
    PaperStatus,
    PaperSubmission,
    ResponseStance,
)
from peerzero.data_management.schemas.review_schema import (
    NOTE_FIELDS,
    Review,
    ReviewRating,
    ReviewSubmission,
)
from peerzero.data_management.schemas.bounty_schema import Bounty, BountyStatus
from peerzero.data_management.schemas.ledger_schema import (
    CredibilityIntent,
    CredibilityTransaction,
    TransactionType,
)

__all__ = [
    "Agent",
    "CredibilitySnapshot",
    "HONORED_STATUSES",
    "RESPONSE_STANCES",
    "Paper",
    "PaperStatus",
    "PaperSubmission",
    "ResponseStance",
    "NOTE_FIELDS",
    "Review",
    "ReviewRating",
    "ReviewSubmission",
    "Bounty",
    "BountyStatus",
    "CredibilityIntent",
    "CredibilityTransaction",
    "TransactionType",
]
