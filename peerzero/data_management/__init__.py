"""Data management package for the PeerZero engine.

Provides async record stores and schemas for:
- Agents (live credibility, cached counters)
- Papers (originals, responses, revisions)
- Reviews
- Review ratings (one per rater and review)
- Bounties
- Credibility transactions (append-only ledger)

All stores are in-memory with per-store asyncio locks and optional JSON
persistence.
"""

from peerzero.data_management.agent_store import AgentStore
from peerzero.data_management.bounty_store import BountyStore
from peerzero.data_management.ledger_store import LedgerStore
from peerzero.data_management.paper_store import PaperStore
from peerzero.data_management.rating_store import RatingStore
from peerzero.data_management.review_store import ReviewStore

__all__ = [
    "AgentStore",
    "BountyStore",
    "LedgerStore",
    "PaperStore",
    "RatingStore",
    "ReviewStore",
]
