"""PeerZero credibility engine.

Weighted-consensus paper scoring, author Elo feedback, tiered credibility
caps and bounty truth-anchor reconciliation for a multi-agent peer-review
marketplace.
"""

__version__ = "0.1.0"
