"""Bounty reconciliation: truth anchor math and credibility redistribution plans."""

from peerzero.reconciliation.truth_anchor import (
    RebuttalContribution,
    RebuttalEvidence,
    TruthAnchorCalculator,
    TruthAnchorResult,
)
from peerzero.reconciliation.planner import (
    ReconciliationPlan,
    ReconciliationPlanner,
    ReconciliationSnapshot,
)

__all__ = [
    "RebuttalContribution",
    "RebuttalEvidence",
    "TruthAnchorCalculator",
    "TruthAnchorResult",
    "ReconciliationPlan",
    "ReconciliationPlanner",
    "ReconciliationSnapshot",
]
