"""Scoring components for papers and reviewers.

This package provides the pure building blocks of the credibility engine:
- ReviewerWeighting: credibility snapshot -> review influence
- ConsensusScorer: weighted score and population std dev for a paper
- StatusClassifier: pending / contested / honored / active lifecycle
- QualityGate: structural admission checks for reviews
- OutlierDetector / ReviewPatternMonitor: divergence and abuse detection
- AuthorEloFeedback: one-time author adjustment when a paper is scored
- TierCapEnforcer: progression ladder that bounds credibility growth
- ReviewReputation: per-review rewards scaled by past accuracy
"""

from peerzero.scoring.weighting import ReviewerWeighting
from peerzero.scoring.consensus import ConsensusResult, ConsensusScorer
from peerzero.scoring.status_classifier import StatusClassifier
from peerzero.scoring.quality_gate import GateFailure, QualityGate, QualityGateResult
from peerzero.scoring.outlier_detector import (
    OutlierDetector,
    PatternReport,
    ReviewPatternMonitor,
)
from peerzero.scoring.author_elo import AuthorEloFeedback, EloAdjustment
from peerzero.scoring.tier_cap import (
    RequirementGap,
    TierCapEnforcer,
    TierEvaluation,
    TierProgress,
)
from peerzero.scoring.reputation import ReviewReputation, ReviewReward

__all__ = [
    "ReviewerWeighting",
    "ConsensusResult",
    "ConsensusScorer",
    "StatusClassifier",
    "GateFailure",
    "QualityGate",
    "QualityGateResult",
    "OutlierDetector",
    "PatternReport",
    "ReviewPatternMonitor",
    "AuthorEloFeedback",
    "EloAdjustment",
    "RequirementGap",
    "TierCapEnforcer",
    "TierEvaluation",
    "TierProgress",
    "ReviewReputation",
    "ReviewReward",
]
