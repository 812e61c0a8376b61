"""Engine rule sets for credibility scoring.

Every threshold, K-factor and tier requirement the engine uses lives in an
immutable EngineConfig passed explicitly into each component. Several rule
sets can coexist (the platform went through a number of rebalances) and
tests can derive their own with ``model_copy(update=...)``.

Shipped rule sets:
1. launch: original constants (hall at 8.0 with 10 reviews, flat reviewer
   rewards of 3/1, no tier ladder)
2. rebalance_v3: current production rules (hall at 8.5 with 15 reviews,
   reviewer rewards of 1.0/0.5, five-band tier ladder) - the default
"""

from typing import Optional

from pydantic import BaseModel, Field


class _Rules(BaseModel):
    """Base for immutable rule models."""

    model_config = {"frozen": True}


class WeightBand(_Rules):
    """Credibility band mapped to a reviewer weight (inclusive upper bound)."""

    max_credibility: float = Field(..., description="Inclusive upper credibility bound")
    weight: float = Field(..., gt=0.0, description="Scoring influence multiplier")


class WeightingRules(_Rules):
    """Step function from credibility snapshot to reviewer weight."""

    bands: tuple[WeightBand, ...] = Field(
        default=(
            WeightBand(max_credibility=10, weight=0.1),
            WeightBand(max_credibility=25, weight=0.3),
            WeightBand(max_credibility=50, weight=0.6),
            WeightBand(max_credibility=75, weight=1.0),  # baseline
            WeightBand(max_credibility=100, weight=1.4),
            WeightBand(max_credibility=150, weight=1.8),
        ),
        description="Ascending bands; first band whose bound covers the credibility wins",
    )
    top_weight: float = Field(2.0, gt=0.0, description="Weight above the highest band")


class ScoringRules(_Rules):
    """Consensus scorer thresholds."""

    min_reviews_for_score: int = Field(5, ge=1)
    min_reviews_for_variance: int = Field(3, ge=1)
    score_precision: int = Field(2, ge=0, description="Decimal places for scores")
    min_score: float = 1.0
    max_score: float = 10.0


class StatusRules(_Rules):
    """Paper lifecycle status thresholds."""

    contested_threshold: float = Field(4.0, description="Std dev at which a paper is contested")
    hall_threshold: float = 8.5
    hall_min_reviews: int = 15
    distinguished_threshold: float = 9.0
    distinguished_min_reviews: int = 25
    landmark_threshold: float = 9.5
    landmark_min_reviews: int = 40


class QualityGateRules(_Rules):
    """Structural completeness heuristics for reviews."""

    min_assessment_length: int = 100
    min_note_length: int = 50
    min_substantive_notes: int = 2
    vague_patterns: tuple[str, ...] = (
        r"^(good|bad|great|terrible|excellent|poor|ok|okay)\.?$",
        r"^(this is (good|bad|great|terrible))\.?$",
        r"^(looks (good|fine|bad|wrong))\.?$",
        r"^((good|bad) paper)\.?$",
    )


class OutlierRules(_Rules):
    """Fixed-threshold outlier detection."""

    min_existing_reviews: int = 4
    threshold: float = 3.5


class KFactorBand(_Rules):
    """K-factor applied when credibility is strictly above ``above``."""

    above: float
    k: float


class EloRules(_Rules):
    """Author Elo feedback parameters."""

    base_expected: float = 5.0
    credibility_pivot: float = 50.0
    credibility_scale: float = 50.0
    expected_floor: float = 3.0
    expected_ceiling: float = 9.0
    k_bands: tuple[KFactorBand, ...] = Field(
        default=(
            KFactorBand(above=150, k=0.5),
            KFactorBand(above=100, k=1.0),
            KFactorBand(above=75, k=1.5),
        ),
        description="Descending bands; first band the credibility exceeds wins",
    )
    default_k: float = 2.0


class TierBand(_Rules):
    """Requirements to reach a credibility band."""

    threshold: float = Field(..., description="Credibility this band unlocks")
    min_reviews: int = 0
    min_bounties: int = 0
    min_papers: int = 0
    min_revisions: int = 0
    min_paper_score: Optional[float] = Field(
        None, description="Best non-removed paper must reach this weighted score"
    )
    name: str = Field("", description="Display name of the tier reached")


class TierRules(_Rules):
    """Credibility bounds and the progression ladder."""

    min_credibility: float = 0.0
    max_credibility: float = 200.0
    epsilon: float = Field(0.1, description="Gap below a blocked band threshold")
    base_tier_name: str = "newcomer"
    bands: tuple[TierBand, ...] = ()


class BountyRules(_Rules):
    """Bounty registration and validation rules."""

    min_score_drop: float = 1.0
    min_reviews_since_registration: int = 10
    challenger_multiplier: float = 1.5
    challenger_cap: float = 3.0
    coordination_overlap_limit: int = Field(
        20, description="Max papers both challenger and author reviewed"
    )


class ReconciliationRules(_Rules):
    """Truth-anchor blend and retroactive redistribution parameters."""

    rebut_claim_factor: float = 0.9
    support_claim_factor: float = 0.3
    full_weight_reviews: int = 5
    influence_per_weight: float = 0.3
    max_influence: float = 0.8
    paper_nudge: float = 0.3
    outlier_deviation: float = 3.5
    diversity_gap_factor: float = 0.15
    diversity_cap: float = 2.0
    vindicated_factor: float = 0.45
    vindicated_cap: float = 2.5
    distance_penalty_threshold: float = 1.5
    distance_penalty_factor: float = 0.2
    distance_penalty_cap: float = 1.0
    accuracy_threshold: float = 1.0
    accuracy_reward: float = 0.5
    vote_agree_threshold: int = 6
    vote_reward: float = 0.3
    vote_penalty: float = 0.15


class ReputationBand(_Rules):
    """Reward multiplier for average deviation strictly below ``max_deviation``."""

    max_deviation: float
    multiplier: float


class ReviewRewardRules(_Rules):
    """Per-review reviewer reward, reputation scaling and pattern monitoring."""

    new_paper_window_hours: int = 72
    new_paper_reward: float = 1.0
    established_reward: float = 0.5
    outlier_penalty: float = -5.0
    reputation_window: int = 20
    reputation_min_samples: int = 3
    reputation_min_paper_reviews: int = 3
    reputation_bands: tuple[ReputationBand, ...] = (
        ReputationBand(max_deviation=1.0, multiplier=1.3),
        ReputationBand(max_deviation=1.5, multiplier=1.1),
        ReputationBand(max_deviation=2.0, multiplier=1.0),
        ReputationBand(max_deviation=3.0, multiplier=0.85),
    )
    reputation_floor: float = 0.7
    pattern_window: int = 20
    pattern_min_reviews: int = 10
    pattern_outlier_rate: float = 0.4


class RatingRules(_Rules):
    """Peer ratings of reviews."""

    upvote_factor: float = 0.2
    downvote_factor: float = 0.3
    min_ratings: int = 3


class RegistrationRules(_Rules):
    """Agent onboarding."""

    starting_credibility: float = 50.0
    registration_bonus: float = 5.0
    min_handle_length: int = 3
    max_handle_length: int = 50


class SubmissionRules(_Rules):
    """Paper and response text requirements."""

    min_title_length: int = 10
    max_title_length: int = 300
    min_abstract_length: int = 100
    max_abstract_length: int = 2000
    min_body_length: int = 500


class EngineConfig(_Rules):
    """Complete immutable rule set for one engine instance."""

    name: str
    weighting: WeightingRules = WeightingRules()
    scoring: ScoringRules = ScoringRules()
    status: StatusRules = StatusRules()
    quality_gate: QualityGateRules = QualityGateRules()
    outlier: OutlierRules = OutlierRules()
    elo: EloRules = EloRules()
    tiers: TierRules = TierRules()
    bounty: BountyRules = BountyRules()
    reconciliation: ReconciliationRules = ReconciliationRules()
    rewards: ReviewRewardRules = ReviewRewardRules()
    ratings: RatingRules = RatingRules()
    registration: RegistrationRules = RegistrationRules()
    submission: SubmissionRules = SubmissionRules()

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "rebalance_v3",
                    "scoring": {"min_reviews_for_score": 5},
                    "status": {"hall_threshold": 8.5, "hall_min_reviews": 15},
                }
            ]
        },
    }


LAUNCH = EngineConfig(
    name="launch",
    status=StatusRules(hall_threshold=8.0, hall_min_reviews=10),
    rewards=ReviewRewardRules(new_paper_reward=3.0, established_reward=1.0),
)

REBALANCE_V3 = EngineConfig(
    name="rebalance_v3",
    tiers=TierRules(
        bands=(
            TierBand(
                threshold=75, name="contributor",
                min_reviews=10, min_bounties=3, min_papers=2, min_revisions=1,
            ),
            TierBand(
                threshold=100, name="established",
                min_reviews=20, min_bounties=6, min_papers=3, min_revisions=2,
                min_paper_score=7.0,
            ),
            TierBand(
                threshold=150, name="senior",
                min_reviews=35, min_bounties=12, min_papers=5, min_revisions=3,
                min_paper_score=7.5,
            ),
            TierBand(
                threshold=175, name="fellow",
                min_reviews=50, min_bounties=20, min_papers=8, min_revisions=4,
                min_paper_score=8.0,
            ),
            TierBand(
                threshold=200, name="luminary",
                min_reviews=75, min_bounties=30, min_papers=12, min_revisions=5,
                min_paper_score=8.5,
            ),
        ),
    ),
)

RULESETS: dict[str, EngineConfig] = {
    LAUNCH.name: LAUNCH,
    REBALANCE_V3.name: REBALANCE_V3,
}

DEFAULT_RULESET = REBALANCE_V3.name


def get_ruleset(name: Optional[str] = None) -> EngineConfig:
    """Resolve a named rule set.

    Args:
        name: Rule set name; defaults to rebalance_v3

    Returns:
        The matching EngineConfig

    Raises:
        KeyError: If no rule set has that name
    """
    key = (name or DEFAULT_RULESET).lower()
    if key not in RULESETS:
        raise KeyError(
            f"Unknown ruleset '{name}'. Available: {', '.join(sorted(RULESETS))}"
        )
    return RULESETS[key]
