"""Tier cap enforcement.

Credibility growth is clamped at the top of the last band whose
requirements are all met (reviews, validated bounties, original papers,
revisions and, for higher bands, a best paper score). An agent that has
not met the first band sits just under its threshold (e.g. 74.9) to signal
"blocked, not yet equal to"; higher bands cap at the previous threshold.

Only growth is capped: losses always pass through. Progress is supplied by
the caller and must be derived from live store counts at decision time.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from peerzero.config.rulesets import TierBand, TierRules


@dataclass
class TierProgress:
    """Live progression counts for one agent.

    Attributes:
        reviews: Passing reviews authored
        bounties: Validated bounties as challenger
        papers: Original (non-response) papers not removed
        revisions: Revisions not removed
        best_paper_score: Highest weighted score among non-removed papers
    """

    reviews: int = 0
    bounties: int = 0
    papers: int = 0
    revisions: int = 0
    best_paper_score: Optional[float] = None


@dataclass
class RequirementGap:
    """One unmet requirement of a band."""

    name: str
    required: float
    current: float

    @property
    def remaining(self) -> float:
        return round(max(0.0, self.required - self.current), 2)


@dataclass
class TierEvaluation:
    """Where an agent stands on the ladder."""

    tier: str
    ceiling: float
    blocked: bool
    next_threshold: Optional[float] = None
    next_tier: Optional[str] = None
    next_requirements: List[RequirementGap] = field(default_factory=list)


class TierCapEnforcer:
    """
    Clamps credibility growth to what an agent's progress unlocks.

    Pure and idempotent: the same (proposed, prior, progress) always yields
    the same result, and enforcing an already-enforced value changes nothing.

    Usage:
        enforcer = TierCapEnforcer(config.tiers)
        new_balance = enforcer.enforce(proposed=80.0, prior=74.0, progress=progress)
    """

    def __init__(self, rules: TierRules):
        self.min_credibility = rules.min_credibility
        self.max_credibility = rules.max_credibility
        self.epsilon = rules.epsilon
        self.base_tier_name = rules.base_tier_name
        self.bands = sorted(rules.bands, key=lambda band: band.threshold)
        self._logger = logger.bind(component="TierCapEnforcer")

    def unmet_requirements(self, band: TierBand, progress: TierProgress) -> List[RequirementGap]:
        gaps = []
        checks = (
            ("reviews", band.min_reviews, progress.reviews),
            ("bounties", band.min_bounties, progress.bounties),
            ("papers", band.min_papers, progress.papers),
            ("revisions", band.min_revisions, progress.revisions),
        )
        for name, required, current in checks:
            if current < required:
                gaps.append(RequirementGap(name=name, required=required, current=current))

        if band.min_paper_score is not None:
            best = progress.best_paper_score or 0.0
            if best < band.min_paper_score:
                gaps.append(
                    RequirementGap(
                        name="best_paper_score",
                        required=band.min_paper_score,
                        current=best,
                    )
                )
        return gaps

    def satisfies(self, band: TierBand, progress: TierProgress) -> bool:
        return not self.unmet_requirements(band, progress)

    def clamp(self, value: float) -> float:
        return max(self.min_credibility, min(self.max_credibility, value))

    def ceiling(self, progress: TierProgress) -> float:
        """Highest credibility the agent's progress allows.

        Growing past a band threshold takes the next band's requirements, so
        an unmet band caps at the previous threshold. The first band caps
        just below its own threshold.
        """
        for index, band in enumerate(self.bands):
            if not self.satisfies(band, progress):
                if index == 0:
                    return round(band.threshold - self.epsilon, 2)
                return self.bands[index - 1].threshold
        return self.max_credibility

    def apply_ceiling(self, proposed: float, prior: float, ceiling: float) -> float:
        """Cap growth at ``ceiling``; never push a balance down to it."""
        proposed = self.clamp(proposed)
        if proposed > prior:
            proposed = max(prior, min(proposed, ceiling))
        return round(proposed, 2)

    def enforce(self, proposed: float, prior: float, progress: TierProgress) -> float:
        """
        Bound a proposed balance by the tier ladder.

        Args:
            proposed: Prior balance plus the requested delta
            prior: Balance before the change
            progress: Live progression counts

        Returns:
            Balance to store, within [min_credibility, max_credibility]
        """
        ceiling = self.ceiling(progress)
        result = self.apply_ceiling(proposed, prior, ceiling)
        if result < round(self.clamp(proposed), 2):
            self._logger.debug(f"Growth capped at {ceiling} (proposed {proposed:.2f})")
        return result

    def evaluate(self, credibility: float, progress: TierProgress) -> TierEvaluation:
        """Current tier, ceiling and what the next band still needs."""
        tier = self.base_tier_name
        for band in self.bands:
            if credibility >= band.threshold and self.satisfies(band, progress):
                tier = band.name or f"tier_{int(band.threshold)}"

        ceiling = self.ceiling(progress)
        next_band = next((b for b in self.bands if b.threshold > credibility), None)
        return TierEvaluation(
            tier=tier,
            ceiling=ceiling,
            blocked=ceiling < self.max_credibility and credibility >= ceiling,
            next_threshold=next_band.threshold if next_band else None,
            next_tier=(next_band.name or None) if next_band else None,
            next_requirements=self.unmet_requirements(next_band, progress) if next_band else [],
        )
