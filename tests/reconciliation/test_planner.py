"""Tests for bounty reconciliation planning.

Tests cover:
- Challenger reward and its cap
- Diversity bonus for a consistent outlier review
- Reviewer intents against the truth anchor (penalty, reward, vindication)
- Rebuttal voter intents
- Paper score nudge
- Planner purity (snapshot untouched)
"""

import pytest

from peerzero.config.rulesets import REBALANCE_V3
from peerzero.data_management.schemas import (
    Bounty,
    CredibilitySnapshot,
    Paper,
    ResponseStance,
    Review,
    TransactionType,
)
from peerzero.reconciliation.planner import ReconciliationPlanner, ReconciliationSnapshot


def review(paper_id: str, reviewer_id: str, score: int, is_outlier: bool = False) -> Review:
    return Review(
        paper_id=paper_id,
        reviewer_id=reviewer_id,
        score=score,
        reviewer_credibility_at_time=CredibilitySnapshot(value=50.0),
        weight=0.6,
        is_outlier=is_outlier,
    )


def paper(paper_id: str, author_id: str, score: float, **fields) -> Paper:
    return Paper(
        paper_id=paper_id,
        author_id=author_id,
        title="title",
        abstract="abstract",
        body="body",
        weighted_score=score,
        **fields,
    )


@pytest.fixture
def planner():
    return ReconciliationPlanner(REBALANCE_V3)


@pytest.fixture
def snapshot():
    """Eight-scorers, one outlier challenger (2) and ten later threes.

    consensus = 72 / 16 = 4.5; one rebut response scored 8.0 by five voters
    gives truth = 4.5 x 0.76 + 2.8 x 0.24 = 4.092.
    """
    target_reviews = (
        [review("target", f"early-{i}", 8) for i in range(5)]
        + [review("target", "challenger", 2, is_outlier=True)]
        + [review("target", f"late-{i}", 3) for i in range(10)]
    )
    rebuttal = paper(
        "rebuttal", "challenger", 8.0,
        parent_paper_id="target", response_stance=ResponseStance.REBUT,
    )
    return ReconciliationSnapshot(
        bounty=Bounty(
            bounty_id="bounty-1",
            challenger_id="challenger",
            target_paper_id="target",
            challenge_paper_id="rebuttal",
            score_before=7.0,
            review_count_at_registration=6,
        ),
        target=paper("target", "author", 4.5),
        target_reviews=target_reviews,
        challenge_paper=rebuttal,
        rebuttals=[rebuttal],
        rebuttal_reviews={"rebuttal": [review("rebuttal", f"voter-{i}", 8) for i in range(5)]},
        current_score=4.5,
    )


def deltas_for(plan, agent_id: str) -> dict:
    return {i.transaction_type: i.delta for i in plan.intents if i.agent_id == agent_id}


class TestReconciliationPlanner:
    def test_truth_anchor_and_nudge(self, planner, snapshot):
        plan = planner.plan(snapshot)
        assert plan.truth.original_consensus == pytest.approx(4.5)
        assert plan.truth_anchor == pytest.approx(4.092)
        assert plan.score_drop == 2.5
        assert plan.paper_adjustment == -0.12

    def test_challenger_rewards(self, planner, snapshot):
        plan = planner.plan(snapshot)
        challenger = deltas_for(plan, "challenger")

        assert challenger[TransactionType.BOUNTY_VALIDATED] == 3.0
        assert challenger[TransactionType.DIVERSITY_BONUS] == 0.59
        # the flagged 2 sits on the side truth moved to, so it is vindicated
        assert challenger[TransactionType.VINDICATED_OUTLIER] == pytest.approx(1.125, abs=0.006)
        assert TransactionType.TRUTH_DISTANCE_PENALTY not in challenger

    def test_challenger_reward_scales_below_cap(self, planner, snapshot):
        snapshot.bounty = snapshot.bounty.model_copy(update={"score_before": 5.5})
        plan = planner.plan(snapshot)
        assert deltas_for(plan, "challenger")[TransactionType.BOUNTY_VALIDATED] == 1.5

    def test_reviewer_intents(self, planner, snapshot):
        plan = planner.plan(snapshot)

        assert deltas_for(plan, "early-0") == {TransactionType.TRUTH_DISTANCE_PENALTY: -0.78}
        # 1.09 from the anchor: neither close enough to reward nor far enough to penalize
        assert deltas_for(plan, "late-0") == {}

    def test_voter_intents(self, planner, snapshot):
        plan = planner.plan(snapshot)
        for i in range(5):
            assert deltas_for(plan, f"voter-{i}") == {TransactionType.REBUTTAL_VOTE_REWARD: 0.3}

    def test_disagreeing_voter_penalized(self, planner, snapshot):
        snapshot.rebuttal_reviews["rebuttal"].append(review("rebuttal", "dissenter", 3))
        plan = planner.plan(snapshot)
        assert deltas_for(plan, "dissenter") == {TransactionType.REBUTTAL_VOTE_PENALTY: -0.15}

    def test_vindicated_outlier(self, planner):
        """A strong rebuttal pulls truth past the consensus toward the lone low score."""
        target_reviews = [review("target", f"r-{i}", 9) for i in range(5)] + [
            review("target", "lone", 2, is_outlier=True)
        ]
        rebuttals = [
            paper(f"rebut-{i}", f"author-{i}", 10.0, parent_paper_id="target",
                  response_stance=ResponseStance.REBUT)
            for i in range(3)
        ]
        snapshot = ReconciliationSnapshot(
            bounty=Bounty(
                challenger_id="author-0",
                target_paper_id="target",
                challenge_paper_id="rebut-0",
                score_before=8.0,
            ),
            target=paper("target", "author", 6.5),
            target_reviews=target_reviews,
            challenge_paper=rebuttals[0],
            rebuttals=rebuttals,
            rebuttal_reviews={p.paper_id: [review(p.paper_id, "v", 9)] * 5 for p in rebuttals},
            current_score=6.5,
        )
        plan = planner.plan(snapshot)

        # consensus 47/6, truth 7.83 x 0.2 + 1.0 x 0.8 = 2.37; the lone 2 sits closer
        lone = deltas_for(plan, "lone")
        assert lone[TransactionType.VINDICATED_OUTLIER] == 2.5
        assert deltas_for(plan, "r-0")[TransactionType.TRUTH_DISTANCE_PENALTY] == -1.0

    def test_outlier_vindicated_by_single_rebuttal(self, planner):
        """One rebuttal moves truth toward a lone low score without passing it.

        consensus = 82 / 11 = 7.45; truth = 7.45 x 0.76 + 2.8 x 0.24 = 6.34.
        The lone 2 is still 4.34 from truth, yet it called the direction.
        """
        target_reviews = [review("target", f"r-{i}", 8) for i in range(10)] + [
            review("target", "lone", 2, is_outlier=True)
        ]
        rebuttal = paper(
            "rebut", "challenger", 8.0,
            parent_paper_id="target", response_stance=ResponseStance.REBUT,
        )
        snapshot = ReconciliationSnapshot(
            bounty=Bounty(
                challenger_id="challenger",
                target_paper_id="target",
                challenge_paper_id="rebut",
                score_before=7.45,
            ),
            target=paper("target", "author", 7.45),
            target_reviews=target_reviews,
            challenge_paper=rebuttal,
            rebuttals=[rebuttal],
            rebuttal_reviews={"rebut": [review("rebut", f"v-{i}", 8) for i in range(5)]},
            current_score=7.45,
        )
        plan = planner.plan(snapshot)

        assert plan.truth_anchor == pytest.approx(6.3375, abs=0.001)
        lone = deltas_for(plan, "lone")
        assert lone == {TransactionType.VINDICATED_OUTLIER: 2.45}
        assert deltas_for(plan, "r-0") == {TransactionType.TRUTH_DISTANCE_PENALTY: -0.33}

    def test_no_evidence_skips_voters(self, planner, snapshot):
        snapshot.rebuttals = []
        snapshot.rebuttal_reviews = {}
        plan = planner.plan(snapshot)

        assert plan.truth_anchor == plan.truth.original_consensus
        assert not any(
            i.transaction_type in (TransactionType.REBUTTAL_VOTE_REWARD, TransactionType.REBUTTAL_VOTE_PENALTY)
            for i in plan.intents
        )

    def test_snapshot_not_mutated(self, planner, snapshot):
        before = [r.model_dump() for r in snapshot.target_reviews]
        planner.plan(snapshot)
        assert [r.model_dump() for r in snapshot.target_reviews] == before
