"""Tests for bounty registration, validation and reconciliation.

Tests cover:
- Registration captures the score and review count
- Validation waits for both the score drop and the new reviews
- Full reconciliation: truth anchor, paper nudge, ledger redistribution
- Validation is one-shot per bounty
- Registration policy errors, including coordination detection
"""

import pytest

from peerzero.config.rulesets import REBALANCE_V3, BountyRules
from peerzero.data_management.schemas import TransactionType
from peerzero.errors import (
    AlreadyChallenged,
    CoordinationDetected,
    NotReviewed,
    PaperNotFound,
    SelfChallenge,
    ValidationError,
)


@pytest.fixture
async def disputed(engine, make_agent, review_with, review_body, paper_body):
    """A paper rated 8 by five reviewers, then challenged by a lone 2.

    The challenger's rebut response is scored 8 by five voters and the
    bounty is registered at score 7.0 with 6 reviews.
    """
    author = await make_agent(50.0, handle="disputed-author")
    target = await engine.submit_paper(author.agent_id, paper_body())
    early = await review_with(target.paper_id, [8, 8, 8, 8, 8])

    challenger = await make_agent(50.0, handle="challenger")
    challenger_review = await engine.submit_review(
        target.paper_id, challenger.agent_id, review_body(2)
    )
    response = await engine.submit_response(
        challenger.agent_id,
        target.paper_id,
        "rebut",
        paper_body(title="Calibration gains vanish under matched compute"),
    )
    voters = await review_with(response.paper_id, [8, 8, 8, 8, 8])
    registration = await engine.register_bounty(
        challenger.agent_id, target.paper_id, response.paper_id
    )
    return {
        "author": author,
        "target": target,
        "early": early,
        "challenger": challenger,
        "challenger_review": challenger_review,
        "response": response,
        "voters": voters,
        "registration": registration,
    }


async def reviewer_of(engine, outcome) -> str:
    return (await engine.reviews.get(outcome.review_id)).reviewer_id


async def deltas(engine, agent_id: str, kind: TransactionType) -> list:
    return [t.delta for t in await engine.transactions.list_for_agent(agent_id, transaction_type=kind)]


class TestRegistration:
    @pytest.mark.asyncio
    async def test_captures_score_and_count(self, disputed):
        assert disputed["challenger_review"].is_outlier
        registration = disputed["registration"]
        assert registration.score_before == 7.0
        assert registration.review_count_at_registration == 6

    @pytest.mark.asyncio
    async def test_self_challenge(self, engine, disputed):
        with pytest.raises(SelfChallenge):
            await engine.register_bounty(
                disputed["author"].agent_id,
                disputed["target"].paper_id,
                disputed["response"].paper_id,
            )

    @pytest.mark.asyncio
    async def test_must_review_first(self, engine, disputed, make_agent):
        outsider = await make_agent(50.0)
        with pytest.raises(NotReviewed):
            await engine.register_bounty(
                outsider.agent_id, disputed["target"].paper_id, disputed["response"].paper_id
            )

    @pytest.mark.asyncio
    async def test_challenge_paper_must_be_own_response(self, engine, disputed):
        early_reviewer = await reviewer_of(engine, disputed["early"][0])
        with pytest.raises(ValidationError):
            await engine.register_bounty(
                early_reviewer, disputed["target"].paper_id, disputed["response"].paper_id
            )

    @pytest.mark.asyncio
    async def test_duplicate_challenge(self, engine, disputed):
        with pytest.raises(AlreadyChallenged):
            await engine.register_bounty(
                disputed["challenger"].agent_id,
                disputed["target"].paper_id,
                disputed["response"].paper_id,
            )

    @pytest.mark.asyncio
    async def test_unknown_target(self, engine):
        with pytest.raises(PaperNotFound):
            await engine.validate_bounty("missing")


class TestValidation:
    @pytest.mark.asyncio
    async def test_waits_for_preconditions(self, engine, disputed, review_with):
        target_id = disputed["target"].paper_id
        assert (await engine.validate_bounty(target_id)).validated_count == 0

        # the score has dropped well past 1.0 but only 9 new reviews exist
        await review_with(target_id, [3] * 9)
        outcome = await engine.validate_bounty(target_id)
        assert outcome.validated_count == 0

    @pytest.mark.asyncio
    async def test_reconciliation(self, engine, disputed, review_with):
        target_id = disputed["target"].paper_id
        challenger_id = disputed["challenger"].agent_id
        bounty_id = disputed["registration"].bounty_id

        late = await review_with(target_id, [3] * 10)
        assert late[-1].paper_score == 4.5

        outcome = await engine.validate_bounty(target_id)
        assert outcome.validated_count == 1
        assert outcome.validated_bounty_ids == [bounty_id]
        assert outcome.truth_anchors[bounty_id] == 4.09
        # 4.5 + round((4.092 - 4.5) x 0.3, 2)
        assert outcome.current_score == 4.38

        bounty = await engine.bounties.get(bounty_id)
        assert bounty.is_valid
        assert bounty.score_after == 4.5
        assert bounty.score_drop == 2.5
        assert bounty.truth_anchor == 4.09
        assert (await engine.agents.get(challenger_id)).valid_bounties == 1

        assert await deltas(engine, challenger_id, TransactionType.BOUNTY_VALIDATED) == [3.0]
        assert await deltas(engine, challenger_id, TransactionType.DIVERSITY_BONUS) == [0.59]
        # the challenger's flagged low review called the direction truth moved in
        vindicated = await deltas(engine, challenger_id, TransactionType.VINDICATED_OUTLIER)
        assert vindicated == [pytest.approx(1.125, abs=0.006)]
        assert await deltas(engine, challenger_id, TransactionType.TRUTH_DISTANCE_PENALTY) == []

        early_reviewer = await reviewer_of(engine, disputed["early"][0])
        assert await deltas(engine, early_reviewer, TransactionType.TRUTH_DISTANCE_PENALTY) == [-0.78]

        late_reviewer = await reviewer_of(engine, late[-1])
        late_transactions = await engine.transactions.list_for_agent(late_reviewer)
        assert [t.transaction_type for t in late_transactions] == [TransactionType.REVIEW_NEW]

        for voter in disputed["voters"]:
            voter_id = await reviewer_of(engine, voter)
            assert await deltas(engine, voter_id, TransactionType.REBUTTAL_VOTE_REWARD) == [0.3]

    @pytest.mark.asyncio
    async def test_validates_once(self, engine, disputed, review_with):
        target_id = disputed["target"].paper_id
        await review_with(target_id, [3] * 10)
        await engine.validate_bounty(target_id)

        again = await engine.validate_bounty(target_id)
        assert again.validated_count == 0
        assert again.current_score == 4.38
        challenger_id = disputed["challenger"].agent_id
        assert len(await deltas(engine, challenger_id, TransactionType.BOUNTY_VALIDATED)) == 1

    @pytest.mark.asyncio
    async def test_ledger_stays_consistent(self, engine, disputed, review_with):
        target_id = disputed["target"].paper_id
        await review_with(target_id, [3] * 10)
        await engine.validate_bounty(target_id)

        audit = await engine.audit_ledger(disputed["challenger"].agent_id)
        assert audit.consistent


class TestCoordination:
    @pytest.fixture
    def config(self):
        return REBALANCE_V3.model_copy(
            update={"name": "strict", "bounty": BountyRules(coordination_overlap_limit=0)}
        )

    @pytest.mark.asyncio
    async def test_shared_reviews_block_challenge(self, engine, make_agent, review_body, paper_body):
        author = await make_agent(50.0)
        challenger = await make_agent(50.0)
        third = await make_agent(50.0)

        shared = await engine.submit_paper(third.agent_id, paper_body())
        await engine.submit_review(shared.paper_id, author.agent_id, review_body(7))
        await engine.submit_review(shared.paper_id, challenger.agent_id, review_body(7))

        target = await engine.submit_paper(author.agent_id, paper_body())
        await engine.submit_review(target.paper_id, challenger.agent_id, review_body(4))
        response = await engine.submit_response(
            challenger.agent_id, target.paper_id, "rebut", paper_body()
        )

        with pytest.raises(CoordinationDetected) as exc_info:
            await engine.register_bounty(challenger.agent_id, target.paper_id, response.paper_id)
        assert exc_info.value.details["shared_reviews"] == 1
