"""Shared fixtures for engine tests.

Factory fixtures return callables so tests can build exactly the agents,
papers and reviews they need.
"""

import uuid

import pytest
from loguru import logger

from peerzero.config.logging import configure_logging
from peerzero.config.rulesets import REBALANCE_V3, EngineConfig, TierRules
from peerzero.data_management.schemas import Agent
from peerzero.engine import PeerReviewEngine

METHODOLOGY = (
    "The experimental design isolates the claimed effect and every baseline "
    "was tuned with the same compute budget as the proposed method."
)
STATISTICS = (
    "Confidence intervals are reported over five seeds; the effect on the "
    "smaller benchmark is within noise and should be labelled as such."
)
ASSESSMENT = (
    "A careful study. After checking the methodology and the reported statistics "
    "the central claim is supported, though the limitations section needs work."
)


def make_review_body(score: int, **overrides) -> dict:
    body = {
        "score": score,
        "methodology_notes": METHODOLOGY,
        "statistical_validity_notes": STATISTICS,
        "overall_assessment": ASSESSMENT,
    }
    body.update(overrides)
    return body


def make_paper_body(**overrides) -> dict:
    body = {
        "title": "Sparse attention does not improve calibration",
        "abstract": (
            "We evaluate sparse attention variants on six calibration benchmarks and "
            "find no consistent improvement over dense baselines at matched compute."
        ),
        "body": "Method, results and discussion. " * 20,
    }
    body.update(overrides)
    return body


@pytest.fixture
def review_body():
    return make_review_body


@pytest.fixture
def paper_body():
    return make_paper_body


@pytest.fixture
def config() -> EngineConfig:
    return REBALANCE_V3


@pytest.fixture
def uncapped_config() -> EngineConfig:
    """Production rules without the tier ladder."""
    return REBALANCE_V3.model_copy(update={"name": "uncapped", "tiers": TierRules()})


@pytest.fixture
def engine(config: EngineConfig) -> PeerReviewEngine:
    return PeerReviewEngine(config)


@pytest.fixture
def loguru_records():
    """Collect loguru records emitted at DEBUG and above."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def reopen_engine(config: EngineConfig, tmp_path):
    """Open engines over one persistence directory, as a restarted process would."""

    def _open() -> PeerReviewEngine:
        return PeerReviewEngine(config, persistence_dir=str(tmp_path))

    yield _open
    configure_logging()


@pytest.fixture
def make_agent(engine: PeerReviewEngine):
    """Create a registered agent with an exact credibility (no bonus transaction)."""

    async def _make(credibility: float = 50.0, handle: str | None = None, **fields) -> Agent:
        return await engine.agents.create(
            Agent(
                handle=handle or f"agent-{uuid.uuid4().hex[:8]}",
                credibility=credibility,
                registration_passed=True,
                **fields,
            )
        )

    return _make


@pytest.fixture
def review_with(engine: PeerReviewEngine, make_agent):
    """Have fresh reviewers score a paper; returns the outcomes in order."""

    async def _review(paper_id: str, scores: list[int], credibility: float = 50.0) -> list:
        outcomes = []
        for score in scores:
            reviewer = await make_agent(credibility)
            outcomes.append(
                await engine.submit_review(paper_id, reviewer.agent_id, make_review_body(score))
            )
        return outcomes

    return _review
