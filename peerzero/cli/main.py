"""Command-line interface for the PeerZero credibility engine using Typer and Rich."""

import asyncio
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from peerzero import __version__
from peerzero.config.logging import get_logger
from peerzero.config.rulesets import RULESETS, get_ruleset
from peerzero.config.settings import settings
from peerzero.data_management.schemas import Agent
from peerzero.engine import PeerReviewEngine
from peerzero.services.outcomes import QualityGateFailure

app = typer.Typer(
    help="PeerZero CLI - credibility engine for multi-agent peer review",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


def _resolve_ruleset(name: Optional[str]):
    try:
        return get_ruleset(name or settings.ruleset)
    except KeyError as e:
        console.print(f"[red]✗[/red] {e.args[0]}")
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """
    Display engine configuration.

    Shows the active rule set, persistence and logging settings.
    """
    logger.info("Displaying engine status")

    table = Table(title="PeerZero Engine Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=15)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)

    ruleset_status = "✓ Loaded" if settings.ruleset in RULESETS else "⚠ Unknown"
    table.add_row("Rule Set", ruleset_status, settings.ruleset)

    persistence_status = "✓ Enabled" if settings.persistence_dir else "✗ Memory only"
    table.add_row("Persistence", persistence_status, settings.persistence_dir or "-")

    log_details = f"Level: {settings.log_level}, Format: {settings.log_format}"
    table.add_row("Logging", "✓ Active", log_details)

    console.print(table)


@app.command()
def rules(
    ruleset: Optional[str] = typer.Option(None, help="Rule set name (default from settings)"),
) -> None:
    """
    Show scoring thresholds and the tier ladder of a rule set.

    Args:
        ruleset: Rule set to display
    """
    config = _resolve_ruleset(ruleset)

    scoring = Table(title=f"Scoring Rules ({config.name})", header_style="bold magenta")
    scoring.add_column("Rule", style="cyan")
    scoring.add_column("Value", style="yellow")
    scoring.add_row("Reviews for a score", str(config.scoring.min_reviews_for_score))
    scoring.add_row("Contested std dev", str(config.status.contested_threshold))
    scoring.add_row(
        "Hall of science",
        f"{config.status.hall_threshold} with {config.status.hall_min_reviews}+ reviews",
    )
    scoring.add_row(
        "Distinguished",
        f"{config.status.distinguished_threshold} with {config.status.distinguished_min_reviews}+ reviews",
    )
    scoring.add_row(
        "Landmark",
        f"{config.status.landmark_threshold} with {config.status.landmark_min_reviews}+ reviews",
    )
    scoring.add_row("Outlier deviation", f"> {config.outlier.threshold}")
    scoring.add_row(
        "Review reward",
        f"{config.rewards.new_paper_reward} new / {config.rewards.established_reward} established",
    )
    console.print(scoring)

    if not config.tiers.bands:
        console.print("[dim]No tier ladder: credibility is bounded only by 0-200[/dim]")
        return

    ladder = Table(title="Tier Ladder", header_style="bold magenta")
    for column in ("Band", "Tier", "Reviews", "Bounties", "Papers", "Revisions", "Best Paper"):
        ladder.add_column(column, style="cyan" if column == "Band" else "yellow")
    for band in config.tiers.bands:
        ladder.add_row(
            str(band.threshold),
            band.name or "-",
            str(band.min_reviews),
            str(band.min_bounties),
            str(band.min_papers),
            str(band.min_revisions),
            str(band.min_paper_score) if band.min_paper_score is not None else "-",
        )
    console.print(ladder)


def _review_body(score: int) -> dict:
    verdict = "holds up" if score >= 6 else "does not hold up"
    return {
        "score": score,
        "methodology_notes": (
            "The experimental design isolates the claimed effect and the baselines are "
            "tuned with the same budget as the proposed method."
        ),
        "statistical_validity_notes": (
            "Confidence intervals are reported over five seeds, although the effect size "
            "on the smaller benchmark is within noise."
        ),
        "overall_assessment": (
            f"Scored {score}/10. After checking the methodology and the reported statistics "
            f"the central claim {verdict}; the discussion of limitations should be expanded."
        ),
    }


async def _simulate(scores: list[int], credibility: float, ruleset: str) -> None:
    engine = PeerReviewEngine(get_ruleset(ruleset))

    author = await engine.agents.create(
        Agent(handle="sim-author", credibility=credibility, registration_passed=True)
    )
    paper = await engine.submit_paper(
        author.agent_id,
        {
            "title": "Simulated submission for consensus scoring",
            "abstract": "A synthetic paper used to walk through weighted consensus scoring, "
                        "status classification and author Elo feedback.",
            "body": "Simulated body text. " * 30,
        },
    )

    table = Table(title="Reviews", header_style="bold magenta")
    for column in ("Reviewer", "Score", "Weight", "Outlier", "Reviewer Cred", "Paper Score", "Status"):
        table.add_column(column)

    for index, score in enumerate(scores, start=1):
        reviewer = await engine.agents.create(
            Agent(handle=f"sim-reviewer-{index}", credibility=credibility, registration_passed=True)
        )
        outcome = await engine.submit_review(paper.paper_id, reviewer.agent_id, _review_body(score))
        if isinstance(outcome, QualityGateFailure):
            table.add_row(reviewer.handle, str(score), "-", "-", "-", "rejected", ", ".join(outcome.rules))
            continue
        table.add_row(
            reviewer.handle,
            str(score),
            f"{outcome.weight:.1f}",
            "yes" if outcome.is_outlier else "no",
            f"{outcome.new_reviewer_credibility:.2f}",
            "-" if outcome.paper_score is None else f"{outcome.paper_score:.2f}",
            outcome.paper_status.value,
        )
    console.print(table)

    final = await engine.papers.get(paper.paper_id)
    author_after = await engine.agents.get(author.agent_id)
    console.print(Panel(
        f"Weighted score: {final.weighted_score}\n"
        f"Std dev: {final.score_variance}\n"
        f"Status: {final.status.value}\n"
        f"Author credibility: {credibility} -> {author_after.credibility}",
        title="Paper",
        border_style="green",
    ))


@app.command()
def simulate(
    scores: str = typer.Option("8,8,8,8,2", help="Comma-separated review scores"),
    credibility: float = typer.Option(50.0, help="Credibility of the author and every reviewer"),
    ruleset: Optional[str] = typer.Option(None, help="Rule set name (default from settings)"),
) -> None:
    """
    Run a paper through review scoring against in-memory stores.

    Args:
        scores: Review scores in submission order
        credibility: Shared starting credibility
        ruleset: Rule set to simulate with
    """
    config = _resolve_ruleset(ruleset)
    try:
        parsed = [int(s) for s in scores.split(",") if s.strip()]
    except ValueError:
        console.print(f"[red]✗[/red] Scores must be integers: {scores}")
        raise typer.Exit(1)

    logger.info(f"Simulating {len(parsed)} reviews with rule set {config.name}")
    asyncio.run(_simulate(parsed, credibility, config.name))


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]PeerZero Credibility Engine[/bold]")
    console.print(f"Version: {__version__}")
    console.print(f"Default rule set: {settings.ruleset}")


if __name__ == "__main__":
    app()
