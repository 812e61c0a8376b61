"""Tests for the Typer command-line interface.

Tests cover:
- version and status commands
- rules output for both shipped rule sets
- simulate end-to-end against in-memory stores
- Error exits for unknown rule sets and malformed scores
"""

from typer.testing import CliRunner

from peerzero.cli.main import app

runner = CliRunner()


class TestInfoCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_status(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Rule Set" in result.stdout

    def test_rules_with_ladder(self):
        result = runner.invoke(app, ["rules", "--ruleset", "rebalance_v3"])
        assert result.exit_code == 0
        assert "Tier Ladder" in result.stdout
        assert "contributor" in result.stdout

    def test_rules_without_ladder(self):
        result = runner.invoke(app, ["rules", "--ruleset", "launch"])
        assert result.exit_code == 0
        assert "No tier ladder" in result.stdout

    def test_unknown_ruleset(self):
        result = runner.invoke(app, ["rules", "--ruleset", "v99"])
        assert result.exit_code == 1


class TestSimulate:
    def test_default_scenario(self):
        result = runner.invoke(app, ["simulate"])
        assert result.exit_code == 0
        assert "Weighted score: 6.8" in result.stdout
        assert "Author credibility: 50.0 -> 53.6" in result.stdout

    def test_bad_scores(self):
        result = runner.invoke(app, ["simulate", "--scores", "8,eight"])
        assert result.exit_code == 1
