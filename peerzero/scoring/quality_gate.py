"""Structural quality gate for reviews.

A review is admitted only if:
- The overall assessment (stripped) meets the minimum length
- Enough of the five structured note fields meet the note minimum
- The assessment is not a known vague platitude ("good", "looks fine", ...)

Rejection lists one failure per unmet rule so the reviewer can correct
exactly what is missing.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from loguru import logger

from peerzero.config.rulesets import QualityGateRules
from peerzero.data_management.schemas import NOTE_FIELDS, ReviewSubmission


@dataclass
class GateFailure:
    """One unmet quality rule.

    Attributes:
        rule: Stable rule code (assessment_too_short, insufficient_notes, vague_assessment)
        message: Human-readable guidance
        details: Measured values behind the failure
    """

    rule: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QualityGateResult:
    """Outcome of a quality check."""

    failures: List[GateFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


class QualityGate:
    """
    Admits or rejects reviews on structural completeness.

    Usage:
        gate = QualityGate(config.quality_gate)
        result = gate.check(submission)
        if not result.passed:
            for failure in result.failures:
                print(failure.rule, failure.message)
    """

    def __init__(self, rules: QualityGateRules):
        self.min_assessment_length = rules.min_assessment_length
        self.min_note_length = rules.min_note_length
        self.min_substantive_notes = rules.min_substantive_notes
        self.vague_patterns = [re.compile(p, re.IGNORECASE) for p in rules.vague_patterns]
        self._logger = logger.bind(component="QualityGate")

    def check(self, submission: ReviewSubmission) -> QualityGateResult:
        """
        Evaluate every rule and collect failures.

        Args:
            submission: Review body to evaluate

        Returns:
            QualityGateResult; passed when no rule failed
        """
        failures: List[GateFailure] = []
        assessment = submission.overall_assessment.strip()

        if len(assessment) < self.min_assessment_length:
            failures.append(
                GateFailure(
                    rule="assessment_too_short",
                    message=(
                        f"Overall assessment must be at least {self.min_assessment_length} "
                        f"characters (got {len(assessment)})"
                    ),
                    details={"length": len(assessment), "required": self.min_assessment_length},
                )
            )

        substantive = [
            name
            for name in NOTE_FIELDS
            if len(getattr(submission, name).strip()) >= self.min_note_length
        ]
        if len(substantive) < self.min_substantive_notes:
            failures.append(
                GateFailure(
                    rule="insufficient_notes",
                    message=(
                        f"At least {self.min_substantive_notes} review categories need "
                        f"{self.min_note_length}+ characters (got {len(substantive)})"
                    ),
                    details={
                        "substantive_fields": substantive,
                        "required": self.min_substantive_notes,
                    },
                )
            )

        if any(pattern.match(assessment) for pattern in self.vague_patterns):
            failures.append(
                GateFailure(
                    rule="vague_assessment",
                    message="Overall assessment is too vague; explain what works and what does not",
                    details={"assessment": assessment},
                )
            )

        if failures:
            self._logger.debug(f"Review rejected: {[f.rule for f in failures]}")
        return QualityGateResult(failures=failures)
