"""
Outcome classification.

The pipeline stops at the first failing stage, in this order:

    MATCH_INPUT -> MATCH_PAYLOAD -> PARSE -> TEST -> Passed

CaseOutcome is the tagged result of that walk; classify() turns it into
the EvaluationRecord written to the report.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.evaluation.domain import CaseStatus, ErrorLocation, EvaluationRecord

# Fixed precedence of the failure checks
STAGE_ORDER: tuple[ErrorLocation, ...] = (
    ErrorLocation.MATCH_INPUT,
    ErrorLocation.MATCH_PAYLOAD,
    ErrorLocation.PARSE,
    ErrorLocation.TEST,
)


@dataclass(frozen=True)
class CaseOutcome:
    """Where a case stopped, the text it had and an optional diagnostic."""

    content: str
    location: ErrorLocation | None = None
    detail: str | None = None

    @classmethod
    def passed(cls, content: str) -> "CaseOutcome":
        return cls(content=content)

    @classmethod
    def failed(cls, location: ErrorLocation, content: str, detail: str | None = None) -> "CaseOutcome":
        return cls(content=content, location=location, detail=detail)

    @property
    def is_passed(self) -> bool:
        return self.location is None


def classify(name: str, document: str, outcome: CaseOutcome) -> EvaluationRecord:
    """Assemble the report record for one test case."""
    if outcome.is_passed:
        return EvaluationRecord(
            name=name,
            status=CaseStatus.PASSED,
            input=document,
            result_content=outcome.content,
        )

    return EvaluationRecord(
        name=name,
        status=CaseStatus.FAILED,
        input=document,
        result_content=outcome.content,
        error_location=outcome.location,
        error_detail=outcome.detail,
    )
