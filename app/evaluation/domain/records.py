"""
Domain models for the evaluation pipeline.

A test case document goes in, exactly one EvaluationRecord comes out. Every
failure a case can run into is tagged with the stage that produced it; the
string values of ErrorLocation are the ones written to the report.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class ErrorLocation(str, Enum):
    """Pipeline stage at which a test case was classified as failed."""

    MATCH_INPUT = "matchinput"  # <input>/<output> markers not found
    MATCH_PAYLOAD = "matchjson"  # no {...} / [...] in the generated text
    PARSE = "parse"  # structural validation rejected or raised
    TEST = "test"  # semantic comparison was not "true"

    def __str__(self) -> str:
        return self.value


class CaseStatus(str, Enum):
    PASSED = "Passed"
    FAILED = "Failed"

    def __str__(self) -> str:
        return self.value


class EvalCase(BaseModel):
    """One parsed test case document."""

    name: str
    input: str = Field(..., description="Problem description between <input> markers")
    expected_resolution: str = Field(..., description="Baseline between <output> markers")
    raw_document: str

    model_config = {"frozen": True}


class ValidationVerdict(BaseModel):
    """Result of structural validation, from exactly one strategy."""

    valid: bool
    diagnostic: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def accept(cls) -> "ValidationVerdict":
        return cls(valid=True)

    @classmethod
    def reject(cls, diagnostic: str | None = None) -> "ValidationVerdict":
        return cls(valid=False, diagnostic=diagnostic)


class ResolutionPayload(BaseModel):
    """Fixed record shape used by the schema validation strategy."""

    problem: str
    resolution: str


class EvaluationRecord(BaseModel):
    """
    One row of the report.

    `input` holds the full raw document and `result_content` whatever text
    the pipeline had when it stopped: the document itself for MATCH_INPUT,
    the first generation for every later stage.
    """

    name: str
    status: CaseStatus
    input: str
    result_content: str
    error_location: ErrorLocation | None = None
    error_detail: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _location_iff_failed(self) -> "EvaluationRecord":
        failed = self.status is CaseStatus.FAILED
        if failed != (self.error_location is not None):
            raise ValueError("error_location must be set exactly when status is Failed")
        if not failed and self.error_detail is not None:
            raise ValueError("a passed record carries no error detail")
        return self

    @property
    def passed(self) -> bool:
        return self.status is CaseStatus.PASSED
