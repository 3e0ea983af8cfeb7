"""Evaluation domain models."""

from app.evaluation.domain.records import (
    CaseStatus,
    ErrorLocation,
    EvalCase,
    EvaluationRecord,
    ResolutionPayload,
    ValidationVerdict,
)

__all__ = [
    "CaseStatus",
    "ErrorLocation",
    "EvalCase",
    "EvaluationRecord",
    "ResolutionPayload",
    "ValidationVerdict",
]
