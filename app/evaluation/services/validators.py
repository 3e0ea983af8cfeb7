"""
Structural validation strategies.

Exactly one strategy is active per run:
- SchemaValidator: decode the payload into a fixed pydantic model.
- ScriptedPredicateValidator: hand the raw payload to a user script's
  `test` function running in a ScriptSandbox process.

Neither raises for a bad payload; both return a ValidationVerdict.
"""

from __future__ import annotations

from pydantic import BaseModel, ValidationError
from loguru import logger

from app.evaluation.domain import ResolutionPayload, ValidationVerdict
from app.evaluation.services.sandbox import DEFAULT_TIMEOUT, ScriptSandbox


class SchemaValidator:
    """Validates by deserializing the payload against a fixed record shape."""

    def __init__(self, schema: type[BaseModel] = ResolutionPayload):
        self.schema = schema

    def validate(self, payload: str) -> ValidationVerdict:
        try:
            self.schema.model_validate_json(payload)
        except ValidationError as e:
            return ValidationVerdict.reject(str(e))
        return ValidationVerdict.accept()


class ScriptedPredicateValidator:
    """
    Validates by calling a sandboxed `test(payload) -> bool`.

    A False result is a plain rejection with no diagnostic. Anything the
    script raises is caught and its message kept as the diagnostic, and a
    run that hits the sandbox time limit is rejected as well.
    """

    def __init__(self, sandbox: ScriptSandbox):
        self.sandbox = sandbox

    @classmethod
    def from_source(
        cls,
        source: str,
        filename: str = "<structure_test>",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "ScriptedPredicateValidator":
        return cls(ScriptSandbox(source, filename=filename, timeout=timeout))

    def validate(self, payload: str) -> ValidationVerdict:
        run = self.sandbox.run(payload)

        if run.timed_out:
            return ValidationVerdict.reject(f"Structure test timed out after {self.sandbox.timeout}s")
        if run.error is not None:
            logger.debug(f"Structure test failed during {run.stage}: {run.error}")
            return ValidationVerdict.reject(run.error)
        if run.value is None:
            return ValidationVerdict.reject(f"test() must return a bool, got {run.result_type}")
        if not run.value:
            return ValidationVerdict.reject()
        return ValidationVerdict.accept()
