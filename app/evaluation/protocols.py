"""
Protocols for the evaluation pipeline.

The oracle client and the structural validator are the two seams of the
pipeline: the first is an external collaborator injected into every
evaluation, the second is chosen once per run from configuration. Tests
substitute fakes for both.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.evaluation.domain import ValidationVerdict


@runtime_checkable
class GenerationClient(Protocol):
    """Protocol for the text-generation oracle."""

    async def generate(self, prompt: str, model: str) -> str:
        """
        Send one user message and return the reply text.

        Args:
            prompt: Fully rendered prompt.
            model: Oracle model identifier.

        Returns:
            Content of the first choice.

        Raises:
            OracleError: On transport failure or an unusable reply.
        """
        ...


@runtime_checkable
class StructuralValidator(Protocol):
    """Protocol for structural validation strategies."""

    def validate(self, payload: str) -> ValidationVerdict:
        """
        Decide whether the candidate payload has an acceptable shape.

        Never raises for a bad payload; problems are reported in the
        verdict's diagnostic.
        """
        ...
