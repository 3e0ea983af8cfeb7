"""
Semantic comparison of a candidate payload against the baseline.

The oracle is asked, through the comparison template, whether the candidate
resolves the problem as well as the baseline does. Only a reply that
lowercases to exactly "true" counts as agreement. "True" and "TRUE" pass;
" true ", "true." or "Yes" do not, and none of them is an error.
"""

from __future__ import annotations

from loguru import logger

from app.evaluation.domain import EvalCase
from app.evaluation.protocols import GenerationClient
from app.evaluation.services.prompts import PromptTemplate

AGREEMENT_TOKEN = "true"


def is_agreement(reply: str) -> bool:
    return reply.lower() == AGREEMENT_TOKEN


class SemanticComparator:
    """Second oracle call of a test case."""

    def __init__(self, client: GenerationClient, template: PromptTemplate):
        self._client = client
        self._template = template

    def build_prompt(self, case: EvalCase, payload: str) -> str:
        return self._template.render(
            description=case.input,
            baseline=case.expected_resolution,
            input=payload,
        )

    async def compare(self, case: EvalCase, payload: str, model: str) -> bool:
        """
        Ask the oracle for a verdict.

        Raises:
            OracleError: Propagated from the client.
        """
        reply = await self._client.generate(self.build_prompt(case, payload), model)
        verdict = is_agreement(reply)
        if not verdict:
            logger.debug(f"Comparator reply for {case.name} was not an agreement: {reply[:80]!r}")
        return verdict
