"""
Per-case evaluation pipeline.

    document -> fields -> generation -> payload -> structure -> comparison

Each stage either hands its result to the next or ends the case with a
tagged CaseOutcome. The comparison call is only made once the payload has
passed structural validation. Oracle failures end the case (generation
failures at MATCH_PAYLOAD, comparison failures at TEST) without stopping
the rest of the corpus.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from app.evaluation.domain import ErrorLocation, EvaluationRecord
from app.evaluation.protocols import GenerationClient, StructuralValidator
from app.evaluation.services.classifier import CaseOutcome, classify
from app.evaluation.services.comparator import SemanticComparator
from app.evaluation.services.field_extractor import extract_case
from app.evaluation.services.payload_extractor import extract_payload
from app.evaluation.services.prompts import PromptTemplate
from casebench_core.domain.exceptions import OracleError
from casebench_core.runtime.context import RunContext


class EvaluationPipeline:
    """
    Runs one test case document through every stage.

    The pipeline holds only run-wide, read-only collaborators, so one
    instance can evaluate many cases concurrently.
    """

    def __init__(
        self,
        client: GenerationClient,
        generation_template: PromptTemplate,
        validator: StructuralValidator,
        comparator: SemanticComparator,
        context: RunContext,
    ):
        self._client = client
        self._generation_template = generation_template
        self._validator = validator
        self._comparator = comparator
        self._context = context

    async def evaluate(self, name: str, document: str) -> EvaluationRecord:
        outcome = await self._run_stages(name, document)
        return classify(name, document, outcome)

    async def _run_stages(self, name: str, document: str) -> CaseOutcome:
        tag = self._context.tag(name)
        model = self._context.model

        case = extract_case(name, document)
        if case is None:
            return CaseOutcome.failed(ErrorLocation.MATCH_INPUT, document)

        logger.debug(f"{tag} Requesting generation")
        prompt = self._generation_template.render(description=case.input)
        try:
            generated = await self._client.generate(prompt, model)
        except OracleError as e:
            logger.warning(f"{tag} Generation call failed: {e}")
            return CaseOutcome.failed(ErrorLocation.MATCH_PAYLOAD, "", str(e))

        payload = extract_payload(generated)
        if payload is None:
            return CaseOutcome.failed(ErrorLocation.MATCH_PAYLOAD, generated)

        # Blocks while a structure test process runs
        verdict = await asyncio.to_thread(self._validator.validate, payload)
        if not verdict.valid:
            return CaseOutcome.failed(ErrorLocation.PARSE, generated, verdict.diagnostic)

        logger.debug(f"{tag} Payload accepted, requesting comparison")
        try:
            agreed = await self._comparator.compare(case, payload, model)
        except OracleError as e:
            logger.warning(f"{tag} Comparison call failed: {e}")
            return CaseOutcome.failed(ErrorLocation.TEST, generated, str(e))

        if not agreed:
            return CaseOutcome.failed(ErrorLocation.TEST, generated)

        return CaseOutcome.passed(generated)
