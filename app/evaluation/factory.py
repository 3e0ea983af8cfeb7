"""
Factory for creating evaluation components from settings.
"""

from __future__ import annotations

from loguru import logger

from app.evaluation.protocols import GenerationClient, StructuralValidator
from app.evaluation.services.comparator import SemanticComparator
from app.evaluation.services.corpus import CorpusLoader
from app.evaluation.services.generation import OpenAIGenerationClient
from app.evaluation.services.pipeline import EvaluationPipeline
from app.evaluation.services.prompts import load_template, read_text_file
from app.evaluation.services.report import ReportSink
from app.evaluation.services.runner import CorpusRunner
from app.evaluation.services.validators import SchemaValidator, ScriptedPredicateValidator
from casebench_core.config import Settings, settings as default_settings
from casebench_core.domain.exceptions import ConfigurationError
from casebench_core.infrastructure.openai_client import get_openai_client
from casebench_core.runtime.context import RunContext


def get_validator(config: Settings | None = None) -> StructuralValidator:
    """
    Build the structural validator selected by VALIDATION_STRATEGY.

    Raises:
        ConfigurationError: If the script strategy is selected and
            STRUCTURE_TEST is missing, unreadable or invalid.
    """
    config = config or default_settings
    if config.VALIDATION_STRATEGY == "schema":
        logger.info("Structural validation: schema")
        return SchemaValidator()

    source = read_text_file(config.STRUCTURE_TEST, "STRUCTURE_TEST")
    logger.info(f"Structural validation: script {config.STRUCTURE_TEST}")
    return ScriptedPredicateValidator.from_source(
        source,
        filename=config.STRUCTURE_TEST,
        timeout=config.STRUCTURE_TEST_TIMEOUT_SECONDS,
    )


def get_run_context(config: Settings | None = None) -> RunContext:
    config = config or default_settings
    if not config.MODEL:
        raise ConfigurationError("MODEL is not configured. Set it in .env or environment variables.")
    return RunContext(model=config.MODEL)


def get_pipeline(
    config: Settings | None = None,
    client: GenerationClient | None = None,
    context: RunContext | None = None,
) -> EvaluationPipeline:
    """
    Create a fully configured EvaluationPipeline.

    Templates and the structure test are read here, before any case runs,
    so a configuration mistake stops the run without spending oracle calls.
    """
    config = config or default_settings
    client = client or OpenAIGenerationClient(get_openai_client())
    context = context or get_run_context(config)

    generation_template = load_template(config.GEN_PROMPT, "GEN_PROMPT")
    comparison_template = load_template(config.TEST_PROMPT, "TEST_PROMPT")
    validator = get_validator(config)

    return EvaluationPipeline(
        client=client,
        generation_template=generation_template,
        validator=validator,
        comparator=SemanticComparator(client, comparison_template),
        context=context,
    )


def get_runner(
    config: Settings | None = None,
    client: GenerationClient | None = None,
    sink: ReportSink | None = None,
    context: RunContext | None = None,
) -> CorpusRunner:
    """Wire loader, pipeline and sink into a CorpusRunner."""
    config = config or default_settings
    if not config.TEST_DIR:
        raise ConfigurationError("TEST_DIR is not configured. Set it in .env or environment variables.")

    return CorpusRunner(
        loader=CorpusLoader(config.TEST_DIR),
        pipeline=get_pipeline(config, client=client, context=context),
        sink=sink if sink is not None else ReportSink(),
        max_concurrency=config.MAX_CONCURRENCY,
    )
