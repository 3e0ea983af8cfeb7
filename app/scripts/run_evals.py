"""
Run the evaluation harness over a corpus of test case documents.

Settings come from .env / the environment (see casebench_core.config);
flags override them.

Usage:
    python -m app.scripts.run_evals --test-dir cases --model gpt-4o-mini
    python -m app.scripts.run_evals --strategy schema --concurrency 4
"""

import argparse
import asyncio
import sys

from loguru import logger

from app.evaluation.factory import get_run_context, get_runner
from app.evaluation.services.report import ReportSink
from casebench_core.config import Settings, settings
from casebench_core.logging import setup_logging
from casebench_core.runtime.errors import ServiceError

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130

# flag dest -> settings field
OVERRIDES = {
    "test_dir": "TEST_DIR",
    "results_dir": "RESULTS_DIR",
    "gen_prompt": "GEN_PROMPT",
    "test_prompt": "TEST_PROMPT",
    "structure_test": "STRUCTURE_TEST",
    "model": "MODEL",
    "strategy": "VALIDATION_STRATEGY",
    "concurrency": "MAX_CONCURRENCY",
    "log_level": "LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score a model against a corpus of test cases.")
    parser.add_argument("--test-dir", help="Directory of test case documents (TEST_DIR)")
    parser.add_argument("--results-dir", help="Directory the CSV report is written to (RESULTS_DIR)")
    parser.add_argument("--gen-prompt", help="Generation prompt template (GEN_PROMPT)")
    parser.add_argument("--test-prompt", help="Comparison prompt template (TEST_PROMPT)")
    parser.add_argument("--structure-test", help="Structure test script (STRUCTURE_TEST)")
    parser.add_argument("--model", help="Oracle model identifier (MODEL)")
    parser.add_argument("--strategy", choices=["script", "schema"], help="Structural validation strategy")
    parser.add_argument("--concurrency", type=int, help="Test cases evaluated at once (MAX_CONCURRENCY)")
    parser.add_argument("--log-level", help="Log level (LOG_LEVEL)")
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Apply command-line overrides on top of the loaded settings."""
    if base is None:
        base = settings
    updates = {
        field: getattr(args, dest)
        for dest, field in OVERRIDES.items()
        if getattr(args, dest, None) is not None
    }
    return base.model_copy(update=updates)


async def run(config: Settings) -> int:
    context = get_run_context(config)
    sink = ReportSink()
    runner = get_runner(config, sink=sink, context=context)

    logger.info(f"[{context.run_id}] Evaluating {config.TEST_DIR} with model {context.model}")
    try:
        await runner.run()
    finally:
        # Completed records survive an interrupted or aborted run
        if runner.started:
            sink.write(config.RESULTS_DIR, context.started_at)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_settings(args)
    setup_logging(config.LOG_LEVEL)

    try:
        return asyncio.run(run(config))
    except ServiceError as e:
        logger.error(f"Run aborted: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.warning("Run interrupted")
        return EXIT_INTERRUPTED


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
