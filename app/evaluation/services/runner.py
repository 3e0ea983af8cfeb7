"""
Corpus runner.

Evaluates every document of a corpus and files exactly one record per
document in the report sink. With max_concurrency=1 cases run strictly one
after another; higher values fan out through a semaphore. Cases share
nothing but the sink, and the sink orders records by corpus position.

A CorpusError stops the run. Cancellation abandons in-flight cases; the
records already in the sink are kept for the caller to write.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field

from loguru import logger

from app.evaluation.domain import EvaluationRecord
from app.evaluation.services.classifier import STAGE_ORDER
from app.evaluation.services.corpus import CorpusEntry, CorpusLoader
from app.evaluation.services.pipeline import EvaluationPipeline
from app.evaluation.services.report import ReportSink


@dataclass
class RunSummary:
    total: int = 0
    passed: int = 0
    failures: Counter = field(default_factory=Counter)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    def count(self, record: EvaluationRecord) -> None:
        self.total += 1
        if record.passed:
            self.passed += 1
        else:
            self.failures[record.error_location] += 1

    def describe(self) -> str:
        if self.total == 0:
            return "Run complete. No test cases found."
        rate = self.passed / self.total * 100
        parts = [f"Run complete. Passed: {self.passed}/{self.total} ({rate:.1f}%)"]
        breakdown = ", ".join(
            f"{location}={self.failures[location]}" for location in STAGE_ORDER if self.failures[location]
        )
        if breakdown:
            parts.append(f"Failures by stage: {breakdown}")
        return ". ".join(parts)


class CorpusRunner:
    """Drives an EvaluationPipeline over a corpus."""

    def __init__(
        self,
        loader: CorpusLoader,
        pipeline: EvaluationPipeline,
        sink: ReportSink,
        max_concurrency: int = 1,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.loader = loader
        self.pipeline = pipeline
        self.sink = sink
        self.max_concurrency = max_concurrency
        self.summary = RunSummary()
        self.started = False

    async def run(self) -> RunSummary:
        """
        Evaluate the whole corpus.

        Raises:
            CorpusError: If the corpus or one of its files cannot be read.
        """
        entries = self.loader.entries()
        self.started = True
        semaphore = asyncio.Semaphore(self.max_concurrency)

        tasks = [
            asyncio.create_task(self._evaluate_entry(position, entry, semaphore), name=entry.name)
            for position, entry in enumerate(entries)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.warning(f"Run stopped with {len(self.sink)}/{len(entries)} case(s) recorded")
            raise

        logger.info(self.summary.describe())
        return self.summary

    async def _evaluate_entry(self, position: int, entry: CorpusEntry, semaphore: asyncio.Semaphore) -> None:
        async with semaphore:
            document = await self.loader.read(entry)
            record = await self.pipeline.evaluate(entry.name, document)

        self.sink.add(record, position=position)
        self.summary.count(record)
        _log_record(record)


def _log_record(record: EvaluationRecord) -> None:
    if record.passed:
        logger.info(f"Test {record.name} passed")
        return

    logger.error(f"Test {record.name} failed. Process: {record.error_location}")
    if record.error_detail:
        logger.error(f"  {record.error_detail}")
