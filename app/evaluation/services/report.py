"""
Report sink.

Collects one EvaluationRecord per test case and writes them as CSV. The
header and column order are consumed by downstream tooling and must not
change. Rows are ordered by corpus position, not completion order, so a
concurrent run produces the same file as a sequential one.
"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from loguru import logger

from app.evaluation.domain import EvaluationRecord
from casebench_core.runtime.errors import ErrorCode, ServiceError

REPORT_COLUMNS: list[str] = ["Name", "Status", "Input", "Result", "Error Location", "Error"]


def report_filename(timestamp: datetime) -> str:
    return f"results{timestamp.strftime('%Y-%m-%d %H%M')}.csv"


def record_to_row(record: EvaluationRecord) -> list[str]:
    return [
        record.name,
        str(record.status),
        record.input,
        record.result_content,
        str(record.error_location) if record.error_location is not None else "",
        record.error_detail or "",
    ]


class ReportSink:
    """
    Append-only collection of records.

    Usage:
        sink = ReportSink()
        sink.add(record, position=0)
        path = sink.write("results", timestamp)
    """

    def __init__(self):
        self._records: dict[int, EvaluationRecord] = {}
        self._names: set[str] = set()

    def add(self, record: EvaluationRecord, position: int | None = None) -> None:
        """
        Store a record.

        Args:
            record: The finished record.
            position: Corpus position of the case (defaults to arrival order).

        Raises:
            ValueError: If the position or the case name was already recorded.
        """
        if position is None:
            position = len(self._records)
        if position in self._records:
            raise ValueError(f"A record already exists at position {position}")
        if record.name in self._names:
            raise ValueError(f"A record already exists for {record.name}")
        self._records[position] = record
        self._names.add(record.name)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[EvaluationRecord]:
        return [self._records[position] for position in sorted(self._records)]

    def rows(self) -> list[list[str]]:
        """Header row followed by one row per record."""
        return [list(REPORT_COLUMNS)] + [record_to_row(r) for r in self.records]

    def write(self, directory: str | Path, timestamp: datetime | None = None) -> Path:
        """
        Write the report to `directory/results<YYYY-MM-DD HHMM>.csv`.

        Raises:
            ServiceError: If the directory or file cannot be written.
        """
        timestamp = timestamp or datetime.now()
        target = Path(directory) / report_filename(timestamp)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerows(self.rows())
        except OSError as e:
            raise ServiceError(
                code=ErrorCode.REPORT_WRITE_ERROR,
                message_safe=f"Cannot write report {target}: {e}",
                cause=e,
            ) from e

        logger.info(f"Wrote {len(self)} record(s) to {target}")
        return target
