"""
Run-scoped context for an evaluation run.

RunContext carries the correlation ID and the model identifier through the
pipeline. It is created once per run and shared read-only by every test
case, so it is frozen.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class RunContext(BaseModel):
    """Context for one pass over a corpus.

    Attributes:
        run_id: Short identifier prefixed to every log line of the run.
        model: Oracle model identifier used for both calls of every case.
        started_at: Local time the run started; stamps the report file name.
    """

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    model: str
    started_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}

    def tag(self, case_name: str) -> str:
        """Log prefix for a single test case."""
        return f"[{self.run_id}:{case_name}]"
