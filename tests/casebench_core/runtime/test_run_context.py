"""Unit tests for RunContext."""

from datetime import datetime

import pytest

from casebench_core.runtime import RunContext


class TestRunContext:
    """Tests for RunContext instantiation and tagging."""

    def test_create_with_model(self):
        """Should generate a run_id and start time."""
        ctx = RunContext(model="gpt-test")

        assert ctx.model == "gpt-test"
        assert len(ctx.run_id) == 8
        assert isinstance(ctx.started_at, datetime)

    def test_run_ids_are_unique(self):
        assert RunContext(model="m").run_id != RunContext(model="m").run_id

    def test_model_is_required(self):
        with pytest.raises(Exception):
            RunContext()

    def test_context_is_immutable(self):
        """Context should be frozen/immutable."""
        ctx = RunContext(model="m")
        with pytest.raises(Exception):  # ValidationError for frozen model
            ctx.model = "changed"

    def test_tag(self):
        ctx = RunContext(run_id="abc12345", model="m")

        assert ctx.tag("case.txt") == "[abc12345:case.txt]"
