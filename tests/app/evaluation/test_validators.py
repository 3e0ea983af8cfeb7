"""
Unit tests for the structural validation strategies.

SchemaValidator should:
1. Accept payloads that decode into ResolutionPayload
2. Reject malformed JSON and wrong shapes with the decode error as diagnostic

ScriptedPredicateValidator should:
1. Accept when test() returns True
2. Reject without diagnostic when test() returns False
3. Reject with the raised message when test() raises
4. Never leak script globals from one validation to the next
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from app.evaluation.services.sandbox import ScriptRun
from app.evaluation.services.validators import SchemaValidator, ScriptedPredicateValidator
from casebench_core.domain.exceptions import ScriptLoadError
from tests.app.evaluation.fakes import VALID_PAYLOAD

JSON_SHAPE_SCRIPT = """
import json

def test(payload):
    data = json.loads(payload)
    return isinstance(data, dict) and "resolution" in data
"""


class TestSchemaValidator:
    def test_accepts_matching_payload(self):
        verdict = SchemaValidator().validate(VALID_PAYLOAD)

        assert verdict.valid is True
        assert verdict.diagnostic is None

    def test_ignores_extra_fields(self):
        verdict = SchemaValidator().validate('{"problem": "p", "resolution": "r", "confidence": 0.4}')

        assert verdict.valid is True

    def test_rejects_missing_field(self):
        verdict = SchemaValidator().validate('{"problem": "p"}')

        assert verdict.valid is False
        assert "resolution" in verdict.diagnostic

    def test_rejects_malformed_json(self):
        verdict = SchemaValidator().validate('{"problem": "p", "resolution": {"x": 1}')

        assert verdict.valid is False
        assert verdict.diagnostic

    def test_rejects_array(self):
        verdict = SchemaValidator().validate('["problem", "resolution"]')

        assert verdict.valid is False

    def test_custom_schema(self):
        class Answer(BaseModel):
            answer: int

        validator = SchemaValidator(schema=Answer)

        assert validator.validate('{"answer": 42}').valid is True
        assert validator.validate('{"answer": "many"}').valid is False


class TestScriptedPredicateValidator:
    def test_accepts_when_test_returns_true(self):
        validator = ScriptedPredicateValidator.from_source(JSON_SHAPE_SCRIPT)

        verdict = validator.validate(VALID_PAYLOAD)

        assert verdict.valid is True
        assert verdict.diagnostic is None

    def test_false_is_rejection_without_diagnostic(self):
        validator = ScriptedPredicateValidator.from_source(JSON_SHAPE_SCRIPT)

        verdict = validator.validate('{"problem": "p"}')

        assert verdict.valid is False
        assert verdict.diagnostic is None

    def test_raised_error_message_becomes_diagnostic(self):
        source = "def test(payload):\n    raise ValueError('payload has no steps')\n"
        validator = ScriptedPredicateValidator.from_source(source)

        verdict = validator.validate("{}")

        assert verdict.valid is False
        assert verdict.diagnostic == "payload has no steps"

    def test_decode_error_inside_script_is_caught(self):
        validator = ScriptedPredicateValidator.from_source(JSON_SHAPE_SCRIPT)

        verdict = validator.validate("{not json}")

        assert verdict.valid is False
        assert "Expecting property name" in verdict.diagnostic

    def test_error_without_message_uses_class_name(self):
        source = "def test(payload):\n    raise KeyError()\n"
        validator = ScriptedPredicateValidator.from_source(source)

        assert validator.validate("{}").diagnostic == "KeyError"

    def test_non_bool_result_is_rejected(self):
        source = "def test(payload):\n    return 'yes'\n"
        validator = ScriptedPredicateValidator.from_source(source)

        verdict = validator.validate("{}")

        assert verdict.valid is False
        assert "must return a bool" in verdict.diagnostic

    def test_globals_do_not_leak_between_validations(self):
        source = (
            "seen = []\n"
            "def test(payload):\n"
            "    seen.append(payload)\n"
            "    return len(seen) == 1\n"
        )
        validator = ScriptedPredicateValidator.from_source(source)

        assert validator.validate("[1]").valid is True
        assert validator.validate("[2]").valid is True
        assert validator.validate("[3]").valid is True

    def test_forbidden_import_is_rejected_at_load(self):
        source = "def test(payload):\n    import os\n    return True\n"

        with pytest.raises(ScriptLoadError) as exc_info:
            ScriptedPredicateValidator.from_source(source)

        assert "Forbidden import: os" in str(exc_info.value)


class TestBundledStructureCheck:
    """The sample script under prompts/ must load in the sandbox."""

    @pytest.fixture
    def validator(self):
        path = Path(__file__).resolve().parents[3] / "prompts" / "structure_check.py"
        return ScriptedPredicateValidator.from_source(path.read_text(encoding="utf-8"), str(path))

    def test_accepts_resolution_payload(self, validator):
        assert validator.validate(VALID_PAYLOAD).valid is True

    @pytest.mark.parametrize("payload", ['{"problem": "p"}', "[1, 2]", '{"problem": "p", "resolution": ""}', "{oops}"])
    def test_rejects_other_payloads(self, validator, payload):
        assert validator.validate(payload).valid is False


class TestScriptedPredicateLimits:
    def test_endless_script_times_out(self):
        source = "def test(payload):\n    while True:\n        pass\n"
        validator = ScriptedPredicateValidator.from_source(source, timeout=0.5)

        verdict = validator.validate("{}")

        assert verdict.valid is False
        assert verdict.diagnostic == "Structure test timed out after 0.5s"

    def test_later_runs_still_work_after_timeout(self):
        source = "def test(payload):\n    while payload == 'hang':\n        pass\n    return True\n"
        validator = ScriptedPredicateValidator.from_source(source, timeout=0.5)

        assert validator.validate("hang").valid is False
        assert validator.validate("{}").valid is True

    def test_module_attributes_do_not_lead_to_host_modules(self):
        source = "def test(payload):\n    mod = re.enum\n    return mod is not None\n"
        validator = ScriptedPredicateValidator.from_source(source)

        verdict = validator.validate("{}")

        assert verdict.valid is False
        assert "enum" in verdict.diagnostic

    def test_load_stage_error_message_is_kept_verbatim(self):
        sandbox = MagicMock(timeout=5.0)
        sandbox.run.return_value = ScriptRun(stage="load", error="limit is not a number")

        verdict = ScriptedPredicateValidator(sandbox).validate("{}")

        assert verdict.valid is False
        assert verdict.diagnostic == "limit is not a number"
