"""
Tests for candidate payload extraction.
"""

from app.evaluation.services.payload_extractor import extract_payload


class TestExtractPayload:
    def test_object_inside_prose(self):
        text = 'Here you go:\n```json\n{"problem": "p", "resolution": "r"}\n```\nDone.'

        assert extract_payload(text) == '{"problem": "p", "resolution": "r"}'

    def test_array(self):
        assert extract_payload("answer: [1, 2, 3] ok") == "[1, 2, 3]"

    def test_multiline_object(self):
        text = '{\n  "problem": "p",\n  "resolution": "r"\n}'

        assert extract_payload(text) == text

    def test_leftmost_opener_wins(self):
        assert extract_payload('[{"a": 1}] then {"b": 2}') == '[{"a": 1}]'
        assert extract_payload('{"a": [1]} then [2]') == '{"a": [1]}'

    def test_no_structure_returns_none(self):
        assert extract_payload("I could not solve this problem.") is None

    def test_unclosed_brace_returns_none(self):
        assert extract_payload('{"problem": "p"') is None

    def test_unclosed_brace_falls_through_to_array(self):
        assert extract_payload("{ broken [1]") == "[1]"


class TestLazyMatchLimitation:
    """The scan is lazy, not balanced: nested data is cut at the first closer."""

    def test_nested_object_is_truncated(self):
        assert extract_payload('{"a": {"b": 1}}') == '{"a": {"b": 1}'

    def test_nested_array_is_truncated(self):
        assert extract_payload("[[1, 2], [3]]") == "[[1, 2]"
