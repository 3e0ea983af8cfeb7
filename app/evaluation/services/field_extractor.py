"""
Field extraction from test case documents.

A document carries the problem description between <input> and </input>
and the baseline resolution between <output> and </output>. Anything else
in the file is ignored. Markers are literal and case-sensitive; the first
closing tag after the first opening tag ends a capture, so nesting is not
supported.
"""

from __future__ import annotations

import re

from app.evaluation.domain import EvalCase

INPUT_PATTERN = re.compile(r"<input>(.*?)</input>", re.DOTALL)
OUTPUT_PATTERN = re.compile(r"<output>(.*?)</output>", re.DOTALL)


def extract_case(name: str, document: str) -> EvalCase | None:
    """
    Parse a document into an EvalCase.

    Returns None when either marker pair is missing; the caller classifies
    that as a MATCH_INPUT failure. Captures are kept verbatim, surrounding
    whitespace included.
    """
    input_match = INPUT_PATTERN.search(document)
    if input_match is None:
        return None

    output_match = OUTPUT_PATTERN.search(document)
    if output_match is None:
        return None

    return EvalCase(
        name=name,
        input=input_match.group(1),
        expected_resolution=output_match.group(1),
        raw_document=document,
    )
