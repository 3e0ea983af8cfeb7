"""
Candidate payload extraction.

Model replies wrap their structured answer in prose and code fences. The
payload is the leftmost `{` or `[` extended lazily to the nearest closing
brace or bracket. This is a scan, not a parser: for nested data it stops at
the first inner closer, e.g. `{"a": {"b": 1}}` yields `{"a": {"b": 1}`.
Structural validation is what rejects such truncated payloads.
"""

from __future__ import annotations

import re

PAYLOAD_PATTERN = re.compile(r"\{.*?\}|\[.*?\]", re.DOTALL)


def extract_payload(text: str) -> str | None:
    """Return the first object- or array-shaped substring, or None."""
    match = PAYLOAD_PATTERN.search(text)
    if match is None:
        return None
    return match.group(0)
