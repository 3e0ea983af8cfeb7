"""
Standardized error model for infrastructural failures.

Expected evaluation outcomes (a missing marker, an invalid payload, a
negative verdict) are never raised; they become Failed records. This module
covers everything else: configuration problems, an unreadable corpus and
oracle transport failures. Each error carries a machine-readable code so the
runner can decide how far a failure reaches.
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """Standardized error with a code and a log-safe message.

    Attributes:
        code: Error code for programmatic handling.
        message_safe: Safe message for logging and the report.
        message_debug: Optional detailed message for debugging.
        cause: Optional underlying exception.
        debug_id: Unique identifier for correlating log lines.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"debug_id={self.debug_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary (excludes debug info)."""
        return {
            "code": self.code,
            "message": self.message_safe,
            "debug_id": self.debug_id,
        }


class ErrorCode:
    """Standard error codes for harness failures."""

    # Configuration
    CONFIG_MISSING = "CONFIG_MISSING"
    TEMPLATE_UNREADABLE = "TEMPLATE_UNREADABLE"
    SCRIPT_INVALID = "SCRIPT_INVALID"

    # Corpus
    CORPUS_UNREADABLE = "CORPUS_UNREADABLE"

    # Oracle
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"
    ORACLE_TIMEOUT = "ORACLE_TIMEOUT"
    EMPTY_CHOICES = "EMPTY_CHOICES"
    MISSING_CONTENT = "MISSING_CONTENT"

    # Report
    REPORT_WRITE_ERROR = "REPORT_WRITE_ERROR"
