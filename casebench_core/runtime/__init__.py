"""
Runtime layer for casebench.

This package provides shared infrastructure for a run:
- RunContext: Run-scoped context with a correlation ID
- ServiceError: Standardized errors with machine-readable codes
"""

from .context import RunContext
from .errors import ErrorCode, ServiceError

__all__ = [
    "RunContext",
    "ServiceError",
    "ErrorCode",
]
