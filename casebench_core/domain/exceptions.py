"""
Standard exceptions for casebench.

How far each one reaches:
- ConfigurationError / ScriptLoadError: the run never starts.
- CorpusError: the whole run is aborted.
- OracleError: only the current test case fails.
"""

from casebench_core.runtime.errors import ErrorCode, ServiceError


class ConfigurationError(ServiceError):
    """A required setting is missing or points at something unusable."""

    def __init__(self, message: str, code: str = ErrorCode.CONFIG_MISSING, cause: Exception | None = None):
        super().__init__(code=code, message_safe=message, cause=cause)


class ScriptLoadError(ConfigurationError):
    """The structure test script is unsafe, does not compile or lacks `test`."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, code=ErrorCode.SCRIPT_INVALID, cause=cause)


class CorpusError(ServiceError):
    """The corpus directory or one of its files cannot be read."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(code=ErrorCode.CORPUS_UNREADABLE, message_safe=message, cause=cause)


class OracleError(ServiceError):
    """The generation oracle did not produce usable text."""

    def __init__(
        self,
        code: str,
        message: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(code=code, message_safe=message, message_debug=message_debug, cause=cause)
