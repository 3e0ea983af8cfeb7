"""
Prompt templates.

Templates are plain text files with `__name__`-style placeholders:

    __description__   problem description from the test case
    __baseline__      expected resolution from the test case
    __input__         candidate payload extracted from the first reply

All placeholders are substituted in a single pass, so a value that happens
to contain a placeholder token is inserted as-is and never expanded.
"""

from __future__ import annotations

import re
from pathlib import Path

from casebench_core.domain.exceptions import ConfigurationError
from casebench_core.runtime.errors import ErrorCode

PLACEHOLDER_PATTERN = re.compile(r"__([a-z][a-z_]*?)__")


class PromptTemplate:
    """A prompt with named placeholders."""

    def __init__(self, text: str, name: str = "prompt"):
        self.text = text
        self.name = name

    @property
    def placeholders(self) -> set[str]:
        return set(PLACEHOLDER_PATTERN.findall(self.text))

    def render(self, **values: str) -> str:
        """
        Substitute placeholders. Tokens without a value are left untouched.

        Example:
            PromptTemplate("Solve: __description__").render(description="2+2")
        """
        if not values:
            return self.text

        tokens = {f"__{key}__": value for key, value in values.items()}
        pattern = re.compile("|".join(re.escape(token) for token in tokens))
        return pattern.sub(lambda m: tokens[m.group(0)], self.text)

    def __repr__(self) -> str:
        return f"PromptTemplate(name={self.name!r}, placeholders={sorted(self.placeholders)})"


def read_text_file(path: str | Path, setting: str) -> str:
    """
    Read a configured template or script file.

    Args:
        path: Path taken from settings or the command line.
        setting: Name of the setting, used in the error message.

    Raises:
        ConfigurationError: If the path is empty or unreadable.
    """
    if not path:
        raise ConfigurationError(f"{setting} is not configured. Set it in .env or environment variables.")

    file_path = Path(path)
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read {setting} file {file_path}: {e}",
            code=ErrorCode.TEMPLATE_UNREADABLE,
            cause=e,
        ) from e


def load_template(path: str | Path, setting: str) -> PromptTemplate:
    """Load a PromptTemplate from a file."""
    return PromptTemplate(read_text_file(path, setting), name=setting)
