"""
OpenAI-backed generation client.

Sends a single user message per call and returns the first choice's
content. Every way the oracle can fail to produce text is raised as an
OracleError so the pipeline can fail that one test case and move on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import openai
from loguru import logger

from casebench_core.domain.exceptions import OracleError
from casebench_core.runtime.errors import ErrorCode

if TYPE_CHECKING:
    from openai import AsyncOpenAI


class OpenAIGenerationClient:
    """
    GenerationClient over the OpenAI chat completions API.

    The client holds no per-case state and can be shared by concurrent
    evaluations.

    Usage:
        client = OpenAIGenerationClient()
        text = await client.generate("Describe ...", model="gpt-4o-mini")
    """

    def __init__(self, client: "AsyncOpenAI | None" = None):
        """
        Args:
            client: AsyncOpenAI instance (defaults to the shared singleton).
        """
        self._client = client

    def _get_client(self) -> "AsyncOpenAI":
        if self._client is None:
            from casebench_core.infrastructure.openai_client import get_openai_client

            self._client = get_openai_client()
        return self._client

    async def generate(self, prompt: str, model: str) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APITimeoutError as e:
            raise OracleError(
                ErrorCode.ORACLE_TIMEOUT,
                "Oracle request timed out",
                message_debug=str(e),
                cause=e,
            ) from e
        except openai.OpenAIError as e:
            raise OracleError(
                ErrorCode.ORACLE_UNAVAILABLE,
                f"Oracle request failed: {e}",
                message_debug=repr(e),
                cause=e,
            ) from e

        if not response.choices:
            raise OracleError(ErrorCode.EMPTY_CHOICES, "Oracle returned no choices")

        content = response.choices[0].message.content
        if content is None:
            raise OracleError(ErrorCode.MISSING_CONTENT, "Oracle reply has no message content")

        logger.debug(f"Oracle replied with {len(content)} characters (model={model})")
        return content
