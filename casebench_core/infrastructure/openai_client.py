"""
AsyncOpenAI Client Singleton

Provides a shared async OpenAI client so concurrent test cases reuse one
connection pool. The client is built with retries disabled: a failed oracle
call fails its test case and is never repeated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from casebench_core.config import settings
from casebench_core.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from openai import AsyncOpenAI


class OpenAIClientSingleton:
    """
    Singleton wrapper for the AsyncOpenAI client.

    Usage:
        client = OpenAIClientSingleton.get_instance()
        response = await client.chat.completions.create(...)
    """

    _instance: "AsyncOpenAI | None" = None

    @classmethod
    def get_instance(cls) -> "AsyncOpenAI":
        """
        Get or create the AsyncOpenAI client instance.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is not configured.
        """
        if cls._instance is None:
            from openai import AsyncOpenAI

            api_key = settings.OPENAI_API_KEY
            if not api_key:
                raise ConfigurationError(
                    "OPENAI_API_KEY not configured. "
                    "Set it in .env or environment variables."
                )

            cls._instance = AsyncOpenAI(
                api_key=api_key,
                base_url=settings.OPENAI_BASE_URL or None,
                timeout=settings.OPENAI_TIMEOUT_SECONDS,
                max_retries=0,
            )
            logger.info("AsyncOpenAI client initialized (singleton)")

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Reset the singleton instance.

        Useful for testing or when the API key changes.
        """
        cls._instance = None


def get_openai_client() -> "AsyncOpenAI":
    """Convenience function to get the AsyncOpenAI client."""
    return OpenAIClientSingleton.get_instance()
