"""
Unified configuration for casebench.

This module provides a single Settings class that consolidates all
environment variables used by the evaluation harness. Values come from the
.env file at the project root and can be overridden by actual environment
variables. Lookups are case-insensitive, so a lowercase `model` variable
fills MODEL.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Settings for a casebench run.

    Paths are left empty by default; the factory checks the ones the
    selected strategy needs and raises ConfigurationError early.
    """

    # Service identification
    SERVICE_NAME: str = "casebench"

    # Corpus and report locations
    TEST_DIR: str = ""
    RESULTS_DIR: str = "results"

    # Prompt templates and the structure test script
    GEN_PROMPT: str = ""
    TEST_PROMPT: str = ""
    STRUCTURE_TEST: str = ""
    STRUCTURE_TEST_TIMEOUT_SECONDS: float = 5.0

    # Structural validation: "script" runs STRUCTURE_TEST, "schema" decodes
    # the payload into ResolutionPayload
    VALIDATION_STRATEGY: Literal["script", "schema"] = "script"

    # Oracle
    MODEL: str = ""
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str | None = None
    OPENAI_TIMEOUT_SECONDS: float = 120.0

    # Number of test cases evaluated at once (1 = sequential)
    MAX_CONCURRENCY: int = 1

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()  # type: ignore
