"""Environment-based configuration and the per-run runtime view."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from legilimens.constants import (
    DEFAULT_FETCHER_TIMEOUT_MS,
    DEFAULT_LOCAL_LLM_TOKENS,
    DEFAULT_MAX_RETRIES,
    ToolName,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables.

    Provider keys use their conventional unprefixed names
    (``FIRECRAWL_API_KEY``); everything else is ``LEGILIMENS_*``.
    """

    # Provider credentials
    firecrawl_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "firecrawl_api_key", "FIRECRAWL_API_KEY"
        ),
    )
    context7_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "context7_api_key", "CONTEXT7_API_KEY"
        ),
    )
    reftools_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "reftools_api_key", "REFTOOLS_API_KEY"
        ),
    )

    # Fetchers
    fetcher_timeout_ms: int = DEFAULT_FETCHER_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES

    # AI generation
    ai_generation_enabled: bool = True

    # Local LLM (litellm model string, e.g. "ollama/granite3.3")
    local_llm_enabled: bool = False
    local_llm_model: str = ""
    local_llm_tokens: int = DEFAULT_LOCAL_LLM_TOKENS
    local_llm_timeout_ms: int = 120_000

    # Logging
    log_level: str = "INFO"

    @field_validator("fetcher_timeout_ms", "local_llm_tokens", "local_llm_timeout_ms")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("max_retries")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries must be >= 0")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "LEGILIMENS_",
        "extra": "ignore",
        "populate_by_name": True,
    }


@dataclass(frozen=True)
class FetcherDefaults:
    timeout_ms: int
    max_retries: int


@dataclass(frozen=True)
class ApiKeys:
    firecrawl: str | None = None
    context7: str | None = None
    ref_tools: str | None = None


@dataclass(frozen=True)
class LocalLlmConfig:
    enabled: bool = False
    model: str | None = None
    tokens: int = DEFAULT_LOCAL_LLM_TOKENS
    timeout_ms: int = 120_000


@dataclass(frozen=True)
class RuntimeConfig:
    """Read-only configuration for one pipeline run.

    Built once from :class:`Settings` and passed explicitly to every
    component that needs it.
    """

    fetcher: FetcherDefaults
    api_keys: ApiKeys
    local_llm: LocalLlmConfig
    ai_generation_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> RuntimeConfig:
        return cls(
            fetcher=FetcherDefaults(
                timeout_ms=settings.fetcher_timeout_ms,
                max_retries=settings.max_retries,
            ),
            api_keys=ApiKeys(
                firecrawl=_blank_to_none(settings.firecrawl_api_key),
                context7=_blank_to_none(settings.context7_api_key),
                ref_tools=_blank_to_none(settings.reftools_api_key),
            ),
            local_llm=LocalLlmConfig(
                enabled=settings.local_llm_enabled,
                model=_blank_to_none(settings.local_llm_model),
                tokens=settings.local_llm_tokens,
                timeout_ms=settings.local_llm_timeout_ms,
            ),
            ai_generation_enabled=settings.ai_generation_enabled,
        )

    def api_key_for(self, tool: ToolName) -> str | None:
        """Credential for a fetch tool, or None when not configured."""
        return {
            ToolName.FIRECRAWL: self.api_keys.firecrawl,
            ToolName.CONTEXT7: self.api_keys.context7,
            ToolName.REF: self.api_keys.ref_tools,
        }[tool]

    @property
    def local_llm_available(self) -> bool:
        return self.local_llm.enabled and bool(self.local_llm.model)


def get_runtime_config(settings: Settings | None = None) -> RuntimeConfig:
    """Build the runtime view from settings (read from env when omitted)."""
    if settings is None:
        settings = Settings()
    config = RuntimeConfig.from_settings(settings)
    logger.debug(
        "event=runtime_config timeout_ms=%d max_retries=%d "
        "firecrawl_key=%s local_llm=%s",
        config.fetcher.timeout_ms,
        config.fetcher.max_retries,
        config.api_keys.firecrawl is not None,
        config.local_llm_available,
    )
    return config


def _blank_to_none(value: str) -> str | None:
    value = value.strip()
    return value or None
