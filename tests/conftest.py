"""Shared test fixtures: isolated environment, fast retries, runtime configs."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from legilimens.config import (
    ApiKeys,
    FetcherDefaults,
    LocalLlmConfig,
    RuntimeConfig,
)

_ENV_VARS = (
    "FIRECRAWL_API_KEY",
    "CONTEXT7_API_KEY",
    "REFTOOLS_API_KEY",
    "LEGILIMENS_FETCHER_TIMEOUT_MS",
    "LEGILIMENS_MAX_RETRIES",
    "LEGILIMENS_AI_GENERATION_ENABLED",
    "LEGILIMENS_LOCAL_LLM_ENABLED",
    "LEGILIMENS_LOCAL_LLM_MODEL",
    "LEGILIMENS_LOCAL_LLM_TOKENS",
    "LEGILIMENS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """No provider keys leak in from the developer's shell."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    """Zero out fetch retry backoff for fast tests."""
    monkeypatch.setattr(
        "legilimens.fetchers.base.RETRY_BACKOFF_BASE_SECONDS", 0.0
    )
    monkeypatch.setattr(
        "legilimens.fetchers.base.RATE_LIMIT_BASE_SECONDS", 0.0
    )


def build_runtime_config(
    *,
    firecrawl: str | None = None,
    context7: str | None = None,
    ref_tools: str | None = None,
    timeout_ms: int = 500,
    max_retries: int = 0,
    local_llm_enabled: bool = False,
    local_llm_model: str | None = None,
    local_llm_tokens: int = 8192,
    ai_generation_enabled: bool = True,
) -> RuntimeConfig:
    return RuntimeConfig(
        fetcher=FetcherDefaults(timeout_ms=timeout_ms, max_retries=max_retries),
        api_keys=ApiKeys(
            firecrawl=firecrawl, context7=context7, ref_tools=ref_tools
        ),
        local_llm=LocalLlmConfig(
            enabled=local_llm_enabled,
            model=local_llm_model,
            tokens=local_llm_tokens,
            timeout_ms=1_000,
        ),
        ai_generation_enabled=ai_generation_enabled,
    )


@pytest.fixture
def make_runtime_config() -> Callable[..., RuntimeConfig]:
    """Factory fixture: ``make_runtime_config(firecrawl="fc-key")``."""
    return build_runtime_config


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """Runtime config with no keys, no retries and short timeouts."""
    return build_runtime_config()
