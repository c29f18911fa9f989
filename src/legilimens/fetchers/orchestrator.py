"""Fallback chains across fetchers, picked by dependency type."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from legilimens.config import RuntimeConfig
from legilimens.constants import (
    GITHUB_BASE_URL,
    NPM_PACKAGE_BASE_URL,
    SourceType,
    ToolName,
)
from legilimens.detection.detector import detect_dependency_type
from legilimens.fetchers.context7 import fetch_from_context7
from legilimens.fetchers.firecrawl import fetch_from_firecrawl
from legilimens.fetchers.ref_tools import fetch_from_ref_tools
from legilimens.fetchers.schemas import FetcherConfig, FetchResult

logger = logging.getLogger(__name__)

Adapter = Callable[..., Awaitable[FetchResult]]

_ADAPTERS: dict[ToolName, Adapter] = {
    ToolName.FIRECRAWL: fetch_from_firecrawl,
    ToolName.CONTEXT7: fetch_from_context7,
    ToolName.REF: fetch_from_ref_tools,
}

_TOOL_LABELS: dict[ToolName, str] = {
    ToolName.FIRECRAWL: "Firecrawl",
    ToolName.CONTEXT7: "Context7",
    ToolName.REF: "ref.tools",
}

_TYPE_LABELS: dict[SourceType, str] = {
    SourceType.GITHUB: "GitHub",
    SourceType.NPM: "NPM",
    SourceType.URL: "URL",
}


@dataclass(frozen=True)
class ChainStep:
    tool: ToolName
    target: Callable[[str], str]
    requires_key: bool = False


def _github_url(identifier: str) -> str:
    if identifier.startswith("http"):
        return identifier
    return f"{GITHUB_BASE_URL}/{identifier}"


def _npm_url(identifier: str) -> str:
    return f"{NPM_PACKAGE_BASE_URL}/{identifier}"


def _same(identifier: str) -> str:
    return identifier


_CHAINS: dict[SourceType, tuple[ChainStep, ...]] = {
    SourceType.GITHUB: (
        ChainStep(ToolName.REF, _same),
        ChainStep(ToolName.FIRECRAWL, _github_url, requires_key=True),
    ),
    SourceType.NPM: (
        ChainStep(ToolName.CONTEXT7, _same),
        ChainStep(ToolName.REF, _same),
        ChainStep(ToolName.FIRECRAWL, _npm_url, requires_key=True),
    ),
    SourceType.URL: (
        ChainStep(ToolName.FIRECRAWL, _same, requires_key=True),
    ),
}


def build_fetcher_config(
    runtime_config: RuntimeConfig, tool: ToolName
) -> FetcherConfig:
    """Per-call fetcher policy for ``tool`` from the run's configuration."""
    return FetcherConfig(
        timeout_ms=runtime_config.fetcher.timeout_ms,
        max_retries=runtime_config.fetcher.max_retries,
        api_key=runtime_config.api_key_for(tool),
    )


def _active_steps(
    source_type: SourceType, runtime_config: RuntimeConfig
) -> list[ChainStep]:
    return [
        step
        for step in _CHAINS.get(source_type, ())
        if not step.requires_key or runtime_config.api_key_for(step.tool)
    ]


async def fetch_documentation(
    identifier: str,
    runtime_config: RuntimeConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch documentation, walking the fallback chain for its type.

    * github: ref.tools → Firecrawl (when keyed)
    * npm: Context7 → ref.tools → Firecrawl (when keyed)
    * url: Firecrawl only, and only with a key

    Returns the first successful result, or a failure naming every
    tool that was tried.
    """
    source_type = detect_dependency_type(identifier)

    if source_type is SourceType.UNKNOWN:
        return FetchResult.fail(
            f"Unknown dependency type for identifier: {identifier}"
        )

    steps = _active_steps(source_type, runtime_config)
    if not steps:
        return FetchResult.fail("Firecrawl API key required for URL fetching")

    tried: list[str] = []
    for step in steps:
        tool_config = build_fetcher_config(runtime_config, step.tool)
        result = await _ADAPTERS[step.tool](
            step.target(identifier), tool_config, client=client
        )
        tried.append(_TOOL_LABELS[step.tool])
        if result.success:
            return result
        logger.info(
            "event=fetch_chain_step_failed tool=%s identifier=%s error=%s",
            step.tool,
            identifier,
            result.error,
        )

    return FetchResult.fail(
        f"{_TYPE_LABELS[source_type]} documentation fetch failed for "
        f"{identifier}. Attempted: {', '.join(tried)}"
    )


def describe_fetch_strategy(
    identifier: str, runtime_config: RuntimeConfig
) -> str:
    """Human-readable description of the chain ``fetch_documentation`` uses."""
    source_type = detect_dependency_type(identifier)
    if source_type is SourceType.UNKNOWN:
        return "Unknown type: No strategy available"

    steps = _active_steps(source_type, runtime_config)
    label = _TYPE_LABELS[source_type]
    if not steps:
        return f"{label}: No API key configured"
    return f"{label}: " + " → ".join(_TOOL_LABELS[s.tool] for s in steps)
