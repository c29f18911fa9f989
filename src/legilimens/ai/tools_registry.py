"""Map AI-requested tool names onto concrete fetcher adapters.

Each tool has its own argument model; the open ``args`` mapping an AI
emits is coerced into that model once, here, so adapters only ever
receive typed arguments. Missing or non-string values become ``""``
and the adapter rejects them fast.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel, Field, field_validator

from legilimens.config import RuntimeConfig
from legilimens.constants import ToolName
from legilimens.fetchers.context7 import fetch_from_context7
from legilimens.fetchers.firecrawl import fetch_from_firecrawl
from legilimens.fetchers.orchestrator import build_fetcher_config
from legilimens.fetchers.ref_tools import fetch_from_ref_tools
from legilimens.fetchers.schemas import FetcherConfig, FetchResult

logger = logging.getLogger(__name__)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


class FirecrawlArgs(BaseModel):
    url: str = ""

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, v: Any) -> str:
        return _as_str(v)


class Context7Args(BaseModel):
    package_name: str = Field(default="", alias="packageName")

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @field_validator("package_name", mode="before")
    @classmethod
    def _coerce_package_name(cls, v: Any) -> str:
        return _as_str(v)


class RefArgs(BaseModel):
    identifier: str = ""

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("identifier", mode="before")
    @classmethod
    def _coerce_identifier(cls, v: Any) -> str:
        return _as_str(v)


type ToolArgs = FirecrawlArgs | Context7Args | RefArgs

_ARG_MODELS: dict[ToolName, type[BaseModel]] = {
    ToolName.FIRECRAWL: FirecrawlArgs,
    ToolName.CONTEXT7: Context7Args,
    ToolName.REF: RefArgs,
}


def coerce_tool_args(tool: ToolName, args: object) -> ToolArgs:
    """Build the typed argument record for ``tool`` from an open mapping."""
    data = dict(args) if isinstance(args, Mapping) else {}
    return _ARG_MODELS[tool].model_validate(data)  # type: ignore[return-value]


async def _run_firecrawl(
    args: FirecrawlArgs,
    config: FetcherConfig,
    client: httpx.AsyncClient | None,
) -> FetchResult:
    return await fetch_from_firecrawl(args.url, config, client=client)


async def _run_context7(
    args: Context7Args,
    config: FetcherConfig,
    client: httpx.AsyncClient | None,
) -> FetchResult:
    return await fetch_from_context7(args.package_name, config, client=client)


async def _run_ref(
    args: RefArgs,
    config: FetcherConfig,
    client: httpx.AsyncClient | None,
) -> FetchResult:
    return await fetch_from_ref_tools(args.identifier, config, client=client)


_DISPATCH: dict[ToolName, Callable[..., Awaitable[FetchResult]]] = {
    ToolName.FIRECRAWL: _run_firecrawl,
    ToolName.CONTEXT7: _run_context7,
    ToolName.REF: _run_ref,
}


async def call_tool(
    tool: ToolName | str,
    args: Mapping[str, Any] | None,
    runtime_config: RuntimeConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Invoke the adapter behind ``tool``.

    Unknown tool names fail as a value without touching any adapter.
    """
    try:
        name = ToolName(tool)
    except ValueError:
        logger.warning("event=unknown_tool tool=%s", tool)
        return FetchResult.fail(f"Unknown tool: {tool}")

    typed_args = coerce_tool_args(name, args)
    config = build_fetcher_config(runtime_config, name)
    logger.debug("event=tool_call tool=%s args=%s", name, typed_args)
    return await _DISPATCH[name](typed_args, config, client)
