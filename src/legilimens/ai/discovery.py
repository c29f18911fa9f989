"""AI-assisted repository discovery for natural-language dependency names."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx
from pydantic import BaseModel

from legilimens.ai.json_output import (
    extract_first_json,
    safe_parse_json,
    validate_discovery_json,
    validate_tool_call_json,
)
from legilimens.ai.schemas import (
    DiscoveryResult,
    ToolCall,
    schema_prompt_hint,
    validate_with_schema,
)
from legilimens.ai.tools_registry import call_tool
from legilimens.config import RuntimeConfig
from legilimens.constants import ConfidenceLevel, DependencyType, SourceType
from legilimens.fetchers.schemas import FetchResult

logger = logging.getLogger(__name__)

type Complete = Callable[[str], Awaitable[str]]


class PipelineResult(BaseModel):
    source_type: SourceType
    normalized_identifier: str
    confidence: ConfidenceLevel
    ai_assisted: bool = True
    dependency_type: DependencyType = DependencyType.OTHER
    repository_url: str | None = None
    search_summary: str | None = None
    tool_result: FetchResult | None = None


def build_query(natural: str) -> str:
    return (
        f"Find official sources for: {natural}. "
        "Prefer GitHub repo, Context7, DeepWiki, official docs."
    )


def _discovery_prompt(natural: str, candidates: Sequence[Any]) -> str:
    return "\n".join([
        build_query(natural),
        "Given these candidate sources, choose the canonical identifier, "
        "primary URL, source type, confidence, and dependency type.",
        "Respond with a single JSON object with fields:",
        schema_prompt_hint(DiscoveryResult),
        f"Natural: {natural}",
        f"Candidates: {json.dumps(list(candidates), indent=2, default=str)}",
    ])


def _tool_prompt(repository_url: str | None) -> str:
    return "\n".join([
        "If fetching markdown would help, propose ONE tool call as JSON:",
        schema_prompt_hint(ToolCall),
        "Otherwise, respond with {}",
        f"Primary URL: {repository_url}",
    ])


async def _ask_json(complete: Complete, prompt: str) -> Any | None:
    reply = await complete(prompt)
    return safe_parse_json(extract_first_json(reply))


async def discover_with_pipeline(
    natural: str,
    runtime_config: RuntimeConfig,
    *,
    complete: Complete,
    candidates: Sequence[Any] = (),
    client: httpx.AsyncClient | None = None,
) -> PipelineResult:
    """Resolve a natural-language name to a canonical identifier.

    ``complete`` is the AI collaborator (prompt in, free text out);
    ``candidates`` are optional search hits to ground its decision.
    An invalid discovery reply yields an unknown/low-confidence result.
    A valid follow-up tool call is dispatched through the registry and
    its FetchResult attached.
    """
    decision = await _ask_json(complete, _discovery_prompt(natural, candidates))
    checked = (
        validate_with_schema(DiscoveryResult, decision)
        if validate_discovery_json(decision)
        else None
    )
    if checked is None or checked.data is None:
        logger.info(
            "event=discovery_invalid natural=%s error=%s",
            natural,
            checked.error if checked else "shape",
        )
        return PipelineResult(
            source_type=SourceType.UNKNOWN,
            normalized_identifier=natural,
            confidence=ConfidenceLevel.LOW,
        )

    choice = checked.data

    tool_result: FetchResult | None = None
    proposal = await _ask_json(complete, _tool_prompt(choice.repository_url))
    if validate_tool_call_json(proposal):
        tool_call = ToolCall.model_validate(proposal)
        tool_result = await call_tool(
            tool_call.tool, tool_call.args, runtime_config, client=client
        )

    return PipelineResult(
        source_type=choice.source_type,
        normalized_identifier=choice.canonical_identifier or natural,
        confidence=choice.confidence,
        dependency_type=choice.dependency_type or DependencyType.OTHER,
        repository_url=choice.repository_url,
        search_summary=choice.search_summary,
        tool_result=tool_result,
    )
