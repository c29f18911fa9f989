"""Pydantic models for validated AI responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from legilimens.constants import (
    ConfidenceLevel,
    DependencyType,
    SourceType,
    ToolName,
)


class DiscoveryResult(BaseModel):
    """Repository discovery decision emitted by the AI step."""

    canonical_identifier: str | None = Field(alias="canonicalIdentifier")
    repository_url: str | None = Field(alias="repositoryUrl")
    source_type: SourceType = Field(alias="sourceType")
    confidence: ConfidenceLevel
    dependency_type: DependencyType | None = Field(
        default=None, alias="dependencyType"
    )
    search_summary: str | None = Field(default=None, alias="searchSummary")

    model_config = {"populate_by_name": True, "frozen": True}


class ToolCall(BaseModel):
    """A single fetch-tool request emitted by the AI step."""

    tool: ToolName
    args: dict[str, Any]

    model_config = {"frozen": True}


@dataclass(frozen=True)
class SchemaValidation[M: BaseModel]:
    success: bool
    data: M | None = None
    error: str | None = None


def validate_with_schema[M: BaseModel](
    model: type[M], data: object
) -> SchemaValidation[M]:
    """Validate ``data`` against ``model`` without raising."""
    try:
        return SchemaValidation(success=True, data=model.model_validate(data))
    except ValidationError as exc:
        issues = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return SchemaValidation(
            success=False, error=f"Schema validation failed: {issues}"
        )


_DISCOVERY_HINT = """{
  "canonicalIdentifier": string|null,  // e.g. "owner/repo" or "package-name"
  "repositoryUrl": string|null,        // full URL to the repository
  "sourceType": "github|npm|url|unknown",
  "confidence": "high|medium|low",
  "dependencyType": "framework|api|library|tool|other",
  "searchSummary": string              // brief summary
}"""

_TOOL_CALL_HINT = """{
  "tool": "firecrawl|context7|ref",
  "args": { "url"?: string, "packageName"?: string, "identifier"?: string }
}"""


def schema_prompt_hint(model: type[BaseModel]) -> str:
    """Human-readable JSON shape to embed in prompts."""
    if model is DiscoveryResult:
        return _DISCOVERY_HINT
    if model is ToolCall:
        return _TOOL_CALL_HINT
    return "Valid JSON object matching schema"
