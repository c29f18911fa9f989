"""Pydantic models for the gateway generation flow.

Field names are snake_case; the camelCase names used by the JSON
harness are accepted and emitted via aliases.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from legilimens.constants import DependencyType, SourceType
from legilimens.telemetry.performance import PerformanceMetrics

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class GatewayProgressEvent(BaseModel):
    step: str
    message: str
    percent_complete: float = 0.0

    model_config = _CAMEL


class GatewayGenerationRequest(BaseModel):
    """Input to :func:`legilimens.gateway.generate_gateway_doc`."""

    target_directory: Path
    dependency_identifier: str = ""
    dependency_type: str = DependencyType.LIBRARY
    deep_wiki_repository: str | None = None
    minimal_mode: bool = False

    model_config = _CAMEL


class McpGuidanceFlags(BaseModel):
    deep_wiki: bool = False
    context7: bool = False
    firecrawl: bool = False
    static_only: bool = False

    model_config = _CAMEL

    @classmethod
    def for_source(cls, source_type: SourceType) -> McpGuidanceFlags:
        return cls(
            deep_wiki=source_type is SourceType.GITHUB,
            context7=source_type is SourceType.NPM,
            firecrawl=source_type is SourceType.URL,
            static_only=source_type is SourceType.UNKNOWN,
        )


class GatewayGenerationMetadata(BaseModel):
    session_id: str
    dependency_type: DependencyType
    dependency_identifier: str
    gateway_path: Path
    gateway_filename: str
    gateway_relative_path: str
    static_backup_path: Path
    static_backup_filename: str
    static_backup_relative_path: str
    template_validated: bool = True
    generation_duration_ms: int = 0
    deep_wiki_guidance_included: bool = False
    deep_wiki_repository: str | None = None
    minimal_mode: bool = False
    mcp_guidance_source_type: SourceType = SourceType.UNKNOWN
    mcp_guidance_flags: McpGuidanceFlags = Field(default_factory=McpGuidanceFlags)
    performance: PerformanceMetrics | None = None
    performance_summary: str = ""
    documentation_fetched: bool = False
    fetch_source: str | None = None
    fetch_duration_ms: int | None = None
    fetch_attempts: list[str] = Field(default_factory=list)
    documentation_condensed: bool = False

    model_config = _CAMEL


class GatewayGenerationResult(BaseModel):
    document_path: Path
    summary: str
    artifacts: list[Path] = Field(default_factory=list)
    metadata: GatewayGenerationMetadata

    model_config = _CAMEL
