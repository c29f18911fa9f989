"""Map module results and harness responses onto one canonical shape.

Every field of :class:`NormalizedGatewayOutput` is always present;
fields an upstream shape lacks take fixed defaults, so outputs from
either side compare field-for-field.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from legilimens.constants import SourceType
from legilimens.schemas import GatewayGenerationResult, McpGuidanceFlags

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class NormalizedGatewayOutput(BaseModel):
    dependency_type: str
    dependency_identifier: str
    gateway_filename: str
    gateway_content: str
    static_backup_filename: str
    static_backup_content: str
    deep_wiki_repository: str | None = None
    mcp_guidance_source_type: str = SourceType.UNKNOWN
    mcp_guidance_flags: McpGuidanceFlags = Field(default_factory=McpGuidanceFlags)
    template_validated: bool = False

    model_config = _CAMEL


class HarnessGateway(BaseModel):
    filename: str
    content: str
    deep_wiki_guidance_included: bool = False

    model_config = _CAMEL


class HarnessStaticBackup(BaseModel):
    filename: str
    content: str

    model_config = _CAMEL


class HarnessMetadata(BaseModel):
    session_id: str = ""
    generation_duration_ms: int = 0
    template_validated: bool = False
    dependency_type: str
    dependency_identifier: str
    deep_wiki_repository: str | None = None

    model_config = _CAMEL


class HarnessGatewayResponse(BaseModel):
    """Response body of the external service harness."""

    gateway: HarnessGateway
    static_backup: HarnessStaticBackup
    metadata: HarnessMetadata

    model_config = _CAMEL


def _trim(value: str) -> str:
    return value.rstrip()


async def _read(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def normalize_module_result(
    result: GatewayGenerationResult,
) -> NormalizedGatewayOutput:
    """Canonical shape of an in-process generation, artifacts read from disk."""
    meta = result.metadata
    gateway_content, static_backup_content = await asyncio.gather(
        _read(meta.gateway_path), _read(meta.static_backup_path)
    )
    return NormalizedGatewayOutput(
        dependency_type=meta.dependency_type,
        dependency_identifier=meta.dependency_identifier,
        gateway_filename=meta.gateway_relative_path,
        gateway_content=_trim(gateway_content),
        static_backup_filename=meta.static_backup_relative_path,
        static_backup_content=_trim(static_backup_content),
        deep_wiki_repository=meta.deep_wiki_repository,
        mcp_guidance_source_type=meta.mcp_guidance_source_type,
        mcp_guidance_flags=meta.mcp_guidance_flags,
        template_validated=meta.template_validated,
    )


def normalize_harness_response(
    response: HarnessGatewayResponse,
) -> NormalizedGatewayOutput:
    """Canonical shape of a harness response.

    The harness does not report the guidance source type or the
    non-DeepWiki flags; they take their defaults.
    """
    return NormalizedGatewayOutput(
        dependency_type=response.metadata.dependency_type,
        dependency_identifier=response.metadata.dependency_identifier,
        gateway_filename=response.gateway.filename,
        gateway_content=_trim(response.gateway.content),
        static_backup_filename=response.static_backup.filename,
        static_backup_content=_trim(response.static_backup.content),
        deep_wiki_repository=response.metadata.deep_wiki_repository,
        mcp_guidance_source_type=SourceType.UNKNOWN,
        mcp_guidance_flags=McpGuidanceFlags(
            deep_wiki=response.gateway.deep_wiki_guidance_included
        ),
        template_validated=response.metadata.template_validated,
    )
