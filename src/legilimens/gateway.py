"""Gateway document generation.

One call turns a dependency identifier into two markdown artifacts
under the target directory:

* ``<type_dir>/<type>_<slug>.md``: the gateway, a short fixed-layout
  page pointing agents at the right MCP tool.
* ``<type_dir>/static-backup/<type>_<slug>.md``: the fetched
  documentation, or a placeholder when every fetcher failed.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
import uuid
from collections.abc import Callable
from pathlib import Path

import httpx

from legilimens.ai.document_chunker import Summarizer, condense_documentation
from legilimens.config import RuntimeConfig
from legilimens.constants import (
    GITHUB_BASE_URL,
    NPM_PACKAGE_BASE_URL,
    UNKNOWN_IDENTIFIER,
    DependencyType,
    SourceType,
)
from legilimens.detection.normalize import to_display_name
from legilimens.detection.source_detector import (
    derive_deepwiki_url,
    detect_source_type,
)
from legilimens.fetchers.orchestrator import fetch_documentation
from legilimens.schemas import (
    GatewayGenerationMetadata,
    GatewayGenerationRequest,
    GatewayGenerationResult,
    GatewayProgressEvent,
    McpGuidanceFlags,
)
from legilimens.telemetry.performance import (
    create_performance_tracker,
    summarize_performance,
)

logger = logging.getLogger(__name__)

type ProgressCallback = Callable[[GatewayProgressEvent], None]

TYPE_DIRECTORY: dict[DependencyType, str] = {
    DependencyType.FRAMEWORK: "frameworks",
    DependencyType.API: "apis",
    DependencyType.LIBRARY: "libraries",
    DependencyType.TOOL: "tools",
    DependencyType.OTHER: "other",
}

STATIC_BACKUP_DIR = "static-backup"

_SOURCE_TOOL_NAMES: dict[SourceType, str] = {
    SourceType.GITHUB: "DeepWiki",
    SourceType.NPM: "Context7",
    SourceType.URL: "Firecrawl",
    SourceType.UNKNOWN: "Static backup",
}

_SOURCE_TYPE_NAMES: dict[SourceType, str] = {
    SourceType.GITHUB: "GitHub",
    SourceType.NPM: "NPM",
    SourceType.URL: "URLs",
    SourceType.UNKNOWN: "unknown sources",
}

_SHORT_DESCRIPTION_CHARS = 280


def sanitize_dependency_type(value: object) -> DependencyType:
    """Known dependency type, ``library`` for anything else."""
    if isinstance(value, str):
        try:
            return DependencyType(value.strip().lower())
        except ValueError:
            pass
    return DependencyType.LIBRARY


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", value.lower()).strip("_")
    return slug or "dependency"


def format_progress(event: GatewayProgressEvent) -> str:
    """One progress line, e.g. ``" 42% :: fetch docs - querying"``."""
    percent = max(0, min(100, round(event.percent_complete)))
    step = re.sub(r"[-_]+", " ", event.step)
    return f"{percent:>3}% :: {step} - {event.message}"


def build_mcp_guidance(
    source_type: SourceType,
    static_backup_link: str,
    deep_wiki_repository: str | None = None,
) -> str:
    """Guidance block telling agents which MCP tool to reach for."""
    if source_type is SourceType.GITHUB:
        lines = ["USE DEEPWIKI MCP TO ACCESS DEPENDENCY KNOWLEDGE!"]
        if deep_wiki_repository:
            lines.append(f"Primary repository: {deep_wiki_repository}")
        lines += [
            'Example: ask_question("What is the quickest way to '
            'integrate this dependency?")',
            "",
            f"For planning sessions, review the static backup: {static_backup_link}",
            "",
            "DeepWiki for coding. Static files for planning.",
        ]
    elif source_type is SourceType.NPM:
        lines = [
            "USE CONTEXT7 MCP TO ACCESS PACKAGE DOCUMENTATION!",
            "Context7 provides cached NPM package documentation "
            "optimized for quick queries.",
            "Use Context7 MCP to query package APIs, usage patterns, and examples.",
            "",
            f"For deep research, review the static backup: {static_backup_link}",
            "",
            "Context7 for package docs. Static files for deep research.",
        ]
    elif source_type is SourceType.URL:
        lines = [
            "USE FIRECRAWL OR WEB-BASED TOOLS TO ACCESS DOCUMENTATION!",
            "Documentation is available at the provided URL.",
            "Use Firecrawl MCP or browser-based access for specific sections.",
            "",
            f"For offline reference, review the static backup: {static_backup_link}",
            "",
            "Web tools for live docs. Static files for offline reference.",
        ]
    else:
        lines = [
            "REFER TO STATIC BACKUP FOR DOCUMENTATION!",
            "The source type could not be determined for this dependency.",
            "The static backup serves as the primary reference.",
            "Consider manually verifying the dependency source.",
            "",
            f"Primary reference: {static_backup_link}",
            "",
            "Static backup is your primary reference for this dependency.",
        ]
    return "\n".join(lines)


def derive_official_source(
    identifier: str,
    source_type: SourceType,
    deep_wiki_repository: str | None = None,
) -> str:
    """Canonical upstream URL for the dependency."""
    if source_type is SourceType.GITHUB:
        if "/" in identifier:
            stripped = re.sub(r"^https?://", "", identifier)
            if stripped.startswith("github.com/"):
                return f"https://{stripped}"
            return f"{GITHUB_BASE_URL}/{stripped}"
        return deep_wiki_repository or f"{GITHUB_BASE_URL}/{identifier}"

    if source_type is SourceType.NPM or (
        "://" not in identifier and "/" not in identifier
    ):
        return f"{NPM_PACKAGE_BASE_URL}/{identifier}"

    if "://" in identifier:
        return identifier
    return deep_wiki_repository or identifier


def _placeholder_backup(
    display_name: str,
    source_type: SourceType,
    deep_wiki_repository: str | None,
    error: str | None,
) -> str:
    lines = [
        f"# Static Backup Placeholder: {display_name}",
        "",
        "Replace this placeholder with the canonical static-backup "
        "markdown when available.",
        "",
    ]
    if source_type is SourceType.GITHUB and deep_wiki_repository:
        lines += [f"DeepWiki reference: {deep_wiki_repository}", ""]
    lines.append(f"Note: Automatic fetch failed - {error}")
    return "\n".join(lines)


def _short_description(
    display_name: str, dependency_type: DependencyType, documentation: str
) -> str:
    """First prose paragraph of the docs, or a generic sentence."""
    for block in re.split(r"\n\s*\n", documentation):
        text = " ".join(block.split())
        if text and not text.startswith(("#", "```", "|", "![", "<")):
            if len(text) > _SHORT_DESCRIPTION_CHARS:
                text = text[: _SHORT_DESCRIPTION_CHARS - 3].rstrip() + "..."
            return text
    return f"{display_name} is a {dependency_type} dependency."


def _feature_list(
    display_name: str,
    dependency_type: DependencyType,
    source_type: SourceType,
    static_backup_link: str,
    minimal_mode: bool,
) -> list[str]:
    mode = (
        "Minimal mode active to respect ANSI-free or low-width terminals."
        if minimal_mode
        else "Supports minimal and low-contrast modes without sacrificing clarity."
    )
    return [
        f"Curated MCP prompts accelerate work with {display_name} "
        f"({_SOURCE_TOOL_NAMES[source_type]} for "
        f"{_SOURCE_TYPE_NAMES[source_type]}).",
        f"Static backup lives at {static_backup_link} for deep dives.",
        f"Enforces the fixed gateway layout for {dependency_type} dependencies.",
        "Shared Python core keeps CLI and service harness outputs aligned.",
        mode,
    ]


def render_gateway(
    *,
    display_name: str,
    dependency_type: DependencyType,
    short_description: str,
    features: list[str],
    mcp_guidance: str,
    static_backup_link: str,
    official_source_url: str,
) -> str:
    """Fill the fixed gateway layout. Exactly five features are required."""
    if len(features) != 5:
        raise ValueError(f"gateway needs exactly 5 features, got {len(features)}")
    lines = [
        f"# Legilimens Gateway: {display_name}",
        "",
        "## Overview",
        f"Lightweight Legilimens summary for {display_name} ({dependency_type}).",
        "",
        "## Short Description",
        short_description,
        "",
        "## Key Features",
        *(f"- {feature}" for feature in features),
        "",
        "## MCP Tool Guidance",
        mcp_guidance,
        "",
        "## Static Backup Reference",
        f"[{static_backup_link}]({static_backup_link})",
        "",
        "## Official Source",
        f"[Official {display_name} reference]({official_source_url})",
    ]
    return "\n".join(lines)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{content.rstrip()}\n", encoding="utf-8")


async def generate_gateway_doc(
    request: GatewayGenerationRequest,
    runtime_config: RuntimeConfig,
    *,
    summarizer: Summarizer | None = None,
    client: httpx.AsyncClient | None = None,
    on_progress: ProgressCallback | None = None,
) -> GatewayGenerationResult:
    """Generate the gateway and static-backup artifacts for one dependency.

    Fetch failures never abort the run: the static backup becomes a
    placeholder naming the error.

    Raises:
        GuardrailExceededError: the run took longer than the absolute
            ceiling. Artifacts are already on disk at that point.
    """
    tracker = create_performance_tracker(request.minimal_mode)

    def _progress(step: str, message: str, percent: float) -> None:
        if on_progress is not None:
            on_progress(
                GatewayProgressEvent(
                    step=step, message=message, percent_complete=percent
                )
            )

    identifier = request.dependency_identifier.strip() or UNKNOWN_IDENTIFIER
    dependency_type = sanitize_dependency_type(request.dependency_type)
    source_type = detect_source_type(identifier).source_type
    deep_wiki_repository = (
        request.deep_wiki_repository or derive_deepwiki_url(identifier)
    )
    display_name = to_display_name(identifier)

    type_dir = TYPE_DIRECTORY[dependency_type]
    filename = f"{dependency_type}_{slugify(identifier)}.md"
    gateway_dir = Path(request.target_directory) / type_dir
    gateway_path = gateway_dir / filename
    static_backup_path = gateway_dir / STATIC_BACKUP_DIR / filename
    static_backup_link = f"./{STATIC_BACKUP_DIR}/{filename}"

    _progress("detect", f"{identifier} looks like {source_type}", 10)

    _progress("fetch_docs", f"fetching documentation for {identifier}", 20)
    fetch_started = time.perf_counter()
    fetch_result = await fetch_documentation(identifier, runtime_config, client=client)
    fetch_duration_ms = round((time.perf_counter() - fetch_started) * 1000)

    if fetch_result.success:
        static_content = fetch_result.content or ""
        fetch_source = (
            fetch_result.metadata.source if fetch_result.metadata else None
        )
    else:
        logger.warning(
            "event=gateway_fetch_failed identifier=%s error=%s",
            identifier,
            fetch_result.error,
        )
        static_content = _placeholder_backup(
            display_name, source_type, deep_wiki_repository, fetch_result.error
        )
        fetch_source = None

    prepared = static_content
    if runtime_config.ai_generation_enabled:
        _progress("condense", "preparing documentation", 50)
        prepared = await condense_documentation(
            static_content,
            display_name,
            dependency_type,
            runtime_config,
            summarizer=summarizer,
        )

    _progress("render", "rendering gateway", 75)
    official_source_url = derive_official_source(
        identifier, source_type, deep_wiki_repository
    )
    gateway_content = render_gateway(
        display_name=display_name,
        dependency_type=dependency_type,
        short_description=_short_description(
            display_name, dependency_type, prepared
        ),
        features=_feature_list(
            display_name,
            dependency_type,
            source_type,
            static_backup_link,
            request.minimal_mode,
        ),
        mcp_guidance=build_mcp_guidance(
            source_type, static_backup_link, deep_wiki_repository
        ),
        static_backup_link=static_backup_link,
        official_source_url=official_source_url,
    )

    _progress("write", f"writing {type_dir}/{filename}", 90)
    await asyncio.to_thread(_write, gateway_path, gateway_content)
    await asyncio.to_thread(_write, static_backup_path, static_content)

    metrics = tracker.finish()
    performance_summary = summarize_performance(metrics)

    gateway_relative = f"{type_dir}/{filename}"
    static_relative = f"{type_dir}/{STATIC_BACKUP_DIR}/{filename}"
    mcp_reference = (
        f"DeepWiki reference: {deep_wiki_repository}."
        if source_type is SourceType.GITHUB and deep_wiki_repository
        else f"MCP tool guidance: {_SOURCE_TOOL_NAMES[source_type]}."
    )
    fetch_status = (
        f"Documentation fetched from {fetch_source} in {fetch_duration_ms}ms."
        if fetch_result.success
        else "Documentation fetch failed; placeholder created."
    )
    summary = " ".join([
        f"Gateway generated for {display_name} ({dependency_type}).",
        f"Markdown saved to {gateway_relative} with static backup "
        f"{static_relative}.",
        mcp_reference,
        performance_summary,
        fetch_status,
    ])

    _progress("done", summary, 100)
    logger.info(
        "event=gateway_generated identifier=%s type=%s source=%s "
        "fetched=%s duration_ms=%d",
        identifier,
        dependency_type,
        source_type,
        fetch_result.success,
        metrics.duration_ms,
    )

    return GatewayGenerationResult(
        document_path=gateway_path,
        summary=summary,
        artifacts=[gateway_path, static_backup_path],
        metadata=GatewayGenerationMetadata(
            session_id=str(uuid.uuid4()),
            dependency_type=dependency_type,
            dependency_identifier=identifier,
            gateway_path=gateway_path,
            gateway_filename=filename,
            gateway_relative_path=gateway_relative,
            static_backup_path=static_backup_path,
            static_backup_filename=filename,
            static_backup_relative_path=static_relative,
            template_validated=True,
            generation_duration_ms=metrics.duration_ms,
            deep_wiki_guidance_included=source_type is SourceType.GITHUB,
            deep_wiki_repository=deep_wiki_repository,
            minimal_mode=request.minimal_mode,
            mcp_guidance_source_type=source_type,
            mcp_guidance_flags=McpGuidanceFlags.for_source(source_type),
            performance=metrics,
            performance_summary=performance_summary,
            documentation_fetched=fetch_result.success,
            fetch_source=fetch_source,
            fetch_duration_ms=fetch_duration_ms,
            fetch_attempts=list(fetch_result.attempts),
            documentation_condensed=prepared != static_content,
        ),
    )
