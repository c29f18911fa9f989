"""Shared constants: single source of truth for cross-module values.

StrEnum members are str-compatible, so JSON payloads built from them
work unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class SourceType(StrEnum):
    """Where a dependency's documentation lives."""

    GITHUB = "github"
    NPM = "npm"
    URL = "url"
    UNKNOWN = "unknown"


class ConfidenceLevel(StrEnum):
    """Qualitative confidence labels from detection and AI discovery."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DependencyType(StrEnum):
    """Dependency categories used to file generated gateways."""

    FRAMEWORK = "framework"
    API = "api"
    LIBRARY = "library"
    TOOL = "tool"
    OTHER = "other"


class ToolName(StrEnum):
    """Fetch tools an AI step may request.

    firecrawl → generic web, context7 → package registry docs,
    ref → source-host docs.
    """

    FIRECRAWL = "firecrawl"
    CONTEXT7 = "context7"
    REF = "ref"


# ── Identifier Sentinels ─────────────────────────────────

UNKNOWN_IDENTIFIER = "unknown-dependency"
UNKNOWN_DISPLAY_NAME = "Unknown Dependency"

# ── Fetcher Endpoints ────────────────────────────────────

FIRECRAWL_BASE_URL = "https://api.firecrawl.dev/v1"
CONTEXT7_BASE_URL = "https://api.context7.ai/v1"
REF_TOOLS_BASE_URL = "https://api.ref.tools/v1"
GITHUB_BASE_URL = "https://github.com"
NPM_PACKAGE_BASE_URL = "https://www.npmjs.com/package"
DEEPWIKI_BASE_URL = "https://deepwiki.com"

# ── Fetcher Defaults ─────────────────────────────────────

DEFAULT_FETCHER_TIMEOUT_MS = 60_000
DEFAULT_MAX_RETRIES = 2

# ── Retry Strategy ───────────────────────────────────────

RETRY_BACKOFF_BASE_SECONDS = 0.1
RETRY_BACKOFF_MAX_SECONDS = 10.0
RATE_LIMIT_BASE_SECONDS = 1.0

# LLM rate-limit retry (summarizer collaborator)
RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_WAIT = 2
RETRY_MAX_WAIT = 30

# ── Circuit Breaker Configuration ────────────────────────

CB_LLM_FAILURE_THRESHOLD = 5
CB_LLM_RECOVERY_TIMEOUT = 30

# ── LLM Output ───────────────────────────────────────────

LLM_MAX_OUTPUT_TOKENS = 512
LLM_SUMMARY_TEMPERATURE = 0.2

# ── Token Estimation / Chunking ──────────────────────────

CHARS_PER_TOKEN_ESTIMATE = 4
DEFAULT_CHUNK_TOKENS = 2000
DEFAULT_OVERLAP_TOKENS = 200
DEFAULT_LOCAL_LLM_TOKENS = 8192
CONDENSE_BUDGET_RATIO = 0.9
CONDENSE_CHUNK_RATIO = 0.25
CONDENSE_FALLBACK_TOKENS = 500

# ── Performance Guardrail ────────────────────────────────

INTERACTIVE_TARGET_MS = 10_000
ABSOLUTE_MAX_MS = 60_000

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
