"""Pattern matching for dependency sources.

Identifies GitHub repositories, npm packages and URLs, normalizes
GitHub identifiers to ``owner/repo`` and derives DeepWiki URLs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from legilimens.constants import (
    DEEPWIKI_BASE_URL,
    ConfidenceLevel,
    SourceType,
)

_GITHUB_PATTERNS = (
    # github.com/owner/repo, optional protocol, www and trailing path
    re.compile(
        r"^(?:https?://)?(?:www\.)?github\.com/([^/]+/[^/]+?)(?:\.git)?(?:/.*)?$",
        re.IGNORECASE,
    ),
    # owner/repo, optional .git and trailing slash
    re.compile(r"^([^/]+/[^/]+?)(?:\.git)?/?$"),
)

_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

_NPM_SCOPED = re.compile(r"^@[a-z0-9-]+/[a-z0-9-]+$")
_NPM_SIMPLE = re.compile(r"^[a-z][a-z0-9-]*[a-z0-9]$")

# Shapes that look like package names but are almost never real ones
_NON_PACKAGE_PATTERNS = (
    re.compile(r"^unknown-"),
    re.compile(r"^test-"),
    re.compile(r"\d{4,}$"),
    re.compile(r"format-\d+$"),
)

# Unambiguous natural-language names (exact, case-insensitive)
_KNOWN_NAMES = frozenset({
    "react",
    "vue",
    "angular",
    "svelte",
    "express",
    "typescript",
    "eslint",
    "prettier",
    "jest",
    "mocha",
    "webpack",
    "rollup",
    "vite",
})


@dataclass(frozen=True)
class DetectionResult:
    source_type: SourceType
    normalized_identifier: str
    confidence: ConfidenceLevel


def _map_natural_name(value: str) -> str:
    lowered = value.lower()
    return lowered if lowered in _KNOWN_NAMES else value


def detect_source_type(value: str) -> DetectionResult:
    """Detect the source type of a dependency identifier.

    Scoped npm names are tested before GitHub because they also
    contain a slash.
    """
    trimmed = value.strip()
    if not trimmed:
        return DetectionResult(SourceType.UNKNOWN, value, ConfidenceLevel.LOW)

    candidate = _map_natural_name(trimmed)
    mapped = candidate != trimmed
    matched_confidence = (
        ConfidenceLevel.MEDIUM if mapped else ConfidenceLevel.HIGH
    )

    if candidate.startswith("@") and _NPM_SCOPED.match(candidate):
        return DetectionResult(SourceType.NPM, candidate, matched_confidence)

    # Full URLs to other hosts must not fall into the bare owner/repo shape
    is_url = bool(_URL_PATTERN.match(candidate))
    is_github_host = "github.com" in candidate.lower()
    if not is_url or is_github_host:
        for pattern in _GITHUB_PATTERNS:
            match = pattern.match(candidate)
            if match:
                owner_repo = match.group(1).removesuffix(".git").rstrip("/")
                return DetectionResult(
                    SourceType.GITHUB, owner_repo, matched_confidence
                )

    if is_url and not is_github_host:
        return DetectionResult(SourceType.URL, candidate, matched_confidence)

    if "/" not in candidate:
        lowered = candidate.lower()
        if any(p.search(lowered) for p in _NON_PACKAGE_PATTERNS):
            return DetectionResult(
                SourceType.UNKNOWN, trimmed, ConfidenceLevel.LOW
            )
        if _NPM_SIMPLE.match(lowered):
            return DetectionResult(
                SourceType.NPM, candidate, ConfidenceLevel.MEDIUM
            )

    return DetectionResult(SourceType.UNKNOWN, trimmed, ConfidenceLevel.LOW)


def derive_deepwiki_url(value: str) -> str | None:
    """DeepWiki URL for a GitHub identifier, None for other sources."""
    detection = detect_source_type(value)
    if detection.source_type is SourceType.GITHUB:
        return f"{DEEPWIKI_BASE_URL}/{detection.normalized_identifier}"
    return None


def is_github_identifier(value: str) -> bool:
    return detect_source_type(value).source_type is SourceType.GITHUB
