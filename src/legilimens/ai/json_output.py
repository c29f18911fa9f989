"""Pull JSON objects out of free-form AI output and validate their shape.

Extraction strategies, in order:

1. a fenced markdown block (```json or ```) whose body is an object
2. the first balanced ``{...}`` span that parses as an object
3. the whole trimmed text, when it is an object

Brace matching in (2) counts ``{`` and ``}`` without tracking string
literals, so a brace inside a quoted value can desynchronize it. A span
that then fails to parse is skipped and the scan restarts at the next
``{``; strategy (3) still recovers single-object replies.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, TypeGuard

from legilimens.constants import (
    ConfidenceLevel,
    DependencyType,
    SourceType,
    ToolName,
)

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

_SOURCE_TYPES = frozenset(s.value for s in SourceType)
_CONFIDENCE_LEVELS = frozenset(c.value for c in ConfidenceLevel)
_DEPENDENCY_TYPES = frozenset(d.value for d in DependencyType)
_TOOL_NAMES = frozenset(t.value for t in ToolName)


def safe_parse_json(text: str | None) -> Any | None:
    """``json.loads`` that returns None instead of raising."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _is_object(candidate: str) -> bool:
    return isinstance(safe_parse_json(candidate), dict)


def _balanced_span(text: str, start: int) -> int | None:
    """Index just past the brace that closes ``text[start]``, or None."""
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def extract_first_json(text: str | None) -> str | None:
    """Return the exact substring of the first JSON object in ``text``."""
    if not text:
        return None

    fenced = _CODE_BLOCK.search(text)
    if fenced:
        body = fenced.group(1).strip()
        if _is_object(body):
            return body

    start = text.find("{")
    while start != -1:
        end = _balanced_span(text, start)
        if end is None:
            break
        candidate = text[start:end]
        if _is_object(candidate):
            return candidate
        start = text.find("{", start + 1)

    trimmed = text.strip()
    if trimmed.startswith("{") and trimmed.endswith("}") and _is_object(trimmed):
        return trimmed

    logger.debug("event=json_extract_failed response_len=%d", len(text))
    return None


def _is_member(value: object, allowed: frozenset[str]) -> bool:
    return isinstance(value, str) and value in allowed


def validate_discovery_json(obj: object) -> TypeGuard[dict[str, Any]]:
    """True iff ``obj`` has the discovery shape.

    ``canonicalIdentifier`` and ``repositoryUrl`` must be present (null
    allowed); ``dependencyType`` is optional but must be valid if given.
    """
    if not isinstance(obj, dict):
        return False
    if not _is_member(obj.get("sourceType"), _SOURCE_TYPES):
        return False
    if not _is_member(obj.get("confidence"), _CONFIDENCE_LEVELS):
        return False
    dependency_type = obj.get("dependencyType")
    if dependency_type and not _is_member(dependency_type, _DEPENDENCY_TYPES):
        return False
    return "canonicalIdentifier" in obj and "repositoryUrl" in obj


def validate_tool_call_json(obj: object) -> TypeGuard[dict[str, Any]]:
    """True iff ``obj`` names a known tool and carries an ``args`` object."""
    if not isinstance(obj, dict):
        return False
    if not _is_member(obj.get("tool"), _TOOL_NAMES):
        return False
    return isinstance(obj.get("args"), dict)
