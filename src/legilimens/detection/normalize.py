"""Turn raw user input into a NormalizedIdentifier."""

from __future__ import annotations

import re
from dataclasses import dataclass

from legilimens.constants import (
    UNKNOWN_DISPLAY_NAME,
    UNKNOWN_IDENTIFIER,
    SourceType,
)
from legilimens.detection.source_detector import detect_source_type

_SEPARATORS = re.compile(r"[-_/]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedIdentifier:
    raw: str
    normalized: str
    source_type: SourceType
    display_name: str


def to_display_name(value: str) -> str:
    """Fold separators into spaces and title-case each segment.

    Only the first character of a segment is upper-cased; the rest
    is kept as written (``facebook/reactDOM`` → ``Facebook ReactDOM``).
    """
    folded = _WHITESPACE.sub(" ", _SEPARATORS.sub(" ", value)).strip()
    segments = [s[0].upper() + s[1:] for s in folded.split(" ") if s]
    return " ".join(segments) or UNKNOWN_DISPLAY_NAME


def normalize_identifier(value: str) -> NormalizedIdentifier:
    """Classify and canonicalize user input. Never raises."""
    raw = value if isinstance(value, str) else ""
    trimmed = raw.strip()

    if not trimmed:
        return NormalizedIdentifier(
            raw=raw,
            normalized=UNKNOWN_IDENTIFIER,
            source_type=SourceType.UNKNOWN,
            display_name=UNKNOWN_DISPLAY_NAME,
        )

    detection = detect_source_type(trimmed)
    normalized = detection.normalized_identifier.strip() or trimmed

    return NormalizedIdentifier(
        raw=raw,
        normalized=normalized,
        source_type=detection.source_type,
        display_name=to_display_name(normalized),
    )
