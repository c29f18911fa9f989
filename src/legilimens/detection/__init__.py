"""Source-type detection and identifier normalization."""

from legilimens.detection.detector import detect_dependency_type
from legilimens.detection.normalize import (
    NormalizedIdentifier,
    normalize_identifier,
    to_display_name,
)
from legilimens.detection.source_detector import (
    DetectionResult,
    derive_deepwiki_url,
    detect_source_type,
    is_github_identifier,
)

__all__ = [
    "DetectionResult",
    "NormalizedIdentifier",
    "derive_deepwiki_url",
    "detect_dependency_type",
    "detect_source_type",
    "is_github_identifier",
    "normalize_identifier",
    "to_display_name",
]
