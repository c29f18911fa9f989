"""Tests for the quick dependency-type classifier."""

from __future__ import annotations

import pytest

from legilimens.constants import SourceType
from legilimens.detection import detect_dependency_type


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("facebook/react", SourceType.GITHUB),
        ("https://github.com/vercel/next.js", SourceType.GITHUB),
        ("https://example.com/x", SourceType.URL),
        ("http://docs.example.org", SourceType.URL),
        ("@scope/pkg", SourceType.NPM),
        ("lodash", SourceType.NPM),
        ("lodash.debounce", SourceType.NPM),
        ("???", SourceType.UNKNOWN),
        ("Not A Package", SourceType.UNKNOWN),
    ],
)
def test_detect_dependency_type(identifier: str, expected: SourceType) -> None:
    assert detect_dependency_type(identifier) == expected


def test_github_marker_wins_over_url_prefix() -> None:
    """Rule 1 runs before rule 2, so github.com URLs are github."""
    assert detect_dependency_type("https://github.com/a/b") == SourceType.GITHUB


def test_owner_repo_shape_wins_over_npm() -> None:
    assert detect_dependency_type("my-org/my_repo") == SourceType.GITHUB


def test_empty_identifier_is_unknown() -> None:
    assert detect_dependency_type("") == SourceType.UNKNOWN
