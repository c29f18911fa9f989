"""Tests for identifier normalization and display names."""

from __future__ import annotations

from legilimens.constants import SourceType
from legilimens.detection import normalize_identifier, to_display_name


def test_empty_input_yields_sentinels() -> None:
    result = normalize_identifier("")
    assert result.normalized == "unknown-dependency"
    assert result.display_name == "Unknown Dependency"
    assert result.source_type == SourceType.UNKNOWN


def test_whitespace_input_yields_sentinels() -> None:
    result = normalize_identifier("  \t ")
    assert result.raw == "  \t "
    assert result.normalized == "unknown-dependency"


def test_non_string_input_never_raises() -> None:
    result = normalize_identifier(None)  # type: ignore[arg-type]
    assert result.raw == ""
    assert result.source_type == SourceType.UNKNOWN


def test_github_url_normalized() -> None:
    result = normalize_identifier(" https://github.com/facebook/react ")
    assert result.normalized == "facebook/react"
    assert result.source_type == SourceType.GITHUB
    assert result.display_name == "Facebook React"


def test_raw_is_preserved() -> None:
    result = normalize_identifier("Express")
    assert result.raw == "Express"
    assert result.normalized == "express"


def test_display_name_folds_separators() -> None:
    assert to_display_name("my-cool_lib/core") == "My Cool Lib Core"


def test_display_name_keeps_inner_case() -> None:
    assert to_display_name("facebook/reactDOM") == "Facebook ReactDOM"


def test_display_name_of_separators_only() -> None:
    assert to_display_name("--//__") == "Unknown Dependency"
