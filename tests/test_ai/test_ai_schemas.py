"""Tests for pydantic schemas of AI replies."""

from __future__ import annotations

from legilimens.ai.schemas import (
    DiscoveryResult,
    ToolCall,
    schema_prompt_hint,
    validate_with_schema,
)
from legilimens.constants import ConfidenceLevel, SourceType, ToolName


def test_discovery_result_from_camel_case() -> None:
    result = validate_with_schema(
        DiscoveryResult,
        {
            "canonicalIdentifier": "facebook/react",
            "repositoryUrl": "https://github.com/facebook/react",
            "sourceType": "github",
            "confidence": "high",
        },
    )
    assert result.success
    assert result.data is not None
    assert result.data.canonical_identifier == "facebook/react"
    assert result.data.source_type == SourceType.GITHUB
    assert result.data.confidence == ConfidenceLevel.HIGH
    assert result.data.dependency_type is None


def test_validation_failure_is_a_value() -> None:
    result = validate_with_schema(DiscoveryResult, {"sourceType": "github"})
    assert not result.success
    assert result.data is None
    assert result.error is not None
    assert result.error.startswith("Schema validation failed:")
    assert "canonicalIdentifier" in result.error


def test_tool_call_parses_tool_name() -> None:
    call = ToolCall.model_validate({"tool": "ref", "args": {"identifier": "x"}})
    assert call.tool is ToolName.REF


def test_prompt_hints() -> None:
    assert '"canonicalIdentifier"' in schema_prompt_hint(DiscoveryResult)
    assert '"tool"' in schema_prompt_hint(ToolCall)
