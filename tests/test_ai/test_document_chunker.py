"""Tests for token estimation, chunking and condensation."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from legilimens.ai.document_chunker import (
    chunk_text,
    condense_documentation,
    estimate_tokens,
)
from legilimens.config import RuntimeConfig


class TestEstimateTokens:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0), ("abc", 0), ("abcd", 1), ("abcdefg", 1), ("x" * 4001, 1000)],
    )
    def test_floor_of_quarter_length(self, text: str, expected: int) -> None:
        assert estimate_tokens(text) == expected

    def test_none_is_zero(self) -> None:
        assert estimate_tokens(None) == 0


class TestChunkText:
    def test_empty(self) -> None:
        assert chunk_text("") == []

    def test_short_text_single_chunk(self) -> None:
        text = "short documentation"
        assert chunk_text(text) == [text]

    def test_exactly_one_budget(self) -> None:
        text = "a" * 8000
        assert chunk_text(text) == [text]

    def test_long_text_respects_budget(self) -> None:
        text = "".join(chr(97 + i % 26) for i in range(1000))
        chunks = chunk_text(text, chunk_size_tokens=50, overlap_tokens=10)
        assert len(chunks) > 1
        assert all(len(c) <= 200 for c in chunks)

    def test_adjacent_chunks_overlap(self) -> None:
        text = "".join(chr(97 + i % 26) for i in range(1000))
        chunks = chunk_text(text, chunk_size_tokens=50, overlap_tokens=10)
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt[:40] == prev[-40:]

    def test_reconstructs_original_ignoring_overlap(self) -> None:
        text = "".join(chr(97 + i % 26) for i in range(777))
        chunks = chunk_text(text, chunk_size_tokens=25, overlap_tokens=5)
        rebuilt = chunks[0] + "".join(c[20:] for c in chunks[1:])
        assert rebuilt == text

    def test_zero_overlap(self) -> None:
        chunks = chunk_text("x" * 100, chunk_size_tokens=10, overlap_tokens=0)
        assert chunks == ["x" * 40, "x" * 40, "x" * 20]

    @pytest.mark.parametrize(
        ("size", "overlap"), [(0, 0), (-1, 0), (10, 10), (10, -1)]
    )
    def test_invalid_budgets_rejected(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            chunk_text("text", chunk_size_tokens=size, overlap_tokens=overlap)


class TestCondenseDocumentation:
    async def test_empty_unchanged(self, runtime_config: RuntimeConfig) -> None:
        summarizer = AsyncMock()
        assert await condense_documentation(
            "", "React", "library", runtime_config, summarizer=summarizer
        ) == ""
        summarizer.assert_not_awaited()

    async def test_small_document_unchanged(
        self, runtime_config: RuntimeConfig
    ) -> None:
        doc = "# React\n\nA library for building UIs."
        summarizer = AsyncMock()
        result = await condense_documentation(
            doc, "React", "library", runtime_config, summarizer=summarizer
        )
        assert result == doc
        summarizer.assert_not_awaited()

    async def test_large_document_without_llm_unchanged(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        doc = "x" * 4000
        config = make_runtime_config(local_llm_tokens=100)
        assert await condense_documentation(doc, "X", "tool", config) == doc

    async def test_large_document_summarized_per_chunk(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        # 100-token model: budget 90 tokens, chunks of 25 tokens
        config = make_runtime_config(local_llm_tokens=100)
        doc = "y" * 1000
        summarizer = AsyncMock(return_value=json.dumps({"summary": "short"}))

        result = await condense_documentation(
            doc, "Lodash", "library", config, summarizer=summarizer
        )

        assert summarizer.await_count > 1
        assert result.startswith("short")
        assert len(result) <= 90 * 4
        prompt = summarizer.await_args_list[0].args[0]
        assert "Lodash (library)" in prompt

    async def test_summarizer_failure_falls_back_to_chunk_text(
        self,
        make_runtime_config: Callable[..., RuntimeConfig],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        config = make_runtime_config(local_llm_tokens=100)
        doc = "z" * 1000
        summarizer = AsyncMock(side_effect=RuntimeError("model offline"))

        with caplog.at_level(logging.WARNING, logger="legilimens.ai.document_chunker"):
            result = await condense_documentation(
                doc, "Zed", "tool", config, summarizer=summarizer
            )

        assert result
        assert set(result) <= {"z", "\n"}
        assert len(result) <= 90 * 4
        assert "event=condense_chunk_fallback" in caplog.text

    async def test_malformed_reply_falls_back(
        self, make_runtime_config: Callable[..., RuntimeConfig]
    ) -> None:
        config = make_runtime_config(local_llm_tokens=100)
        summarizer = AsyncMock(return_value="I could not summarize that.")
        result = await condense_documentation(
            "q" * 1000, "Q", "api", config, summarizer=summarizer
        )
        assert result.startswith("q")
