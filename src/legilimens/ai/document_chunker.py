"""Token budgeting for documentation bound for an AI summarization step."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from legilimens.ai.json_output import extract_first_json, safe_parse_json
from legilimens.config import RuntimeConfig
from legilimens.constants import (
    CHARS_PER_TOKEN_ESTIMATE,
    CONDENSE_BUDGET_RATIO,
    CONDENSE_CHUNK_RATIO,
    CONDENSE_FALLBACK_TOKENS,
    DEFAULT_CHUNK_TOKENS,
    DEFAULT_OVERLAP_TOKENS,
)

logger = logging.getLogger(__name__)

type Summarizer = Callable[[str], Awaitable[str]]


def estimate_tokens(text: str | None) -> int:
    """Rough token estimate using chars-per-token ratio.

    Approximate by design: ``len(text) // 4``. It will not match any
    real tokenizer exactly.
    """
    return len(text or "") // CHARS_PER_TOKEN_ESTIMATE


def chunk_text(
    text: str,
    chunk_size_tokens: int = DEFAULT_CHUNK_TOKENS,
    overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
) -> list[str]:
    """Split ``text`` into overlapping character windows.

    Windows hold at most ``chunk_size_tokens * 4`` characters; each
    window after the first starts ``overlap_tokens * 4`` characters
    before the end of the previous one.
    """
    if chunk_size_tokens <= 0:
        raise ValueError("chunk_size_tokens must be positive")
    if overlap_tokens < 0 or overlap_tokens >= chunk_size_tokens:
        raise ValueError(
            "overlap_tokens must be >= 0 and smaller than chunk_size_tokens"
        )
    if not text:
        return []

    chunk_chars = chunk_size_tokens * CHARS_PER_TOKEN_ESTIMATE
    overlap_chars = overlap_tokens * CHARS_PER_TOKEN_ESTIMATE

    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = min(len(text), start + chunk_chars)
        chunks.append(text[start:end])
        if end >= len(text):
            break
        start = end - overlap_chars
    return chunks


def _summary_prompt(chunk: str, subject_name: str, subject_kind: str) -> str:
    return "\n".join([
        "Summarize the following documentation chunk for later aggregation.",
        'Respond with a single JSON object: { "summary": string }',
        f"Dependency: {subject_name} ({subject_kind})",
        "",
        chunk,
    ])


async def _summarize_chunk(
    summarizer: Summarizer,
    chunk: str,
    subject_name: str,
    subject_kind: str,
    timeout_s: float,
) -> str:
    fallback = chunk[: CONDENSE_FALLBACK_TOKENS * CHARS_PER_TOKEN_ESTIMATE]
    try:
        reply = await asyncio.wait_for(
            summarizer(_summary_prompt(chunk, subject_name, subject_kind)),
            timeout=timeout_s,
        )
    except Exception:
        logger.warning(
            "event=condense_chunk_fallback subject=%s reason=summarizer_error",
            subject_name,
            exc_info=True,
        )
        return fallback

    parsed = safe_parse_json(extract_first_json(reply))
    summary = parsed.get("summary") if isinstance(parsed, dict) else None
    if isinstance(summary, str) and summary.strip():
        return summary.strip()

    logger.warning(
        "event=condense_chunk_fallback subject=%s reason=malformed_reply",
        subject_name,
    )
    return fallback


async def condense_documentation(
    documentation: str,
    subject_name: str,
    subject_kind: str,
    runtime_config: RuntimeConfig,
    *,
    summarizer: Summarizer | None = None,
) -> str:
    """Shrink ``documentation`` to the local model's token budget.

    Returned unchanged when empty, when it already fits the budget
    (90% of the model's context), or when no summarizer is available.
    Otherwise each chunk is summarized in turn, falling back to its
    leading text when the summarizer fails, and the joined result is
    capped at the budget.
    """
    if not documentation:
        return documentation

    model_tokens = runtime_config.local_llm.tokens
    budget = math.floor(model_tokens * CONDENSE_BUDGET_RATIO)
    total = estimate_tokens(documentation)
    if total <= budget:
        return documentation

    if summarizer is None:
        if not runtime_config.local_llm_available:
            return documentation
        from legilimens.ai.llm_call import make_litellm_summarizer

        summarizer = make_litellm_summarizer(runtime_config)

    chunk_tokens = max(
        1,
        min(DEFAULT_CHUNK_TOKENS, math.floor(model_tokens * CONDENSE_CHUNK_RATIO)),
    )
    overlap = min(DEFAULT_OVERLAP_TOKENS, chunk_tokens // 10)
    chunks = chunk_text(documentation, chunk_tokens, overlap)
    logger.info(
        "event=condense_start subject=%s tokens=%d budget=%d chunks=%d",
        subject_name,
        total,
        budget,
        len(chunks),
    )

    timeout_s = runtime_config.local_llm.timeout_ms / 1000
    summaries = [
        await _summarize_chunk(
            summarizer, chunk, subject_name, subject_kind, timeout_s
        )
        for chunk in chunks
    ]

    aggregated = "\n\n".join(summaries)
    return aggregated[: budget * CHARS_PER_TOKEN_ESTIMATE]
