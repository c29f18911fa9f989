"""Summarization collaborator: litellm call with circuit breaker and retry."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import litellm
from circuitbreaker import (  # pyright: ignore[reportUnknownVariableType]
    CircuitBreaker,
    CircuitBreakerError,
)
from litellm.exceptions import RateLimitError as LitellmRateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from legilimens.config import RuntimeConfig
from legilimens.constants import (
    CB_LLM_FAILURE_THRESHOLD,
    CB_LLM_RECOVERY_TIMEOUT,
    LLM_MAX_OUTPUT_TOKENS,
    LLM_SUMMARY_TEMPERATURE,
    RETRY_INITIAL_WAIT,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_WAIT,
)

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion

SUMMARY_SYSTEM_PROMPT = (
    "You condense software documentation for later aggregation. "
    "Reply with a single JSON object and nothing else."
)


@dataclass(frozen=True)
class LLMCallResult:
    content: str
    model: str
    input_tokens: int
    output_tokens: int


def _is_non_rate_limit_error(
    thrown_type: type, thrown_value: BaseException
) -> bool:
    """Rate limits are backpressure, not outages; don't count them."""
    return not issubclass(thrown_type, LitellmRateLimitError)


# One breaker per model so a dead local model can't block another
_breaker_registry: dict[str, CircuitBreaker] = {}  # pyright: ignore[reportUnknownVariableType]


def _get_breaker(model: str) -> CircuitBreaker:  # pyright: ignore[reportUnknownParameterType]
    if model not in _breaker_registry:
        _breaker_registry[model] = CircuitBreaker(  # pyright: ignore[reportUnknownMemberType]
            failure_threshold=CB_LLM_FAILURE_THRESHOLD,
            recovery_timeout=CB_LLM_RECOVERY_TIMEOUT,
            expected_exception=_is_non_rate_limit_error,
            name=f"llm_{model}",
        )
    return _breaker_registry[model]


@retry(
    stop=stop_after_attempt(RETRY_MAX_ATTEMPTS),
    wait=wait_exponential_jitter(
        initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
    ),
    retry=retry_if_exception_type(LitellmRateLimitError),
    reraise=True,
)
async def guarded_llm_call(
    model: str,
    messages: list[dict[str, str]],
    timeout: float,
    *,
    json_mode: bool = True,
) -> LLMCallResult:
    """Per-model circuit-breaker-protected completion with rate-limit retry.

    - The breaker opens after 5 consecutive non-rate-limit failures and
      recovers after 30s.
    - Rate-limit errors (429) are retried with jittered exponential
      backoff.
    """
    breaker = _get_breaker(model)
    if breaker.opened:  # pyright: ignore[reportUnknownMemberType]
        logger.warning("event=circuit_open model=%s", model)
        raise CircuitBreakerError(breaker)  # pyright: ignore[reportUnknownArgumentType]
    with breaker:  # pyright: ignore[reportUnknownMemberType]
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "timeout": timeout,
            "max_tokens": LLM_MAX_OUTPUT_TOKENS,
            "temperature": LLM_SUMMARY_TEMPERATURE,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response: Any = await _acompletion(**kwargs)

    usage: Any = getattr(response, "usage", None)
    return LLMCallResult(
        content=str(response.choices[0].message.content or ""),
        model=model,
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
    )


def make_litellm_summarizer(
    runtime_config: RuntimeConfig,
) -> Callable[[str], Awaitable[str]]:
    """Summarizer backed by the configured local model."""
    model = runtime_config.local_llm.model
    if not model:
        raise ValueError("local LLM model is not configured")
    timeout = runtime_config.local_llm.timeout_ms / 1000

    async def _summarize(prompt: str) -> str:
        result = await guarded_llm_call(
            model,
            [
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            timeout,
        )
        return result.content

    return _summarize
