"""Shared timeout + retry loop for all fetcher adapters."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from legilimens.constants import (
    ERROR_TRUNCATION_CHARS,
    RATE_LIMIT_BASE_SECONDS,
    RETRY_BACKOFF_BASE_SECONDS,
    RETRY_BACKOFF_MAX_SECONDS,
)
from legilimens.fetchers.schemas import (
    AttemptState,
    FetchAttempt,
    FetcherConfig,
    FetchMetadata,
    FetchResult,
)
from legilimens.resilience.errors import (
    ErrorClass,
    classify_error,
    is_retryable,
    status_code_of,
)

logger = logging.getLogger(__name__)

SendFn = Callable[[httpx.AsyncClient], Awaitable[httpx.Response]]
ExtractFn = Callable[[Any], str | None]

# Errors that end a fetch as a FetchResult failure instead of propagating
_FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL, TimeoutError)


class _MissingContent(Exception):
    """Response was 2xx but lacked the expected content field."""


def _retry_after_seconds(error: BaseException) -> float | None:
    response = getattr(error, "response", None)
    if response is None:
        return None
    header = response.headers.get("retry-after")
    if header is None:
        return None
    try:
        return max(0.0, float(header))
    except ValueError:
        return None


def _retry_wait(retry_state: RetryCallState) -> float:
    """Retry-After for 429s when given, exponential backoff otherwise."""
    n = retry_state.attempt_number - 1
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    if error is not None and status_code_of(error) == 429:
        delay = _retry_after_seconds(error)
        if delay is not None:
            return delay
        return RATE_LIMIT_BASE_SECONDS * 2**n
    return min(RETRY_BACKOFF_BASE_SECONDS * 2**n, RETRY_BACKOFF_MAX_SECONDS)


def _should_retry(error: BaseException) -> bool:
    return not isinstance(error, _MissingContent) and is_retryable(error)


def _describe(error: BaseException) -> str:
    if isinstance(error, TimeoutError):
        return "timed out"
    text = str(error) or type(error).__name__
    return text[:ERROR_TRUNCATION_CHARS]


def _read_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def fetch_with_retry(
    source: str,
    send: SendFn,
    extract: ExtractFn,
    config: FetcherConfig,
    *,
    missing_field: str,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Run ``send`` under the timeout/retry policy of ``config``.

    * Every attempt is bounded by ``config.timeout_ms``.
    * Timeouts, transport errors, 429 and 5xx are retried up to
      ``config.max_retries`` extra times; other failures stop at once.
    * A 2xx response without content is a final, non-retried failure.
    * Each attempt is recorded in ``metadata.history`` whatever its outcome.
    """
    started = time.perf_counter()
    history: list[FetchAttempt] = []

    def _metadata() -> FetchMetadata:
        return FetchMetadata(
            source=source,
            duration_ms=round((time.perf_counter() - started) * 1000),
            history=tuple(history),
        )

    async def _attempt(http: httpx.AsyncClient, number: int) -> str:
        pending = FetchAttempt(number=number, source=source)
        history.append(pending)
        attempt_started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                send(http), timeout=config.timeout_ms / 1000
            )
            response.raise_for_status()
        except _FETCH_ERRORS as exc:
            state = (
                AttemptState.TIMED_OUT
                if classify_error(exc) is ErrorClass.TIMEOUT
                else AttemptState.FAILED
            )
            history[-1] = pending.finish(state, attempt_started, _describe(exc))
            logger.debug(
                "event=fetch_attempt_failed source=%s attempt=%d state=%s error=%s",
                source,
                number,
                state,
                _describe(exc),
            )
            raise

        content = extract(_read_json(response))
        if not content:
            error = (
                f"{source} returned status {response.status_code} "
                f"without {missing_field}"
            )
            history[-1] = pending.finish(
                AttemptState.FAILED, attempt_started, error
            )
            raise _MissingContent(error)

        history[-1] = pending.finish(AttemptState.SUCCEEDED, attempt_started)
        return content

    http = client if client is not None else httpx.AsyncClient(
        timeout=config.timeout_ms / 1000
    )
    content = ""
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(config.max_retries + 1),
            wait=_retry_wait,
            retry=retry_if_exception(_should_retry),
            reraise=True,
        ):
            with attempt:
                content = await _attempt(
                    http, attempt.retry_state.attempt_number
                )
    except _MissingContent as exc:
        logger.warning("event=fetch_empty source=%s error=%s", source, exc)
        return FetchResult.fail(str(exc), _metadata())
    except _FETCH_ERRORS as exc:
        logger.warning(
            "event=fetch_exhausted source=%s attempts=%d error=%s",
            source,
            len(history),
            _describe(exc),
        )
        return FetchResult.fail(
            f"{source} fetch failed: {_describe(exc)}", _metadata()
        )
    finally:
        if client is None:
            await http.aclose()

    metadata = _metadata()
    logger.info(
        "event=fetch_succeeded source=%s attempts=%d duration_ms=%d",
        source,
        len(history),
        metadata.duration_ms,
    )
    return FetchResult.ok(content, metadata)
