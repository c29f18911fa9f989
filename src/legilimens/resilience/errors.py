"""Error classification for fetch retry decisions.

Classifies exceptions by category to enable:
- Retry only where it can help (transient/server/timeout)
- Informative failure strings in FetchResult.error
- Structured logging of which failures were transient vs permanent
"""

from __future__ import annotations

import asyncio
from enum import Enum

import httpx


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors, retryable
    SERVER = "server"  # 500, 502, 503, retryable
    TIMEOUT = "timeout"  # deadline exceeded, retryable with backoff
    CLIENT = "client"  # 400, 401, 403, 404, do NOT retry
    UNKNOWN = "unknown"  # unclassified, do NOT retry


def status_code_of(error: BaseException) -> int | None:
    """Return the HTTP status code carried by an exception, if any.

    Looks at ``error.status_code`` (litellm, openai) and then at
    ``error.response.status_code`` (httpx.HTTPStatusError).
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(error, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks structured attributes first (status codes, exception
    types), falls back to string matching for untyped exceptions.
    """
    # 1. Structured status code
    status_code = status_code_of(error)
    if status_code is not None:
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    # 2. Timeout and transport types
    if isinstance(
        error, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)
    ):
        return ErrorClass.TIMEOUT
    if isinstance(error, httpx.TransportError):
        return ErrorClass.TRANSIENT

    # 3. Fall back to string matching
    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "econnrefused" in msg or "connection" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: BaseException) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE
