"""Data shapes for documentation fetches."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


@dataclass(frozen=True)
class FetcherConfig:
    """Per-call fetch policy. ``max_retries`` counts EXTRA attempts."""

    timeout_ms: int
    max_retries: int
    api_key: str | None = None


class AttemptState(StrEnum):
    """Lifecycle of one fetch attempt.

    PENDING → SUCCEEDED | TIMED_OUT | FAILED. A TIMED_OUT or FAILED
    attempt is followed by another PENDING one while retries remain.
    """

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchAttempt:
    number: int  # 1-indexed
    source: str
    state: AttemptState = AttemptState.PENDING
    error: str | None = None
    duration_ms: int = 0

    @property
    def label(self) -> str:
        return f"{self.source} (attempt {self.number})"

    def finish(
        self,
        state: AttemptState,
        started: float,
        error: str | None = None,
    ) -> FetchAttempt:
        """Return the settled copy of a pending attempt."""
        return replace(
            self,
            state=state,
            error=error,
            duration_ms=round((time.perf_counter() - started) * 1000),
        )


class FetchMetadata(BaseModel):
    """Diagnostics for one adapter invocation, retries included."""

    source: str
    duration_ms: int
    history: tuple[FetchAttempt, ...] = ()
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def attempts(self) -> list[str]:
        """One descriptor per attempt, in chronological order."""
        return [a.label for a in self.history]


class FetchResult(BaseModel):
    """Uniform adapter result. Failure is a value, never an exception."""

    success: bool
    content: str | None = None
    metadata: FetchMetadata | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_outcome(self) -> FetchResult:
        if self.success:
            if not self.content:
                raise ValueError("successful fetch requires non-empty content")
            if self.metadata is None:
                raise ValueError("successful fetch requires metadata")
        elif not self.error:
            raise ValueError("failed fetch requires an error message")
        return self

    @classmethod
    def ok(cls, content: str, metadata: FetchMetadata) -> FetchResult:
        return cls(success=True, content=content, metadata=metadata)

    @classmethod
    def fail(
        cls, error: str, metadata: FetchMetadata | None = None
    ) -> FetchResult:
        return cls(success=False, error=error, metadata=metadata)

    @property
    def attempts(self) -> list[str]:
        return self.metadata.attempts if self.metadata else []


def is_fetch_success(result: FetchResult) -> bool:
    """True when the result carries usable content."""
    return result.success and bool(result.content) and result.metadata is not None
