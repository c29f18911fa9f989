"""Wall-clock guardrail for one pipeline run.

The tracker never preempts work; it only checks elapsed time when the
run calls ``finish()`` and refuses to report success past the ceiling.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from legilimens.constants import ABSOLUTE_MAX_MS, INTERACTIVE_TARGET_MS

logger = logging.getLogger(__name__)


class GuardrailExceededError(RuntimeError):
    """The run went past the absolute duration ceiling."""

    def __init__(self, duration_ms: int, ceiling_ms: int = ABSOLUTE_MAX_MS) -> None:
        super().__init__(
            f"Generation exceeded {ceiling_ms // 1000}s guardrail "
            f"(ran for {duration_ms}ms)."
        )
        self.duration_ms = duration_ms
        self.ceiling_ms = ceiling_ms


@dataclass(frozen=True)
class PerformanceMetrics:
    duration_ms: int
    exceeded_interactive_target: bool
    exceeded_absolute_ceiling: bool
    minimal_mode_requested: bool
    minimal_mode_recommended: bool


class PerformanceTracker:
    """Started at construction, finalized once by :meth:`finish`."""

    def __init__(
        self,
        minimal_mode_requested: bool = False,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._clock = clock or time.perf_counter
        self._start = self._clock()
        self._minimal_mode_requested = minimal_mode_requested
        self._metrics: PerformanceMetrics | None = None

    def elapsed_ms(self) -> int:
        return round((self._clock() - self._start) * 1000)

    def finish(self) -> PerformanceMetrics:
        """Finalize the run.

        Raises:
            GuardrailExceededError: elapsed time is above ABSOLUTE_MAX_MS.
        """
        if self._metrics is not None:
            return self._metrics

        duration_ms = self.elapsed_ms()
        exceeded_interactive = duration_ms > INTERACTIVE_TARGET_MS
        if duration_ms > ABSOLUTE_MAX_MS:
            logger.error(
                "event=guardrail_exceeded duration_ms=%d ceiling_ms=%d",
                duration_ms,
                ABSOLUTE_MAX_MS,
            )
            raise GuardrailExceededError(duration_ms)

        self._metrics = PerformanceMetrics(
            duration_ms=duration_ms,
            exceeded_interactive_target=exceeded_interactive,
            exceeded_absolute_ceiling=False,
            minimal_mode_requested=self._minimal_mode_requested,
            minimal_mode_recommended=(
                self._minimal_mode_requested or exceeded_interactive
            ),
        )
        return self._metrics


def create_performance_tracker(
    minimal_mode_requested: bool = False,
    *,
    clock: Callable[[], float] | None = None,
) -> PerformanceTracker:
    return PerformanceTracker(minimal_mode_requested, clock=clock)


def summarize_performance(metrics: PerformanceMetrics) -> str:
    """Two-sentence summary for the terminal layer."""
    target_s = INTERACTIVE_TARGET_MS // 1000
    if metrics.exceeded_interactive_target:
        base = (
            f"Exceeded interactive comfort target ({target_s}s) "
            f"with {metrics.duration_ms}ms runtime."
        )
    else:
        base = f"Completed within interactive target in {metrics.duration_ms}ms."

    if metrics.minimal_mode_recommended:
        hint = "Enable minimal mode in constrained terminals or follow-up runs."
    else:
        hint = "Minimal mode optional for future runs."
    return f"{base} {hint}"
