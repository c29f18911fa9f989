"""Pipeline timing and the interactive-use guardrail."""

from legilimens.telemetry.performance import (
    GuardrailExceededError,
    PerformanceMetrics,
    PerformanceTracker,
    create_performance_tracker,
    summarize_performance,
)

__all__ = [
    "GuardrailExceededError",
    "PerformanceMetrics",
    "PerformanceTracker",
    "create_performance_tracker",
    "summarize_performance",
]
