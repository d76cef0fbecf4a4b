"""
Prometheus Metrics for the Sherlock provider pipeline.

Provides metrics collection for provider attempts, classified failures,
degraded-mode fallbacks, and upstream call latency.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

# =============================================================================
# Core Metrics Definitions
# =============================================================================

# Router dispatches
DISPATCHES_TOTAL = Counter(
    "sherlock_provider_dispatches_total",
    "Operations dispatched by the provider router",
    ["provider", "operation"],
)

# Every attempt made by the retry policy, including the first
PROVIDER_ATTEMPTS = Counter(
    "sherlock_provider_attempts_total",
    "Provider call attempts",
    ["provider", "operation"],
)

PROVIDER_FAILURES = Counter(
    "sherlock_provider_failures_total",
    "Failed provider attempts by classified error code",
    ["provider", "operation", "code"],
)

PROVIDER_FALLBACKS = Counter(
    "sherlock_provider_fallbacks_total",
    "Operations answered with synthetic fallback data",
    ["provider", "operation"],
)

PROVIDER_LATENCY = Histogram(
    "sherlock_provider_latency_seconds",
    "Latency of a single provider attempt",
    ["provider", "operation"],
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)


# =============================================================================
# Metrics Helpers
# =============================================================================


def track_dispatch(provider: str, operation: str) -> None:
    DISPATCHES_TOTAL.labels(provider=provider, operation=operation).inc()


def track_provider_attempt(provider: str, operation: str) -> None:
    PROVIDER_ATTEMPTS.labels(provider=provider, operation=operation).inc()


def track_provider_failure(provider: str, operation: str, code: str) -> None:
    PROVIDER_FAILURES.labels(provider=provider, operation=operation, code=code).inc()


def track_provider_fallback(provider: str, operation: str) -> None:
    PROVIDER_FALLBACKS.labels(provider=provider, operation=operation).inc()


@contextmanager
def track_provider_latency(provider: str, operation: str) -> Generator[None, None, None]:
    """
    Context manager to time a provider attempt.

    Usage:
        with track_provider_latency("GEMINI", "INVESTIGATE"):
            await call()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        PROVIDER_LATENCY.labels(provider=provider, operation=operation).observe(
            time.perf_counter() - start
        )


def get_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus-formatted metrics as bytes
    """
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


__all__ = [
    "DISPATCHES_TOTAL",
    "PROVIDER_ATTEMPTS",
    "PROVIDER_FAILURES",
    "PROVIDER_FALLBACKS",
    "PROVIDER_LATENCY",
    "track_dispatch",
    "track_provider_attempt",
    "track_provider_failure",
    "track_provider_fallback",
    "track_provider_latency",
    "get_metrics",
    "get_metrics_content_type",
]
