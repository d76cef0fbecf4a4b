"""
Sherlock Observability Package.

Components:
- debug_log: per-attempt ``[provider-router]`` records on the
  ``sherlock.providers`` logger
- metrics: Prometheus counters and histograms for provider calls

Quick Start:
    >>> from sherlock.observability import get_metrics, log_provider_debug
    >>> log_provider_debug("GEMINI", "gemini-3-flash-preview", "INVESTIGATE", 0)
    >>> payload = get_metrics()
"""

from sherlock.observability.debug_log import (
    LOG_NAMESPACE,
    ProviderLogRecord,
    log_provider_debug,
)
from sherlock.observability.metrics import (
    DISPATCHES_TOTAL,
    PROVIDER_ATTEMPTS,
    PROVIDER_FAILURES,
    PROVIDER_FALLBACKS,
    PROVIDER_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_dispatch,
    track_provider_attempt,
    track_provider_failure,
    track_provider_fallback,
    track_provider_latency,
)

__all__ = [
    # Debug log
    "LOG_NAMESPACE",
    "ProviderLogRecord",
    "log_provider_debug",
    # Metrics
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
