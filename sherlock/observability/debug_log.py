"""Per-attempt provider debug records.

One line per attempt on the ``sherlock.providers`` logger, in a stable
``key=value`` format so it can be grepped in postmortems:

    [provider-router] provider=GEMINI modelId=gemini-3-flash-preview operation=INVESTIGATE retryCount=0 errorClass=NONE

The same fields are attached as ``extra`` for structured handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

LOG_NAMESPACE = "[provider-router]"

logger = logging.getLogger("sherlock.providers")


@dataclass(frozen=True)
class ProviderLogRecord:
    provider: str
    model_id: str
    operation: str
    retry_count: int
    error_class: str | None = None
    message: str | None = None

    def format(self) -> str:
        parts = [
            LOG_NAMESPACE,
            f"provider={self.provider}",
            f"modelId={self.model_id}",
            f"operation={self.operation}",
            f"retryCount={self.retry_count}",
            f"errorClass={self.error_class or 'NONE'}",
        ]
        if self.message:
            parts.append(f"message={self.message}")
        return " ".join(parts)


def log_provider_debug(
    provider: str,
    model_id: str,
    operation: str,
    retry_count: int,
    error_class: str | None = None,
    message: str | None = None,
) -> ProviderLogRecord:
    """Emit a provider attempt record and return it."""
    record = ProviderLogRecord(
        provider=provider,
        model_id=model_id,
        operation=operation,
        retry_count=retry_count,
        error_class=error_class,
        message=message,
    )
    logger.warning(
        record.format(),
        extra={
            "provider": record.provider,
            "model_id": record.model_id,
            "operation": record.operation,
            "retry_count": record.retry_count,
            "error_class": record.error_class or "NONE",
        },
    )
    return record


__all__ = ["LOG_NAMESPACE", "ProviderLogRecord", "log_provider_debug"]
