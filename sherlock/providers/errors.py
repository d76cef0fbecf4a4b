"""Provider error taxonomy.

Every failure that crosses the adapter boundary is a ``ProviderError``
with one of five codes. Foreign exceptions are classified once, by
message content (and HTTP status when the exception carries one), and
are never wrapped twice.
"""

from __future__ import annotations

from enum import Enum

from sherlock.models.ai_models import AIProvider
from sherlock.providers.types import ProviderOperation


class ProviderErrorCode(str, Enum):
    MISSING_API_KEY = "MISSING_API_KEY"
    RATE_LIMITED = "RATE_LIMITED"
    PARSE_ERROR = "PARSE_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"


# Codes that end a retry loop immediately.
TERMINAL_ERROR_CODES = frozenset(
    {
        ProviderErrorCode.MISSING_API_KEY,
        ProviderErrorCode.UNSUPPORTED_OPERATION,
        ProviderErrorCode.PARSE_ERROR,
    }
)


class ProviderError(Exception):
    """Classified failure of a provider operation."""

    def __init__(
        self,
        code: ProviderErrorCode,
        provider: AIProvider,
        operation: ProviderOperation,
        message: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.operation = operation
        self.message = message
        self.status = status
        self.cause = cause

    @property
    def is_retryable(self) -> bool:
        return self.code not in TERMINAL_ERROR_CODES

    def __repr__(self) -> str:
        return (
            f"ProviderError(code={self.code.value}, provider={self.provider.value}, "
            f"operation={self.operation.value}, status={self.status}, message={self.message!r})"
        )


# =============================================================================
# Marker exceptions raised below the adapter layer
# =============================================================================


class MissingApiKeyError(LookupError):
    """No credential is configured for a provider."""

    def __init__(self, provider: AIProvider):
        super().__init__(f"MISSING_API_KEY: No API key configured for {provider.value}")
        self.provider = provider


class UpstreamHttpError(RuntimeError):
    """Non-success HTTP response from a provider endpoint."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Classification
# =============================================================================


def _status_of(error: BaseException) -> int | None:
    for attr in ("status", "status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def infer_error_code(error: BaseException) -> ProviderErrorCode:
    """Classify an exception into a provider error code (first match wins)."""
    if isinstance(error, ProviderError):
        return error.code

    message = str(error).upper()
    if "MISSING_API_KEY" in message:
        return ProviderErrorCode.MISSING_API_KEY
    if "429" in message or "RATE" in message or _status_of(error) == 429:
        return ProviderErrorCode.RATE_LIMITED
    if "PARSE" in message:
        return ProviderErrorCode.PARSE_ERROR
    if "UNSUPPORTED" in message:
        return ProviderErrorCode.UNSUPPORTED_OPERATION
    return ProviderErrorCode.UPSTREAM_ERROR


def to_provider_error(
    provider: AIProvider,
    operation: ProviderOperation,
    error: BaseException,
    status: int | None = None,
) -> ProviderError:
    """Wrap an exception as a ``ProviderError``; existing ones pass through unchanged."""
    if isinstance(error, ProviderError):
        return error

    return ProviderError(
        code=infer_error_code(error),
        provider=provider,
        operation=operation,
        message=str(error) or type(error).__name__,
        status=status if status is not None else _status_of(error),
        cause=error,
    )


__all__ = [
    "ProviderErrorCode",
    "TERMINAL_ERROR_CODES",
    "ProviderError",
    "MissingApiKeyError",
    "UpstreamHttpError",
    "infer_error_code",
    "to_provider_error",
]
