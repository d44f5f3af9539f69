"""
Structured error types for retrycache.

Every error raised by the resilience layer itself derives from
``RetrycacheError`` and carries a category, a retryable flag and the
chained underlying exception. Errors raised by a wrapped producer are
never converted to this hierarchy on their way through the cache layer;
only the retry layer turns them into a terminal ``RetryExhausted``.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    RetrycacheError                        │
        │          (category, retryable, cause, to_dict)            │
        ├──────────────────────────────────────────────────────────┤
        │                                                           │
        │  ConfigError          RetryExhausted       SourceError    │
        │  (CONFIG)             (RETRY)              (SOURCE)       │
        │       │               attempts             status_code    │
        │  InvalidPolicyError   last_error           url            │
        │  (also ValueError)                                        │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> err = RetryExhausted(3, RuntimeError("HTTP error! Status: 503"))
    >>> str(err)
    'Failed after 3 attempts: HTTP error! Status: 503'
    >>> err.retryable
    False

Guardrails:
    ❌ DON'T: Catch RetryExhausted inside a cache wrapper
    ✅ DO: Let it reach the caller, the slot is left untouched

    ❌ DON'T: Drop the underlying exception
    ✅ DO: Read it back from ``last_error`` or ``__cause__``
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for structured logging."""

    CONFIG = "CONFIG"      # Invalid policy or settings
    RETRY = "RETRY"        # Attempt budget consumed
    SOURCE = "SOURCE"      # Upstream producer reported a failure
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class RetrycacheError(Exception):
    """Base class for every error raised by retrycache.

    Attributes:
        message: Human readable message
        category: ErrorCategory for routing
        retryable: Whether a caller may reasonably try again
        cause: Chained underlying exception, if any
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (Never Retryable)
# =============================================================================


class ConfigError(RetrycacheError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidPolicyError(ConfigError, ValueError):
    """A retry or cache parameter is outside its allowed range.

    Also a ``ValueError`` so callers validating plain arguments can catch
    it without importing retrycache.
    """

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for {key}: {value!r}")


# =============================================================================
# RETRY ERRORS
# =============================================================================


class RetryExhausted(RetrycacheError):
    """Raised once the attempt budget of a retry wrapper is consumed.

    Only the final underlying failure is retained; its message is embedded
    in this error's message and the exception itself is chained as
    ``__cause__``.

    Attributes:
        attempts: Number of attempts that were made
        last_error: The failure raised by the final attempt
    """

    default_category = ErrorCategory.RETRY

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed after {attempts} attempts: {error_message(last_error)}",
            cause=last_error,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["attempts"] = self.attempts
        result["last_error_type"] = type(self.last_error).__name__
        return result


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(RetrycacheError):
    """An upstream source answered with a failure status.

    5xx and 429 responses are flagged retryable, everything else is not.
    The retry wrapper does not consult the flag; it is informational for
    callers and logs.
    """

    default_category = ErrorCategory.SOURCE

    def __init__(self, status_code: int, url: str | None = None):
        self.status_code = status_code
        self.url = url
        super().__init__(
            f"HTTP error! Status: {status_code}",
            retryable=status_code >= 500 or status_code == 429,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        if self.url:
            result["url"] = self.url
        return result


def error_message(error: BaseException) -> str:
    """Return the message of an exception, falling back to its type name."""
    if isinstance(error, RetrycacheError):
        return error.message
    text = str(error)
    return text if text else type(error).__name__


__all__ = [
    "ErrorCategory",
    "RetrycacheError",
    "ConfigError",
    "InvalidPolicyError",
    "RetryExhausted",
    "SourceError",
    "error_message",
]
