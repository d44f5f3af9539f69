"""Core primitives: errors, time sources, logging and settings."""

from retrycache.core.errors import (
    ConfigError,
    ErrorCategory,
    InvalidPolicyError,
    RetryExhausted,
    RetrycacheError,
    SourceError,
)

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "InvalidPolicyError",
    "RetryExhausted",
    "RetrycacheError",
    "SourceError",
]
