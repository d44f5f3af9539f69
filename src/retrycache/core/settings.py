"""Environment-driven settings for retrycache.

Defaults mirror the wrapper defaults (three attempts, 0.3s base delay,
5s cache window) so an application can move them into the environment
without touching code.

Examples:
    >>> import os
    >>> os.environ["RETRYCACHE_TTL"] = "30"
    >>> get_settings(_force_reload=True).ttl
    30.0

Fields
──────
max_attempts   : Attempts per invocation, including the first (>= 1)
base_delay     : Backoff before the second attempt, in seconds (>= 0)
ttl            : Cache freshness window in seconds (>= 0)
single_flight  : Collapse concurrent cache misses into one producer call
log_level      : structlog level used by the CLI (DEBUG..CRITICAL, any case)
log_format     : "console" or "json"
demo_url       : URL fetched by ``retrycache demo``
http_timeout   : Timeout for the HTTP source, in seconds
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from retrycache.execution.retry import RetryPolicy

DEFAULT_DEMO_URL = "https://jsonplaceholder.typicode.com/posts"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RetrycacheSettings(BaseSettings):
    """Settings read from ``RETRYCACHE_*`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Retry ────────────────────────────────────────────────────
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.3, ge=0)

    # ── Cache ────────────────────────────────────────────────────
    ttl: float = Field(default=5.0, ge=0)
    single_flight: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: LogLevel = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    # ── HTTP source ──────────────────────────────────────────────
    demo_url: str = Field(default=DEFAULT_DEMO_URL)
    http_timeout: float = Field(default=10.0, gt=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept level names in any case (``debug`` -> ``DEBUG``)."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def to_retry_policy(self) -> RetryPolicy:
        """Build the immutable retry policy described by these settings."""
        return RetryPolicy(max_attempts=self.max_attempts, base_delay=self.base_delay)


_settings_cache: dict[str, RetrycacheSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RetrycacheSettings:
    """Load, validate, and cache a :class:`RetrycacheSettings` instance."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = RetrycacheSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (used by tests)."""
    _settings_cache.clear()


__all__ = [
    "DEFAULT_DEMO_URL",
    "RetrycacheSettings",
    "get_settings",
    "clear_settings_cache",
]
