"""Retry, cache and their composition for asynchronous producers.

MODULE MAP
──────────
  events.py   ─ RetryAttempt / CacheHit / CacheMiss / CacheStore + observers
  retry.py    ─ RetryPolicy, RetryWrapper, retry(), with_retry()
  cache.py    ─ CacheEntry, CacheSlot, CacheWrapper, cache(), with_cache()
  compose.py  ─ resilient() = cache(retry(producer)), compose()
"""

from retrycache.execution.cache import (
    CacheEntry,
    CacheSlot,
    CacheWrapper,
    cache,
    with_cache,
)
from retrycache.execution.compose import compose, from_settings, resilient, resilient_call
from retrycache.execution.events import (
    CacheHit,
    CacheMiss,
    CacheStore,
    CompositeObserver,
    LoggingObserver,
    NullObserver,
    Observer,
    RecordingObserver,
    RetryAttempt,
)
from retrycache.execution.retry import (
    RetryContext,
    RetryPolicy,
    RetryWrapper,
    retry,
    with_retry,
)

__all__ = [
    # Retry
    "RetryPolicy",
    "RetryContext",
    "RetryWrapper",
    "retry",
    "with_retry",
    # Cache
    "CacheEntry",
    "CacheSlot",
    "CacheWrapper",
    "cache",
    "with_cache",
    # Composition
    "resilient",
    "resilient_call",
    "from_settings",
    "compose",
    # Events
    "RetryAttempt",
    "CacheHit",
    "CacheMiss",
    "CacheStore",
    "Observer",
    "NullObserver",
    "LoggingObserver",
    "RecordingObserver",
    "CompositeObserver",
]
