"""retrycache — retry with exponential backoff and single-slot caching for async producers.

Treat a flaky, expensive asynchronous call as if it were cheap and
reliable, without changing the call itself::

    from retrycache import resilient

    async def fetch_posts():
        ...  # any coroutine that may raise

    fetch = resilient(fetch_posts, ttl=5.0, max_attempts=3, base_delay=0.3)
    posts = await fetch()   # cache miss → up to 3 attempts
    posts = await fetch()   # within 5s → served from cache, no call

Layers
──────
  retry(producer)          ─ RetryWrapper, backoff base_delay * 2**i
  cache(producer)          ─ CacheWrapper, single slot, fresh while age < ttl
  resilient(producer)      ─ cache(retry(producer))

Errors
──────
  RetryExhausted           ─ attempt budget consumed (carries last failure)
  InvalidPolicyError       ─ bad max_attempts / base_delay / ttl
"""

from retrycache.core.errors import (
    InvalidPolicyError,
    RetryExhausted,
    RetrycacheError,
    SourceError,
)
from retrycache.execution import (
    CacheEntry,
    CacheHit,
    CacheMiss,
    CacheStore,
    CacheWrapper,
    CompositeObserver,
    LoggingObserver,
    NullObserver,
    Observer,
    RecordingObserver,
    RetryAttempt,
    RetryPolicy,
    RetryWrapper,
    cache,
    compose,
    from_settings,
    resilient,
    resilient_call,
    retry,
    with_cache,
    with_retry,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "RetrycacheError",
    "InvalidPolicyError",
    "RetryExhausted",
    "SourceError",
    # Wrappers
    "RetryPolicy",
    "RetryWrapper",
    "retry",
    "with_retry",
    "CacheEntry",
    "CacheWrapper",
    "cache",
    "with_cache",
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
