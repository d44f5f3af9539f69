"""Composition of the cache and retry wrappers.

``resilient(producer)`` builds ``cache(retry(producer))``: the cache is
consulted first, and only a miss falls through to the retry loop. A hit
therefore costs zero producer calls and zero backoff, and a terminal
``RetryExhausted`` reaches the caller without touching the slot.

Architecture:
    ::

        caller
          │
          ▼
        CacheWrapper ── fresh? ──► return cached value
          │ miss
          ▼
        RetryWrapper ── attempt 1..n, sleep base_delay * 2**i between
          │
          ▼
        producer(*args, **kwargs)

The reverse order, ``retry(cache(producer))``, is a different behaviour
and is only available by composing the wrappers explicitly, e.g. with
:func:`compose`.

Example:
    >>> from retrycache import resilient, LoggingObserver
    >>>
    >>> fetch = resilient(fetch_posts, ttl=5.0, max_attempts=3, base_delay=0.3,
    ...                   observer=LoggingObserver())
    >>> posts = await fetch()
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from retrycache.core.clock import Clock, Sleeper
from retrycache.core.settings import RetrycacheSettings, get_settings
from retrycache.execution.cache import DEFAULT_TTL, CacheWrapper
from retrycache.execution.events import Observer
from retrycache.execution.retry import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    RetryPolicy,
    RetryWrapper,
)

T = TypeVar("T")
P = ParamSpec("P")

Layer = Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]


def resilient(
    producer: Callable[P, Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    ttl: float = DEFAULT_TTL,
    observer: Observer | None = None,
    clock: Clock | None = None,
    sleep: Sleeper | None = None,
    single_flight: bool = False,
) -> CacheWrapper[P, T]:
    """Wrap ``producer`` as ``cache(retry(producer))``.

    Args:
        producer: Coroutine function to protect
        max_attempts: Retry budget per cache miss
        base_delay: Seconds before the second attempt
        ttl: Cache freshness window in seconds
        observer: Shared by both layers
        clock: Time source for the cache layer
        sleep: Backoff sleeper for the retry layer
        single_flight: Collapse concurrent misses into one retry sequence

    Returns:
        The outer ``CacheWrapper``; its ``wrapped`` attribute is the
        ``RetryWrapper``.
    """
    policy = RetryPolicy(max_attempts=max_attempts, base_delay=base_delay)
    retrying = RetryWrapper(producer, policy, observer=observer, sleep=sleep)
    return CacheWrapper(
        retrying, ttl, observer=observer, clock=clock, single_flight=single_flight
    )


def resilient_call(
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    ttl: float = DEFAULT_TTL,
    observer: Observer | None = None,
    clock: Clock | None = None,
    sleep: Sleeper | None = None,
    single_flight: bool = False,
) -> Callable[[Callable[P, Awaitable[T]]], CacheWrapper[P, T]]:
    """Decorator factory form of :func:`resilient`.

    Example:
        >>> @resilient_call(ttl=60.0)
        ... async def fetch_rates():
        ...     return await fetch_json(RATES_URL)
    """
    # Validate eagerly so a bad decorator fails at import time.
    RetryPolicy(max_attempts=max_attempts, base_delay=base_delay)

    def decorator(func: Callable[P, Awaitable[T]]) -> CacheWrapper[P, T]:
        return resilient(
            func,
            max_attempts=max_attempts,
            base_delay=base_delay,
            ttl=ttl,
            observer=observer,
            clock=clock,
            sleep=sleep,
            single_flight=single_flight,
        )

    return decorator


def from_settings(
    producer: Callable[P, Awaitable[T]],
    settings: RetrycacheSettings | None = None,
    *,
    observer: Observer | None = None,
    clock: Clock | None = None,
    sleep: Sleeper | None = None,
) -> CacheWrapper[P, T]:
    """Build :func:`resilient` from ``RETRYCACHE_*`` settings."""
    settings = settings or get_settings()
    policy = settings.to_retry_policy()
    return resilient(
        producer,
        max_attempts=policy.max_attempts,
        base_delay=policy.base_delay,
        ttl=settings.ttl,
        observer=observer,
        clock=clock,
        sleep=sleep,
        single_flight=settings.single_flight,
    )


def compose(producer: Callable[..., Awaitable[Any]], *layers: Layer) -> Callable[..., Awaitable[Any]]:
    """Apply ``layers`` inside-out: the first layer wraps the producer directly.

    ``compose(base, retry_layer, cache_layer)`` is ``cache_layer(retry_layer(base))``.

    Example:
        >>> from functools import partial
        >>> fetch = compose(fetch_posts, partial(retry, max_attempts=5), partial(cache, ttl=30))
    """
    wrapped = producer
    for layer in layers:
        wrapped = layer(wrapped)
    return wrapped


__all__ = ["resilient", "resilient_call", "from_settings", "compose"]
