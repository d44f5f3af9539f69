"""Single-slot, time-windowed result cache for asynchronous producers.

``cache(producer, ttl)`` remembers the most recent successful result and
the moment it was requested. While ``now - stored_at < ttl`` every call is
answered from the slot without touching the producer; afterwards the next
call invokes the producer again and overwrites the slot on success.

The slot is not keyed by arguments. It is meant for producers that take no
arguments, or whose arguments never change between calls: a call with new
arguments inside the window is still answered with the earlier value.

Failures pass through unchanged and leave the slot as it was. Since a miss
only happens once the entry has expired, the next call tries again.

Concurrency:
    Safe under asyncio's cooperative scheduling only: no ``await`` sits
    between the freshness check and the decision to refresh. Not
    thread-safe.

    By default two calls that both see an expired slot both invoke the
    producer (last writer wins). With ``single_flight=True`` the first miss
    parks a future in the slot and later arrivals await it instead. They
    share its result or its failure. If the leader is cancelled, the
    waiting callers are not: the first of them to resume starts a new
    refresh and the rest wait on that one.

Example:
    >>> from retrycache.execution.cache import cache
    >>>
    >>> cached = cache(fetch_posts, ttl=5.0)
    >>> first = await cached()   # calls fetch_posts
    >>> second = await cached()  # served from the slot
    >>> first is second
    True
"""

from __future__ import annotations

import asyncio
import functools
import numbers
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar

from retrycache.core import clock as clocks
from retrycache.core.clock import Clock
from retrycache.core.errors import InvalidPolicyError
from retrycache.execution.events import (
    CacheHit,
    CacheMiss,
    CacheStore,
    Observer,
    resolve_observer,
)

T = TypeVar("T")
P = ParamSpec("P")

DEFAULT_TTL = 5.0


class _RefreshAbandoned(Exception):
    """Set on the pending future when the single-flight leader is cancelled."""


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the clock reading at which it was requested."""

    value: T
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


class CacheSlot(Generic[T]):
    """State owned by exactly one ``CacheWrapper``.

    ``entry`` is either ``None`` or the last stored value with its
    timestamp. ``pending`` holds the in-flight refresh when single-flight
    is enabled.
    """

    def __init__(self) -> None:
        self.entry: CacheEntry[T] | None = None
        self.pending: asyncio.Future[T] | None = None

    def store(self, value: T, at: float) -> CacheEntry[T]:
        self.entry = CacheEntry(value=value, stored_at=at)
        return self.entry

    def clear(self) -> None:
        self.entry = None

    @property
    def is_empty(self) -> bool:
        return self.entry is None

    def __repr__(self) -> str:
        return f"CacheSlot(entry={self.entry!r}, pending={self.pending is not None})"


def _validate_ttl(ttl: Any) -> float:
    if isinstance(ttl, bool) or not isinstance(ttl, numbers.Real):
        raise InvalidPolicyError("ttl", ttl, "ttl must be a number of seconds")
    if ttl < 0:
        raise InvalidPolicyError("ttl", ttl, f"ttl must be non-negative, got {ttl}")
    return float(ttl)


class CacheWrapper(Generic[P, T]):
    """Producer wrapper serving the last successful result within ``ttl``."""

    def __init__(
        self,
        producer: Callable[P, Awaitable[T]],
        ttl: float = DEFAULT_TTL,
        *,
        observer: Observer | None = None,
        clock: Clock | None = None,
        single_flight: bool = False,
    ):
        self.wrapped = producer
        self.ttl = _validate_ttl(ttl)
        self.observer = resolve_observer(observer)
        self.single_flight = single_flight
        self.slot: CacheSlot[T] = CacheSlot()
        self._clock = clock or clocks.monotonic
        functools.update_wrapper(self, producer, updated=())

    @property
    def entry(self) -> CacheEntry[T] | None:
        """Current slot content, fresh or not."""
        return self.slot.entry

    def invalidate(self) -> None:
        """Empty the slot so the next call invokes the producer."""
        self.slot.clear()

    async def __call__(self, *args: P.args, **kwargs: P.kwargs) -> T:
        while True:
            now = self._clock()
            entry = self.slot.entry

            if entry is not None and entry.is_fresh(now, self.ttl):
                self.observer.notify(CacheHit(age=entry.age(now)))
                return entry.value

            pending = self.slot.pending
            if self.single_flight and pending is not None:
                try:
                    # Shielded so a cancelled follower does not cancel the leader's refresh.
                    return await asyncio.shield(pending)
                except _RefreshAbandoned:
                    # Leader was cancelled; look at the slot again and take over.
                    continue

            self.observer.notify(CacheMiss(reason="empty" if entry is None else "expired"))

            if not self.single_flight:
                value = await self.wrapped(*args, **kwargs)
                self._store(value, now)
                return value

            return await self._refresh_single_flight(now, *args, **kwargs)

    async def _refresh_single_flight(self, now: float, *args: Any, **kwargs: Any) -> T:
        pending: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self.slot.pending = pending
        try:
            value = await self.wrapped(*args, **kwargs)
        except asyncio.CancelledError:
            pending.set_exception(_RefreshAbandoned())
            pending.exception()
            raise
        except BaseException as e:
            pending.set_exception(e)
            # Followers re-raise it themselves; keep asyncio from reporting it as unretrieved.
            pending.exception()
            raise
        else:
            self.slot.store(value, now)
            pending.set_result(value)
            self.observer.notify(CacheStore(value_type=type(value).__name__))
            return value
        finally:
            if self.slot.pending is pending:
                self.slot.pending = None

    def _store(self, value: T, now: float) -> None:
        self.slot.store(value, now)
        self.observer.notify(CacheStore(value_type=type(value).__name__))

    def __repr__(self) -> str:
        return (
            f"CacheWrapper({getattr(self.wrapped, '__qualname__', self.wrapped)!r}, "
            f"ttl={self.ttl}, single_flight={self.single_flight})"
        )


def cache(
    producer: Callable[P, Awaitable[T]],
    ttl: float = DEFAULT_TTL,
    *,
    observer: Observer | None = None,
    clock: Clock | None = None,
    single_flight: bool = False,
) -> CacheWrapper[P, T]:
    """Wrap ``producer`` with a single-slot cache valid for ``ttl`` seconds.

    Args:
        producer: Coroutine function to wrap, usually a ``RetryWrapper``
        ttl: Freshness window in seconds (>= 0, 0 disables serving from the slot)
        observer: Receives ``CacheHit``, ``CacheMiss`` and ``CacheStore`` events
        clock: Monotonic time source (default ``time.monotonic``)
        single_flight: Collapse concurrent misses into one producer call

    Raises:
        InvalidPolicyError: If ``ttl`` is negative or not a number
    """
    return CacheWrapper(
        producer, ttl, observer=observer, clock=clock, single_flight=single_flight
    )


def with_cache(
    ttl: float = DEFAULT_TTL,
    *,
    observer: Observer | None = None,
    clock: Clock | None = None,
    single_flight: bool = False,
) -> Callable[[Callable[P, Awaitable[T]]], CacheWrapper[P, T]]:
    """Decorator factory form of :func:`cache`."""
    _validate_ttl(ttl)

    def decorator(func: Callable[P, Awaitable[T]]) -> CacheWrapper[P, T]:
        return CacheWrapper(
            func, ttl, observer=observer, clock=clock, single_flight=single_flight
        )

    return decorator


__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "CacheSlot",
    "CacheWrapper",
    "cache",
    "with_cache",
]
