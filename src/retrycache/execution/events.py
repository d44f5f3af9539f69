"""Lifecycle events emitted by the retry and cache wrappers.

The wrappers never print. Every notable step is delivered as an immutable
event to an injected ``Observer``; what happens with it (log line, metric,
test assertion) is the caller's business.

Events:
    RetryAttempt  - a failure was seen and a backoff sleep is about to start
    CacheHit      - the slot was fresh and served without calling the producer
    CacheMiss     - the slot was empty or expired, the producer will be called
    CacheStore    - a refreshed value was written to the slot

Example:
    >>> observer = RecordingObserver()
    >>> fetch = resilient(fetch_posts, observer=observer)
    >>> await fetch()
    >>> [type(e).__name__ for e in observer.events]
    ['CacheMiss', 'CacheStore']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, Union, runtime_checkable

from retrycache.core.errors import error_message
from retrycache.core.logging import get_logger

E = TypeVar("E")


@dataclass(frozen=True)
class RetryAttempt:
    """A backoff sleep is about to start.

    Attributes:
        attempt_number: 1-based number of the retry being scheduled
        delay: Seconds the wrapper will sleep before the retry
        error: Failure that triggered the retry
        max_attempts: Attempt budget of the wrapper
    """

    attempt_number: int
    delay: float
    error: BaseException | None = None
    max_attempts: int | None = None


@dataclass(frozen=True)
class CacheHit:
    """Served from the slot; ``age`` is seconds since the value was stored."""

    age: float = 0.0


@dataclass(frozen=True)
class CacheMiss:
    """The producer is about to be called; ``reason`` is "empty" or "expired"."""

    reason: str = "empty"


@dataclass(frozen=True)
class CacheStore:
    """A fresh value was written to the slot."""

    value_type: str = ""


Event = Union[RetryAttempt, CacheHit, CacheMiss, CacheStore]


@runtime_checkable
class Observer(Protocol):
    """Receives wrapper events."""

    def notify(self, event: Event) -> None: ...


class NullObserver:
    """Discards every event."""

    def notify(self, event: Event) -> None:
        return None


class LoggingObserver:
    """Writes events through structlog.

    Retries are logged at warning level, cache hits and misses at info and
    stores at debug.
    """

    def __init__(self, logger: Any = None):
        self._log = logger if logger is not None else get_logger("retrycache")

    def notify(self, event: Event) -> None:
        if isinstance(event, RetryAttempt):
            self._log.warning(
                "retry_scheduled",
                attempt=event.attempt_number,
                delay=event.delay,
                max_attempts=event.max_attempts,
                error=error_message(event.error) if event.error is not None else None,
            )
        elif isinstance(event, CacheHit):
            self._log.info("cache_hit", age=round(event.age, 3))
        elif isinstance(event, CacheMiss):
            self._log.info("cache_miss", reason=event.reason)
        elif isinstance(event, CacheStore):
            self._log.debug("cache_store", value_type=event.value_type)


@dataclass
class RecordingObserver:
    """Keeps every event in memory, in arrival order."""

    events: list[Event] = field(default_factory=list)

    def notify(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[E]) -> list[E]:
        """Return the recorded events of one type."""
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()


class CompositeObserver:
    """Forwards each event to several observers, in order."""

    def __init__(self, *observers: Observer):
        self.observers = list(observers)

    def notify(self, event: Event) -> None:
        for observer in self.observers:
            observer.notify(event)


def resolve_observer(observer: Observer | None) -> Observer:
    """Return ``observer`` or a ``NullObserver`` when none was given."""
    return observer if observer is not None else NullObserver()


__all__ = [
    "Event",
    "RetryAttempt",
    "CacheHit",
    "CacheMiss",
    "CacheStore",
    "Observer",
    "NullObserver",
    "LoggingObserver",
    "RecordingObserver",
    "CompositeObserver",
    "resolve_observer",
]
