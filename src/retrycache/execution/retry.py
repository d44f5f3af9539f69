"""Retry with exponential backoff for asynchronous producers.

A producer is any coroutine function. ``retry(producer)`` returns a
wrapper with the same call signature that re-invokes the producer after
a failure, sleeping ``base_delay * 2 ** i`` seconds before attempt
``i + 1``. When the attempt budget is consumed the wrapper raises
``RetryExhausted`` carrying the attempt count and the final failure.

Backoff timing (defaults: max_attempts=3, base_delay=0.3):

    Attempt  Delay before   Cumulative
    ──────── ───────────── ──────────
    1        -             0.0 s
    2        0.3 s         0.3 s
    3        0.6 s         0.9 s
    (raise RetryExhausted after attempt 3 fails)

Delay growth is not capped. A caller choosing a large ``max_attempts``
accepts the matching worst-case latency (see ``RetryPolicy.worst_case_delay``).

Example:
    >>> from retrycache.execution.retry import retry
    >>>
    >>> fetch = retry(fetch_posts, max_attempts=5, base_delay=0.1)
    >>> posts = await fetch()

    Decorator form:

    >>> @with_retry(max_attempts=3)
    ... async def fetch_posts():
    ...     ...
"""

from __future__ import annotations

import functools
import numbers
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, ParamSpec, TypeVar

from retrycache.core import clock
from retrycache.core.clock import Sleeper
from retrycache.core.errors import InvalidPolicyError, RetryExhausted
from retrycache.execution.events import Observer, RetryAttempt, resolve_observer

T = TypeVar("T")
P = ParamSpec("P")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.3


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration.

    Attributes:
        max_attempts: Total attempts per invocation, including the first (>= 1)
        base_delay: Seconds to wait before the second attempt (>= 0)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise InvalidPolicyError(
                "max_attempts", self.max_attempts, "max_attempts must be an integer"
            )
        if self.max_attempts < 1:
            raise InvalidPolicyError(
                "max_attempts",
                self.max_attempts,
                f"max_attempts must be >= 1, got {self.max_attempts}",
            )
        if isinstance(self.base_delay, bool) or not isinstance(self.base_delay, numbers.Real):
            raise InvalidPolicyError(
                "base_delay", self.base_delay, "base_delay must be a number of seconds"
            )
        if self.base_delay < 0:
            raise InvalidPolicyError(
                "base_delay",
                self.base_delay,
                f"base_delay must be non-negative, got {self.base_delay}",
            )

    def delay_for(self, attempt_index: int) -> float:
        """Delay in seconds after the failure of zero-based attempt ``attempt_index``."""
        return self.base_delay * (2 ** attempt_index)

    def should_retry(self, attempts_made: int) -> bool:
        """True while the budget allows another attempt."""
        return attempts_made < self.max_attempts

    @property
    def delays(self) -> list[float]:
        """Every backoff delay an always-failing producer would incur."""
        return [self.delay_for(i) for i in range(self.max_attempts - 1)]

    @property
    def worst_case_delay(self) -> float:
        """Total seconds spent sleeping when every attempt fails."""
        return sum(self.delays)


@dataclass
class RetryContext:
    """Per-invocation retry state.

    A fresh context is created for every call of a ``RetryWrapper``, so
    nothing carries over from one invocation to the next.
    """

    policy: RetryPolicy
    observer: Observer = field(default_factory=lambda: resolve_observer(None))
    sleep: Sleeper = clock.sleep
    attempt: int = field(default=0, init=False)
    last_error: BaseException | None = field(default=None, init=False)
    delays: list[float] = field(default_factory=list, init=False)

    @property
    def attempts(self) -> int:
        """Number of attempts made so far."""
        return self.attempt

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``func`` until it succeeds or the budget is consumed.

        Raises:
            RetryExhausted: After ``policy.max_attempts`` failed attempts
        """
        while True:
            self.attempt += 1
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                self.last_error = e

                if not self.policy.should_retry(self.attempt):
                    raise RetryExhausted(self.attempt, e) from e

                delay = self.policy.delay_for(self.attempt - 1)
                self.delays.append(delay)
                self.observer.notify(
                    RetryAttempt(
                        attempt_number=self.attempt,
                        delay=delay,
                        error=e,
                        max_attempts=self.policy.max_attempts,
                    )
                )

                await self.sleep(delay)


class RetryWrapper(Generic[P, T]):
    """Producer wrapper that retries failures with exponential backoff.

    Calling the wrapper returns a coroutine with the wrapped producer's
    result. The policy is fixed at construction; attempt counters live in
    a ``RetryContext`` created per call.
    """

    def __init__(
        self,
        producer: Callable[P, Awaitable[T]],
        policy: RetryPolicy | None = None,
        *,
        observer: Observer | None = None,
        sleep: Sleeper | None = None,
    ):
        self.wrapped = producer
        self.policy = policy or RetryPolicy()
        self.observer = resolve_observer(observer)
        self._sleep = sleep or clock.sleep
        functools.update_wrapper(self, producer, updated=())

    async def __call__(self, *args: P.args, **kwargs: P.kwargs) -> T:
        ctx = RetryContext(policy=self.policy, observer=self.observer, sleep=self._sleep)
        return await ctx.run(self.wrapped, *args, **kwargs)

    def __repr__(self) -> str:
        return (
            f"RetryWrapper({getattr(self.wrapped, '__qualname__', self.wrapped)!r}, "
            f"max_attempts={self.policy.max_attempts}, base_delay={self.policy.base_delay})"
        )


def retry(
    producer: Callable[P, Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    *,
    observer: Observer | None = None,
    sleep: Sleeper | None = None,
) -> RetryWrapper[P, T]:
    """Wrap ``producer`` with bounded exponential-backoff retries.

    Args:
        producer: Coroutine function to wrap
        max_attempts: Total attempts per call (>= 1)
        base_delay: Seconds before the second attempt (>= 0)
        observer: Receives a ``RetryAttempt`` before each backoff sleep
        sleep: Coroutine used to wait (default ``asyncio.sleep``)

    Raises:
        InvalidPolicyError: If ``max_attempts`` or ``base_delay`` is out of range
    """
    policy = RetryPolicy(max_attempts=max_attempts, base_delay=base_delay)
    return RetryWrapper(producer, policy, observer=observer, sleep=sleep)


def with_retry(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    *,
    observer: Observer | None = None,
    sleep: Sleeper | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], RetryWrapper[P, T]]:
    """Decorator factory form of :func:`retry`.

    Example:
        >>> @with_retry(max_attempts=5, base_delay=0.1)
        ... async def fetch_posts():
        ...     return await fetch_json(URL)
    """
    policy = RetryPolicy(max_attempts=max_attempts, base_delay=base_delay)

    def decorator(func: Callable[P, Awaitable[T]]) -> RetryWrapper[P, T]:
        return RetryWrapper(func, policy, observer=observer, sleep=sleep)

    return decorator


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_BASE_DELAY",
    "RetryPolicy",
    "RetryContext",
    "RetryWrapper",
    "retry",
    "with_retry",
]
