"""Time sources used by the wrappers.

Both wrappers read time and suspend through these seams so that tests can
substitute a virtual clock instead of sleeping for real.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source returning seconds."""

    def __call__(self) -> float: ...


class Sleeper(Protocol):
    """Coroutine that suspends the current task for ``seconds``."""

    def __call__(self, seconds: float) -> Awaitable[None]: ...


def monotonic() -> float:
    """Default clock: ``time.monotonic``."""
    return time.monotonic()


async def sleep(seconds: float) -> None:
    """Default sleeper: ``asyncio.sleep``."""
    await asyncio.sleep(seconds)


__all__ = ["Clock", "Sleeper", "monotonic", "sleep"]
