"""
Shared pytest fixtures and configuration for retrycache tests.

This module provides:
- Virtual time (FakeClock / FakeSleep) so no test waits on the wall clock
- Scripted producers that fail a given number of times before succeeding
- Settings cache isolation

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    @pytest.mark.asyncio
    async def test_something(fake_clock, fake_sleep):
        ...
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Generator

import pytest

# Ensure retrycache package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from retrycache.core.settings import clear_settings_cache  # noqa: E402


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Virtual Time
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested delays and advances a FakeClock instead of sleeping."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)
        # Still yield to the loop like a real sleep would.
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock: FakeClock) -> FakeSleep:
    return FakeSleep(fake_clock)


# =============================================================================
# Producers
# =============================================================================


class ScriptedProducer:
    """Async producer failing ``failures`` times before returning ``value``.

    ``failures=None`` fails forever. Every call is recorded with its
    arguments.
    """

    def __init__(
        self,
        value: Any = "V",
        failures: int | None = 0,
        error_factory: Any = None,
    ):
        self.value = value
        self.failures = failures
        self.error_factory = error_factory or (lambda n: ConnectionError(f"boom {n}"))
        self.calls: list[tuple[tuple, dict]] = []
        self.__name__ = "scripted_producer"
        self.__qualname__ = "scripted_producer"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((args, kwargs))
        n = len(self.calls)
        if self.failures is None or n <= self.failures:
            raise self.error_factory(n)
        return self.value


@pytest.fixture
def producer() -> ScriptedProducer:
    """Always-succeeding producer returning ``"V"``."""
    return ScriptedProducer()


@pytest.fixture
def make_producer():
    """Factory for ScriptedProducer instances."""
    return ScriptedProducer


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Drop cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
