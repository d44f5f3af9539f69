#!/usr/bin/env python3
"""Cache over Retry — serve a recent result, retry only on a miss.

ARCHITECTURE
────────────
    caller ─► CacheWrapper ── fresh? ──► cached value (no call, no backoff)
                  │ miss
                  ▼
              RetryWrapper ── attempts with backoff
                  │
                  ▼
              producer()

TIMELINE (ttl=1s in this example)
─────────────────────────────────
    t=0.0s  call 1 → miss, producer runs
    t=0.0s  call 2 → hit
    t=1.2s  call 3 → expired, producer runs again

Run: python examples/01_resilience/02_cache_over_retry.py
"""
import asyncio

from retrycache import LoggingObserver, resilient
from retrycache.core.logging import configure_logging


async def main():
    configure_logging(level="INFO", json_format=False)

    print("=" * 60)
    print("Cache over Retry")
    print("=" * 60)

    calls = 0

    async def fetch_posts():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        if calls == 1:
            raise ConnectionError("connection reset")
        return [{"id": 1, "title": f"fetched on call {calls}"}]

    enhanced = resilient(fetch_posts, ttl=1.0, base_delay=0.1, observer=LoggingObserver())

    print("\nFirst call:")
    print(f"  {(await enhanced())[0]}")

    print("\nSecond call (within 1s, should use cache):")
    print(f"  {(await enhanced())[0]}")

    print("\nWaiting 1.2 seconds...")
    await asyncio.sleep(1.2)

    print("\nThird call (after 1s, should fetch again):")
    print(f"  {(await enhanced())[0]}")

    print(f"\nProducer calls: {calls}")

    print("\n" + "=" * 60)
    print("[OK] Cache over Retry Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
