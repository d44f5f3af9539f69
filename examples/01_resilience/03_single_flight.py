#!/usr/bin/env python3
"""Single-flight — collapse concurrent cache misses into one call.

Without single-flight, N tasks that find the slot expired at the same time
each run the producer. With ``single_flight=True`` the first miss runs it
and the others await the same in-flight result.

Run: python examples/01_resilience/03_single_flight.py
"""
import asyncio

from retrycache import cache


async def run(single_flight: bool) -> int:
    calls = 0

    async def expensive():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.1)
        return "value"

    cached = cache(expensive, ttl=5.0, single_flight=single_flight)
    await asyncio.gather(*(cached() for _ in range(5)))
    return calls


async def main():
    print("=" * 60)
    print("Single-flight")
    print("=" * 60)

    print(f"\n  5 concurrent misses, single_flight=False: {await run(False)} producer calls")
    print(f"  5 concurrent misses, single_flight=True:  {await run(True)} producer call")

    print("\n" + "=" * 60)
    print("[OK] Single-flight Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
