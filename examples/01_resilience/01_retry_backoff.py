#!/usr/bin/env python3
"""Retry with Exponential Backoff — turn transient failures into successes.

WHY RETRIES MATTER
─────────────────
Network calls fail transiently: a dropped connection, a 503 during a
deploy, a brief rate limit. Retrying after a short, growing pause turns
most of those into successes without hammering the upstream.

BACKOFF TIMING (max_attempts=4, base_delay=0.3s)
────────────────────────────────────────────────
    Attempt  Delay before   Cumulative
    ──────── ───────────── ──────────
    1        -             0.0 s
    2        0.3 s         0.3 s
    3        0.6 s         0.9 s
    4        1.2 s         2.1 s
    → RetryExhausted("Failed after 4 attempts: ...")

Delays are not capped: worst-case latency grows with max_attempts.

Run: python examples/01_resilience/01_retry_backoff.py
"""
import asyncio

from retrycache import RecordingObserver, RetryAttempt, RetryExhausted, RetryPolicy, retry


async def main():
    print("=" * 60)
    print("Retry with Exponential Backoff")
    print("=" * 60)

    # === 1. Delay schedule ===
    print("\n[1] Delay Schedule")
    policy = RetryPolicy(max_attempts=4, base_delay=0.3)
    for i, delay in enumerate(policy.delays):
        print(f"    Before attempt {i + 2}: wait {delay:.1f}s")
    print(f"    Worst case: {policy.worst_case_delay:.1f}s")

    # === 2. Fails twice, then succeeds ===
    print("\n[2] Flaky Operation")
    call_count = 0

    async def flaky_operation():
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            print(f"    Attempt {call_count}: failing...")
            raise ConnectionError("Simulated failure")
        print(f"    Attempt {call_count}: success!")
        return "result"

    observer = RecordingObserver()
    fetch = retry(flaky_operation, max_attempts=3, base_delay=0.05, observer=observer)
    print(f"  Final result: {await fetch()}")
    for event in observer.of_type(RetryAttempt):
        print(f"    Retry #{event.attempt_number} waited {event.delay:.2f}s")

    # === 3. Exhaustion ===
    print("\n[3] Exhaustion")

    async def always_down():
        raise ConnectionError("HTTP error! Status: 503")

    try:
        await retry(always_down, max_attempts=2, base_delay=0.01)()
    except RetryExhausted as e:
        print(f"  {e}")
        print(f"  attempts={e.attempts}, last_error={e.last_error!r}")

    print("\n" + "=" * 60)
    print("[OK] Retry Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
