"""Resilience patterns — retry with backoff, time-windowed cache, composition.

READING ORDER
─────────────
    01 — Retry with exponential backoff (attempt budget, RetryExhausted)
    02 — Cache over retry (the resilient() composition, observer logging)
    03 — Single-flight (concurrent misses share one refresh)
"""
