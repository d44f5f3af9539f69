"""
CLI: ``retrycache demo`` — walk through cache hits and refreshes against a URL.

Makes three calls through ``resilient(fetch)``: the first fetches, the
second (immediately after) is served from the cache, the third happens
after ``--wait`` seconds and fetches again once the window has expired.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import typer

from retrycache.cli.utils import console, preview, print_error, print_json
from retrycache.core.errors import error_message
from retrycache.core.logging import LogContext, bind_context, clear_context, configure_logging
from retrycache.core.settings import get_settings
from retrycache.execution.compose import resilient
from retrycache.execution.events import LoggingObserver
from retrycache.sources.http import json_source


def demo(
    url: str | None = typer.Argument(None, help="URL returning JSON (default: RETRYCACHE_DEMO_URL)"),
    ttl: float | None = typer.Option(None, "--ttl", help="Cache window in seconds"),
    max_attempts: int | None = typer.Option(None, "--max-attempts", "-n", help="Attempts per miss"),
    base_delay: float | None = typer.Option(None, "--base-delay", help="Backoff before the 2nd attempt"),
    wait: float = typer.Option(6.0, "--wait", "-w", help="Pause before the third call"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """Fetch a URL three times through the cache and retry wrappers."""
    try:
        settings = get_settings()
        configure_logging(
            level=settings.log_level,
            json_format=json_logs or settings.log_format == "json",
        )
        asyncio.run(
            _walkthrough(
                url or settings.demo_url,
                ttl=settings.ttl if ttl is None else ttl,
                max_attempts=settings.max_attempts if max_attempts is None else max_attempts,
                base_delay=settings.base_delay if base_delay is None else base_delay,
                wait=wait,
                timeout=settings.http_timeout,
            )
        )
    except Exception as e:
        print_error(error_message(e))
        raise typer.Exit(1) from e


async def _walkthrough(
    url: str,
    *,
    ttl: float,
    max_attempts: int,
    base_delay: float,
    wait: float,
    timeout: float,
) -> list[Any]:
    results = []
    bind_context(url=url)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            enhanced = resilient(
                json_source(url, client=client),
                ttl=ttl,
                max_attempts=max_attempts,
                base_delay=base_delay,
                observer=LoggingObserver(),
            )

            console.print("[bold]First call:[/bold]")
            results.append(await _call(enhanced, 1))

            console.print(f"\n[bold]Second call (within {ttl:g}s, should use cache):[/bold]")
            results.append(await _call(enhanced, 2))

            console.print(f"\nWaiting {wait:g} seconds...")
            await asyncio.sleep(wait)

            console.print(f"\n[bold]Third call (after {wait:g}s, should fetch again):[/bold]")
            results.append(await _call(enhanced, 3))
    finally:
        clear_context()

    return results


async def _call(enhanced: Any, n: int) -> Any:
    # Every cache/retry log line of this call carries call=n.
    async with LogContext(call=n):
        data = await enhanced()
    _success(data)
    return data


def _success(data: Any) -> None:
    console.print("[green]✅ Success:[/green]")
    print_json(preview(data))
