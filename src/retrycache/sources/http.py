"""HTTP JSON source.

A small asynchronous producer used by the ``retrycache demo`` command: GET
a URL and decode its JSON body. Non-2xx responses raise ``SourceError``;
transport failures (``httpx.TransportError``) propagate as they are. Both
count as failures for a retry wrapper.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from retrycache.core.errors import SourceError
from retrycache.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


async def fetch_json(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """GET ``url`` and return the decoded JSON body.

    Args:
        url: Absolute URL to fetch
        client: Reused client; a short-lived one is opened when omitted
        timeout: Request timeout in seconds (only for the short-lived client)

    Raises:
        SourceError: On a non-2xx status
        httpx.HTTPError: On transport failures
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await _get_json(own_client, url)
    return await _get_json(client, url)


async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
    response = await client.get(url)
    if not response.is_success:
        logger.debug("http_error_status", url=url, status=response.status_code)
        raise SourceError(response.status_code, url=url)
    return response.json()


def json_source(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Callable[[], Awaitable[Any]]:
    """Return a zero-argument producer that fetches ``url``.

    Binding the URL up front keeps the producer argument-invariant, which
    is what the single-slot cache expects.
    """

    async def fetch() -> Any:
        return await fetch_json(url, client=client, timeout=timeout)

    fetch.__name__ = "fetch_json_source"
    fetch.__qualname__ = f"json_source({url!r})"
    return fetch


__all__ = ["DEFAULT_TIMEOUT", "fetch_json", "json_source"]
