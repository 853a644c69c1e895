"""Async HTTP client utilities for fetching imported audit ledgers.

Provides a thin wrapper around ``httpx.AsyncClient`` with standardised
timeouts, user-agent headers, and error handling, so that import fetching
behaves consistently and is easy to mock in tests.

Raises ``ImportFetchError`` (a subclass of ``ChainVetError``) on any HTTP
failure: an import that cannot be fetched must never silently become an
empty ledger.
"""

from __future__ import annotations

import logging

import httpx

from chainvet.exceptions import ImportFetchError

logger = logging.getLogger(__name__)

# Timeout for all import HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = "chainvet-imports/0.1"


async def fetch_text(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Fetch a URL and return the response body as text.

    Args:
        url: The URL to fetch.
        timeout: Request timeout in seconds.

    Returns:
        Response body text.

    Raises:
        ImportFetchError: On timeouts, HTTP error statuses, or transport errors.
    """
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
    except httpx.TimeoutException as exc:
        logger.warning("Timeout fetching %s", url)
        raise ImportFetchError(f"Timeout fetching {url}") from exc
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP %d from %s", exc.response.status_code, url)
        raise ImportFetchError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.RequestError as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise ImportFetchError(f"Request error fetching {url}: {exc}") from exc
