"""
HTTP utilities

This module handles GET requests against the upstream host with retry logic.
"""
import logging
import asyncio

import httpx


logger = logging.getLogger(__name__)


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    max_retries: int = 3,
    backoff_factor: float = 2.0
) -> bytes:
    """
    GET a URL with exponential backoff retry logic

    Retries on transient network errors (timeouts, connection errors) and 5xx responses.
    Does NOT retry on 4xx HTTP errors (client errors).

    Args:
        client: Shared HTTP client (carries the request timeout)
        url: URL to fetch
        headers: Extra request headers
        max_retries: Maximum number of attempts (1 disables retrying)
        backoff_factor: Exponential backoff multiplier (wait = backoff_factor ^ attempt)

    Returns:
        Response body

    Raises:
        httpx.HTTPError: If the request fails after all retries
    """
    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            return response.content

        except (httpx.TimeoutException, httpx.TransportError) as e:
            # Transient network errors - retry
            last_error = e
            if attempt < max_retries - 1:
                wait_time = backoff_factor ** attempt
                logger.warning(
                    f"GET attempt {attempt + 1}/{max_retries} for {url} failed (transient error): {type(e).__name__}. "
                    f"Retrying in {wait_time:.1f}s..."
                )
                await asyncio.sleep(wait_time)

        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                logger.debug(f"HTTP {e.response.status_code} (client error) for {url}")
                raise

            # 5xx server error - retry
            last_error = e
            if attempt < max_retries - 1:
                wait_time = backoff_factor ** attempt
                logger.warning(
                    f"GET attempt {attempt + 1}/{max_retries} for {url} failed "
                    f"(HTTP {e.response.status_code} server error). "
                    f"Retrying in {wait_time:.1f}s..."
                )
                await asyncio.sleep(wait_time)

    if last_error:
        raise last_error

    raise RuntimeError(f"Failed to fetch {url} after {max_retries} attempts")
