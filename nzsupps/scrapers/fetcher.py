"""Static HTML fetcher built on httpx."""

import asyncio
from typing import Optional

import httpx
import structlog

from nzsupps.config import settings
from nzsupps.core.exceptions import FetchError, FetchTimeoutError
from nzsupps.scrapers.utils.user_agents import default_headers


logger = structlog.get_logger(__name__)


async def fetch_html(
    url: str,
    *,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """GET a page and return its body as text.

    No retries happen here: callers decide whether a failure ends pagination
    or becomes a recorded error.

    Args:
        url: Absolute page URL
        timeout: Seconds before the request is aborted (defaults to settings)
        client: Optional shared client; a short-lived one is created otherwise

    Returns:
        Response body decoded as text

    Raises:
        FetchTimeoutError: If the whole request, body included, exceeds the timeout
        FetchError: On a non-2xx status or a transport failure
    """
    timeout = settings.FETCH_TIMEOUT_SECONDS if timeout is None else timeout

    if client is None:
        async with httpx.AsyncClient(
            timeout=timeout, headers=default_headers(), follow_redirects=True
        ) as owned:
            return await _get(owned, url, timeout)
    return await _get(client, url, timeout)


async def _get(client: httpx.AsyncClient, url: str, timeout: float) -> str:
    try:
        # httpx timeouts are per phase; a slow body needs an overall deadline
        response = await asyncio.wait_for(
            client.get(url, headers=default_headers(), timeout=timeout), timeout
        )
    except (httpx.TimeoutException, asyncio.TimeoutError) as e:
        logger.warning("fetch_timeout", url=url, timeout=timeout)
        raise FetchTimeoutError(url, timeout) from e
    except httpx.HTTPError as e:
        logger.warning("fetch_network_error", url=url, error=str(e))
        raise FetchError(url, f"{type(e).__name__}: {e} for {url}") from e

    if not response.is_success:
        logger.warning("fetch_http_error", url=url, status_code=response.status_code)
        raise FetchError(
            url,
            f"HTTP {response.status_code} for {url}",
            status_code=response.status_code,
        )

    logger.debug("fetch_ok", url=url, size=len(response.content))
    return response.text
