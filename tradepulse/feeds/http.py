"""Shared async HTTP helper for market-data providers.

Every provider call goes through ``get_json`` with an explicit timeout.
A timeout, transport error or non-2xx status raises an ``httpx.HTTPError``,
which the provider cascade treats as a tier failure.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("tradepulse.feeds")

DEFAULT_TIMEOUT = 10.0  # seconds


async def get_json(
    url: str,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """GET *url* and return the decoded JSON body.

    Raises:
        httpx.TimeoutException: the call exceeded *timeout*.
        httpx.HTTPStatusError: the response status was 4xx/5xx.
        httpx.TransportError: the connection failed.
        ValueError: the body was not valid JSON.
    """
    async with httpx.AsyncClient() as client:
        resp = await client.get(
            url,
            params=params,
            headers=headers,
            timeout=timeout,
        )
    logger.debug("GET %s → %d", url, resp.status_code)
    resp.raise_for_status()
    return resp.json()
