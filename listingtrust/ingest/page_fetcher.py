"""Raw page fetch for the client-side preview; never used for the verdict itself."""

from __future__ import annotations

import logging

import httpx

from listingtrust.schemas.models import PageFetchResult

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}


async def fetch_page_html(
    url: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PageFetchResult:
    """
    GET ``url`` with browser-like headers.

    Any transport error, timeout or non-2xx status is reported as
    ``blocked=True`` instead of raising.
    """
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers=BROWSER_HEADERS,
            transport=transport,
        ) as client:
            response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.info("Page fetch blocked for %s: %s", url, e)
        return PageFetchResult(blocked=True)

    if not response.is_success:
        logger.info("Page fetch blocked for %s: status %s", url, response.status_code)
        return PageFetchResult(blocked=True)
    return PageFetchResult(blocked=False, html=response.text)
