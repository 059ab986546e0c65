"""
Network-response tier.

Re-reads a JSON endpoint the page itself already called (taken from its
resource timing entries) with the page's cookies, and looks for the
result list in the body.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any
from urllib.parse import urlparse

import httpx

from core.config import settings
from workers.travel_extract.field_candidates import Path, find_hotel_array, first_in_paths, map_hotel_object
from workers.travel_extract.models import HotelRoute
from workers.travel_extract.page import PageContext
from workers.travel_extract.strategies.base import BaseStrategy, StrategyResult

logger = logging.getLogger(__name__)

JsonFetcher = Callable[[str], Awaitable[Any]]

_API_SHAPED = re.compile(
    r"api|search|result|hotel|property|availability|booking|services|graphql|trams",
    re.IGNORECASE,
)
_RESULT_SHAPED = re.compile(r"hotel|results|search", re.IGNORECASE)

_BODY_PATHS: tuple[Path, ...] = (
    ("hotels",),
    ("properties",),
    ("results",),
    ("data", "hotels"),
    ("data", "search", "results"),
)


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}" if parsed.scheme and parsed.netloc else ""


def pick_endpoint(resource_urls: tuple[str, ...] | list[str], page_origin: str) -> str | None:
    """
    Choose the most result-shaped URL among what the page already fetched:
    same-origin and result-shaped, then any result-shaped, then the first
    API-shaped candidate.
    """
    candidates = list(dict.fromkeys(u for u in resource_urls if _API_SHAPED.search(u)))
    if not candidates:
        return None
    for url in candidates:
        if page_origin and _origin(url) == page_origin and _RESULT_SHAPED.search(url):
            return url
    for url in candidates:
        if _RESULT_SHAPED.search(url):
            return url
    return candidates[0]


class HttpxJsonFetcher:
    """GETs a URL with the page's cookies and returns the parsed JSON body (or None)."""

    def __init__(self, cookies: Mapping[str, str] | None = None, referer: str | None = None) -> None:
        self._cookies = dict(cookies or {})
        self._headers = {
            "User-Agent": settings.user_agent,
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": settings.accept_language,
        }
        if referer:
            self._headers["Referer"] = referer

    async def __call__(self, url: str) -> Any:
        async with httpx.AsyncClient(
            cookies=self._cookies,
            headers=self._headers,
            timeout=settings.fetch_timeout,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.debug("Re-fetch of %s failed: %s", url, exc)
                return None


class NetworkStrategy(BaseStrategy):
    route = HotelRoute.XHR

    def __init__(self, page: PageContext, max_rows: int, fetcher: JsonFetcher | None = None) -> None:
        super().__init__(page, max_rows)
        self._fetcher = fetcher or HttpxJsonFetcher(page.cookies, referer=page.url or None)

    async def attempt(self) -> StrategyResult | None:
        endpoint = pick_endpoint(self.page.resource_urls, self.page.origin)
        if endpoint is None:
            logger.debug("XHR tier: no API-shaped resource entries")
            return None

        body = await self._fetcher(endpoint)
        if body is None:
            return None

        items = first_in_paths(body, _BODY_PATHS) or find_hotel_array(body)
        if not items:
            logger.debug("XHR tier: %s returned no hotel-shaped list", endpoint)
            return None

        rows = [map_hotel_object(item, self.page.url) for item in items[: self.max_rows]]
        rows = [row for row in rows if row]
        if not rows:
            return None
        logger.debug("XHR hit on %s (%d rows)", endpoint, len(rows))
        return StrategyResult(route=self.route, rows=rows, meta={"endpoint": endpoint})
