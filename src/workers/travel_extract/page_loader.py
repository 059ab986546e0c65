"""
Page loading: from a URL to a PageContext.

Rendered mode drives headless Chromium through Playwright, which is the
only way to see client-side hydration globals and the resource timing
list of a results page. Static mode fetches the HTML with curl_cffi
(browser TLS fingerprint) and recovers `window.__STATE__ = {...}`
assignments from inline scripts.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from curl_cffi.requests import AsyncSession as CurlSession, RequestsError
from playwright.async_api import Error as PlaywrightError, async_playwright

from core.config import settings
from core.exceptions import PageLoadError
from workers.travel_extract.page import PageContext
from workers.travel_extract.strategies.hydration import HYDRATION_KEYS

logger = logging.getLogger(__name__)

_GLOBAL_ASSIGNMENT = re.compile(r"window\.(__[A-Z_]+__)\s*=\s*")

# Serialized in the page; non-JSON values (functions, cycles) are skipped
_CAPTURE_GLOBALS_JS = """
(keys) => {
  const out = {};
  for (const k of keys) {
    try {
      if (window[k] !== undefined) out[k] = JSON.parse(JSON.stringify(window[k]));
    } catch (e) {}
  }
  return out;
}
"""

_CAPTURE_RESOURCES_JS = "() => performance.getEntriesByType('resource').map(e => e.name)"


def _request_headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent, "Accept-Language": settings.accept_language}


def parse_inline_globals(html: str) -> dict[str, Any]:
    """Decode `window.KEY = {...}` assignments embedded in inline scripts."""
    decoder = json.JSONDecoder()
    found: dict[str, Any] = {}
    for match in _GLOBAL_ASSIGNMENT.finditer(html):
        name = match.group(1)
        if name in found:
            continue
        try:
            value, _end = decoder.raw_decode(html, match.end())
        except json.JSONDecodeError:
            logger.debug("Inline global %s is not plain JSON, skipping", name)
            continue
        found[name] = value
    return found


async def capture_playwright_page(pw_page: Any) -> PageContext:
    """Snapshot a live Playwright page into a PageContext."""
    keys = [key.name for key in HYDRATION_KEYS]
    html = await pw_page.content()
    title = await pw_page.title()
    page_globals = await pw_page.evaluate(_CAPTURE_GLOBALS_JS, keys)
    resources = await pw_page.evaluate(_CAPTURE_RESOURCES_JS)
    cookies = await pw_page.context.cookies(pw_page.url)
    return PageContext(
        url=pw_page.url,
        html=html,
        title=title,
        globals=page_globals or {},
        resource_urls=tuple(resources or ()),
        cookies={c["name"]: c["value"] for c in cookies},
    )


async def render_page(url: str) -> PageContext:
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                context = await browser.new_context(
                    user_agent=settings.user_agent,
                    extra_http_headers={"Accept-Language": settings.accept_language},
                )
                page = await context.new_page()
                await page.goto(url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
                await page.wait_for_timeout(settings.settle_delay_ms)
                return await capture_playwright_page(page)
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise PageLoadError(f"Browser navigation failed: {exc.message}", url=url) from exc


async def fetch_page(url: str) -> PageContext:
    try:
        async with CurlSession(
            headers=_request_headers(),
            timeout=settings.fetch_timeout,
            impersonate="chrome120",
        ) as client:
            response = await client.get(url)
    except RequestsError as exc:
        raise PageLoadError(f"Fetch failed: {exc}", url=url) from exc

    if response.status_code >= 400:
        raise PageLoadError(f"HTTP {response.status_code}", url=url, status_code=response.status_code)

    html = response.text
    return PageContext(
        url=str(response.url or url),
        html=html,
        globals=parse_inline_globals(html),
        cookies=dict(response.cookies),
    )


async def load_page(url: str, render: bool | None = None) -> PageContext:
    """Load a URL into a PageContext, rendered or static per settings."""
    render = settings.render_with_browser if render is None else render
    logger.info("Loading %s (%s)", url, "browser" if render else "static")
    if render:
        return await render_page(url)
    return await fetch_page(url)
