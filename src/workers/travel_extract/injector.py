"""
Injector boundary and the host-side call API.

An Injector runs a page script against "the current page" and returns
whatever JSON the script produced. Two are provided:

- PageInjector: runs against an already captured PageContext
- PlaywrightInjector: captures a live Playwright page first

inject_smart_results / inject_generic_facts wrap a call and decode the
envelope, which is all a host needs.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from workers.travel_extract.decoder import decode_raw_rows, decode_travel_facts, map_rows
from workers.travel_extract.facts_extractor import TravelFactsScript
from workers.travel_extract.hotel_extractor import HotelResultsScript
from workers.travel_extract.models import ExtractionEnvelope, HotelDTO
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)


class PageScript(Protocol):
    name: str

    async def run(self, page: PageContext, args: Mapping[str, Any] | None = None) -> ExtractionEnvelope: ...


Injector = Callable[[PageScript, Mapping[str, Any]], Awaitable[dict[str, Any]]]


class PageInjector:
    """Runs page scripts against a captured page."""

    def __init__(self, page: PageContext) -> None:
        self.page = page

    async def __call__(self, script: PageScript, args: Mapping[str, Any]) -> dict[str, Any]:
        try:
            envelope = await script.run(self.page, args)
        except Exception as exc:
            logger.exception("Page script %s failed on %s", script.name, self.page.url)
            envelope = ExtractionEnvelope(ok=False, error=f"{type(exc).__name__}: {exc}")
        return envelope.to_wire()


class PlaywrightInjector:
    """Captures the current state of a Playwright page on every call."""

    def __init__(self, pw_page: Any) -> None:
        self.pw_page = pw_page

    async def __call__(self, script: PageScript, args: Mapping[str, Any]) -> dict[str, Any]:
        from workers.travel_extract.page_loader import capture_playwright_page

        page = await capture_playwright_page(self.pw_page)
        return await PageInjector(page)(script, args)


# ── Host call API ─────────────────────────────────────────────────────

@dataclass
class SmartExtractOutput:
    raw: dict[str, Any]
    rows: list[Any] = field(default_factory=list)
    dtos: list[HotelDTO] = field(default_factory=list)
    dropped: int = 0


@dataclass
class GenericFactsOutput:
    raw: dict[str, Any]
    facts: list = field(default_factory=list)


async def inject_smart_results(
    injector: Injector,
    args: Mapping[str, Any] | None = None,
    script: PageScript | None = None,
) -> SmartExtractOutput:
    """Run the hotel results script and decode its rows into DTOs."""
    raw = await injector(script or HotelResultsScript(), dict(args or {}))
    rows = decode_raw_rows(raw)
    dtos, dropped = map_rows(rows)
    return SmartExtractOutput(raw=raw, rows=rows, dtos=dtos, dropped=dropped)


async def inject_generic_facts(
    injector: Injector,
    args: Mapping[str, Any] | None = None,
    script: PageScript | None = None,
) -> GenericFactsOutput:
    """Run the travel facts script and decode its facts."""
    raw = await injector(script or TravelFactsScript(), dict(args or {}))
    return GenericFactsOutput(raw=raw, facts=decode_travel_facts(raw))
