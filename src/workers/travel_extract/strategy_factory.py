"""
StrategyFactory: Strategy Pattern router.

Decides which tiers run, and in which order, based on the detected
booking platform.

Flow:
  Step 1 → Receive the platform tag from PlatformDetector
  Step 2 → Look up the platform's tier order
  Step 3 → Instantiate each tier with the page context and row cap

Usage:
    for strategy in StrategyFactory.create_chain(platform, page, max_rows):
        result = await strategy.attempt()
"""

from __future__ import annotations

import logging

from workers.travel_extract.models import HotelRoute, PlatformTag
from workers.travel_extract.page import PageContext
from workers.travel_extract.strategies import BaseStrategy, DomStrategy, HydrationStrategy, NetworkStrategy
from workers.travel_extract.strategies.dom import Scheduler
from workers.travel_extract.strategies.network import JsonFetcher

logger = logging.getLogger(__name__)

# ── Registry: maps PlatformTag → tier order ───────────────────────────
# Platforms that hydrate reliably read state first; platforms known to
# expose a clean internal JSON API during the session sample it first.

_DEFAULT_ORDER: tuple[HotelRoute, ...] = (HotelRoute.HYDRATION, HotelRoute.XHR, HotelRoute.DOM)

_STRATEGY_ORDER: dict[str, tuple[HotelRoute, ...]] = {
    PlatformTag.VAX: (HotelRoute.HYDRATION, HotelRoute.XHR, HotelRoute.DOM),
    PlatformTag.WAD: (HotelRoute.XHR, HotelRoute.HYDRATION, HotelRoute.DOM),
    PlatformTag.NAVITRIP_CP: (HotelRoute.XHR, HotelRoute.HYDRATION, HotelRoute.DOM),
}


class StrategyFactory:
    """Builds the ordered tier chain for a platform."""

    @staticmethod
    def order_for(platform: str) -> tuple[HotelRoute, ...]:
        order = _STRATEGY_ORDER.get(platform)
        if order is None:
            logger.debug("No specific tier order for platform=%s, using default.", platform)
            return _DEFAULT_ORDER
        return order

    @staticmethod
    def create(
        route: HotelRoute,
        page: PageContext,
        max_rows: int,
        *,
        dom_selector: str | None = None,
        fetcher: JsonFetcher | None = None,
        scheduler: Scheduler | None = None,
    ) -> BaseStrategy:
        if route is HotelRoute.HYDRATION:
            return HydrationStrategy(page, max_rows)
        if route is HotelRoute.XHR:
            return NetworkStrategy(page, max_rows, fetcher=fetcher)
        return DomStrategy(page, max_rows, selector=dom_selector, scheduler=scheduler)

    @classmethod
    def create_chain(
        cls,
        platform: str,
        page: PageContext,
        max_rows: int,
        *,
        dom_selector: str | None = None,
        fetcher: JsonFetcher | None = None,
        scheduler: Scheduler | None = None,
    ) -> list[BaseStrategy]:
        return [
            cls.create(
                route,
                page,
                max_rows,
                dom_selector=dom_selector,
                fetcher=fetcher,
                scheduler=scheduler,
            )
            for route in cls.order_for(platform)
        ]
