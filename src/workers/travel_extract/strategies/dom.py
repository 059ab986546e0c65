"""
DOM card tier, the least stable signal and always tried last.

Selects result cards with a broad (caller-overridable) selector and maps
each card's sub-elements. Cards are processed in batches with a yield
point in between so a long result page does not monopolize the loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from core.config import settings
from workers.travel_extract.models import HotelRoute
from workers.travel_extract.page import PageContext, text_of
from workers.travel_extract.strategies.base import BaseStrategy, StrategyResult

logger = logging.getLogger(__name__)

Scheduler = Callable[[], Awaitable[None]]

DEFAULT_CARD_SELECTOR = (
    ".hotel-card,[data-result-id],[data-hotel-id],tr.result-row,.result-row,"
    ".hotel,.hotel-result,.property,.search-card,.card"
)

_NAME_SELECTOR = '.hotel-name,[itemprop="name"]'
_PRICE_SELECTOR = '.price,.rate,[data-test="price"]'
_ADDRESS_SELECTOR = '.address,[itemprop="address"]'
_LINK_SELECTOR = 'a[href*="hotel"],a[href*="property"]'


async def yield_to_loop() -> None:
    await asyncio.sleep(0)


class DomStrategy(BaseStrategy):
    route = HotelRoute.DOM

    def __init__(
        self,
        page: PageContext,
        max_rows: int,
        selector: str | None = None,
        scheduler: Scheduler | None = None,
        batch_size: int | None = None,
    ) -> None:
        super().__init__(page, max_rows)
        self.selector = selector or DEFAULT_CARD_SELECTOR
        self._yield = scheduler or yield_to_loop
        self._batch_size = max(1, batch_size or settings.dom_batch_size)

    async def attempt(self) -> StrategyResult | None:
        try:
            cards = self.page.soup.select(self.selector)
        except SelectorSyntaxError as exc:
            logger.warning("DOM tier: invalid selector %r: %s", self.selector, exc)
            return None
        if not cards:
            logger.debug("DOM tier: no cards for %s", self.selector)
            return None

        total = min(len(cards), self.max_rows)
        rows: list[dict[str, Any]] = []
        for start in range(0, total, self._batch_size):
            batch = cards[start : min(start + self._batch_size, total)]
            rows.extend(self._card_to_row(card) for card in batch)
            await self._yield()

        if not any(rows):
            logger.debug("DOM tier: %d cards but nothing mappable", total)
            return None
        return StrategyResult(route=self.route, rows=rows, meta={"selector": self.selector})

    def _card_to_row(self, card: Tag) -> dict[str, Any]:
        nested_id = card.select_one("[data-id]")
        stars = card.select_one("[data-stars]")
        star_label = card.select_one('[aria-label*="star"]')
        link = card.select_one(_LINK_SELECTOR)
        image = card.select_one("img")
        name = card.select_one(_NAME_SELECTOR) or card.select_one("h2, h3, h4")

        row = {
            "id": card.get("data-hotel-id")
            or card.get("data-result-id")
            or (nested_id.get("data-id") if nested_id else None),
            "name": text_of(name),
            "price_text": text_of(card.select_one(_PRICE_SELECTOR)),
            "star_rating": (stars.get("data-stars") if stars else None)
            or (star_label.get("aria-label") if star_label else None),
            "address": text_of(card.select_one(_ADDRESS_SELECTOR)),
            "detail_url": self.page.absolute(link.get("href")) if link else None,
            "image": self.page.absolute(image.get("src") or image.get("data-src")) if image else None,
        }
        return {key: value for key, value in row.items() if value}
