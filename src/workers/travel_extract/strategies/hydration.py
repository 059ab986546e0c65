"""
Hydration-state tier.

Server-rendered pages embed their initial application state either in a
window global or in an inline <script type="application/json"> block,
often holding exactly the result list shown in the UI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from workers.travel_extract.field_candidates import (
    Path,
    find_hotel_array,
    first_in_paths,
    looks_like_hotel,
    map_hotel_object,
)
from workers.travel_extract.models import HotelRoute
from workers.travel_extract.strategies.base import BaseStrategy, StrategyResult

logger = logging.getLogger(__name__)

_RESULT_PATHS: tuple[Path, ...] = (
    ("props", "pageProps", "results"),
    ("search", "results", "hotels"),
    ("results", "hotels"),
    ("data", "search", "results"),
)

_INLINE_PATHS: tuple[Path, ...] = (
    ("hotels",),
    ("properties",),
    ("results",),
)


def _apollo_entities(state: Any) -> list | None:
    """Normalized Apollo caches keep entities as "Type:id" -> object."""
    if not isinstance(state, dict):
        return None
    entities = [
        value
        for value in state.values()
        if isinstance(value, dict)
        and any(tag in str(value.get("__typename", "")).lower() for tag in ("hotel", "property", "lodging"))
        and looks_like_hotel(value)
    ]
    return entities or None


@dataclass(frozen=True)
class HydrationKey:
    name: str
    paths: tuple[Path, ...] = _RESULT_PATHS
    extractor: Callable[[Any], list | None] | None = None

    def find_items(self, state: Any) -> list | None:
        items = first_in_paths(state, self.paths)
        if items is None and self.extractor is not None:
            items = self.extractor(state)
        if items is None:
            items = find_hotel_array(state)
        return items


# Bump when entries change so captured meta can be traced to a table revision
HYDRATION_KEYS_VERSION = 1

HYDRATION_KEYS: tuple[HydrationKey, ...] = (
    HydrationKey("__INITIAL_STATE__"),
    HydrationKey("__PRELOADED_STATE__"),
    HydrationKey("__REDUX_STATE__"),
    HydrationKey("__NUXT__"),
    HydrationKey("__NEXT_DATA__"),
    HydrationKey("__APOLLO_STATE__", extractor=_apollo_entities),
)


class HydrationStrategy(BaseStrategy):
    route = HotelRoute.HYDRATION

    async def attempt(self) -> StrategyResult | None:
        for key in HYDRATION_KEYS:
            if key.name not in self.page.globals:
                continue
            items = key.find_items(self.page.globals[key.name])
            if items:
                logger.debug("Hydration hit on %s (%d items)", key.name, len(items))
                return self._result(items, key.name)

        for script, _raw, data in self.page.json_blocks("application/json"):
            items = first_in_paths(data, _INLINE_PATHS) or find_hotel_array(data)
            if items:
                label = f"inline#{script['id']}" if script.get("id") else "inline"
                logger.debug("Hydration hit on %s block (%d items)", label, len(items))
                return self._result(items, label)

        logger.debug("Hydration tier: no hotel-shaped state found")
        return None

    def _result(self, items: list, key: str) -> StrategyResult | None:
        rows = [map_hotel_object(item, self.page.url) for item in items[: self.max_rows]]
        rows = [row for row in rows if row]
        if not rows:
            return None
        return StrategyResult(
            route=self.route,
            rows=rows,
            meta={"hydrationKey": key, "hydrationKeysVersion": HYDRATION_KEYS_VERSION},
        )
