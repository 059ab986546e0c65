"""
Hotel Results Script
====================
Turns a hotel search results page into canonical HotelRow records:

1. Classify the page (PlatformDetector, unless a hint is given)
2. Run the platform's tier chain until one tier yields rows
3. Compress the rows as NDJSON and return a small envelope

Never raises: every failure, including unexpected exceptions, comes back
as {ok: false, error}.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from core.config import settings
from workers.travel_extract import transport
from workers.travel_extract.coerce import clamp
from workers.travel_extract.models import ExtractionEnvelope, HotelExtractArgs
from workers.travel_extract.page import PageContext
from workers.travel_extract.platform_detector import PlatformDetector
from workers.travel_extract.strategies.dom import Scheduler
from workers.travel_extract.strategies.network import JsonFetcher
from workers.travel_extract.strategy_factory import StrategyFactory

logger = logging.getLogger(__name__)


def clamp_max_rows(requested: float | None) -> int:
    value = settings.max_rows_default if requested is None else requested
    return int(clamp(value, settings.max_rows_floor, settings.max_rows_ceiling))


class HotelResultsScript:
    """Page script for list-style hotel results."""

    name = "smart_results_extractor"

    def __init__(self, fetcher: JsonFetcher | None = None, scheduler: Scheduler | None = None) -> None:
        self._fetcher = fetcher
        self._scheduler = scheduler

    async def run(self, page: PageContext, args: Mapping[str, Any] | None = None) -> ExtractionEnvelope:
        started = time.perf_counter()
        try:
            return await self._run(page, HotelExtractArgs.model_validate(args or {}), started)
        except ValidationError as exc:
            return ExtractionEnvelope(ok=False, error=f"Invalid arguments: {exc.error_count()} error(s)")
        except Exception as exc:
            logger.exception("Hotel results script crashed on %s", page.url)
            return ExtractionEnvelope(ok=False, error=f"{type(exc).__name__}: {exc}")

    async def _run(self, page: PageContext, args: HotelExtractArgs, started: float) -> ExtractionEnvelope:
        max_rows = clamp_max_rows(args.max_rows)
        platform = PlatformDetector.detect(page, args.page_type_hint)
        notes = [f"pageType={platform}", f"maxRows={max_rows}"]

        chain = StrategyFactory.create_chain(
            platform,
            page,
            max_rows,
            dom_selector=args.dom_selector,
            fetcher=self._fetcher,
            scheduler=self._scheduler,
        )

        result = None
        for strategy in chain:
            try:
                result = await strategy.attempt()
            except Exception:
                logger.exception("Tier %s failed on %s, falling through", strategy.route, page.url or "<page>")
                notes.append(f"error={strategy.route}")
                result = None
                continue
            if result is not None and result.rows:
                break
            notes.append(f"miss={strategy.route}")
            result = None

        if result is None:
            logger.warning("No hotel rows on %s (platform=%s)", page.url or "<page>", platform)
            return ExtractionEnvelope(
                ok=False,
                page_type=str(platform),
                error="No results via hydration/xhr/dom",
                meta={"notes": notes},
            )

        rows = result.rows[:max_rows]
        notes.append(f"hit={result.route}")
        logger.info("Extracted %d hotel rows via %s (platform=%s)", len(rows), result.route, platform)
        return ExtractionEnvelope(
            ok=True,
            page_type=str(platform),
            route=result.route.value,
            count=len(rows),
            sample=rows[: settings.hotel_sample_size],
            ndjson_gz_base64=transport.encode_ndjson(rows),
            meta={
                **result.meta,
                "timing_ms": round((time.perf_counter() - started) * 1000),
                "notes": notes,
            },
        )
