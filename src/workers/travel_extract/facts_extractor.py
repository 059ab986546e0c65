"""
Generic Travel Facts Script
===========================
Pulls travel facts (flights, hotel stays, reservations, events, places)
out of an arbitrary page:

1. JSON-LD structured data, filtered to what the caller is after
2. Inline application/json blocks
3. Regex heuristics over the visible text, with a generic fallback

The first method that yields facts wins. Each fact gets the method's
confidence bonus, clamped to the valid range. Never raises.
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
from workers.travel_extract.facts.hints import guess_target_kind
from workers.travel_extract.facts.inline_json import extract_inline_json_facts
from workers.travel_extract.facts.jsonld import extract_jsonld_facts
from workers.travel_extract.facts.regex_text import extract_regex_facts
from workers.travel_extract.models import (
    CONFIDENCE_CEILING,
    ExtractionEnvelope,
    FactRoute,
    FactsExtractArgs,
)
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)


def clamp_max_chars(requested: int | None) -> int:
    value = settings.max_chars_default if requested is None else requested
    return int(clamp(value, settings.max_chars_floor, settings.max_chars_ceiling))


def route_bonus(route: FactRoute) -> float:
    return {
        FactRoute.JSONLD: settings.confidence_bonus_jsonld,
        FactRoute.INLINE_JSON: settings.confidence_bonus_inline_json,
        FactRoute.REGEX: settings.confidence_bonus_regex,
    }.get(route, 0.0)


def with_bonus(facts: list, route: FactRoute) -> list:
    bonus = route_bonus(route)
    return [
        fact.model_copy(update={"confidence": round(clamp(fact.confidence + bonus, 0.0, CONFIDENCE_CEILING), 4)})
        for fact in facts
    ]


class TravelFactsScript:
    """Page script for arbitrary travel content."""

    name = "generic_travel_parser"

    async def run(self, page: PageContext, args: Mapping[str, Any] | None = None) -> ExtractionEnvelope:
        started = time.perf_counter()
        try:
            return self._run(page, FactsExtractArgs.model_validate(args or {}), started)
        except ValidationError as exc:
            return ExtractionEnvelope(ok=False, error=f"Invalid arguments: {exc.error_count()} error(s)")
        except Exception as exc:
            logger.exception("Travel facts script crashed on %s", page.url)
            return ExtractionEnvelope(ok=False, error=f"{type(exc).__name__}: {exc}")

    def _run(self, page: PageContext, args: FactsExtractArgs, started: float) -> ExtractionEnvelope:
        hint = args.hint or ""
        max_chars = clamp_max_chars(args.max_chars)
        target = guess_target_kind(hint, args.prefer_kind)

        route = FactRoute.JSONLD
        facts = extract_jsonld_facts(page, target)
        if not facts:
            logger.debug("No JSON-LD facts on %s", page.url or "<page>")
            route = FactRoute.INLINE_JSON
            facts = extract_inline_json_facts(page)
        if not facts:
            logger.debug("No inline JSON facts on %s", page.url or "<page>")
            route = FactRoute.REGEX
            facts = extract_regex_facts(page, max_chars, target, hint, args.prefer_kind)

        facts = with_bonus(facts, route)
        wire = [fact.to_wire() for fact in facts]
        logger.info("Extracted %d travel facts via %s (target=%s)", len(facts), route, target)

        return ExtractionEnvelope(
            ok=True,
            route=route.value,
            count=len(facts),
            sample=wire[: settings.facts_sample_size],
            facts_gz_base64=transport.encode_json(wire),
            meta={
                "timing_ms": round((time.perf_counter() - started) * 1000),
                "route": route.value,
                "hints": [hint],
                "charBudget": max_chars,
                "targetKind": target.value,
            },
        )
