"""
URL-level extraction: load a page, run a script, decode the result.

Shared by the HTTP routes and the ARQ jobs so both return the same shape.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from workers.travel_extract.decoder import best_fact_per_kind
from workers.travel_extract.injector import PageInjector, inject_generic_facts, inject_smart_results
from workers.travel_extract.page_loader import load_page

logger = logging.getLogger(__name__)


async def extract_hotels_from_url(url: str, args: Mapping[str, Any] | None = None, render: bool | None = None) -> dict[str, Any]:
    """Hotel rows of a results page, mapped to DTOs. Raises PageLoadError."""
    page = await load_page(url, render=render)
    output = await inject_smart_results(PageInjector(page), {**(args or {}), "url": url})
    return {
        "envelope": output.raw,
        "hotels": [dto.to_wire() for dto in output.dtos],
        "dropped": output.dropped,
    }


async def extract_facts_from_url(url: str, args: Mapping[str, Any] | None = None, render: bool | None = None) -> dict[str, Any]:
    """Travel facts of an arbitrary page plus the best fact of each kind. Raises PageLoadError."""
    page = await load_page(url, render=render)
    output = await inject_generic_facts(PageInjector(page), {**(args or {}), "url": url})
    best = best_fact_per_kind(output.facts)
    return {
        "envelope": output.raw,
        "facts": [fact.to_wire() for fact in output.facts],
        "best": {kind: fact.to_wire() for kind, fact in best.items()},
    }
