"""
ARQ Worker Settings — Registers the extraction jobs.

Usage:
    arq workers.worker_settings.WorkerSettings

Enqueue from a host:
    await redis.enqueue_job("extract_hotels", url, {"maxRows": 500})
"""

from __future__ import annotations

import logging
from typing import Any

from arq.connections import RedisSettings

from core.config import settings
from core.exceptions import PageLoadError

logger = logging.getLogger(__name__)


async def extract_hotels(ctx: dict, url: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
    """ARQ job: hotel results of one page."""
    from workers.travel_extract.service import extract_hotels_from_url

    try:
        return await extract_hotels_from_url(url, args)
    except PageLoadError as exc:
        logger.warning("Could not load %s: %s", url, exc.message)
        return {"envelope": {"ok": False, "error": exc.message}, "hotels": [], "dropped": 0}


async def extract_travel_facts(ctx: dict, url: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
    """ARQ job: travel facts of one page."""
    from workers.travel_extract.service import extract_facts_from_url

    try:
        return await extract_facts_from_url(url, args)
    except PageLoadError as exc:
        logger.warning("Could not load %s: %s", url, exc.message)
        return {"envelope": {"ok": False, "error": exc.message}, "facts": [], "best": {}}


async def startup(ctx: dict) -> None:
    """Called on worker startup."""
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("Extraction worker started")


async def shutdown(ctx: dict) -> None:
    """Called on worker shutdown."""
    pass


class WorkerSettings:
    """ARQ worker configuration."""

    functions = [
        extract_hotels,
        extract_travel_facts,
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = RedisSettings.from_dsn(settings.redis_url)
