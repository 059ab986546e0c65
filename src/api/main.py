"""
FastAPI application entry point.

Health check plus on-demand extraction endpoints. Longer batches go
through the ARQ worker (workers.worker_settings).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes.extraction import router as extraction_router
from core.config import settings
from core.exceptions import PageLoadError, TransportDecodeError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup/shutdown events."""
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("Travel extraction API starting")
    yield


app = FastAPI(
    title="Travel Extraction Engine",
    description="Hotel results and travel facts from booking pages",
    version="0.1.0",
    lifespan=lifespan,
)


# ── Error handlers ────────────────────────────────────────────────────

@app.exception_handler(PageLoadError)
async def page_load_error_handler(request: Request, exc: PageLoadError) -> JSONResponse:
    logger.warning("Page load failed for %s: %s", exc.url, exc.message)
    return JSONResponse(
        status_code=502,
        content={"detail": exc.message, "url": exc.url, "upstream_status": exc.status_code},
    )


@app.exception_handler(TransportDecodeError)
async def transport_error_handler(request: Request, exc: TransportDecodeError) -> JSONResponse:
    logger.error("Payload decode failed: %s", exc.message)
    return JSONResponse(status_code=500, content={"detail": exc.message})


# ── Routes ────────────────────────────────────────────────────────────
app.include_router(extraction_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "travel-extraction-engine"}
