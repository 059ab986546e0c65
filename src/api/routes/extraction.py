"""Extraction API — hotel results and travel facts for a URL."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from workers.travel_extract import service

router = APIRouter(prefix="/api/extract", tags=["extract"])


# ── Request schemas ───────────────────────────────────────────────────

class HotelExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    page_type_hint: str | None = Field(default=None, alias="pageTypeHint")
    max_rows: float | None = Field(default=None, alias="maxRows")
    dom_selector: str | None = Field(default=None, alias="domSelector")
    render: bool | None = None


class FactsExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    hint: str | None = None
    max_chars: int | None = Field(default=None, alias="maxChars")
    prefer_kind: list[str] = Field(default_factory=list, alias="preferKind")
    render: bool | None = None


# ── Endpoints ─────────────────────────────────────────────────────────

@router.post("/hotels")
async def extract_hotels(body: HotelExtractRequest) -> dict:
    args = body.model_dump(by_alias=True, exclude_none=True, exclude={"url", "render"})
    return await service.extract_hotels_from_url(body.url, args, render=body.render)


@router.post("/facts")
async def extract_facts(body: FactsExtractRequest) -> dict:
    args = body.model_dump(by_alias=True, exclude_none=True, exclude={"url", "render"})
    return await service.extract_facts_from_url(body.url, args, render=body.render)
