"""Data models for the travel extraction pipeline (rows, facts, envelopes)."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

CONFIDENCE_CEILING = 0.99


class PlatformTag(StrEnum):
    """Booking platforms we can fingerprint from a results page."""

    VAX = "vax"                  # VacationAccess / booking services CDN
    WAD = "wad"                  # World Agent Direct (Delta)
    NAVITRIP_CP = "navitrip_cp"  # Navitrip / CPMaxx / Cruise Planners
    GENERIC = "generic"


class HotelRoute(StrEnum):
    """Tier that satisfied a hotel results extraction."""

    HYDRATION = "hydration"
    XHR = "xhr"
    DOM = "dom"


class FactRoute(StrEnum):
    """Method that produced a travel fact."""

    JSONLD = "jsonld"
    HYDRATION = "hydration"
    INLINE_JSON = "inlineJson"
    REGEX = "regex"


class FactKind(StrEnum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    RESERVATION = "reservation"
    EVENT = "event"
    PLACE = "place"
    GENERIC = "generic"


# ══════════════════════════════════════════════════════════════════════
# HOTEL RESULTS
# ══════════════════════════════════════════════════════════════════════

class HotelRow(BaseModel):
    """
    Canonical list-result record, as produced by every tier.

    Deliberately permissive: ratings can be numbers or display strings,
    price and currency stay free text. Only the shape is checked here;
    addressability is enforced when mapping to HotelDTO.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    name: str | None = None
    brand: str | None = None
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    star_rating: float | str | None = None
    review_score: float | str | None = None
    price_text: str | None = None
    currency: str | None = None
    taxes_fees_text: str | None = None
    cancel_text: str | None = None
    refundable: bool | None = None
    package_type: str | None = None  # Air+Hotel, Hotel-only, etc.
    image: str | None = None
    detail_url: str | None = None


class HotelDTO(BaseModel):
    """Outward-facing hotel record handed to search, caching and persistence."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    brand: str | None = None
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    star_rating: float | None = None
    review_score: float | None = None
    price_text: str | None = None
    currency: str | None = None
    taxes_fees_text: str | None = None
    cancel_text: str | None = None
    refundable: bool | None = None
    package_type: str | None = None
    image: str | None = None
    detail_url: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ══════════════════════════════════════════════════════════════════════
# TRAVEL FACTS
# ══════════════════════════════════════════════════════════════════════

class FactSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    route: FactRoute
    hints: list[str] = Field(default_factory=list)
    selectors: list[str] | None = None


class _FactBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    confidence: float = Field(ge=0.0, le=CONFIDENCE_CEILING)
    source: FactSource
    text_snippets: list[str] | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FlightFact(_FactBase):
    kind: Literal["flight"] = "flight"
    airline: str | None = None
    flight_number: str | None = None
    dep_airport: str | None = None
    arr_airport: str | None = None
    dep_time: str | None = None
    arr_time: str | None = None
    record_locator: str | None = None
    passenger_names: list[str] | None = None
    price_text: str | None = None


class HotelStayFact(_FactBase):
    kind: Literal["hotel"] = "hotel"
    hotel_name: str | None = None
    address: str | None = None
    check_in: str | None = None
    check_out: str | None = None
    confirmation: str | None = None
    price_text: str | None = None
    currency: str | None = None
    phone: str | None = None
    url: str | None = None


class ReservationFact(_FactBase):
    kind: Literal["reservation"] = "reservation"
    supplier: str | None = None
    confirmation: str | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    name: str | None = None
    location: str | None = None
    price_text: str | None = None


class EventFact(_FactBase):
    kind: Literal["event"] = "event"
    name: str | None = None
    start: str | None = None
    end: str | None = None
    venue: str | None = None
    address: str | None = None
    url: str | None = None
    price_text: str | None = None
    is_free: bool | None = None


class PlaceFact(_FactBase):
    kind: Literal["place"] = "place"
    name: str | None = None
    category: str | None = None
    address: str | None = None
    lat: float | None = None
    lon: float | None = None
    hours: str | None = None
    url: str | None = None
    phone: str | None = None


class GenericNote(_FactBase):
    kind: Literal["generic"] = "generic"
    title: str | None = None
    body: str | None = None


TravelFact = Annotated[
    Union[FlightFact, HotelStayFact, ReservationFact, EventFact, PlaceFact, GenericNote],
    Field(discriminator="kind"),
]

travel_fact_adapter: TypeAdapter[TravelFact] = TypeAdapter(TravelFact)


# ══════════════════════════════════════════════════════════════════════
# ENVELOPE
# ══════════════════════════════════════════════════════════════════════

class ExtractionEnvelope(BaseModel):
    """
    Small wire record returned by a page script.

    Built once per invocation and never mutated. The heavy payload travels
    gzipped + base64 encoded; `sample` holds the first few records for
    quick inspection.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ok: bool
    page_type: str | None = Field(default=None, alias="pageType")
    route: str | None = None
    count: int | None = None
    sample: list[dict[str, Any]] | None = None
    ndjson_gz_base64: str | None = None
    facts_gz_base64: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HotelExtractArgs(BaseModel):
    """Arguments of the hotel results call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str | None = None
    page_type_hint: str | None = Field(default=None, alias="pageTypeHint")
    max_rows: float | None = Field(default=None, alias="maxRows")
    dom_selector: str | None = Field(default=None, alias="domSelector")


class FactsExtractArgs(BaseModel):
    """Arguments of the generic travel facts call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str | None = None
    hint: str | None = None
    max_chars: int | None = Field(default=None, alias="maxChars")
    prefer_kind: list[str] = Field(default_factory=list, alias="preferKind")
