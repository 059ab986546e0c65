"""
Structured-data facts from <script type="application/ld+json">.

The most reliable source on confirmation pages and reservation emails:
schema.org FlightReservation, LodgingReservation, Event, Place etc. are
mapped to fact kinds, filtered by what the caller is after.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any

from workers.travel_extract.coerce import clean_text, to_number
from workers.travel_extract.facts.dates import normalize_datetime
from workers.travel_extract.facts.hints import accepts
from workers.travel_extract.field_candidates import FieldRule, apply_rules, dig
from workers.travel_extract.models import (
    EventFact,
    FactKind,
    FactRoute,
    FactSource,
    FlightFact,
    HotelStayFact,
    PlaceFact,
    ReservationFact,
)
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 160

_FLIGHT_TYPE = re.compile(r"flightreservation|flight")
_HOTEL_TYPE = re.compile(r"lodgingreservation|hotel|lodgingbusiness")
_EVENT_TYPE = re.compile(r"event")
_PLACE_TYPE = re.compile(r"place|touristattraction|localbusiness")
_RESERVATION_TYPE = re.compile(r"reservation")

_ADDRESS_KEYS = ("streetAddress", "addressLocality", "addressRegion", "postalCode", "addressCountry")


def _street_address(value: Any) -> str | None:
    """PostalAddress objects are joined into one line; plain strings pass through."""
    if isinstance(value, dict):
        parts: list[str] = []
        for key in _ADDRESS_KEYS:
            part = value.get(key)
            part = clean_text(part.get("name") if isinstance(part, dict) else part)
            if part and part not in parts:
                parts.append(part)
        return ", ".join(parts) or None
    return clean_text(value)


def _address_at(*path: str):
    return lambda obj: _street_address(dig(obj, path))


def _first_offer_price(obj: dict) -> Any:
    offers = obj.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    return offers.get("price") if isinstance(offers, dict) else None


def _joined(value: Any) -> str | None:
    if isinstance(value, list):
        return clean_text(", ".join(str(v) for v in value if v is not None))
    return clean_text(value)


FLIGHT_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "airline",
        (
            ("reservationFor", "airline", "iataCode"),
            ("airline", "iataCode"),
            ("reservationFor", "airline", "name"),
            ("airline", "name"),
        ),
    ),
    FieldRule("flight_number", (("reservationFor", "flightNumber"), ("flightNumber",))),
    FieldRule("dep_airport", (("reservationFor", "departureAirport", "iataCode"), ("departureAirport", "iataCode"))),
    FieldRule("arr_airport", (("reservationFor", "arrivalAirport", "iataCode"), ("arrivalAirport", "iataCode"))),
    FieldRule("dep_time", (("reservationFor", "departureTime"), ("departureTime",)), coerce=normalize_datetime),
    FieldRule("arr_time", (("reservationFor", "arrivalTime"), ("arrivalTime",)), coerce=normalize_datetime),
    FieldRule("record_locator", (("reservationNumber",), ("reservationId",))),
    FieldRule("price_text", (("totalPrice",), ("price",))),
)

HOTEL_RULES: tuple[FieldRule, ...] = (
    FieldRule("hotel_name", (("reservationFor", "name"), ("name",))),
    FieldRule("address", (_address_at("reservationFor", "address"), _address_at("address"))),
    FieldRule("check_in", (("checkinTime",), ("checkInTime",), ("checkinDate",)), coerce=normalize_datetime),
    FieldRule("check_out", (("checkoutTime",), ("checkOutTime",), ("checkoutDate",)), coerce=normalize_datetime),
    FieldRule("confirmation", (("reservationNumber",), ("reservationId",))),
    FieldRule("price_text", (("price",), ("totalPrice",))),
    FieldRule("currency", (("priceCurrency",),)),
    FieldRule("phone", (("reservationFor", "telephone"), ("telephone",))),
    FieldRule("url", (("reservationFor", "url"), ("url",))),
)

EVENT_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", (("name",),)),
    FieldRule("start", (("startDate",),), coerce=normalize_datetime),
    FieldRule("end", (("endDate",),), coerce=normalize_datetime),
    FieldRule("venue", (("location", "name"),)),
    FieldRule("address", (_address_at("location", "address"),)),
    FieldRule("url", (("url",),)),
    FieldRule("price_text", (_first_offer_price,)),
)

PLACE_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", (("name",),)),
    FieldRule("address", (_address_at("address"),)),
    FieldRule("lat", (("geo", "latitude"),), coerce=to_number),
    FieldRule("lon", (("geo", "longitude"),), coerce=to_number),
    FieldRule("hours", (("openingHours",),), coerce=_joined),
    FieldRule("url", (("url",),)),
    FieldRule("phone", (("telephone",),)),
)

RESERVATION_RULES: tuple[FieldRule, ...] = (
    FieldRule("supplier", (("provider", "name"), ("broker", "name"), ("reservationFor", "provider", "name"))),
    FieldRule("confirmation", (("reservationNumber",), ("reservationId",))),
    FieldRule("name", (("reservationFor", "name"), ("name",))),
    FieldRule("date", (("reservationFor", "startDate"), ("startTime",), ("bookingTime",)), coerce=normalize_datetime),
    FieldRule("start_time", (("reservationFor", "startDate"), ("startTime",)), coerce=normalize_datetime),
    FieldRule("end_time", (("reservationFor", "endDate"), ("endTime",)), coerce=normalize_datetime),
    FieldRule("location", (("reservationFor", "location", "name"), _address_at("reservationFor", "address"))),
    FieldRule("price_text", (("totalPrice",), ("price",))),
)


def _flatten(data: Any) -> Iterator[dict]:
    """Top-level objects, list items and @graph members."""
    if isinstance(data, list):
        for item in data:
            yield from _flatten(item)
    elif isinstance(data, dict):
        if "@type" in data:
            yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _flatten(graph)


def _type_label(obj: dict) -> str:
    raw = obj.get("@type")
    if isinstance(raw, list):
        return " ".join(str(t) for t in raw)
    return str(raw or "")


def extract_jsonld_facts(page: PageContext, target: FactKind) -> list:
    facts: list = []
    for _script, raw, data in page.json_blocks("application/ld+json"):
        snippet = raw.strip()[:SNIPPET_CHARS]
        for obj in _flatten(data):
            label = _type_label(obj)
            key = label.lower()
            if not key:
                continue

            def source(hint: str) -> dict:
                return {
                    "source": FactSource(route=FactRoute.JSONLD, hints=[hint]),
                    "text_snippets": [snippet] if snippet else None,
                }

            matched = False
            if _FLIGHT_TYPE.search(key) and accepts(target, FactKind.FLIGHT):
                names = dig(obj, ("underName", "name"))
                facts.append(
                    FlightFact(
                        confidence=0.8,
                        passenger_names=[names] if isinstance(names, str) else None,
                        **apply_rules(obj, FLIGHT_RULES),
                        **source("FlightReservation"),
                    )
                )
                matched = True
            if _HOTEL_TYPE.search(key) and accepts(target, FactKind.HOTEL):
                facts.append(HotelStayFact(confidence=0.8, **apply_rules(obj, HOTEL_RULES), **source(label)))
                matched = True
            if _EVENT_TYPE.search(key) and accepts(target, FactKind.EVENT):
                price = _first_offer_price(obj)
                facts.append(
                    EventFact(
                        confidence=0.7,
                        is_free=(to_number(price) == 0) if price is not None else None,
                        **apply_rules(obj, EVENT_RULES),
                        **source(label),
                    )
                )
                matched = True
            if _PLACE_TYPE.search(key) and accepts(target, FactKind.PLACE):
                facts.append(
                    PlaceFact(confidence=0.6, category=label, **apply_rules(obj, PLACE_RULES), **source(label))
                )
                matched = True
            if (
                not matched
                and _RESERVATION_TYPE.search(key)
                and not _FLIGHT_TYPE.search(key)
                and not _HOTEL_TYPE.search(key)
                and accepts(target, FactKind.RESERVATION)
            ):
                facts.append(ReservationFact(confidence=0.7, **apply_rules(obj, RESERVATION_RULES), **source(label)))

    logger.debug("JSON-LD pass: %d facts (target=%s)", len(facts), target)
    return facts
