"""
Facts from inline <script type="application/json"> blocks.

Blocks are only classified by the vocabulary they contain; when a block
also carries recognizable keys (flightNumber, checkIn, confirmation ...)
the first object holding them fills in the fact's fields.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from workers.travel_extract.facts.dates import normalize_datetime
from workers.travel_extract.field_candidates import FieldRule, apply_rules, walk_containers
from workers.travel_extract.models import (
    FactRoute,
    FactSource,
    FlightFact,
    HotelStayFact,
    ReservationFact,
)
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 160
_SEARCH_DEPTH = 8

_FLIGHT_WORDS = re.compile(r"flight|airline|pnr|record locator")
_HOTEL_WORDS = re.compile(r"hotel|lodging|checkin|checkout")
_RESERVATION_WORDS = re.compile(r"reservation|booking|confirmation")


_FLIGHT_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("airline", (("airlineCode",), ("airline", "code"), ("carrier",), ("airline",))),
    FieldRule("flight_number", (("flightNumber",), ("flightNo",))),
    FieldRule("dep_airport", (("origin",), ("departureAirport",), ("from",))),
    FieldRule("arr_airport", (("destination",), ("arrivalAirport",), ("to",))),
    FieldRule("dep_time", (("departureTime",), ("departure",)), coerce=normalize_datetime),
    FieldRule("arr_time", (("arrivalTime",), ("arrival",)), coerce=normalize_datetime),
    FieldRule("record_locator", (("recordLocator",), ("pnr",))),
)

_HOTEL_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("hotel_name", (("hotelName",), ("propertyName",))),
    FieldRule("address", (("address",),)),
    FieldRule("check_in", (("checkIn",), ("checkin",), ("checkInDate",)), coerce=normalize_datetime),
    FieldRule("check_out", (("checkOut",), ("checkout",), ("checkOutDate",)), coerce=normalize_datetime),
    FieldRule("confirmation", (("confirmationNumber",), ("confirmation",))),
)

_RESERVATION_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("supplier", (("supplier",), ("vendor",))),
    FieldRule("confirmation", (("confirmationNumber",), ("confirmation",), ("bookingReference",))),
    FieldRule("date", (("date",), ("bookingDate",)), coerce=normalize_datetime),
)


def _fields_from(data: Any, rules: tuple[FieldRule, ...]) -> dict[str, Any]:
    """Fields of the first object that resolves at least one rule."""
    for node in walk_containers(data, _SEARCH_DEPTH):
        if isinstance(node, dict):
            fields = apply_rules(node, rules)
            if fields:
                return fields
    return {}


def extract_inline_json_facts(page: PageContext) -> list:
    facts: list = []
    for _script, raw, data in page.json_blocks("application/json"):
        lowered = json.dumps(data, ensure_ascii=False).lower()
        snippet = raw.strip()[:SNIPPET_CHARS]
        common = {"text_snippets": [snippet] if snippet else None}

        if _FLIGHT_WORDS.search(lowered):
            facts.append(
                FlightFact(
                    confidence=0.65,
                    source=FactSource(route=FactRoute.INLINE_JSON, hints=["flight-ish"]),
                    **_fields_from(data, _FLIGHT_FIELDS),
                    **common,
                )
            )
        if _HOTEL_WORDS.search(lowered):
            facts.append(
                HotelStayFact(
                    confidence=0.65,
                    source=FactSource(route=FactRoute.INLINE_JSON, hints=["hotel-ish"]),
                    **_fields_from(data, _HOTEL_FIELDS),
                    **common,
                )
            )
        if _RESERVATION_WORDS.search(lowered):
            facts.append(
                ReservationFact(
                    confidence=0.6,
                    source=FactSource(route=FactRoute.INLINE_JSON, hints=["reservation-ish"]),
                    **_fields_from(data, _RESERVATION_FIELDS),
                    **common,
                )
            )

    logger.debug("Inline JSON pass: %d facts", len(facts))
    return facts
