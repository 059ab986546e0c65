"""
Full-text heuristics over the visible text of a page.

Last resort of the facts chain. The text is collected once (bounded by
the caller's character budget) and each kind runs its own patterns:
record locators and airline + flight number for flights, lodging
vocabulary plus dates/prices for hotels, and so on. A kind is attempted
when the caller asked for it or the text shows strong enough evidence.
If nothing matches, a generic note (title + excerpt) is returned so a
non-empty page never comes back empty.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from workers.travel_extract.facts.dates import to_iso_date
from workers.travel_extract.facts.hints import hint_mentions, valid_kinds
from workers.travel_extract.models import (
    EventFact,
    FactKind,
    FactRoute,
    FactSource,
    FlightFact,
    GenericNote,
    HotelStayFact,
    PlaceFact,
    ReservationFact,
)
from workers.travel_extract.page import PageContext

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 600
_SNIPPET_BEFORE = 60
_SNIPPET_AFTER = 120

# ── Patterns ──────────────────────────────────────────────────────────

_PNR_LABEL_FIRST = re.compile(r"(?i:\b(?:record\s+locator|pnr|locator)\b)\s*[:#]?\s*([A-Z0-9]{6})\b")
_PNR_TOKEN_FIRST = re.compile(r"\b([A-Z0-9]{6})\b.{0,40}?(?i:PNR|Record Locator|Locator|Confirmation)")

_FLIGHT_LABELLED = re.compile(
    r"(?i:\bflight)\s*(?:#|(?i:no\.?|number))?\s*:?\s*"
    r"(?:([A-Z]{2}|[A-Z]\d|\d[A-Z])\s?)?(\d{1,4})\b"
)
_AIRLINE_FLIGHT_NO = re.compile(r"\b([A-Z]{2})\s?(\d{2,4})\b")

_IATA_ROUTE = re.compile(r"\b([A-Z]{3})\s*(?:→|->|–|-|(?i:to))\s*([A-Z]{3})\b")
_IATA = re.compile(r"\b([A-Z]{3})\b")
_NOT_AIRPORTS = frozenset({"USD", "EUR", "GBP", "CAD", "AUD", "MXN", "PNR", "THE", "AND", "FOR"})

_DATE = re.compile(
    r"\b(?:\d{4}[-/.]\d{1,2}[-/.]\d{1,2}"
    r"|(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}"
    r"|\d{1,2}[/.]\d{1,2}[/.]\d{2,4})\b",
    re.IGNORECASE,
)
_MONEY = re.compile(r"(?:USD|US\$|\$|€|£)\s?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?")
_CONFIRMATION = re.compile(
    r"(?i:\b(?:confirmation|conf\.?|booking|reservation)\s*(?:#|no\.?|number)?\s*[:#]?\s*)"
    r"(?=[A-Z0-9-]*\d)([A-Z0-9][A-Z0-9-]{4,})\b"
)

_NAME_STOP = r"(?!(?:Check|Confirmation|Reservation|Booking|Address|Phone|Total|Price|Your|Our|Welcome|Thank)\b)"
_HOTEL_NAME = re.compile(
    rf"\b(?:{_NAME_STOP}[A-Z][\w'&.-]*\s+){{0,4}}"
    rf"(?:Hotel|Resort|Inn|Suites|Lodge|Motel|Hostel)\b"
    rf"(?:\s+{_NAME_STOP}[A-Z][\w'&-]*){{0,3}}"
)
_ADDRESS = re.compile(
    r"\b\d{1,5}\s+[A-Za-z0-9.'\- ]{1,60}?\b"
    r"(?:St|Street|Ave|Avenue|Rd|Road|Blvd|Boulevard|Drive|Dr|Ln|Lane|Way|Trail|Ct|Court)\b\.?"
    r"(?:\s+(?:NE|NW|SE|SW|N|S|E|W)\b)?"
    r"(?:,\s*[A-Za-z][A-Za-z .'-]{1,40}){1,2}"
)

_FLIGHT_VOCAB = re.compile(r"\b(?:flight|airline|record locator|pnr|boarding)\b", re.IGNORECASE)
_HOTEL_VOCAB = re.compile(
    r"\b(?:hotel|resort|inn|suites|lodge|motel|hostel|lodging|check-?in|check-?out)\b", re.IGNORECASE
)
_EVENT_WORDS = re.compile(
    r"\b(?:farmers?|market|tour|museum|exhibit|festival|concert|show|guided|admission)\b", re.IGNORECASE
)
_FREE = re.compile(r"\bfree\b", re.IGNORECASE)


class TextScan:
    """Visible text of a page plus the lookups every kind shares."""

    def __init__(self, text: str) -> None:
        self.text = text

    def snippet(self, match: re.Match[str] | None) -> list[str] | None:
        if match is None:
            return None
        start = match.start()
        return [self.text[max(0, start - _SNIPPET_BEFORE) : start + _SNIPPET_AFTER].strip()]

    def dates(self, limit: int = 2) -> list[str]:
        found: list[str] = []
        for match in _DATE.finditer(self.text):
            iso = to_iso_date(match.group(0))
            if iso:
                found.append(iso)
            if len(found) >= limit:
                break
        return found

    def money(self) -> str | None:
        match = _MONEY.search(self.text)
        return match.group(0) if match else None

    def confirmation(self) -> re.Match[str] | None:
        return _CONFIRMATION.search(self.text)

    def record_locator(self) -> str | None:
        match = _PNR_LABEL_FIRST.search(self.text) or _PNR_TOKEN_FIRST.search(self.text)
        return match.group(1) if match else None

    def flight_number(self) -> re.Match[str] | None:
        return _FLIGHT_LABELLED.search(self.text) or _AIRLINE_FLIGHT_NO.search(self.text)

    def airports(self) -> tuple[str | None, str | None]:
        route = _IATA_ROUTE.search(self.text)
        if route and not {route.group(1), route.group(2)} & _NOT_AIRPORTS:
            return route.group(1), route.group(2)
        codes = [m.group(1) for m in _IATA.finditer(self.text) if m.group(1) not in _NOT_AIRPORTS]
        return (codes[0] if codes else None), (codes[1] if len(codes) > 1 else None)

    def address(self) -> str | None:
        match = _ADDRESS.search(self.text)
        return match.group(0).strip() if match else None


def _source(*hints: str) -> FactSource:
    return FactSource(route=FactRoute.REGEX, hints=list(hints))


def extract_regex_facts(
    page: PageContext,
    max_chars: int,
    target: FactKind,
    hint: str = "",
    prefer_kind: Iterable[str] = (),
) -> list:
    scan = TextScan(page.visible_text(max_chars))
    text = scan.text
    preferred = set(valid_kinds(prefer_kind))

    def requested(kind: FactKind) -> bool:
        return kind is target or kind in preferred or hint_mentions(kind, hint)

    facts: list = []

    # Flights
    flight_no = scan.flight_number()
    if requested(FactKind.FLIGHT) or (_FLIGHT_VOCAB.search(text) and flight_no):
        dates = scan.dates()
        dep, arr = scan.airports()
        facts.append(
            FlightFact(
                confidence=0.55,
                airline=flight_no.group(1) if flight_no else None,
                flight_number=f"{flight_no.group(1) or ''}{flight_no.group(2)}" if flight_no else None,
                dep_airport=dep,
                arr_airport=arr,
                dep_time=dates[0] if dates else None,
                arr_time=dates[1] if len(dates) > 1 else None,
                record_locator=scan.record_locator(),
                price_text=scan.money(),
                source=_source("PNR", "Airline+FlightNo", "Dates"),
                text_snippets=scan.snippet(flight_no),
            )
        )

    # Hotels
    hotel_word = _HOTEL_VOCAB.search(text)
    dates = scan.dates()
    price = scan.money()
    if requested(FactKind.HOTEL) or (hotel_word and (dates or price)):
        name = _HOTEL_NAME.search(text)
        confirmation = scan.confirmation()
        facts.append(
            HotelStayFact(
                confidence=0.5,
                hotel_name=name.group(0).strip() if name else None,
                check_in=dates[0] if dates else None,
                check_out=dates[1] if len(dates) > 1 else None,
                confirmation=confirmation.group(1) if confirmation else None,
                price_text=price,
                address=scan.address(),
                source=_source("hotel word", "dates", "conf", "price"),
                text_snippets=scan.snippet(name or hotel_word),
            )
        )

    # Reservations (only when no flight/hotel fact already carries the number)
    confirmation = scan.confirmation()
    if requested(FactKind.RESERVATION) or (confirmation and not facts):
        facts.append(
            ReservationFact(
                confidence=0.45,
                confirmation=confirmation.group(1) if confirmation else None,
                date=dates[0] if dates else None,
                name=page.heading_text or None,
                price_text=price,
                source=_source("confirmation", "date", "price"),
                text_snippets=scan.snippet(confirmation),
            )
        )

    # Events
    event_word = _EVENT_WORDS.search(text)
    if requested(FactKind.EVENT) or _EVENT_WORDS.search(hint) or event_word:
        facts.append(
            EventFact(
                confidence=0.45,
                name=page.heading_text or None,
                start=dates[0] if dates else None,
                price_text=price,
                is_free=True if _FREE.search(text) else (False if price else None),
                source=_source("event words", "date", "price"),
                text_snippets=scan.snippet(event_word),
            )
        )

    # Places
    address = scan.address()
    if requested(FactKind.PLACE) or (address and not facts):
        facts.append(
            PlaceFact(
                confidence=0.4,
                name=page.heading_text or page.page_title or None,
                address=address,
                source=_source("title", "address"),
            )
        )

    if not facts:
        facts.append(
            GenericNote(
                confidence=0.3,
                title=page.heading_text or page.page_title,
                body=text[:EXCERPT_CHARS],
                source=_source("generic fallback"),
            )
        )

    logger.debug("Regex pass over %d chars: %d facts (target=%s)", len(text), len(facts), target)
    return facts
