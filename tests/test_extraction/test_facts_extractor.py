"""Tests for the generic travel facts script."""

import json

from workers.travel_extract.decoder import decode_travel_facts
from workers.travel_extract.facts_extractor import TravelFactsScript, clamp_max_chars, with_bonus
from workers.travel_extract.models import FactRoute, FactSource, FlightFact
from workers.travel_extract.models import HotelStayFact


def _ld(data: dict) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


FLIGHT_RESERVATION = {
    "@context": "https://schema.org",
    "@type": "FlightReservation",
    "reservationNumber": "RXJ34P",
    "underName": {"@type": "Person", "name": "Eva Green"},
    "reservationFor": {
        "@type": "Flight",
        "flightNumber": "123",
        "airline": {"@type": "Airline", "name": "American Airlines", "iataCode": "AA"},
        "departureAirport": {"@type": "Airport", "iataCode": "JFK"},
        "arrivalAirport": {"@type": "Airport", "iataCode": "LAX"},
        "departureTime": "2025-05-01T08:00:00-04:00",
    },
}

HOTEL_TEXT = (
    "<h1>Your stay at the Grand Plaza Hotel</h1>"
    "<p>Check-in: March 5, 2025</p>"
    "<p>Check-out: March 8, 2025</p>"
    "<p>Total: $450.00</p>"
    "<p>Confirmation #: HX12345</p>"
)


# --- JSON-LD ---


async def test_flight_reservation_jsonld(make_page):
    envelope = await TravelFactsScript().run(make_page(_ld(FLIGHT_RESERVATION)), {})

    assert envelope.ok is True
    assert envelope.count == 1
    fact = envelope.sample[0]
    assert fact["kind"] == "flight"
    assert fact["source"]["route"] == "jsonld"
    assert fact["confidence"] >= 0.8
    assert fact["airline"] == "AA"
    assert fact["flightNumber"] == "123"
    assert fact["recordLocator"] == "RXJ34P"
    assert fact["depAirport"] == "JFK"
    assert fact["depTime"] == "2025-05-01T12:00:00.000Z"
    assert fact["passengerNames"] == ["Eva Green"]
    assert envelope.meta["route"] == "jsonld"


async def test_jsonld_graph_and_type_lists_are_flattened(make_page):
    data = {
        "@context": "https://schema.org",
        "@graph": [
            {"@type": "WebPage", "name": "Itinerary"},
            {
                "@type": ["LodgingReservation"],
                "reservationNumber": "H-7781",
                "reservationFor": {
                    "@type": "Hotel",
                    "name": "Harbor Hotel",
                    "address": {"streetAddress": "10 Pier Rd", "addressLocality": "Boston"},
                },
                "checkinTime": "2025-06-01T15:00:00Z",
                "checkoutTime": "2025-06-03T11:00:00Z",
            },
        ],
    }
    envelope = await TravelFactsScript().run(make_page(_ld(data)), {})
    facts = decode_travel_facts(envelope.to_wire())

    assert len(facts) == 1
    hotel = facts[0]
    assert isinstance(hotel, HotelStayFact)
    assert hotel.hotel_name == "Harbor Hotel"
    assert hotel.address == "10 Pier Rd, Boston"
    assert hotel.check_in == "2025-06-01T15:00:00.000Z"
    assert hotel.confirmation == "H-7781"


async def test_jsonld_respects_target_kind(make_page):
    event = {"@type": "Event", "name": "Jazz Night", "startDate": "2025-07-04"}
    page = make_page(_ld(event) + "<p>Record Locator: QX7P2K Flight AA 123 JFK → LAX</p>")
    envelope = await TravelFactsScript().run(page, {"hint": "flight PNR"})

    assert envelope.meta["targetKind"] == "flight"
    assert envelope.meta["route"] == "regex"
    assert envelope.sample[0]["kind"] == "flight"


async def test_event_offers_mark_free_events(make_page):
    event = {
        "@type": "Event",
        "name": "Open Air Cinema",
        "startDate": "2025-08-01T20:00:00Z",
        "location": {"@type": "Place", "name": "City Park"},
        "offers": {"price": 0},
    }
    envelope = await TravelFactsScript().run(make_page(_ld(event)), {"preferKind": ["event"]})
    fact = envelope.sample[0]

    assert fact["kind"] == "event"
    assert fact["venue"] == "City Park"
    assert fact["isFree"] is True
    assert fact["confidence"] == 0.85


# --- Inline JSON ---


async def test_inline_json_facts(make_page):
    page = make_page(
        '<script type="application/json">'
        '{"booking": {"confirmationNumber": "ZX99881", "hotelName": "Sea Breeze Inn", "checkIn": "2025-06-01"}}'
        "</script>"
    )
    envelope = await TravelFactsScript().run(page, {})
    kinds = [f["kind"] for f in envelope.sample]

    assert envelope.route == "inlineJson"
    assert kinds == ["hotel", "reservation"]
    hotel = envelope.sample[0]
    assert hotel["hotelName"] == "Sea Breeze Inn"
    assert hotel["checkIn"] == "2025-06-01T00:00:00.000Z"
    assert hotel["confidence"] == 0.7
    assert envelope.sample[1]["confirmation"] == "ZX99881"


# --- Regex ---


async def test_regex_hotel_fact(make_page):
    envelope = await TravelFactsScript().run(make_page(HOTEL_TEXT), {})
    hotels = [f for f in envelope.sample if f["kind"] == "hotel"]

    assert envelope.route == "regex"
    assert len(hotels) == 1
    hotel = hotels[0]
    assert hotel["hotelName"] == "Grand Plaza Hotel"
    assert hotel["checkIn"] == "2025-03-05T00:00:00.000Z"
    assert hotel["checkOut"] == "2025-03-08T00:00:00.000Z"
    assert hotel["priceText"] == "$450.00"
    assert hotel["confirmation"] == "HX12345"
    assert hotel["textSnippets"]


async def test_regex_hotel_ranks_below_jsonld_equivalent(make_page):
    regex_env = await TravelFactsScript().run(make_page(HOTEL_TEXT), {})
    lodging = {
        "@type": "LodgingReservation",
        "reservationNumber": "HX12345",
        "reservationFor": {"@type": "Hotel", "name": "Grand Plaza Hotel"},
        "checkinTime": "2025-03-05",
        "checkoutTime": "2025-03-08",
        "totalPrice": "$450.00",
    }
    jsonld_env = await TravelFactsScript().run(make_page(_ld(lodging)), {})

    regex_hotel = next(f for f in regex_env.sample if f["kind"] == "hotel")
    jsonld_hotel = next(f for f in jsonld_env.sample if f["kind"] == "hotel")
    assert regex_hotel["confidence"] < jsonld_hotel["confidence"]


async def test_regex_flight_fact(make_page):
    page = make_page(
        "<h1>Trip details</h1>"
        "<p>Record Locator: QX7P2K</p>"
        "<p>Flight AA 123 JFK → LAX on May 1, 2025</p>"
    )
    envelope = await TravelFactsScript().run(page, {"hint": "flight"})
    flight = envelope.sample[0]

    assert flight["kind"] == "flight"
    assert flight["airline"] == "AA"
    assert flight["flightNumber"] == "AA123"
    assert flight["depAirport"] == "JFK"
    assert flight["arrAirport"] == "LAX"
    assert flight["recordLocator"] == "QX7P2K"
    assert flight["depTime"] == "2025-05-01T00:00:00.000Z"
    assert flight["confidence"] == 0.55


async def test_bare_flight_number_does_not_invent_an_airline(make_page):
    page = make_page("<p>Flight 1234 departs May 1, 2025</p>")
    envelope = await TravelFactsScript().run(page, {"hint": "flight"})
    flight = envelope.sample[0]

    assert flight["kind"] == "flight"
    assert "airline" not in flight
    assert flight["flightNumber"] == "1234"


async def test_regex_place_fact(make_page):
    page = make_page("<h1>Union Market</h1><p>Visit us at 1309 5th St NE, Washington, DC</p>")
    envelope = await TravelFactsScript().run(page, {"preferKind": ["place"]})
    places = [f for f in envelope.sample if f["kind"] == "place"]

    assert places[0]["name"] == "Union Market"
    assert places[0]["address"] == "1309 5th St NE, Washington, DC"


async def test_generic_fallback_for_unrelated_page(make_page):
    page = make_page("<h1>About us</h1><p>We are a small company.</p>")
    envelope = await TravelFactsScript().run(page, {})

    assert envelope.ok is True
    assert envelope.count == 1
    note = envelope.sample[0]
    assert note["kind"] == "generic"
    assert note["title"] == "About us"
    assert "small company" in note["body"]
    assert note["confidence"] == 0.3


async def test_char_budget_is_clamped(make_page):
    envelope = await TravelFactsScript().run(make_page("<p>x</p>"), {"maxChars": 10})
    assert envelope.meta["charBudget"] == 50_000
    assert envelope.meta["hints"] == [""]


async def test_regex_pass_stops_at_char_budget(make_page):
    filler = "lorem ipsum dolor " * 3_500
    page = make_page(f"<p>{filler}</p><p>Grand Plaza Hotel check-in June 3, 2025 total $420</p>")

    short = await TravelFactsScript().run(page, {"maxChars": 50_000})
    assert short.ok is True
    assert [f["kind"] for f in short.sample] == ["generic"]
    assert len(short.sample[0]["body"]) <= 600

    long = await TravelFactsScript().run(page, {"maxChars": 200_000})
    hotel = next(f for f in long.sample if f["kind"] == "hotel")
    assert hotel["checkIn"] == "2025-06-03T00:00:00.000Z"
    assert hotel["priceText"] == "$420"


def test_clamp_max_chars():
    assert clamp_max_chars(None) == 250_000
    assert clamp_max_chars(5_000_000) == 1_000_000


def test_bonus_never_exceeds_ceiling():
    fact = FlightFact(confidence=0.9, source=FactSource(route=FactRoute.JSONLD))
    boosted = with_bonus([fact], FactRoute.JSONLD)[0]
    assert boosted.confidence == 0.99
    assert fact.confidence == 0.9


async def test_invalid_arguments(make_page):
    envelope = await TravelFactsScript().run(make_page("<p>x</p>"), {"preferKind": "flight"})
    assert envelope.ok is False
    assert envelope.error.startswith("Invalid arguments")
