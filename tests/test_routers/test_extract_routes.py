"""Tests for the extraction HTTP routes (page loading is patched)."""

from core.exceptions import PageLoadError
from workers.travel_extract.page import PageContext

URL = "https://www.example.com/search?city=LIS"

CARDS_HTML = (
    "<html><body>"
    '<div class="hotel-card" data-hotel-id="1"><h3 class="hotel-name">Tagus</h3><span class="price">$90</span></div>'
    '<div class="hotel-card" data-hotel-id="2"><h3 class="hotel-name">Alfama</h3><span class="price">$110</span></div>'
    "</body></html>"
)

FLIGHT_HTML = (
    "<html><body>"
    '<script type="application/ld+json">'
    '{"@type": "FlightReservation", "reservationNumber": "RXJ34P",'
    ' "reservationFor": {"flightNumber": "123", "airline": {"iataCode": "AA"}}}'
    "</script>"
    "</body></html>"
)


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_extract_hotels(client, mock_load_page):
    mock_load_page.return_value = PageContext(url=URL, html=CARDS_HTML)

    resp = await client.post("/api/extract/hotels", json={"url": URL, "maxRows": 500, "render": False})

    assert resp.status_code == 200
    data = resp.json()
    assert data["envelope"]["ok"] is True
    assert data["envelope"]["route"] == "dom"
    assert data["hotels"] == [
        {"id": "1", "name": "Tagus", "priceText": "$90"},
        {"id": "2", "name": "Alfama", "priceText": "$110"},
    ]
    assert data["dropped"] == 0
    mock_load_page.assert_awaited_once_with(URL, render=False)


async def test_extract_hotels_no_results(client, mock_load_page):
    mock_load_page.return_value = PageContext(url=URL, html="<html><body><p>Sold out</p></body></html>")

    resp = await client.post("/api/extract/hotels", json={"url": URL})

    assert resp.status_code == 200
    data = resp.json()
    assert data["envelope"]["ok"] is False
    assert data["envelope"]["error"] == "No results via hydration/xhr/dom"
    assert data["hotels"] == []


async def test_extract_facts(client, mock_load_page):
    mock_load_page.return_value = PageContext(url=URL, html=FLIGHT_HTML)

    resp = await client.post("/api/extract/facts", json={"url": URL, "hint": "flight"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["envelope"]["meta"]["route"] == "jsonld"
    assert data["facts"][0]["kind"] == "flight"
    assert data["best"]["flight"]["recordLocator"] == "RXJ34P"


async def test_url_is_required(client, mock_load_page):
    resp = await client.post("/api/extract/facts", json={"hint": "hotel"})
    assert resp.status_code == 422
    mock_load_page.assert_not_awaited()


async def test_page_load_error_maps_to_502(client, mock_load_page):
    mock_load_page.side_effect = PageLoadError("HTTP 403", url=URL, status_code=403)

    resp = await client.post("/api/extract/hotels", json={"url": URL})

    assert resp.status_code == 502
    assert resp.json() == {"detail": "HTTP 403", "url": URL, "upstream_status": 403}
