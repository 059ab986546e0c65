"""Tests for the injector boundary and the host call API."""

from workers.travel_extract.injector import (
    PageInjector,
    PlaywrightInjector,
    inject_generic_facts,
    inject_smart_results,
)
from workers.travel_extract.page_loader import capture_playwright_page


CARDS = (
    '<div class="hotel-card"><h3 class="hotel-name">Alpha</h3><span class="price">$90</span></div>'
    '<div class="hotel-card"><h3 class="hotel-name">Beta</h3><span class="price">$95</span></div>'
    '<div class="hotel-card"><span class="price">$99</span></div>'
)


class _FakeContext:
    async def cookies(self, url):
        return [{"name": "sid", "value": "42", "domain": "www.example.com"}]


class _FakePlaywrightPage:
    url = "https://www.example.com/results"
    context = _FakeContext()

    def __init__(self, html, page_globals=None, resources=None):
        self._html = html
        self._globals = page_globals or {}
        self._resources = resources or []

    async def content(self):
        return self._html

    async def title(self):
        return "Results"

    async def evaluate(self, expression, arg=None):
        return self._globals if arg is not None else self._resources


async def test_smart_results_maps_and_counts_drops(make_page):
    output = await inject_smart_results(PageInjector(make_page(CARDS)), {"maxRows": 500})

    assert output.raw["ok"] is True
    assert output.raw["route"] == "dom"
    assert len(output.rows) == 3
    assert [dto.name for dto in output.dtos] == ["Alpha", "Beta"]
    assert output.dropped == 1


async def test_failed_extraction_returns_no_rows(make_page):
    output = await inject_smart_results(PageInjector(make_page("<p>nothing</p>")))

    assert output.raw["ok"] is False
    assert output.rows == []
    assert output.dtos == []


async def test_generic_facts_are_decoded(make_page):
    output = await inject_generic_facts(PageInjector(make_page("<h1>Hello</h1><p>World</p>")), {"hint": ""})

    assert output.raw["ok"] is True
    assert [fact.kind for fact in output.facts] == ["generic"]


async def test_page_injector_turns_crashes_into_failures(make_page):
    class Exploding:
        name = "exploding"

        async def run(self, page, args=None):
            raise ValueError("kaboom")

    raw = await PageInjector(make_page())(Exploding(), {})
    assert raw == {"ok": False, "meta": {}, "error": "ValueError: kaboom"}


async def test_capture_playwright_page():
    pw_page = _FakePlaywrightPage(
        "<html><body><p>x</p></body></html>",
        page_globals={"__NUXT__": {"hotels": []}},
        resources=["https://www.example.com/api/search"],
    )
    page = await capture_playwright_page(pw_page)

    assert page.url == "https://www.example.com/results"
    assert page.title == "Results"
    assert page.globals == {"__NUXT__": {"hotels": []}}
    assert page.resource_urls == ("https://www.example.com/api/search",)
    assert page.cookies == {"sid": "42"}


async def test_playwright_injector_runs_against_live_state():
    state = {"results": {"hotels": [{"id": "n1", "name": "Nuxt Hotel"}]}}
    injector = PlaywrightInjector(_FakePlaywrightPage("<html><body></body></html>", page_globals={"__NUXT__": state}))

    output = await inject_smart_results(injector)

    assert output.raw["route"] == "hydration"
    assert output.raw["meta"]["hydrationKey"] == "__NUXT__"
    assert output.dtos[0].id == "n1"
