from workers.travel_extract.models import PlatformTag
from workers.travel_extract.platform_detector import PlatformDetector


def test_detects_vax_by_hostname(make_page):
    page = make_page("<div>results</div>", url="https://www.vacationaccess.com/Search/Hotels")
    assert PlatformDetector.detect(page) == PlatformTag.VAX


def test_detects_vax_by_asset_url(make_page):
    page = make_page(
        "<div>results</div>",
        head='<script src="https://cdn.funjet.com/static/app.js"></script>',
    )
    assert PlatformDetector.detect(page) == PlatformTag.VAX


def test_detects_wad_by_title(make_page):
    page = make_page("<h1>World Agent Direct - Hotel Search</h1>")
    assert PlatformDetector.detect(page) == PlatformTag.WAD


def test_detects_navitrip_by_markup(make_page):
    page = make_page(
        '<form id="aspnetForm"><input type="hidden" name="__VIEWSTATE" value="x"></form>'
    )
    assert PlatformDetector.detect(page) == PlatformTag.NAVITRIP_CP


def test_unknown_page_is_generic(make_page):
    page = make_page("<h1>Hotels in Lisbon</h1>")
    assert PlatformDetector.detect(page) == PlatformTag.GENERIC


def test_known_hint_wins_over_signatures(make_page):
    page = make_page("<div></div>", url="https://www.vacationaccess.com/")
    assert PlatformDetector.detect(page, hint="wad") == PlatformTag.WAD


def test_unknown_hint_is_passed_through(make_page):
    page = make_page("<div></div>")
    assert PlatformDetector.detect(page, hint="expedia") == "expedia"
