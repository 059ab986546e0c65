from unittest.mock import AsyncMock, patch

import httpx
import pytest
from httpx import ASGITransport

from workers.travel_extract.page import PageContext


@pytest.fixture
def make_page():
    """Build a captured page from a body fragment (or a full document)."""

    def _make(body: str = "", url: str = "https://www.example.com/search", head: str = "", **kwargs):
        html = body if body.lstrip().startswith("<html") else f"<html><head>{head}</head><body>{body}</body></html>"
        return PageContext(url=url, html=html, **kwargs)

    return _make


@pytest.fixture
def mock_load_page():
    """Patch page loading for the HTTP routes and ARQ jobs."""
    with patch("workers.travel_extract.service.load_page", new_callable=AsyncMock) as mocked:
        yield mocked


@pytest.fixture
async def client():
    from api.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
