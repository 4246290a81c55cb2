"""Tests for ScrapingClient."""

import httpx
import pytest
import respx
from httpx import Response

from profile_extractor.services.scraping_client import ScrapingClient, validate_public_url


@pytest.fixture
def client():
    return httpx.AsyncClient()


@pytest.fixture
def scraper(client):
    return ScrapingClient(client)


def _html(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


# --- URL safety ---


@pytest.mark.parametrize("url", [
    "ftp://acme.com",
    "http://localhost:8000",
    "http://127.0.0.1",
    "http://10.0.0.5/admin",
    "http://192.168.1.1",
    "http://169.254.169.254/latest/meta-data",
    "http://[::1]/",
    "http://printer.local",
    "https://",
])
def test_unsafe_urls_are_rejected(url):
    assert validate_public_url(url) is not None


@pytest.mark.parametrize("url", ["https://acme.com", "http://8.8.8.8", "https://shop.acme.co.uk/path?q=1"])
def test_public_urls_pass(url):
    assert validate_public_url(url) is None


# --- fetch_page ---


@respx.mock
async def test_fetch_page_success_with_metadata(scraper):
    respx.get("https://acme.com").mock(
        return_value=Response(
            200,
            html=_html("<p>Hi</p>", head='<title>Acme</title><meta name="description" content="Bakery">'),
            headers={"content-type": "text/html; charset=utf-8"},
        )
    )
    result = await scraper.fetch_page("https://acme.com")

    assert result.success
    assert "<p>Hi</p>" in result.html
    assert result.metadata.title == "Acme"
    assert result.metadata.description == "Bakery"
    assert result.metadata.status_code == 200


@respx.mock
async def test_fetch_page_sends_user_agent(scraper):
    route = respx.get("https://acme.com").mock(
        return_value=Response(200, html=_html(""), headers={"content-type": "text/html"})
    )
    await scraper.fetch_page("https://acme.com")
    assert route.calls.last.request.headers["user-agent"].startswith("ProfileExtractor/")


@respx.mock
async def test_fetch_page_http_error(scraper):
    respx.get("https://acme.com/missing").mock(return_value=Response(404))
    result = await scraper.fetch_page("https://acme.com/missing")
    assert not result.success
    assert result.error == "HTTP 404"


@respx.mock
async def test_fetch_page_network_error(scraper):
    respx.get("https://acme.com").mock(side_effect=httpx.ConnectError("refused"))
    result = await scraper.fetch_page("https://acme.com")
    assert not result.success
    assert result.error.startswith("ConnectError")


@respx.mock
async def test_fetch_page_rejects_non_html(scraper):
    respx.get("https://acme.com/file.pdf").mock(
        return_value=Response(200, content=b"%PDF", headers={"content-type": "application/pdf"})
    )
    result = await scraper.fetch_page("https://acme.com/file.pdf")
    assert not result.success
    assert result.error == "Not HTML: application/pdf"


@respx.mock
async def test_fetch_page_rejects_oversized_body(client):
    scraper = ScrapingClient(client, max_body_bytes=100)
    respx.get("https://acme.com").mock(
        return_value=Response(200, html=_html("x" * 500), headers={"content-type": "text/html"})
    )
    result = await scraper.fetch_page("https://acme.com")
    assert not result.success
    assert result.error.startswith("Page too large")


async def test_fetch_page_refuses_private_address(scraper):
    result = await scraper.fetch_page("http://127.0.0.1/admin")
    assert not result.success
    assert result.error.startswith("Unsafe URL")


@respx.mock
async def test_fetch_page_follows_public_redirect(scraper):
    respx.get("https://acme.com").mock(return_value=Response(301, headers={"location": "https://www.acme.co.uk/"}))
    respx.get("https://www.acme.co.uk/").mock(
        return_value=Response(200, html=_html("Moved"), headers={"content-type": "text/html"})
    )

    result = await scraper.fetch_page("https://acme.com")

    assert result.success
    assert result.url == "https://acme.com"
    assert result.metadata.final_url == "https://www.acme.co.uk/"


@pytest.mark.respx(assert_all_called=False)
async def test_fetch_page_refuses_redirect_to_private_address(scraper, respx_mock):
    respx_mock.get("https://acme.com").mock(
        return_value=Response(302, headers={"location": "http://169.254.169.254/latest/meta-data"})
    )
    metadata_route = respx_mock.get("http://169.254.169.254/latest/meta-data").mock(return_value=Response(200))

    result = await scraper.fetch_page("https://acme.com")

    assert not result.success
    assert result.error.startswith("Unsafe redirect")
    assert not metadata_route.called


@respx.mock
async def test_fetch_page_limits_redirect_hops(scraper):
    respx.get("https://acme.com/loop").mock(return_value=Response(302, headers={"location": "/loop"}))

    result = await scraper.fetch_page("https://acme.com/loop")

    assert not result.success
    assert result.error.startswith("Too many redirects")


# --- fetch_pages ---


@respx.mock
async def test_fetch_pages_isolates_failures(scraper):
    respx.get("https://acme.com/about").mock(
        return_value=Response(200, html=_html("About"), headers={"content-type": "text/html"})
    )
    respx.get("https://acme.com/contact").mock(return_value=Response(500))
    respx.get("https://acme.com/team").mock(side_effect=httpx.ReadTimeout("slow"))

    results = await scraper.fetch_pages(
        ["https://acme.com/about", "https://acme.com/contact", "https://acme.com/team"], concurrency=2,
    )

    assert results["https://acme.com/about"].success
    assert results["https://acme.com/contact"].error == "HTTP 500"
    assert not results["https://acme.com/team"].success
