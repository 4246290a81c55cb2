import pytest

from profile_extractor.extractors.links import (
    extract_navigation_links,
    infer_page_type,
    normalize_url,
    prioritize_links_for_scraping,
)
from profile_extractor.schemas.discovery import ExtractedLink, PageType

BASE = "https://acme.com"


# --- Normalization ---


@pytest.mark.parametrize("url", [
    "https://acme.com/about/",
    "HTTPS://Acme.com/Services?ref=nav#top",
    "http://acme.com",
    "https://acme.com/a/b/c/",
    "https://www.acme.com/contact#form",
])
def test_normalize_is_idempotent(url):
    once = normalize_url(url, BASE)
    assert normalize_url(once, BASE) == once


def test_normalize_strips_query_fragment_and_trailing_slash():
    assert normalize_url("/about/?utm=x#team", BASE) == "https://acme.com/about"


def test_normalize_rejects_non_http():
    assert normalize_url("mailto:hi@acme.com", BASE) is None
    assert normalize_url("javascript:void(0)", BASE) is None
    assert normalize_url("", BASE) is None


# --- Page types ---


@pytest.mark.parametrize("href,text,expected", [
    ("/about-us", "", PageType.about),
    ("/get-in-touch", "", PageType.contact),
    ("/what-we-do", "", PageType.services),
    ("/p/123", "Meet the team", PageType.team),
    ("/shop", "", PageType.products),
    ("/faq", "", PageType.faq),
    ("/news", "", PageType.blog),
    ("/privacy-policy", "", PageType.privacy),
    ("/terms", "", PageType.terms),
    ("/random", "Random", PageType.other),
])
def test_infer_page_type(href, text, expected):
    assert infer_page_type(href, text) == expected


# --- Navigation links ---


def test_extract_navigation_links_filters_and_dedupes():
    html = """
    <html><body>
      <nav>
        <a href="/">Home</a>
        <a href="/about/">About</a>
        <a href="/about#team">About again</a>
        <a href="https://www.acme.com/contact">Contact</a>
        <a href="https://other.com/partner">Partner</a>
        <a href="mailto:hi@acme.com">Email</a>
      </nav>
      <main><a href="/blog">Blog in body</a></main>
      <footer><nav><a href="/privacy">Privacy</a></nav></footer>
    </body></html>
    """
    links = extract_navigation_links(html, BASE)
    assert [(l.url, l.page_type) for l in links] == [
        ("https://acme.com/about", PageType.about),
        ("https://www.acme.com/contact", PageType.contact),
    ]


def test_www_homepage_link_is_dropped():
    html = '<nav><a href="https://www.acme.com/">Home</a><a href="http://acme.com">Home</a><a href="/about">About</a></nav>'
    links = extract_navigation_links(html, BASE)
    assert [l.url for l in links] == ["https://acme.com/about"]


def test_page_type_ignores_host_name():
    html = '<nav><a href="https://shop.acme.com/x">X</a><a href="/story">Our story</a></nav>'
    links = extract_navigation_links(html, "https://shop.acme.com")
    assert links[0].page_type == PageType.other


# --- Prioritization ---


def _link(page_type: PageType) -> ExtractedLink:
    return ExtractedLink(url=f"https://acme.com/{page_type}", page_type=page_type)


def test_prioritize_enforces_type_order():
    links = [_link(PageType.blog), _link(PageType.about), _link(PageType.other), _link(PageType.contact)]
    result = prioritize_links_for_scraping(links, 2)
    assert [l.page_type for l in result] == [PageType.about, PageType.contact]


def test_prioritize_is_stable_within_type():
    first = ExtractedLink(url="https://acme.com/a", page_type=PageType.services)
    second = ExtractedLink(url="https://acme.com/b", page_type=PageType.services)
    assert prioritize_links_for_scraping([first, second], 5) == [first, second]


def test_prioritize_zero_pages():
    assert prioritize_links_for_scraping([_link(PageType.about)], 0) == []
