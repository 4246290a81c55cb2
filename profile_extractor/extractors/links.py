import logging
import re
from urllib.parse import urljoin, urlparse, urlunparse

from profile_extractor.extractors.chain import parse_html, text_of
from profile_extractor.schemas.discovery import ExtractedLink, PageType

logger = logging.getLogger(__name__)

NAVIGATION_SELECTOR = (
    'nav, header, [role="navigation"], .nav, .navbar, .menu, .navigation, '
    '#menu, .main-menu, [class*="nav"], [class*="menu"]'
)

# First match wins.
_PAGE_TYPE_PATTERNS: tuple[tuple[re.Pattern, PageType], ...] = (
    (re.compile(r"about|our-story|who-we-are|history"), PageType.about),
    (re.compile(r"contact|get-in-touch|reach-us|location|directions"), PageType.contact),
    (re.compile(r"service|what-we-do|solutions|offerings|treatments|pricing"), PageType.services),
    (re.compile(r"team|staff|people|leadership|our-doctors|meet"), PageType.team),
    (re.compile(r"product|shop|store|catalog|collection|menu"), PageType.products),
    (re.compile(r"faq|frequently-asked|questions|help"), PageType.faq),
    (re.compile(r"blog|news|articles|posts|insights"), PageType.blog),
    (re.compile(r"privacy"), PageType.privacy),
    (re.compile(r"terms|conditions|legal"), PageType.terms),
)

PAGE_TYPE_PRIORITY: tuple[PageType, ...] = (
    PageType.about,
    PageType.contact,
    PageType.services,
    PageType.team,
    PageType.products,
    PageType.faq,
    PageType.blog,
    PageType.privacy,
    PageType.terms,
    PageType.other,
)


def _host(netloc: str) -> str:
    host = netloc.lower().rsplit("@", 1)[-1]
    return host.removeprefix("www.")


def normalize_url(href: str, base_url: str) -> str | None:
    """Absolute http(s) URL without query, fragment or trailing slash.

    Idempotent: normalizing an already-normalized URL returns it unchanged.
    """
    if not href:
        return None
    try:
        parsed = urlparse(urljoin(base_url, href.strip()))
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return None
    path = parsed.path.rstrip("/")
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, "", "", ""))


def infer_page_type(href: str, text: str = "") -> PageType:
    haystack = f"{href} {text}".lower()
    for pattern, page_type in _PAGE_TYPE_PATTERNS:
        if pattern.search(haystack):
            return page_type
    return PageType.other


def extract_navigation_links(html: str, base_url: str) -> list[ExtractedLink]:
    """Internal links from navigation areas, deduplicated by normalized URL.

    Body and footer links are ignored. Links to other hosts (``www.`` aside)
    and links back to the homepage are dropped.
    """
    soup = parse_html(html)
    base = urlparse(normalize_url(base_url, base_url) or base_url)
    base_host = _host(base.netloc)

    links: list[ExtractedLink] = []
    seen: set[str] = set()
    for container in soup.select(NAVIGATION_SELECTOR):
        if container.name == "footer" or container.find_parent("footer") is not None:
            continue
        for a in container.find_all("a", href=True):
            url = normalize_url(a["href"], base_url)
            if url is None or url in seen:
                continue
            parsed = urlparse(url)
            if _host(parsed.netloc) != base_host or parsed.path == base.path:
                continue
            seen.add(url)
            text = text_of(a)
            links.append(ExtractedLink(url=url, text=text, page_type=infer_page_type(parsed.path, text)))

    logger.debug("Found %d navigation links on %s", len(links), base_url)
    return links


def prioritize_links_for_scraping(links: list[ExtractedLink], max_pages: int) -> list[ExtractedLink]:
    if max_pages <= 0:
        return []
    ranked = sorted(links, key=lambda link: PAGE_TYPE_PRIORITY.index(link.page_type))
    return ranked[:max_pages]
