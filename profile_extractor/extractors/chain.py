import logging
from collections.abc import Callable, Sequence
from typing import TypeVar
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_result(strategies: Sequence[Callable[..., T]], *args) -> T | None:
    """Run strategies in order and return the first non-empty result."""
    for strategy in strategies:
        result = strategy(*args)
        if result:
            return result
    return None


def safely(func: Callable[..., T], default: T, *args) -> T:
    """Call a heuristic, turning any failure into its "not found" default."""
    try:
        return func(*args)
    except Exception:
        logger.debug("Extractor %s failed", getattr(func, "__name__", func), exc_info=True)
        return default


def text_of(el: Tag | None) -> str:
    if el is None:
        return ""
    return " ".join(el.get_text(" ", strip=True).split())


def select_text(root: Tag, selector: str) -> str:
    return text_of(root.select_one(selector))


def resolve_url(href: str | None, base_url: str) -> str | None:
    """Resolve ``href`` against ``base_url``; None unless the result is http(s)."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("data:", "javascript:", "mailto:", "tel:", "#")):
        return None
    absolute = urljoin(base_url, href)
    parsed = urlparse(absolute)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")
