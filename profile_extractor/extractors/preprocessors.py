"""Reduce raw HTML to the parts each LLM extraction phase needs, within a byte budget."""

import logging
import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from profile_extractor.extractors.branding import CSS_RULE_RE, MAX_STYLE_LENGTH, MAX_STYLE_TAGS, find_favicon
from profile_extractor.extractors.chain import parse_html, resolve_url

logger = logging.getLogger(__name__)

VISION_MAX_BYTES = 10_000
TEXT_MAX_BYTES = 15_000
IMAGE_MAX_BYTES = 10_000
# Header and footer digests are reserved before the main body is cut.
DIGEST_MAX_BYTES = 2000
LONG_TEXT_RUN = 40

_NON_VISUAL_TAGS = [
    "script", "noscript", "iframe", "video", "audio", "canvas",
    "object", "embed", "template", "style",
]
_KEPT_ATTRIBUTES = frozenset({"class", "id", "style", "src", "alt", "href", "rel", "type"})
_LANDMARK_SELECTORS = (
    "header",
    "nav",
    "footer",
    '[class*="logo"], [id*="logo"]',
    "main",
    '.hero, [class*="hero"], .banner, .jumbotron',
)
_HERO_AREA_SELECTOR = '.hero, #hero, [class*="hero"], .banner, .jumbotron, .masthead'
_BLOCK_TAGS = frozenset({
    "p", "div", "section", "article", "main", "aside", "header", "footer", "nav",
    "form", "blockquote", "address", "figure", "figcaption", "dl", "dt", "dd", "body",
})
_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_IMAGE_CONTAINER_SELECTORS = (
    ".hero, .banner, .jumbotron, .masthead",
    ".wp-block-cover, .wp-block-image",
    '[class*="elementor-background"], .elementor-widget-image',
    '.page-section, .banner-thumbnail-wrapper, [class*="sqs-block-image"]',
    '[data-testid="bgMedia"], wow-image',
    '[style*="background"]',
    '[class*="gallery"], [class*="carousel"], [class*="slider"]',
    "picture",
    "img",
)
_URL_IN_STYLE_RE = re.compile(r"url\(", re.IGNORECASE)
_IMAGE_CSS_RE = re.compile(r"background|url\(|--[a-z0-9-]*(?:image|img|bg|hero)", re.IGNORECASE)


def truncate_bytes(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def _strip_noise(soup: BeautifulSoup) -> None:
    for el in soup.find_all(_NON_VISUAL_TAGS):
        el.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()


def _outermost(soup: BeautifulSoup, selectors: tuple[str, ...]) -> list[Tag]:
    """Elements matching ``selectors`` in selector order, skipping any nested in an earlier match."""
    found: list[Tag] = []
    for selector in selectors:
        for el in soup.select(selector):
            if any(el is f or f in el.parents or el in f.parents for f in found):
                continue
            found.append(el)
    return found


def extract_favicon(html: str, base_url: str) -> str | None:
    return find_favicon(parse_html(html), base_url)


# --- Vision ---


def preprocess_for_vision(html: str, max_bytes: int = VISION_MAX_BYTES) -> str:
    """Layout skeleton for the screenshot-guided branding pass.

    Keeps structure, classes, image sources and inline styles; drops scripts,
    media, SVG internals and all text. Oversized pages fall
    back to the landmark elements (header, nav, footer, logo, main, hero).
    """
    soup = parse_html(html)
    _strip_noise(soup)

    for svg in soup.find_all("svg"):
        svg.clear()

    for el in soup.find_all(True):
        el.attrs = {k: v for k, v in el.attrs.items() if k in _KEPT_ATTRIBUTES}

    for text in soup.find_all(string=True):
        text.extract()

    result = str(soup.body or soup)
    if len(result.encode("utf-8")) <= max_bytes:
        return result

    logger.debug("Vision HTML is %d bytes, falling back to landmarks", len(result.encode("utf-8")))
    landmarks = "\n".join(str(el) for el in _outermost(soup, _LANDMARK_SELECTORS))
    return truncate_bytes(landmarks or result, max_bytes)


# --- Text ---


class _TextRenderer:
    """Walks a DOM subtree into markdown-ish lines."""

    def __init__(self, base_url: str | None, prominent: Tag | None, heroes: set[int]):
        self.base_url = base_url or ""
        self.prominent = prominent
        self.heroes = heroes
        self.lines: list[str] = []
        self._buffer: list[str] = []

    def render(self, root: Tag | None) -> str:
        self.lines, self._buffer = [], []
        if root is not None:
            self._walk(root)
            self._flush()
        return "\n".join(self.lines)

    def _flush(self) -> None:
        text = " ".join(self._buffer).strip()
        if text:
            self.lines.append(text)
        self._buffer = []

    def _link(self, a: Tag) -> str:
        text = self._inline(a, links=False)
        href = (a.get("href") or "").strip()
        target = href if href.startswith(("mailto:", "tel:")) else resolve_url(href, self.base_url)
        if target and text:
            return f"[{text}]({target})"
        return text

    def _inline(self, tag: Tag, links: bool = True) -> str:
        parts: list[str] = []
        for child in tag.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                parts.append(" ".join(child.split()))
            elif isinstance(child, Tag):
                parts.append(self._link(child) if links and child.name == "a" else self._inline(child, links))
        return " ".join(p for p in parts if p)

    def _heading(self, el: Tag) -> None:
        text = self._inline(el)
        if not text:
            return
        if el is self.prominent:
            text = f"[PROMINENT] {text}"
        self.lines.append(f"{'#' * int(el.name[1])} {text}")

    def _walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                text = " ".join(child.split())
                if text:
                    self._buffer.append(text)
                continue
            if not isinstance(child, Tag):
                continue

            if child.name in _HEADINGS:
                self._flush()
                self._heading(child)
            elif child.name in ("ul", "ol"):
                self._flush()
                for li in child.find_all("li", recursive=False):
                    text = self._inline(li)
                    if text:
                        self.lines.append(f"- {text}")
            elif child.name == "table":
                self._flush()
                for tr in child.find_all("tr"):
                    cells = [c for c in (self._inline(cell) for cell in tr.find_all(["td", "th"])) if c]
                    if cells:
                        self.lines.append(" | ".join(cells))
            elif child.name == "a":
                self._buffer.append(self._link(child))
            elif child.name == "br":
                self._flush()
            else:
                is_hero = id(child) in self.heroes
                is_block = is_hero or child.name in _BLOCK_TAGS
                if is_block:
                    self._flush()
                if is_hero:
                    self.lines.append("[HERO]")
                self._walk(child)
                if is_block:
                    self._flush()
                if is_hero:
                    self.lines.append("[/HERO]")


def preprocess_for_text(html: str, base_url: str | None = None, max_bytes: int = TEXT_MAX_BYTES) -> str:
    """Readable page text for the contact, content and social-proof passes.

    Output order is title and description, header digest, main content,
    footer digest. The header and footer budgets are set aside before the
    main content is truncated so contact details in the footer survive.
    """
    soup = parse_html(html)
    _strip_noise(soup)
    for svg in soup.find_all("svg"):
        svg.decompose()

    prominent = soup.find("h1") or soup.find("h2")
    heroes = {id(el) for el in _outermost(soup, (_HERO_AREA_SELECTOR,))}
    renderer = _TextRenderer(base_url, prominent, heroes)

    title = " ".join(soup.title.get_text().split()) if soup.title else ""
    meta = soup.find("meta", attrs={"name": "description"})
    description = meta.get("content", "").strip() if meta else ""

    header = soup.find("header")
    footer = soup.find("footer")
    header_text = truncate_bytes(renderer.render(header), DIGEST_MAX_BYTES)
    footer_text = truncate_bytes(renderer.render(footer), DIGEST_MAX_BYTES)
    if header is not None:
        header.extract()
    if footer is not None:
        footer.extract()

    head = "\n".join(line for line in (
        f"Title: {title}" if title else "",
        f"Description: {description}" if description else "",
    ) if line)
    header_section = f"=== HEADER ===\n{header_text}" if header_text else ""
    footer_section = f"=== FOOTER ===\n{footer_text}" if footer_text else ""

    reserved = sum(len(s.encode("utf-8")) + 2 for s in (head, header_section, footer_section) if s)
    main_label = "=== MAIN ===\n"
    main_budget = max(max_bytes - reserved - len(main_label) - 2, 0)
    main_root = soup.find("main") or soup.find(attrs={"role": "main"}) or soup.body or soup
    main_text = truncate_bytes(renderer.render(main_root), main_budget)

    output = "\n\n".join(s for s in (head, header_section, main_label + main_text, footer_section) if s)
    return truncate_bytes(output, max_bytes)


# --- Images ---


def _image_snippet(el: Tag) -> str:
    clone = parse_html(str(el))
    for node in clone.find_all(_NON_VISUAL_TAGS):
        node.decompose()
    for text in clone.find_all(string=True):
        if len(text.strip()) > LONG_TEXT_RUN:
            text.replace_with("[text]")
    return str(clone)


def _carries_image(el: Tag) -> bool:
    return (
        el.name in ("img", "picture", "wow-image")
        or el.get("data-testid") == "bgMedia"
        or el.find(["img", "picture"]) is not None
        or bool(_URL_IN_STYLE_RE.search(str(el.get("style", ""))))
    )


def preprocess_for_image_extraction(html: str, max_bytes: int = IMAGE_MAX_BYTES) -> str:
    """Image-bearing elements and image-related CSS rules.

    Covers plain ``<img>``/``<picture>``, background-image styles and the
    wrappers common site builders (WordPress, Elementor, Squarespace, Wix)
    put around hero and gallery media.
    """
    soup = parse_html(html)
    parts = [
        _image_snippet(el)
        for el in _outermost(soup, _IMAGE_CONTAINER_SELECTORS)
        if _carries_image(el)
    ]

    css_rules: list[str] = []
    for style in soup.find_all("style", limit=MAX_STYLE_TAGS):
        css = (style.get_text() or "")[:MAX_STYLE_LENGTH]
        for match in CSS_RULE_RE.finditer(css):
            if _IMAGE_CSS_RE.search(match.group(2)):
                css_rules.append(f"{match.group(1).strip()} {{ {match.group(2).strip()} }}")

    output = "\n".join(parts)
    if css_rules:
        output += "\n<style>\n" + "\n".join(css_rules) + "\n</style>"
    return truncate_bytes(output, max_bytes)
