import logging
import re
from collections import Counter
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from profile_extractor.extractors.chain import resolve_url
from profile_extractor.extractors.colors import (
    cluster_colors,
    is_grayscale,
    iter_colors,
    normalize_color,
)
from profile_extractor.schemas.business_info import (
    MAX_BRAND_COLORS,
    MAX_FONTS,
    Typography,
    TypographyStyle,
)

logger = logging.getLogger(__name__)

# Scan bounds for pathological pages.
MAX_INLINE_ELEMENTS = 600
MAX_STYLE_TAGS = 6
MAX_STYLE_LENGTH = 40_000
MAX_MATCHES_PER_BLOCK = 500

IMPORTANT_CONTAINER_SELECTOR = (
    'header, nav, .header, .navbar, .site-header, #header, #masthead, .hero, '
    '[class*="hero"], .wp-block-cover, .wp-block-cover-image'
)

INLINE_WEIGHT = 3
IMPORTANT_INLINE_WEIGHT = 6
BRAND_VARIABLE_WEIGHT = 6
VARIABLE_WEIGHT = 2
STYLESHEET_WEIGHT = 1
THEME_COLOR_WEIGHT = 8

_BRAND_VARIABLE_RE = re.compile(r"primary|accent|brand|theme|palette|color", re.IGNORECASE)
CSS_VARIABLE_RE = re.compile(r"(--[a-z0-9\-_]+)\s*:\s*([^;}]+)", re.IGNORECASE)
CSS_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")

_LOGO_SELECTORS = (
    'img[class*="logo"]',
    'img[id*="logo"]',
    ".logo img",
    "#logo img",
    "header img",
    ".site-logo img",
    '[class*="brand"] img',
    'a[class*="logo"] img',
    'a[id*="logo"] img',
    ".navbar-brand img",
    ".site-header img",
    '[class*="header"] img[class*="logo"]',
    "h1 img",
    ".brand img",
    'img[alt*="logo" i]',
    'img[title*="logo" i]',
    '[class*="masthead"] img',
    ".site-title img",
    ".company-logo img",
)
_SVG_LOGO_SELECTORS = (
    'svg[class*="logo"]',
    ".logo svg",
    "#logo svg",
    'a[class*="logo"] svg',
    "header svg",
)
_PLACEHOLDER_MARKERS = ("placeholder", "loading", "spinner", "blank", "transparent")

GENERIC_FONT_FAMILIES = frozenset({
    "serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui",
    "ui-sans-serif", "ui-serif", "ui-monospace", "ui-rounded", "-apple-system",
    "blinkmacsystemfont", "inherit", "initial", "unset", "revert", "emoji", "math",
    "apple color emoji", "segoe ui emoji", "segoe ui symbol", "noto color emoji",
})

_HEADING_SELECTOR_RE = re.compile(r"(?:^|[\s,>+~])h[1-6]\b|heading|title", re.IGNORECASE)
_BODY_SELECTOR_RE = re.compile(r"(?:^|[\s,])(?:html|body|p)\s*(?:,|$)", re.IGNORECASE)
_ACCENT_SELECTOR_RE = re.compile(
    r"(?:^|[\s,])(?:a|em|strong|blockquote|button)\s*(?:,|$)|\.btn|accent|highlight",
    re.IGNORECASE,
)


def parse_declarations(block: str) -> dict[str, str]:
    decls: dict[str, str] = {}
    for part in block.split(";"):
        name, sep, value = part.partition(":")
        if sep:
            decls[name.strip().lower()] = value.strip()
    return decls


def style_blocks(soup: BeautifulSoup) -> list[str]:
    """Contents of the first few ``<style>`` blocks, each truncated."""
    blocks: list[str] = []
    for el in soup.find_all("style", limit=MAX_STYLE_TAGS):
        css = el.get_text() or ""
        blocks.append(css[:MAX_STYLE_LENGTH])
    return blocks


def inline_styled(soup: BeautifulSoup) -> list[Tag]:
    return soup.find_all(style=True, limit=MAX_INLINE_ELEMENTS)


def important_ids(soup: BeautifulSoup) -> set[int]:
    """Identities of header, nav and hero-like containers."""
    return {id(el) for el in soup.select(IMPORTANT_CONTAINER_SELECTOR)}


def in_important_container(el: Tag, important: set[int]) -> bool:
    return id(el) in important or any(id(p) in important for p in el.parents)


# --- Logo ---


def extract_logo(soup: BeautifulSoup, base_url: str) -> str | None:
    """First structurally valid logo image, most specific selector first."""
    rejected: list[tuple[str, str]] = []

    for selector in _LOGO_SELECTORS:
        for img in soup.select(selector):
            src = (img.get("src") or img.get("data-src") or "").strip()
            if not src:
                rejected.append((selector, "no src"))
                continue
            if src.startswith("data:"):
                rejected.append((selector, "data URI"))
                continue
            resolved = resolve_url(src, base_url)
            if resolved is None:
                rejected.append((selector, f"unresolvable src {src[:80]}"))
                continue
            if any(marker in resolved.lower() for marker in _PLACEHOLDER_MARKERS):
                rejected.append((selector, f"placeholder {resolved}"))
                continue
            logger.debug("Logo found via %r: %s", selector, resolved)
            return resolved

    for selector in _SVG_LOGO_SELECTORS:
        if soup.select_one(selector) is not None:
            rejected.append((selector, "inline SVG not supported"))

    if rejected:
        logger.debug("No logo found; rejected candidates: %s", rejected[:20])
    return None


# --- Brand colors ---


def _score_colors(text: str, weight: int, scores: dict[str, int]) -> None:
    for raw in iter_colors(text, MAX_MATCHES_PER_BLOCK):
        add_color_vote(raw, weight, scores)


def add_color_vote(raw: str | None, weight: int, scores: dict[str, int]) -> None:
    hex_color = normalize_color(raw)
    if hex_color is None or hex_color in ("#ffffff", "#000000") or is_grayscale(hex_color):
        return
    scores[hex_color] = scores.get(hex_color, 0) + weight


def extract_brand_colors(soup: BeautifulSoup) -> list[str]:
    """Weighted color vote across inline styles, CSS variables, stylesheets and theme-color.

    Near-duplicate colors collapse into their highest-weighted representative.
    """
    scores: dict[str, int] = {}
    important = important_ids(soup)

    for el in inline_styled(soup):
        style = str(el.get("style", ""))[:MAX_STYLE_LENGTH].lower()
        weight = IMPORTANT_INLINE_WEIGHT if in_important_container(el, important) else INLINE_WEIGHT
        _score_colors(style, weight, scores)

    for css in style_blocks(soup):
        for count, match in enumerate(CSS_VARIABLE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            name, value = match.group(1), match.group(2)
            weight = BRAND_VARIABLE_WEIGHT if _BRAND_VARIABLE_RE.search(name) else VARIABLE_WEIGHT
            _score_colors(value, weight, scores)
        _score_colors(css, STYLESHEET_WEIGHT, scores)

    for meta in soup.find_all("meta", attrs={"name": "theme-color"}):
        add_color_vote(meta.get("content"), THEME_COLOR_WEIGHT, scores)

    # sorted() is stable, so ties keep first-seen order.
    ranked = [color for color, _ in sorted(scores.items(), key=lambda kv: -kv[1])]
    return cluster_colors(ranked)[:MAX_BRAND_COLORS]


# --- Fonts ---


def first_font_family(value: str) -> str | None:
    """First non-generic family name of a ``font-family`` stack."""
    value = value.split("!important")[0]
    for part in value.split(","):
        name = part.strip().strip("'\"").strip()
        if not name or name.lower() in GENERIC_FONT_FAMILIES or name.lower().startswith("var("):
            continue
        return name
    return None


def _google_font_families(href: str) -> list[str]:
    query = parse_qs(urlparse(href).query)
    families: list[str] = []
    for raw in query.get("family", []):
        for family in raw.split("|"):
            name = family.split(":")[0].replace("+", " ").strip()
            if name:
                families.append(name)
    return families


def extract_fonts(soup: BeautifulSoup) -> list[str]:
    """Font families ranked by where they are declared."""
    scores: Counter[str] = Counter()
    display: dict[str, str] = {}

    def _vote(name: str | None, weight: int) -> None:
        if not name:
            return
        key = name.lower()
        display.setdefault(key, name)
        scores[key] += weight

    for link in soup.select('link[href*="fonts.googleapis.com"]'):
        for family in _google_font_families(link.get("href", "")):
            _vote(family, 5)

    for css in style_blocks(soup):
        for count, match in enumerate(CSS_RULE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            selector, decls = match.group(1).strip(), parse_declarations(match.group(2))
            if "font-family" not in decls:
                continue
            if selector.lower().startswith("@font-face"):
                _vote(first_font_family(decls["font-family"]), 3)
            elif _HEADING_SELECTOR_RE.search(selector) or _BODY_SELECTOR_RE.search(selector):
                _vote(first_font_family(decls["font-family"]), 3)
            else:
                _vote(first_font_family(decls["font-family"]), 1)
        for count, match in enumerate(CSS_VARIABLE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            if "font" in match.group(1).lower():
                _vote(first_font_family(match.group(2)), 4)

    for el in inline_styled(soup):
        decls = parse_declarations(str(el.get("style", "")))
        if "font-family" in decls:
            _vote(first_font_family(decls["font-family"]), 2)

    ranked = sorted(scores, key=lambda key: -scores[key])
    return [display[key] for key in ranked][:MAX_FONTS]


# --- Typography ---


def _style_from_decls(decls: dict[str, str], role: str) -> TypographyStyle:
    color = decls.get("color")
    return TypographyStyle(
        font_family=first_font_family(decls["font-family"]) if "font-family" in decls else None,
        font_weight=decls.get("font-weight"),
        text_color=normalize_color(color) or color if color else None,
        font_size=decls.get("font-size"),
        line_height=decls.get("line-height") if role == "body" else None,
    )


def _merge_style(current: TypographyStyle | None, new: TypographyStyle) -> TypographyStyle:
    if current is None:
        return new
    updates = {
        field: value
        for field, value in new.model_dump().items()
        if value is not None and getattr(current, field) is None
    }
    return current.model_copy(update=updates)


def extract_typography(soup: BeautifulSoup) -> Typography | None:
    """Per-role font/weight/color/size from stylesheet rules, then inline styles."""
    roles: dict[str, TypographyStyle | None] = {"heading": None, "body": None, "accent": None}

    for css in style_blocks(soup):
        for count, match in enumerate(CSS_RULE_RE.finditer(css)):
            if count >= MAX_MATCHES_PER_BLOCK:
                break
            selector = match.group(1).strip()
            if selector.startswith("@"):
                continue
            decls = parse_declarations(match.group(2))
            if not decls.keys() & {"font-family", "font-weight", "color", "font-size"}:
                continue
            if _HEADING_SELECTOR_RE.search(selector):
                role = "heading"
            elif _BODY_SELECTOR_RE.search(selector):
                role = "body"
            elif _ACCENT_SELECTOR_RE.search(selector):
                role = "accent"
            else:
                continue
            roles[role] = _merge_style(roles[role], _style_from_decls(decls, role))

    for role, tag in (("heading", "h1"), ("body", "body"), ("accent", "a")):
        el = soup.find(tag, style=True)
        if el is not None:
            decls = parse_declarations(str(el.get("style", "")))
            roles[role] = _merge_style(roles[role], _style_from_decls(decls, role))

    found = {
        role: style
        for role, style in roles.items()
        if style is not None and any(v is not None for v in style.model_dump().values())
    }
    return Typography(**found) if found else None


def find_favicon(soup: BeautifulSoup, base_url: str) -> str | None:
    for link in soup.find_all("link", href=True):
        rel = " ".join(link.get("rel", [])).lower()
        if "icon" in rel:
            resolved = resolve_url(link["href"], base_url)
            if resolved:
                return resolved
    return None
