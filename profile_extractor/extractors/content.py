import copy
import logging
import re

from bs4 import BeautifulSoup, Tag

from profile_extractor.extractors.chain import first_result, resolve_url, select_text, text_of
from profile_extractor.schemas.business_info import (
    MAX_GALLERIES,
    MAX_GALLERY_IMAGES,
    MAX_HERO_IMAGES,
    MAX_KEY_FEATURES,
    Gallery,
    GalleryImage,
    HeroImage,
    HeroSection,
    ImageDimensions,
    PageContent,
)

logger = logging.getLogger(__name__)

MAX_MAIN_CONTENT = 8000
MAX_FOOTER_TEXT = 2000
MAX_SIDEBAR_CONTENT = 2000

_BACKGROUND_URL_RE = re.compile(r"background(?:-image)?\s*:[^;]*url\(\s*['\"]?([^'\")]+)['\"]?\s*\)", re.IGNORECASE)
_COLUMNS_CLASS_RE = re.compile(r"(?:columns?|cols?|grid-cols)-(\d{1,2})\b")

_HERO_SELECTORS = (
    ".hero",
    "#hero",
    '[class*="hero"]',
    ".banner",
    ".jumbotron",
    ".header-content",
    ".masthead",
    '[class*="landing"]',
    '[class*="showcase"]',
    "header section",
    "main > section",
    "section:first-of-type",
)
_SUBHEADLINE_SELECTORS = (
    '[class*="subtitle"]',
    '[class*="tagline"]',
    '[class*="subhead"]',
    ".lead",
)
_CTA_SELECTORS = (
    "a.btn-primary",
    "button.btn-primary",
    "a.button",
    "button.button",
    'a[class*="cta"]',
    'button[class*="cta"]',
    "a.btn",
    "button",
)
_FEATURE_SELECTORS = (
    '[class*="feature"] li',
    '[class*="feature"] h3',
    '[class*="benefit"] li',
    '[class*="benefit"] h3',
    '[class*="highlight"] li',
    '[class*="why-"] li',
)
_DESCRIPTION_SELECTORS = (
    '[class*="about"] p',
    '[id*="about"] p',
    '[class*="intro"] p',
    '[class*="description"]',
    "main p",
)
_TAGLINE_SELECTORS = (
    '[class*="tagline"]',
    '[class*="slogan"]',
    '[class*="motto"]',
    ".site-description",
)
_GALLERY_SELECTORS = (
    '[class*="gallery"]',
    '[class*="carousel"]',
    '[class*="slider"]',
    '[class*="masonry"]',
    '[class*="swiper"]',
    '[class*="portfolio"]',
    '[class*="grid"]',
)
_MAIN_SELECTORS = ("main", "article", '[role="main"]', "#content", ".content")
_SIDEBAR_SELECTORS = ("aside", '[class*="sidebar"]', '[role="complementary"]')


def _img_src(img: Tag) -> str | None:
    return img.get("src") or img.get("data-src") or img.get("data-lazy-src")


def _int_attr(el: Tag, name: str) -> int | None:
    value = str(el.get(name, "")).strip().removesuffix("px")
    return int(value) if value.isdigit() else None


def background_image(el: Tag, base_url: str) -> str | None:
    m = _BACKGROUND_URL_RE.search(str(el.get("style", "")))
    return resolve_url(m.group(1), base_url) if m else None


# --- Metadata ---


def extract_site_title(soup: BeautifulSoup) -> str | None:
    og = soup.find("meta", attrs={"property": "og:site_name"}) or soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content", "").strip():
        return og["content"].strip()
    title = text_of(soup.title)
    return title or None


def extract_site_description(soup: BeautifulSoup) -> str | None:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        meta = soup.find("meta", attrs=attrs)
        if meta and meta.get("content", "").strip():
            return meta["content"].strip()
    return None


def _meta_description(soup: BeautifulSoup) -> str | None:
    description = extract_site_description(soup)
    return description if description and len(description) > 20 else None


def _schema_description(soup: BeautifulSoup) -> str | None:
    el = soup.select_one('[itemtype*="schema.org"] [itemprop="description"]')
    if el is None:
        return None
    text = el.get("content") or text_of(el)
    return text or None


def _selector_description(soup: BeautifulSoup) -> str | None:
    for selector in _DESCRIPTION_SELECTORS:
        for el in soup.select(selector):
            text = text_of(el)
            if 50 <= len(text) <= 1000:
                return text
    return None


def extract_business_description(soup: BeautifulSoup) -> str | None:
    return first_result((_meta_description, _schema_description, _selector_description), soup)


def extract_tagline(soup: BeautifulSoup) -> str | None:
    for selector in _TAGLINE_SELECTORS:
        text = select_text(soup, selector)
        if 5 <= len(text) <= 150:
            return text
    return None


def extract_key_features(soup: BeautifulSoup) -> list[str]:
    features: list[str] = []
    for selector in _FEATURE_SELECTORS:
        for el in soup.select(selector):
            text = text_of(el)
            if 5 <= len(text) <= 300 and text not in features:
                features.append(text)
            if len(features) >= MAX_KEY_FEATURES:
                return features
    return features


# --- Hero ---


def _find_hero_container(soup: BeautifulSoup) -> Tag | None:
    for selector in _HERO_SELECTORS:
        for el in soup.select(selector):
            if el.find(["h1", "h2"]) is not None:
                return el
    h1 = soup.find("h1")
    return h1.parent if h1 is not None and isinstance(h1.parent, Tag) else None


def _subheadline(container: Tag, headline_tag: str) -> str | None:
    if headline_tag == "h1":
        text = select_text(container, "h2")
        if 10 <= len(text) <= 200:
            return text
    for selector in (*_SUBHEADLINE_SELECTORS, "p", "h1 + p", "h2 + p"):
        text = select_text(container, selector)
        if 10 <= len(text) <= 200:
            return text
    return None


def _cta(container: Tag, base_url: str) -> tuple[str | None, str | None]:
    for selector in _CTA_SELECTORS:
        for el in container.select(selector):
            text = text_of(el)
            if 2 <= len(text) <= 50:
                link = resolve_url(el.get("href"), base_url) if el.name == "a" else None
                return text, link
    return None, None


def extract_hero_section(soup: BeautifulSoup, base_url: str) -> HeroSection | None:
    """Headline, subheadline, call to action and background of the first hero area."""
    container = _find_hero_container(soup)
    if container is None:
        logger.debug("No hero container found")
        return None

    headline_el = container.find("h1") or container.find("h2")
    headline = text_of(headline_el)
    if not headline:
        return None

    cta_text, cta_link = _cta(container, base_url)
    background = background_image(container, base_url)
    if background is None:
        img = container.find("img")
        if img is not None:
            background = resolve_url(_img_src(img), base_url)

    return HeroSection(
        headline=headline,
        subheadline=_subheadline(container, headline_el.name),
        cta_text=cta_text,
        cta_link=cta_link,
        background_image=background,
    )


def extract_hero_images(soup: BeautifulSoup, base_url: str) -> list[HeroImage]:
    container = _find_hero_container(soup)
    if container is None:
        return []

    images: list[HeroImage] = []
    seen: set[str] = set()

    background = background_image(container, base_url)
    if background:
        seen.add(background)
        images.append(HeroImage(url=background, context="hero background", confidence=0.8))

    for img in container.find_all("img"):
        url = resolve_url(_img_src(img), base_url)
        if url is None or url in seen:
            continue
        seen.add(url)
        width, height = _int_attr(img, "width"), _int_attr(img, "height")
        images.append(HeroImage(
            url=url,
            context="hero",
            alt=img.get("alt") or None,
            dimensions=ImageDimensions(width=width, height=height) if width and height else None,
            confidence=0.7 if width and width >= 600 else 0.5,
        ))
        if len(images) >= MAX_HERO_IMAGES:
            break
    return images


# --- Galleries ---


def _gallery_type(classes: str) -> str:
    if any(word in classes for word in ("carousel", "slider", "swiper", "slick")):
        return "carousel"
    if "masonry" in classes:
        return "masonry"
    if "grid" in classes or "gallery" in classes or "portfolio" in classes:
        return "grid"
    return "unknown"


def _gallery_columns(el: Tag) -> int | None:
    columns = _int_attr(el, "data-columns")
    if columns:
        return columns
    m = _COLUMNS_CLASS_RE.search(" ".join(el.get("class", [])))
    return int(m.group(1)) if m else None


def _gallery_image(img: Tag, base_url: str) -> GalleryImage | None:
    url = resolve_url(_img_src(img), base_url)
    if url is None:
        return None
    width, height = _int_attr(img, "width"), _int_attr(img, "height")
    return GalleryImage(
        url=url,
        alt=img.get("alt") or None,
        width=width,
        height=height,
        aspect_ratio=f"{width}:{height}" if width and height else None,
    )


def extract_galleries(soup: BeautifulSoup, base_url: str) -> list[Gallery]:
    """Image groups of three or more in gallery-, carousel- or grid-like containers.

    Nested matches are skipped once an ancestor has been taken.
    """
    galleries: list[Gallery] = []
    taken: list[Tag] = []

    for selector in _GALLERY_SELECTORS:
        for el in soup.select(selector):
            if any(el is t or t in el.parents for t in taken):
                continue
            images = [
                image
                for image in (_gallery_image(img, base_url) for img in el.find_all("img"))
                if image is not None
            ]
            if len(images) < 3:
                continue
            taken.append(el)
            heading = el.find(["h2", "h3", "h4"])
            galleries.append(Gallery(
                type=_gallery_type(" ".join(el.get("class", [])).lower()),
                images=images[:MAX_GALLERY_IMAGES],
                columns=_gallery_columns(el),
                title=text_of(heading) or None,
            ))
            if len(galleries) >= MAX_GALLERIES:
                return galleries
    return galleries


# --- Page text ---


def _main_text(soup: BeautifulSoup) -> str:
    main = None
    for selector in _MAIN_SELECTORS:
        main = soup.select_one(selector)
        if main is not None:
            break
    main = main or soup.body or soup
    main = copy.copy(main)
    for el in main.find_all(["script", "style", "nav", "header", "footer"]):
        el.decompose()
    return text_of(main)[:MAX_MAIN_CONTENT]


def extract_page_content(soup: BeautifulSoup) -> PageContent | None:
    """Main, footer and sidebar text, truncated for prompt context."""
    footer = soup.find("footer")
    sidebar = None
    for selector in _SIDEBAR_SELECTORS:
        sidebar = soup.select_one(selector)
        if sidebar is not None:
            break

    main_text = _main_text(soup)
    footer_text = text_of(footer)[:MAX_FOOTER_TEXT]
    if not main_text and not footer_text:
        return None
    return PageContent(
        main_content=main_text,
        footer_text=footer_text,
        sidebar_content=text_of(sidebar)[:MAX_SIDEBAR_CONTENT] or None,
    )
