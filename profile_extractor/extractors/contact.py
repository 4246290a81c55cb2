import re

from bs4 import BeautifulSoup

from profile_extractor.extractors.chain import first_result, text_of
from profile_extractor.schemas.business_info import (
    MAX_ADDRESSES,
    MAX_EMAILS,
    MAX_PHONES,
    Coordinates,
    SocialLink,
)

# Free-text regexes only see this much body text.
MAX_BODY_TEXT = 200_000

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"(?:\+?\d{1,3}[\-.\s]?)?\(?\d{3}\)?[\-.\s]?\d{3}[\-.\s]?\d{4}")
_ADDRESS_WORDS_RE = re.compile(
    r"\b(?:street|st|avenue|ave|road|rd|boulevard|blvd|drive|dr|lane|ln|way|circle|court|place|plaza)\b",
    re.IGNORECASE,
)
_LAT_LNG_RE = re.compile(r"(-?\d{1,2}\.\d+)\s*[,;]\s*(-?\d{1,3}\.\d+)")
_MAPS_AT_RE = re.compile(r"@(-?\d{1,2}\.\d+),(-?\d{1,3}\.\d+)")
_MAPS_EMBED_RE = re.compile(r"!3d(-?\d{1,2}\.\d+)!4d(-?\d{1,3}\.\d+)")
_MAPS_QUERY_RE = re.compile(r"[?&](?:q|ll|center)=(-?\d{1,2}\.\d+),(-?\d{1,3}\.\d+)")

_FALSE_POSITIVE_EMAIL_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")
_BLOCKED_EMAIL_DOMAINS = frozenset({
    "sentry.io", "wixpress.com", "w3.org", "example.com", "example.org", "example.net",
})

_ADDRESS_SELECTORS = (
    '[class*="address"]',
    '[id*="address"]',
    "address",
    '[class*="location"]',
    '[id*="location"]',
    'footer [class*="contact"]',
    ".footer-info",
    ".store-location",
)

# First matching platform wins.
_SOCIAL_PATTERNS = (
    ("facebook", re.compile(r"(?:^|[/.])(?:facebook\.com|fb\.com)/", re.IGNORECASE)),
    ("instagram", re.compile(r"(?:^|[/.])instagram\.com/", re.IGNORECASE)),
    ("twitter", re.compile(r"(?:^|[/.])twitter\.com/", re.IGNORECASE)),
    ("x", re.compile(r"(?:^|//|www\.)x\.com/", re.IGNORECASE)),
    ("linkedin", re.compile(r"(?:^|[/.])linkedin\.com/", re.IGNORECASE)),
    ("youtube", re.compile(r"(?:^|[/.])(?:youtube\.com|youtu\.be)/", re.IGNORECASE)),
    ("pinterest", re.compile(r"(?:^|[/.])pinterest\.[a-z.]+/", re.IGNORECASE)),
    ("tiktok", re.compile(r"(?:^|[/.])tiktok\.com/", re.IGNORECASE)),
    ("snapchat", re.compile(r"(?:^|[/.])snapchat\.com/", re.IGNORECASE)),
    ("whatsapp", re.compile(r"(?:^|[/.])(?:wa\.me|api\.whatsapp\.com|whatsapp\.com)/", re.IGNORECASE)),
    ("yelp", re.compile(r"(?:^|[/.])yelp\.[a-z.]+/", re.IGNORECASE)),
)


def body_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    return root.get_text(" ", strip=True)[:MAX_BODY_TEXT]


def _digits_only(phone: str) -> str:
    return "".join(c for c in phone if c.isdigit())


def _is_plausible_email(email: str) -> bool:
    if email.endswith(_FALSE_POSITIVE_EMAIL_SUFFIXES):
        return False
    return email.partition("@")[2] not in _BLOCKED_EMAIL_DOMAINS


def extract_emails(soup: BeautifulSoup) -> list[str]:
    """Emails from mailto: links first, then from the page text."""
    emails: list[str] = []

    for a in soup.select('a[href^="mailto:"]'):
        email = a["href"][7:].split("?")[0].strip().lower()
        if _EMAIL_RE.fullmatch(email) and _is_plausible_email(email) and email not in emails:
            emails.append(email)

    for match in _EMAIL_RE.findall(body_text(soup)):
        email = match.lower()
        if _is_plausible_email(email) and email not in emails:
            emails.append(email)

    return emails[:MAX_EMAILS]


def extract_phones(soup: BeautifulSoup) -> list[str]:
    """Phones from tel: links first, then regex in text; deduped by digits."""
    seen_digits: set[str] = set()
    phones: list[str] = []

    def _add(raw: str) -> None:
        phone = raw.strip()
        digits = _digits_only(phone)
        if len(digits) >= 7 and digits not in seen_digits:
            seen_digits.add(digits)
            phones.append(phone)

    for a in soup.select('a[href^="tel:"]'):
        _add(a["href"][4:])

    for match in _PHONE_RE.findall(body_text(soup)):
        _add(match)

    return phones[:MAX_PHONES]


def _schema_addresses(soup: BeautifulSoup) -> list[str]:
    addresses: list[str] = []
    for el in soup.select('[itemtype*="schema.org/PostalAddress"], [itemtype*="schema.org/LocalBusiness"]'):
        parts = [
            text_of(el.select_one(f'[itemprop="{prop}"]'))
            for prop in ("streetAddress", "addressLocality", "addressRegion", "postalCode")
        ]
        if parts[0] or parts[1]:
            addresses.append(", ".join(p for p in parts if p))
    return addresses


def _selector_addresses(soup: BeautifulSoup) -> list[str]:
    addresses: list[str] = []
    for selector in _ADDRESS_SELECTORS:
        for el in soup.select(selector):
            text = text_of(el)
            if 10 < len(text) < 300 and re.search(r"\d", text) and _ADDRESS_WORDS_RE.search(text):
                addresses.append(text)
    return addresses


def extract_addresses(soup: BeautifulSoup) -> list[str]:
    addresses: list[str] = []
    for candidate in _schema_addresses(soup) + _selector_addresses(soup):
        if candidate not in addresses:
            addresses.append(candidate)
    return addresses[:MAX_ADDRESSES]


def _social_platform(href: str) -> str | None:
    for platform, pattern in _SOCIAL_PATTERNS:
        if pattern.search(href):
            return platform
    return None


def extract_social_links(soup: BeautifulSoup) -> list[SocialLink]:
    """Social profile links, first occurrence per platform."""
    links: list[SocialLink] = []
    seen: set[str] = set()
    for a in soup.select("a[href]"):
        href = a["href"].strip()
        if not href.lower().startswith(("http://", "https://", "//")):
            continue
        platform = _social_platform(href)
        if platform and platform not in seen:
            seen.add(platform)
            url = f"https:{href}" if href.startswith("//") else href
            links.append(SocialLink(platform=platform, url=url))
    return links


def _valid_coordinates(lat: str, lng: str) -> Coordinates | None:
    try:
        lat_f, lng_f = float(lat), float(lng)
    except ValueError:
        return None
    if -90 <= lat_f <= 90 and -180 <= lng_f <= 180 and (lat_f, lng_f) != (0.0, 0.0):
        return Coordinates(lat=lat_f, lng=lng_f)
    return None


def _meta_coordinates(soup: BeautifulSoup) -> Coordinates | None:
    for name in ("geo.position", "ICBM"):
        meta = soup.find("meta", attrs={"name": name})
        if meta and meta.get("content"):
            m = _LAT_LNG_RE.search(meta["content"])
            if m:
                return _valid_coordinates(m.group(1), m.group(2))
    lat = soup.select_one('meta[property="place:location:latitude"], meta[property="og:latitude"]')
    lng = soup.select_one('meta[property="place:location:longitude"], meta[property="og:longitude"]')
    if lat and lng and lat.get("content") and lng.get("content"):
        return _valid_coordinates(lat["content"], lng["content"])
    return None


def _microdata_coordinates(soup: BeautifulSoup) -> Coordinates | None:
    lat = soup.select_one('[itemprop="latitude"]')
    lng = soup.select_one('[itemprop="longitude"]')
    if lat is None or lng is None:
        return None
    return _valid_coordinates(
        lat.get("content") or text_of(lat),
        lng.get("content") or text_of(lng),
    )


def _map_embed_coordinates(soup: BeautifulSoup) -> Coordinates | None:
    for el in soup.select('iframe[src*="google.com/maps"], a[href*="google.com/maps"], a[href*="maps.google"]'):
        url = el.get("src") or el.get("href") or ""
        for pattern in (_MAPS_EMBED_RE, _MAPS_AT_RE, _MAPS_QUERY_RE):
            m = pattern.search(url)
            if m:
                coords = _valid_coordinates(m.group(1), m.group(2))
                if coords:
                    return coords
    return None


def extract_coordinates(soup: BeautifulSoup) -> Coordinates | None:
    return first_result(
        (_microdata_coordinates, _meta_coordinates, _map_embed_coordinates), soup,
    )
