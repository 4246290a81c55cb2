import copy
import re

from bs4 import BeautifulSoup, Tag

from profile_extractor.extractors.chain import resolve_url, safely, text_of
from profile_extractor.extractors.contact import body_text
from profile_extractor.schemas.business_info import (
    MAX_BUSINESS_HOURS,
    MAX_FAQ,
    MAX_FOOTER_LINKS,
    MAX_PRODUCT_CATEGORIES,
    MAX_SERVICES,
    MAX_TESTIMONIALS,
    BusinessHours,
    FAQItem,
    FooterContent,
    FooterLink,
    HoursEntry,
    ProductCategory,
    Service,
    StructuredContent,
    Testimonial,
)

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_TIME = r"\d{1,2}(?::\d{2})?\s*(?:am|pm)?"
_DAY = r"monday|tuesday|wednesday|thursday|friday|saturday|sunday|mon|tue|wed|thu|fri|sat|sun"
_TIME_RANGE_RE = re.compile(rf"({_TIME})\s*[-–]\s*({_TIME})", re.IGNORECASE)
_DAY_RANGE_RE = re.compile(
    rf"\b({_DAY})[\s-]*(?:through|thru|to|-|–)[\s-]*({_DAY}):?\s*({_TIME})\s*[-–]\s*({_TIME})",
    re.IGNORECASE,
)
_SINGLE_DAY_RE = re.compile(rf"\b({_DAY}):?\s*({_TIME})\s*[-–]\s*({_TIME})", re.IGNORECASE)
_DURATION_RE = re.compile(r"(\d+\s*(?:hour|hr|minute|min|day|week|month|session|class|visit)s?)\b", re.IGNORECASE)
_LIST_PRICE_RE = re.compile(r"^(.+?)\s*[-–:]\s*(\$[\d,]+(?:\.\d{2})?|\d+\s*(?:dollars?|euros?|pounds?))", re.IGNORECASE)
_RATING_TEXT_RE = re.compile(r"(\d(?:\.\d)?)\s*(?:star|★|⭐|/\s*5)", re.IGNORECASE)
_ITEM_COUNT_RE = re.compile(r"(\d+)\s*(?:items?|products?|varieties)", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")

_HOURS_SELECTORS = (
    ".hours",
    ".business-hours",
    '[class*="hours"]',
    '[id*="hours"]',
    ".opening-hours",
    ".store-hours",
    'footer [class*="hour"]',
    'aside [class*="hour"]',
    '[class*="schedule"]',
    '[class*="timing"]',
)
_SERVICE_SELECTORS = (
    ".service-item",
    ".price-card",
    ".pricing-item",
    '[class*="service"]',
    '[class*="pricing"]',
    '[class*="package"]',
    '[class*="plan"]',
    '[class*="product-item"]',
    '[class*="offering"]',
    ".menu-item",
    ".treatment",
    ".program-item",
    ".course-item",
)
_SERVICE_LIST_SELECTORS = (
    "ul.services li",
    "ul.pricing li",
    '[class*="service-list"] li',
    '[class*="offering"] li',
)
_TESTIMONIAL_SELECTORS = (
    ".testimonial",
    ".review",
    ".feedback",
    '[class*="testimonial"]',
    '[class*="review"]',
    '[class*="customer-feedback"]',
    "blockquote",
    ".quote",
    ".rating-item",
)
_AUTHOR_SELECTORS = (".author", ".name", ".customer", ".reviewer", ".client-name", "cite", "footer", ".by")
_ROLE_SELECTORS = (".role", ".title", ".company", ".position", ".job-title")
_FAQ_SELECTORS = (
    ".faq-item",
    '[class*="faq"]',
    '[class*="question-answer"]',
    ".accordion-item",
    "details",
)
_CATEGORY_SELECTORS = (
    '[class*="category"]',
    '[class*="product-type"]',
    '[class*="collection"]',
    ".catalog-section",
    '[class*="department"]',
)


def _first_text(root: Tag, selectors: tuple[str, ...], accept) -> str:
    for selector in selectors:
        text = text_of(root.select_one(selector))
        if text and accept(text):
            return text
    return ""


def _looks_like_price(text: str) -> bool:
    return any(symbol in text for symbol in "$€£") or bool(re.search(r"\d", text))


def _dedupe(items: list, key) -> list:
    seen: set = set()
    out: list = []
    for item in items:
        k = key(item)
        if k not in seen:
            seen.add(k)
            out.append(item)
    return out


# --- Business hours ---


def _full_day(token: str) -> str:
    prefix = token.lower()[:3]
    return next((day for day in DAY_NAMES if day.startswith(prefix)), token.lower()).capitalize()


def _schema_hours(soup: BeautifulSoup) -> list[BusinessHours]:
    hours: list[BusinessHours] = []
    for el in soup.select('[itemtype*="schema.org/OpeningHoursSpecification"]'):
        day = text_of(el.select_one('[itemprop="dayOfWeek"]'))
        opens_el = el.select_one('[itemprop="opens"]')
        closes_el = el.select_one('[itemprop="closes"]')
        opens = (opens_el.get("content") or text_of(opens_el)) if opens_el else ""
        closes = (closes_el.get("content") or text_of(closes_el)) if closes_el else ""
        if day:
            closed = not (opens and closes)
            hours.append(BusinessHours(day=day, hours="Closed" if closed else f"{opens} - {closes}", closed=closed))
    return hours


def _days_between(first: str, last: str) -> set[str]:
    start, end = DAY_NAMES.index(first.lower()), DAY_NAMES.index(last.lower())
    if start <= end:
        return set(DAY_NAMES[start:end + 1])
    return set(DAY_NAMES[start:] + DAY_NAMES[:end + 1])


def _container_hours(container: Tag) -> list[BusinessHours]:
    hours: list[BusinessHours] = []
    found_days: set[str] = set()

    for row in container.select('tr, li, div[class*="day"], div[class*="hour-item"]') or [container]:
        text = text_of(row).lower()
        for m in _DAY_RANGE_RE.finditer(text):
            first, last = _full_day(m.group(1)), _full_day(m.group(2))
            hours.append(BusinessHours(day=f"{first}-{last}", hours=f"{m.group(3)} - {m.group(4)}"))
            found_days.update(_days_between(first, last))
        text = _DAY_RANGE_RE.sub(" ", text)

        for day in DAY_NAMES:
            if day in found_days or not re.search(rf"\b{day[:3]}", text):
                continue
            segment = text[text.find(day[:3]):]
            m = _TIME_RANGE_RE.search(segment)
            if m:
                found_days.add(day)
                hours.append(BusinessHours(day=day.capitalize(), hours=f"{m.group(1)} - {m.group(2)}"))
            elif segment[:20].find("closed") != -1:
                found_days.add(day)
                hours.append(BusinessHours(day=day.capitalize(), hours="Closed", closed=True))
    return hours


def _text_hours(text: str) -> list[BusinessHours]:
    hours: list[BusinessHours] = []
    for m in _DAY_RANGE_RE.finditer(text):
        hours.append(BusinessHours(
            day=f"{_full_day(m.group(1))}-{_full_day(m.group(2))}",
            hours=f"{m.group(3)} - {m.group(4)}",
        ))
    for m in _SINGLE_DAY_RE.finditer(text):
        day = _full_day(m.group(1))
        if not any(day.lower() in h.day.lower() for h in hours):
            hours.append(BusinessHours(day=day, hours=f"{m.group(2)} - {m.group(3)}"))
    return hours


def extract_business_hours(soup: BeautifulSoup) -> list[BusinessHours]:
    """Opening hours from schema.org markup, then hours-like containers, then page text."""
    hours = _schema_hours(soup)
    if not hours:
        for selector in _HOURS_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                hours = _container_hours(container)
                if hours:
                    break
    if not hours:
        hours = _text_hours(body_text(soup))
    return _dedupe(hours, lambda h: (h.day, h.hours))[:MAX_BUSINESS_HOURS]


def hours_by_day(entries: list[BusinessHours]) -> dict[str, HoursEntry] | None:
    """Per-weekday open/close times for entries naming a single day."""
    result: dict[str, HoursEntry] = {}
    for entry in entries:
        day = entry.day.lower()
        if day not in DAY_NAMES or day in result:
            continue
        if entry.closed:
            result[day] = HoursEntry(closed=True)
            continue
        opens, _, closes = entry.hours.partition(" - ")
        result[day] = HoursEntry(open=opens.strip() or None, close=closes.strip() or None)
    return result or None


# --- Services ---


def _schema_services(soup: BeautifulSoup) -> list[Service]:
    services: list[Service] = []
    for el in soup.select(
        '[itemtype*="schema.org/Service"], [itemtype*="schema.org/Product"], [itemtype*="schema.org/Offer"]'
    ):
        name = text_of(el.select_one('[itemprop="name"]'))
        if name:
            services.append(Service(
                name=name,
                description=text_of(el.select_one('[itemprop="description"]')) or None,
                price=text_of(el.select_one('[itemprop="price"]')) or None,
            ))
    return services


def _card_services(soup: BeautifulSoup) -> list[Service]:
    services: list[Service] = []
    for selector in _SERVICE_SELECTORS:
        for item in soup.select(selector):
            name = _first_text(
                item,
                ("h2", "h3", "h4", "h5", ".title", ".name", ".service-name", ".item-title"),
                lambda t: len(t) < 200,
            )
            price = _first_text(item, (".price", ".cost", '[class*="price"]', ".rate", ".fee", ".amount"), _looks_like_price)
            description = _first_text(
                item,
                ("p", ".description", ".desc", ".details", ".summary"),
                lambda t: 10 < len(t) < 500 and t not in (name, price),
            )
            duration = _DURATION_RE.search(text_of(item))
            if name and (price or description) and all(s.name != name for s in services):
                services.append(Service(
                    name=name,
                    description=description or None,
                    price=price or None,
                    duration=duration.group(1) if duration else None,
                ))
        if len(services) >= 5:
            break
    return services


def _table_services(soup: BeautifulSoup) -> list[Service]:
    services: list[Service] = []
    for table in soup.find_all("table"):
        text = text_of(table).lower()
        if not any(word in text for word in ("price", "cost", "service", "package", "$")):
            continue
        for row in table.find_all("tr"):
            if row.find("th") is not None:
                continue
            cells = [text_of(cell) for cell in row.find_all(["td", "th"])]
            if len(cells) < 2:
                continue
            name, price_cell = cells[0], cells[-1]
            description = cells[1] if len(cells) > 2 else ""
            if not name or len(name) >= 200 or "total" in name.lower():
                continue
            has_price = _looks_like_price(price_cell)
            if has_price or description:
                services.append(Service(
                    name=name,
                    description=description or None,
                    price=price_cell if has_price else None,
                ))
    return services


def _list_services(soup: BeautifulSoup) -> list[Service]:
    services: list[Service] = []
    for selector in _SERVICE_LIST_SELECTORS:
        for item in soup.select(selector):
            text = text_of(item)
            m = _LIST_PRICE_RE.match(text)
            if m:
                services.append(Service(name=m.group(1).strip(), price=m.group(2).strip()))
            elif 5 < len(text) < 200:
                services.append(Service(name=text))
    return services


def extract_services(soup: BeautifulSoup) -> list[Service]:
    services: list[Service] = []
    for strategy in (_schema_services, _card_services, _table_services, _list_services):
        services = strategy(soup)
        if services:
            break
    return _dedupe(services, lambda s: s.name)[:MAX_SERVICES]


# --- Testimonials ---


def _rating(item: Tag) -> float | None:
    stars = item.select('[class*="star"], [class*="rating"]')
    filled = [
        el for el in stars
        if any(word in " ".join(el.get("class", [])) for word in ("filled", "active", "full", "checked"))
    ]
    if 0 < len(filled) <= 5:
        return float(len(filled))

    holder = item if item.has_attr("data-rating") else item.select_one("[data-rating]")
    if holder is not None:
        try:
            return float(holder["data-rating"])
        except ValueError:
            pass

    m = _RATING_TEXT_RE.search(text_of(item))
    return float(m.group(1)) if m else None


def _testimonial_content(item: Tag) -> str:
    content = _first_text(
        item,
        ("p", ".content", ".text", ".quote-text", ".review-text", ".message", ".comment"),
        lambda t: len(t) > 20,
    )
    if content:
        return content
    stripped = copy.copy(item)
    for el in stripped.select(".author, .name, .customer, .reviewer, .by, cite, footer"):
        el.decompose()
    return text_of(stripped)


def _schema_testimonials(soup: BeautifulSoup) -> list[Testimonial]:
    testimonials: list[Testimonial] = []
    for el in soup.select('[itemtype*="schema.org/Review"], [itemtype*="schema.org/UserReview"]'):
        content = text_of(el.select_one('[itemprop="reviewBody"], [itemprop="description"], [itemprop="text"]'))
        rating_el = el.select_one('[itemprop="ratingValue"]')
        rating = (rating_el.get("content") or text_of(rating_el)) if rating_el else ""
        if len(content) > 10:
            testimonials.append(Testimonial(
                name=text_of(el.select_one('[itemprop="author"]')) or None,
                content=content,
                rating=float(rating) if re.fullmatch(r"\d+(?:\.\d+)?", rating) else None,
            ))
    return testimonials


def _selector_testimonials(soup: BeautifulSoup) -> list[Testimonial]:
    testimonials: list[Testimonial] = []
    for selector in _TESTIMONIAL_SELECTORS:
        for item in soup.select(selector):
            content = _testimonial_content(item)
            if not 20 < len(content) < 2000:
                continue
            name = _first_text(item, _AUTHOR_SELECTORS, lambda t: len(t) < 100)
            name = re.sub(r"^(?:[-–—]\s*|by\s+)", "", name, flags=re.IGNORECASE)
            rating = _rating(item)
            testimonials.append(Testimonial(
                name=name or None,
                role=_first_text(item, _ROLE_SELECTORS, lambda t: len(t) < 100) or None,
                content=content,
                rating=rating if rating is not None and 0 < rating <= 5 else None,
            ))
        if len(testimonials) >= 5:
            break
    return testimonials


def extract_testimonials(soup: BeautifulSoup) -> list[Testimonial]:
    testimonials = _schema_testimonials(soup) or _selector_testimonials(soup)
    return _dedupe(testimonials, lambda t: t.content[:100])[:MAX_TESTIMONIALS]


# --- FAQ ---


def extract_faq(soup: BeautifulSoup) -> list[FAQItem]:
    """Question/answer pairs from schema.org, FAQ-like blocks and definition lists."""
    faqs: list[FAQItem] = []

    for el in soup.select('[itemtype*="schema.org/Question"]'):
        question = text_of(el.select_one('[itemprop="name"]'))
        answer = text_of(el.select_one('[itemprop="acceptedAnswer"] [itemprop="text"], [itemprop="text"]'))
        if question and answer:
            faqs.append(FAQItem(question=question, answer=answer))

    if not faqs:
        for selector in _FAQ_SELECTORS:
            for item in soup.select(selector):
                question = _first_text(
                    item, ("h3", "h4", "h5", ".question", "summary", '[class*="question"]', "dt"),
                    lambda t: "?" in t,
                )
                answer = _first_text(
                    item, ("p", ".answer", '[class*="answer"]', "dd", ".content"),
                    lambda t: len(t) > 10 and t != question,
                )
                if question and answer:
                    faqs.append(FAQItem(question=question, answer=answer))

    for dl in soup.find_all("dl"):
        for dt, dd in zip(dl.find_all("dt"), dl.find_all("dd")):
            question, answer = text_of(dt), text_of(dd)
            if question and answer and len(question) < 300 and len(answer) < 1000:
                faqs.append(FAQItem(question=question, answer=answer))

    return _dedupe(faqs, lambda f: f.question)[:MAX_FAQ]


# --- Product categories ---


def extract_product_categories(soup: BeautifulSoup) -> list[ProductCategory]:
    categories: list[ProductCategory] = []
    names: set[str] = set()

    for selector in _CATEGORY_SELECTORS:
        for item in soup.select(selector):
            name = _first_text(item, ("h2", "h3", "h4", ".title", ".name", "a"), lambda t: len(t) < 100)
            if not name or name in names:
                continue
            count = _ITEM_COUNT_RE.search(text_of(item))
            names.add(name)
            categories.append(ProductCategory(
                name=name,
                description=text_of(item.select_one("p, .description")) or None,
                item_count=int(count.group(1)) if count else None,
            ))

    for link in soup.select("nav a, .menu a"):
        href = link.get("href", "")
        name = text_of(link)
        if name and name not in names and any(word in href for word in ("category", "collection", "products")):
            names.add(name)
            categories.append(ProductCategory(name=name))

    return categories[:MAX_PRODUCT_CATEGORIES]


# --- Footer ---


def extract_footer_content(soup: BeautifulSoup, base_url: str) -> FooterContent | None:
    footer = soup.find("footer")
    if footer is None:
        return None

    copyright_text = _first_text(
        footer, (".copyright", '[class*="copyright"]', "p"),
        lambda t: "©" in t or "copyright" in t.lower() or bool(_YEAR_RE.search(t)),
    )

    links: list[FooterLink] = []
    for a in footer.find_all("a", href=True):
        text = text_of(a)
        href = a["href"].strip()
        if not text or href.startswith(("mailto:", "tel:")):
            continue
        url = resolve_url(href, base_url)
        if url:
            links.append(FooterLink(text=text, url=url))
        if len(links) >= MAX_FOOTER_LINKS:
            break

    additional = text_of(footer)[:500]
    content = FooterContent(
        copyright_text=copyright_text or None,
        important_links=links,
        additional_info=additional if len(additional) > 50 else None,
    )
    if not (content.copyright_text or content.important_links or content.additional_info):
        return None
    return content


def extract_structured_content(soup: BeautifulSoup, base_url: str) -> StructuredContent:
    """Each section is independent; one failing section leaves the others intact."""
    return StructuredContent(
        business_hours=safely(extract_business_hours, [], soup),
        services=safely(extract_services, [], soup),
        testimonials=safely(extract_testimonials, [], soup),
        faq=safely(extract_faq, [], soup),
        product_categories=safely(extract_product_categories, [], soup),
        footer_content=safely(extract_footer_content, None, soup, base_url),
    )
