import logging
from urllib.parse import urlparse

from profile_extractor.extractors.business_info import extract_business_info
from profile_extractor.extractors.chain import parse_html, text_of
from profile_extractor.schemas.analysis import AnalyzedWebsite
from profile_extractor.schemas.business_info import ExtractedBusinessInfo
from profile_extractor.schemas.discovery import DiscoveredPage, PageType
from profile_extractor.services.llm_extractor import LLMExtractionService

logger = logging.getLogger(__name__)

PAGE_EXCERPT_CHARS = 2000


def _merge_values(primary, secondary):
    if primary is None:
        return secondary
    if isinstance(primary, list) and isinstance(secondary, list):
        return primary + [item for item in secondary if item not in primary]
    if isinstance(primary, dict) and isinstance(secondary, dict) and not primary:
        return secondary
    return primary


def merge_business_info(primary: ExtractedBusinessInfo, secondary: ExtractedBusinessInfo) -> ExtractedBusinessInfo:
    """Fill gaps in ``primary`` from ``secondary``.

    Scalars keep the primary value when present; lists are unioned, primary
    first, and re-capped by the model.
    """
    a = primary.model_dump()
    b = secondary.model_dump()
    merged = {key: _merge_values(a[key], b[key]) for key in a if key != "structured_content"}

    sa, sb = a["structured_content"], b["structured_content"]
    merged["structured_content"] = {key: _merge_values(sa[key], sb[key]) for key in sa}
    return ExtractedBusinessInfo.model_validate(merged)


def _page_excerpt(html: str) -> str:
    soup = parse_html(html)
    for el in soup.find_all(["script", "style", "noscript", "nav", "header", "footer"]):
        el.decompose()
    main = soup.find("main") or soup.body or soup
    return text_of(main)[:PAGE_EXCERPT_CHARS]


def _recommended_pages(info: ExtractedBusinessInfo, pages: list[DiscoveredPage]) -> list[str]:
    found = {page.page_type for page in pages}
    structured = info.structured_content
    candidates = (
        ("home", True),
        ("about", PageType.about in found or info.business_description is not None),
        ("services", PageType.services in found or bool(structured.services)),
        ("products", PageType.products in found or bool(structured.product_categories)),
        ("team", PageType.team in found),
        ("gallery", bool(info.galleries)),
        ("testimonials", bool(structured.testimonials)),
        ("faq", PageType.faq in found or bool(structured.faq)),
        ("contact", PageType.contact in found or info.has_contact()),
    )
    return [name for name, wanted in candidates if wanted]


def _content_summary(base_url: str, info: ExtractedBusinessInfo, pages: list[DiscoveredPage]) -> str:
    name = info.site_title or urlparse(base_url).netloc
    lines = [f"{name} ({base_url})"]
    if info.tagline:
        lines.append(f"Tagline: {info.tagline}")
    if info.business_description:
        lines.append(f"About: {info.business_description}")
    if info.key_features:
        lines.append("Highlights: " + "; ".join(info.key_features[:5]))
    structured = info.structured_content
    if structured.services:
        lines.append("Services: " + ", ".join(s.name for s in structured.services[:10]))
    counts = [
        f"{len(structured.testimonials)} testimonials" if structured.testimonials else "",
        f"{len(structured.faq)} FAQ entries" if structured.faq else "",
        f"{len(info.galleries)} galleries" if info.galleries else "",
    ]
    if any(counts):
        lines.append("Also found: " + ", ".join(c for c in counts if c))
    lines.append("Pages analysed: " + ", ".join(f"{p.page_type} ({p.url})" for p in pages))
    return "\n".join(lines)


class SiteAnalyzer:
    """Turns a crawl into one business profile.

    The homepage goes through the LLM pipeline when one is configured; the
    remaining pages are extracted algorithmically and fill whatever the
    homepage left empty.
    """

    def __init__(self, llm_extractor: LLMExtractionService | None = None):
        self._llm_extractor = llm_extractor

    async def _extract_home(
        self, page: DiscoveredPage, base_url: str, screenshot: str | None, use_llm: bool,
    ) -> ExtractedBusinessInfo:
        if self._llm_extractor is None or not use_llm:
            return extract_business_info(page.html, base_url)
        return await self._llm_extractor.extract_business_info_with_llm(page.html, base_url, screenshot)

    async def analyze_scraped_website(
        self, pages: list[DiscoveredPage], screenshot: str | None = None, use_llm: bool = True,
    ) -> AnalyzedWebsite:
        if not pages:
            raise ValueError("No pages to analyze")

        home = next((p for p in pages if p.page_type == PageType.home), pages[0])
        parsed = urlparse(home.url)
        base_url = f"{parsed.scheme}://{parsed.netloc}"

        info = await self._extract_home(home, home.url, screenshot, use_llm)
        for page in pages:
            if page is home:
                continue
            info = merge_business_info(info, extract_business_info(page.html, page.url))

        page_contents = {page.url: _page_excerpt(page.html) for page in pages}
        logger.info("Analyzed %d pages for %s", len(pages), base_url)

        return AnalyzedWebsite(
            base_url=base_url,
            business_info=info,
            page_contents=page_contents,
            recommended_pages=_recommended_pages(info, pages),
            content_summary=_content_summary(base_url, info, pages),
        )
