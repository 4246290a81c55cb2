import logging
import time

from profile_extractor.exceptions.custom import InvalidUrlError, ScrapingError
from profile_extractor.schemas.analysis import AnalyzedWebsite
from profile_extractor.schemas.discovery import DiscoveryResult
from profile_extractor.schemas.responses import (
    ExtractedDataSummary,
    ExtractionResponse,
    PageSummary,
    ScrapingMetrics,
    StepDurations,
)
from profile_extractor.services.page_discovery import PageDiscoveryService
from profile_extractor.services.scraping_client import validate_public_url
from profile_extractor.services.site_analyzer import SiteAnalyzer

logger = logging.getLogger(__name__)


def normalize_input_url(url: str) -> str:
    """Strip whitespace and default to https when no scheme is given."""
    url = url.strip()
    if not url:
        raise InvalidUrlError(url, "empty URL")
    if "://" not in url:
        url = f"https://{url}"
    problem = validate_public_url(url)
    if problem:
        raise InvalidUrlError(url, problem)
    return url


def _ms_since(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def build_metrics(discovery: DiscoveryResult) -> ScrapingMetrics:
    sizes = [len(page.html.encode()) for page in discovery.pages]
    total = sum(sizes)
    return ScrapingMetrics(
        total_pages_found=discovery.total_pages_found,
        total_pages_scraped=len(discovery.pages),
        failed_pages=len(discovery.errors),
        average_page_size=total // len(sizes) if sizes else 0,
        total_data_size=total,
        failed_urls=[error.url for error in discovery.errors],
    )


def build_summary(analysis: AnalyzedWebsite) -> ExtractedDataSummary:
    info = analysis.business_info
    structured = info.structured_content
    return ExtractedDataSummary(
        has_logo=info.logo_url is not None,
        logo_url=info.logo_url,
        brand_colors_count=len(info.brand_colors),
        emails_count=len(info.emails),
        phones_count=len(info.phones),
        social_links_count=len(info.social_links),
        social_platforms=[link.platform for link in info.social_links],
        has_hero_section=info.hero_section is not None,
        hero_headline=info.hero_section.headline if info.hero_section else None,
        has_business_hours=bool(info.hours) or bool(structured.business_hours),
        services_count=len(structured.services),
        testimonials_count=len(structured.testimonials),
        key_features_count=len(info.key_features),
    )


def build_warnings(metrics: ScrapingMetrics, summary: ExtractedDataSummary) -> list[str]:
    warnings: list[str] = []
    if metrics.failed_pages:
        warnings.append(f"Failed to scrape {metrics.failed_pages} pages")
    if not summary.has_logo:
        warnings.append("No logo found on the website")
    return warnings


class ExtractionService:
    """Crawl a site and turn it into a business profile report."""

    def __init__(self, discovery: PageDiscoveryService, analyzer: SiteAnalyzer):
        self._discovery = discovery
        self._analyzer = analyzer

    async def run(self, url: str, use_llm: bool = True, screenshot: str | None = None) -> ExtractionResponse:
        url = normalize_input_url(url)
        start = time.monotonic()

        discovery = await self._discovery.discover_and_scrape_pages(url)
        scraping_ms = _ms_since(start)
        if not discovery.pages:
            error = discovery.errors[0].error if discovery.errors else "no pages returned"
            raise ScrapingError(f"No pages could be scraped from {url} ({error})", url=url)

        analysis_start = time.monotonic()
        analysis = await self._analyzer.analyze_scraped_website(
            discovery.pages, screenshot=screenshot, use_llm=use_llm,
        )
        analysis_ms = _ms_since(analysis_start)

        metrics = build_metrics(discovery)
        summary = build_summary(analysis)
        warnings = build_warnings(metrics, summary)
        logger.info(
            "Extracted %s: %d/%d pages, %d warnings in %dms",
            url, metrics.total_pages_scraped, metrics.total_pages_found, len(warnings), _ms_since(start),
        )

        return ExtractionResponse(
            url=url,
            business_info=analysis.business_info,
            pages=[
                PageSummary(
                    url=page.url,
                    page_type=page.page_type,
                    title=page.metadata.title if page.metadata else None,
                    size=len(page.html.encode()),
                )
                for page in discovery.pages
            ],
            metrics=metrics,
            summary=summary,
            warnings=warnings,
            durations=StepDurations(scraping_ms=scraping_ms, analysis_ms=analysis_ms, total_ms=_ms_since(start)),
            content_summary=analysis.content_summary,
            recommended_pages=analysis.recommended_pages,
        )
