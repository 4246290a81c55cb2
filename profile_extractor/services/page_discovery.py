import logging
from urllib.parse import urlparse

from profile_extractor.config import ExtractionConfig
from profile_extractor.extractors.links import extract_navigation_links, prioritize_links_for_scraping
from profile_extractor.schemas.discovery import (
    DiscoveredPage,
    DiscoveryError,
    DiscoveryResult,
    PageType,
)
from profile_extractor.services.scraping_client import ScrapingClient

logger = logging.getLogger(__name__)


def site_base_url(root_url: str) -> str:
    parsed = urlparse(root_url)
    return f"{parsed.scheme}://{parsed.netloc}"


class PageDiscoveryService:
    def __init__(self, scraper: ScrapingClient, config: ExtractionConfig | None = None):
        self._scraper = scraper
        self._config = config or ExtractionConfig()

    def _concurrency(self, queued: int) -> int:
        if queued > self._config.high_concurrency_threshold:
            return self._config.high_fetch_concurrency
        return self._config.fetch_concurrency

    async def discover_and_scrape_pages(self, root_url: str) -> DiscoveryResult:
        """Fetch the homepage, then the most useful navigation pages.

        A homepage failure ends the crawl with that single error. Secondary
        page failures are recorded and never stop their siblings.
        """
        base_url = site_base_url(root_url)

        home = await self._scraper.fetch_page(root_url)
        if not home.success or not home.html:
            logger.warning("Homepage fetch failed for %s: %s", root_url, home.error)
            return DiscoveryResult(
                base_url=base_url,
                errors=[DiscoveryError(url=root_url, error=home.error or "Empty response")],
            )

        pages = [DiscoveredPage(url=root_url, page_type=PageType.home, html=home.html, metadata=home.metadata)]
        errors: list[DiscoveryError] = []

        # Links resolve against where the homepage actually landed
        home_url = home.metadata.final_url if home.metadata and home.metadata.final_url else root_url
        links = extract_navigation_links(home.html, home_url)
        selected = prioritize_links_for_scraping(links, self._config.max_pages_per_site - 1)
        logger.info(
            "Discovered %d navigation links on %s, scraping %d", len(links), root_url, len(selected),
        )

        if selected:
            results = await self._scraper.fetch_pages(
                [link.url for link in selected], concurrency=self._concurrency(len(selected)),
            )
            for link in selected:
                result = results.get(link.url)
                if result is None or not result.success or not result.html:
                    error = result.error if result is not None and result.error else "No content"
                    logger.info("Skipping %s (%s): %s", link.url, link.page_type, error)
                    errors.append(DiscoveryError(url=link.url, error=error))
                    continue
                pages.append(DiscoveredPage(
                    url=link.url, page_type=link.page_type, html=result.html, metadata=result.metadata,
                ))

        return DiscoveryResult(
            base_url=base_url,
            pages=pages,
            errors=errors,
            total_pages_found=1 + len(links),
            total_pages_scraped=len(pages),
        )
