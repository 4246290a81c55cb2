import asyncio
import ipaddress
import logging
from urllib.parse import urljoin, urlparse

import httpx

from profile_extractor.extractors.chain import parse_html, text_of
from profile_extractor.schemas.discovery import PageFetchResult, PageMetadata

logger = logging.getLogger(__name__)

MAX_BODY = 2 * 1024 * 1024  # 2 MB
TIMEOUT = 10.0
MAX_REDIRECTS = 5
USER_AGENT = "ProfileExtractor/1.0 (+https://github.com/profile-extractor)"

_BLOCKED_HOST_SUFFIXES = (".local", ".internal", ".localhost")


def validate_public_url(url: str) -> str | None:
    """Return why ``url`` is unsafe to fetch, or None when it looks public.

    Only the URL itself is checked; hostnames are not resolved.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return "malformed URL"
    if parsed.scheme not in ("http", "https"):
        return f"unsupported scheme {parsed.scheme!r}"
    host = (parsed.hostname or "").lower().rstrip(".")
    if not host:
        return "missing hostname"
    if host == "localhost" or host.endswith(_BLOCKED_HOST_SUFFIXES):
        return f"internal hostname {host}"
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return None
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_multicast or ip.is_unspecified:
        return f"non-public address {host}"
    return None


def _page_metadata(html: str, resp: httpx.Response) -> PageMetadata:
    soup = parse_html(html)
    description = soup.find("meta", attrs={"name": "description"})
    return PageMetadata(
        title=text_of(soup.title) or None,
        description=(description.get("content") or "").strip() or None if description else None,
        status_code=resp.status_code,
        final_url=str(resp.url),
        content_type=resp.headers.get("content-type"),
    )


class ScrapingClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = TIMEOUT,
        max_body_bytes: int = MAX_BODY,
        user_agent: str = USER_AGENT,
    ):
        self._client = client
        self._timeout = timeout
        self._max_body = max_body_bytes
        self._user_agent = user_agent

    async def fetch_page(self, url: str) -> PageFetchResult:
        """Fetch one HTML page. Never raises; failures come back with ``success=False``."""
        problem = validate_public_url(url)
        if problem:
            logger.warning("Refusing to fetch %s: %s", url, problem)
            return PageFetchResult(url=url, success=False, error=f"Unsafe URL: {problem}")

        current = url
        try:
            for _ in range(MAX_REDIRECTS + 1):
                resp = await self._client.get(
                    current,
                    follow_redirects=False,
                    timeout=self._timeout,
                    headers={"User-Agent": self._user_agent},
                )
                if not resp.is_redirect:
                    break
                # Every hop goes through the same public-address check
                current = urljoin(str(resp.url), resp.headers["location"])
                problem = validate_public_url(current)
                if problem:
                    logger.warning("Refusing redirect from %s to %s: %s", url, current, problem)
                    return PageFetchResult(url=url, success=False, error=f"Unsafe redirect: {problem}")
            else:
                return PageFetchResult(url=url, success=False, error=f"Too many redirects (>{MAX_REDIRECTS})")
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.debug("Failed to fetch %s: HTTP %d", url, exc.response.status_code)
            return PageFetchResult(url=url, success=False, error=f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.debug("Failed to fetch %s: %s", url, exc)
            return PageFetchResult(url=url, success=False, error=f"{type(exc).__name__}: {exc}")

        content_type = resp.headers.get("content-type", "")
        if "text/html" not in content_type:
            logger.debug("Skipping non-HTML %s (content-type: %s)", url, content_type)
            return PageFetchResult(url=url, success=False, error=f"Not HTML: {content_type or 'unknown'}")

        if len(resp.content) > self._max_body:
            logger.debug("Skipping oversized page %s (%d bytes)", url, len(resp.content))
            return PageFetchResult(url=url, success=False, error=f"Page too large ({len(resp.content)} bytes)")

        html = resp.text
        return PageFetchResult(url=url, success=True, html=html, metadata=_page_metadata(html, resp))

    async def fetch_pages(self, urls: list[str], concurrency: int = 3) -> dict[str, PageFetchResult]:
        """Fetch several pages with at most ``concurrency`` requests in flight."""
        semaphore = asyncio.Semaphore(max(concurrency, 1))

        async def _bounded(url: str) -> PageFetchResult:
            async with semaphore:
                return await self.fetch_page(url)

        results = await asyncio.gather(*(_bounded(url) for url in urls), return_exceptions=True)

        pages: dict[str, PageFetchResult] = {}
        for url, res in zip(urls, results):
            if isinstance(res, BaseException):
                logger.warning("Fetch task for %s failed: %s", url, res)
                pages[url] = PageFetchResult(url=url, success=False, error=str(res))
            else:
                pages[url] = res
        return pages
