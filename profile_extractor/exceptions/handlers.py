import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import ExtractionError, InvalidUrlError, ScrapingError

logger = logging.getLogger(__name__)


async def invalid_url_error_handler(_request: Request, exc: InvalidUrlError) -> JSONResponse:
    logger.warning("Rejected URL %s: %s", exc.url, exc.reason)
    return JSONResponse(
        status_code=400,
        content={"detail": f"Invalid URL: {exc.reason}"},
    )


async def scraping_error_handler(_request: Request, exc: ScrapingError) -> JSONResponse:
    logger.error("Scraping error: %s (url=%s)", exc.message, exc.url)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Failed to scrape website: {exc.message}"},
    )


async def extraction_error_handler(_request: Request, exc: ExtractionError) -> JSONResponse:
    logger.error("Extraction error: %s", exc.message)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Extraction failed: {exc.message}"},
    )
