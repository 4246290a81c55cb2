import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from profile_extractor.config import Settings
from profile_extractor.exceptions.custom import (
    ExtractionError,
    InvalidUrlError,
    ScrapingError,
)
from profile_extractor.exceptions.handlers import (
    extraction_error_handler,
    invalid_url_error_handler,
    scraping_error_handler,
)
from profile_extractor.jobs import JobStore
from profile_extractor.routers.extraction import router as extraction_router
from profile_extractor.services.extraction import ExtractionService
from profile_extractor.services.llm_client import LLMClient
from profile_extractor.services.llm_extractor import LLMExtractionService
from profile_extractor.services.page_discovery import PageDiscoveryService
from profile_extractor.services.scraping_client import ScrapingClient
from profile_extractor.services.site_analyzer import SiteAnalyzer


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    config = settings.extraction_config()

    async with httpx.AsyncClient(timeout=30.0) as client:
        scraper = ScrapingClient(client, timeout=settings.fetch_timeout)
        discovery = PageDiscoveryService(scraper, config)

        # LLM extraction only when an API key is configured
        llm_extractor: LLMExtractionService | None = None
        if settings.anthropic_api_key:
            llm = LLMClient(settings.anthropic_api_key, timeout=settings.llm_timeout)
            llm_extractor = LLMExtractionService(llm, config)

        app.state.extraction_service = ExtractionService(discovery, SiteAnalyzer(llm_extractor))
        app.state.job_store = JobStore()
        app.state.llm_enabled = llm_extractor is not None

        yield


app = FastAPI(title="Profile Extractor", lifespan=lifespan)

app.add_exception_handler(InvalidUrlError, invalid_url_error_handler)
app.add_exception_handler(ScrapingError, scraping_error_handler)
app.add_exception_handler(ExtractionError, extraction_error_handler)

app.include_router(extraction_router)
