from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from profile_extractor.schemas.business_info import CamelModel, ExtractedBusinessInfo
from profile_extractor.schemas.discovery import PageType


class ExtractionRequest(BaseModel):
    url: str
    use_llm: bool = True
    # Base64 PNG or data URI, forwarded to the vision phase
    screenshot: str | None = None


class ScrapingMetrics(CamelModel):
    total_pages_found: int
    total_pages_scraped: int
    failed_pages: int
    average_page_size: int
    total_data_size: int
    failed_urls: list[str] = []


class ExtractedDataSummary(CamelModel):
    has_logo: bool
    logo_url: str | None = None
    brand_colors_count: int = 0
    emails_count: int = 0
    phones_count: int = 0
    social_links_count: int = 0
    social_platforms: list[str] = []
    has_hero_section: bool = False
    hero_headline: str | None = None
    has_business_hours: bool = False
    services_count: int = 0
    testimonials_count: int = 0
    key_features_count: int = 0


class PageSummary(CamelModel):
    url: str
    page_type: PageType
    title: str | None = None
    size: int


class StepDurations(CamelModel):
    scraping_ms: int
    analysis_ms: int
    total_ms: int


class ExtractionResponse(CamelModel):
    url: str
    business_info: ExtractedBusinessInfo
    pages: list[PageSummary]
    metrics: ScrapingMetrics
    summary: ExtractedDataSummary
    warnings: list[str] = []
    durations: StepDurations
    content_summary: str = ""
    recommended_pages: list[str] = []


class JobSubmittedResponse(BaseModel):
    job_id: str
    status: str
    message: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    created_at: datetime
    finished_at: datetime | None = None
    url: str | None = None
    result: ExtractionResponse | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    status: str
    llm_enabled: bool
