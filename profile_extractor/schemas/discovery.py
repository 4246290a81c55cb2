from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PageType(StrEnum):
    home = "home"
    about = "about"
    contact = "contact"
    services = "services"
    team = "team"
    products = "products"
    faq = "faq"
    blog = "blog"
    privacy = "privacy"
    terms = "terms"
    other = "other"


class ExtractedLink(BaseModel):
    url: str
    text: str = ""
    page_type: PageType = PageType.other


class PageMetadata(BaseModel):
    title: str | None = None
    description: str | None = None
    status_code: int | None = None
    final_url: str | None = None
    content_type: str | None = None


class PageFetchResult(BaseModel):
    url: str
    success: bool
    html: str | None = None
    metadata: PageMetadata | None = None
    error: str | None = None


class DiscoveredPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    page_type: PageType
    html: str
    metadata: PageMetadata | None = None
    scraped_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DiscoveryError(BaseModel):
    url: str
    error: str


class DiscoveryResult(BaseModel):
    base_url: str
    pages: list[DiscoveredPage] = []
    errors: list[DiscoveryError] = []
    total_pages_found: int = 0
    total_pages_scraped: int = 0
