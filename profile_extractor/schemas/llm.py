"""Response contracts for the two-phase LLM extraction.

Phase 1 is a vision call for brand identity; phase 2 runs four text calls
(contact, content, social proof, images) concurrently.
"""

from typing import Literal

from pydantic import BaseModel, Field

from profile_extractor.schemas.business_info import (
    CamelModel,
    Coordinates,
    DesignTokens,
    Gallery,
    HeroSection,
    HoursEntry,
    ImageDimensions,
    PageContent,
    SocialLink,
    StructuredContent,
    Typography,
)


class VisualStyle(CamelModel):
    theme: str | None = None
    mood: str | None = None


class VisualBrandAnalysis(CamelModel):
    brand_colors: list[str] = []
    logo_url: str | None = None
    fonts: list[str] = []
    typography: Typography | None = None
    design_tokens: DesignTokens | None = None
    visual_style: VisualStyle | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    def has_minimum_data(self, threshold: float) -> bool:
        return bool(self.brand_colors) and self.confidence >= threshold


class ContactExtraction(CamelModel):
    emails: list[str] = []
    phones: list[str] = []
    addresses: list[str] = []
    hours: dict[str, HoursEntry] | None = None
    social_links: list[SocialLink] = []
    coordinates: Coordinates | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    def has_minimum_data(self, threshold: float) -> bool:
        return bool(self.emails or self.phones or self.addresses) and self.confidence >= threshold


class ContentExtraction(CamelModel):
    site_title: str | None = None
    site_description: str | None = None
    favicon: str | None = None
    business_description: str | None = None
    tagline: str | None = None
    key_features: list[str] = []
    hero_section: HeroSection | None = None
    galleries: list[Gallery] = []
    page_content: PageContent | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    def has_minimum_data(self, threshold: float) -> bool:
        has_any = (
            self.site_title is not None
            or self.business_description is not None
            or bool(self.key_features)
        )
        return has_any and self.confidence >= threshold


class SocialProofExtraction(CamelModel):
    structured_content: StructuredContent | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


ImageType = Literal["hero", "gallery", "product", "feature", "team", "logo", "other"]
ImageContext = Literal[
    "background-image", "css-variable", "img-tag", "picture-element", "data-attribute",
]


class ExtractedImage(CamelModel):
    url: str
    type: ImageType = "other"
    context: ImageContext = "img-tag"
    selector: str = ""
    alt: str | None = None
    dimensions: ImageDimensions | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ImageExtraction(CamelModel):
    images: list[ExtractedImage] = []
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    def has_minimum_data(self, threshold: float) -> bool:
        return bool(self.images) and self.confidence >= threshold


class ExtractionMetadata(BaseModel):
    phase1_complete: bool = False
    phase2a_complete: bool = False
    phase2b_complete: bool = False
    phase2c_complete: bool = False
    phase2d_complete: bool = False
    success: bool = False
    used_fallback: bool = False
    duration_ms: int | None = None
    errors: list[str] = []
    warnings: list[str] = []
