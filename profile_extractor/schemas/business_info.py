from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from profile_extractor.extractors.colors import normalize_color

MAX_EMAILS = 5
MAX_PHONES = 3
MAX_ADDRESSES = 3
MAX_BRAND_COLORS = 5
MAX_FONTS = 5
MAX_KEY_FEATURES = 15
MAX_HERO_IMAGES = 10
MAX_GALLERIES = 10
MAX_GALLERY_IMAGES = 50
MAX_BUSINESS_HOURS = 10
MAX_SERVICES = 30
MAX_TESTIMONIALS = 30
MAX_FAQ = 20
MAX_PRODUCT_CATEGORIES = 15
MAX_FOOTER_LINKS = 10
MAX_SPACING_VALUES = 8
MAX_RADIUS_VALUES = 6
MAX_SHADOWS = 5

SOCIAL_PLATFORMS = frozenset({
    "facebook", "instagram", "twitter", "x", "linkedin", "tiktok",
    "youtube", "pinterest", "snapchat", "whatsapp", "yelp",
})

_FILE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".css", ".js")


def _capped(limit: int):
    def _truncate(values: list) -> list:
        return values[:limit]
    return AfterValidator(_truncate)


def _unique_capped(limit: int):
    def _dedupe(values: list[str]) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for value in values:
            value = value.strip()
            if value and value not in seen:
                seen.add(value)
                out.append(value)
        return out[:limit]
    return AfterValidator(_dedupe)


def _clean_emails(values: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        email = value.strip().lower()
        if not email or "@" not in email or email.endswith(_FILE_EXTENSIONS):
            continue
        if email not in seen:
            seen.add(email)
            out.append(email)
    return out[:MAX_EMAILS]


def _clean_colors(values: list[str]) -> list[str]:
    out: list[str] = []
    for value in values:
        color = normalize_color(value)
        if color and color not in out:
            out.append(color)
    return out[:MAX_BRAND_COLORS]


def _clean_social_links(values: Any) -> Any:
    """Drop unknown platforms and keep the first link per platform."""
    if not isinstance(values, list):
        return values
    seen: set[str] = set()
    out: list = []
    for item in values:
        platform = item.get("platform") if isinstance(item, dict) else getattr(item, "platform", None)
        if not isinstance(platform, str):
            continue
        platform = platform.strip().lower()
        if platform not in SOCIAL_PLATFORMS or platform in seen:
            continue
        seen.add(platform)
        if isinstance(item, dict):
            item = {**item, "platform": platform}
        else:
            item = item.model_copy(update={"platform": platform})
        out.append(item)
    return out


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HoursEntry(CamelModel):
    open: str | None = None
    close: str | None = None
    closed: bool = False


class Coordinates(CamelModel):
    lat: float
    lng: float


class SocialLink(CamelModel):
    platform: str
    url: str


class TypographyStyle(CamelModel):
    font_family: str | None = None
    font_weight: str | int | None = None
    text_color: str | None = None
    font_size: str | None = None
    line_height: str | None = None


class Typography(CamelModel):
    heading: TypographyStyle | None = None
    body: TypographyStyle | None = None
    accent: TypographyStyle | None = None


class SpacingTokens(CamelModel):
    values: Annotated[list[str], _unique_capped(MAX_SPACING_VALUES)] = []
    unit: Literal["rem", "px", "em"] = "px"


class RadiusTokens(CamelModel):
    values: Annotated[list[str], _unique_capped(MAX_RADIUS_VALUES)] = []


class DesignTokens(CamelModel):
    spacing: SpacingTokens | None = None
    border_radius: RadiusTokens | None = None
    shadows: Annotated[list[str], _unique_capped(MAX_SHADOWS)] = []

    def is_empty(self) -> bool:
        return not (
            (self.spacing and self.spacing.values)
            or (self.border_radius and self.border_radius.values)
            or self.shadows
        )


class HeroSection(CamelModel):
    headline: str | None = None
    subheadline: str | None = None
    cta_text: str | None = None
    cta_link: str | None = None
    background_image: str | None = None


class ImageDimensions(CamelModel):
    width: int
    height: int


class HeroImage(CamelModel):
    url: str
    context: str | None = None
    alt: str | None = None
    dimensions: ImageDimensions | None = None
    confidence: float = 0.5


class GalleryImage(CamelModel):
    url: str
    alt: str | None = None
    width: int | None = None
    height: int | None = None
    aspect_ratio: str | None = None


class Gallery(CamelModel):
    type: Literal["grid", "carousel", "masonry", "unknown"] = "unknown"
    images: Annotated[list[GalleryImage], _capped(MAX_GALLERY_IMAGES)] = []
    columns: int | None = None
    title: str | None = None


class BusinessHours(CamelModel):
    day: str
    hours: str
    closed: bool = False


class Service(CamelModel):
    name: str
    description: str | None = None
    price: str | None = None
    duration: str | None = None


class Testimonial(CamelModel):
    name: str | None = None
    role: str | None = None
    content: str
    rating: float | None = None


class FAQItem(CamelModel):
    question: str
    answer: str


class ProductCategory(CamelModel):
    name: str
    description: str | None = None
    item_count: int | None = None


class FooterLink(CamelModel):
    text: str
    url: str


class FooterContent(CamelModel):
    copyright_text: str | None = None
    important_links: Annotated[list[FooterLink], _capped(MAX_FOOTER_LINKS)] = []
    additional_info: str | None = None


class StructuredContent(CamelModel):
    business_hours: Annotated[list[BusinessHours], _capped(MAX_BUSINESS_HOURS)] = []
    services: Annotated[list[Service], _capped(MAX_SERVICES)] = []
    testimonials: Annotated[list[Testimonial], _capped(MAX_TESTIMONIALS)] = []
    faq: Annotated[list[FAQItem], _capped(MAX_FAQ)] = []
    product_categories: Annotated[list[ProductCategory], _capped(MAX_PRODUCT_CATEGORIES)] = []
    footer_content: FooterContent | None = None


class PageContent(CamelModel):
    main_content: str = ""
    footer_text: str = ""
    sidebar_content: str | None = None


class ExtractedBusinessInfo(CamelModel):
    """Business profile of one scraped site.

    Absent values mean "not found". List fields are capped and deduplicated
    on construction, whichever extractor produced them.
    """

    # Contact
    emails: Annotated[list[str], AfterValidator(_clean_emails)] = []
    phones: Annotated[list[str], _unique_capped(MAX_PHONES)] = []
    addresses: Annotated[list[str], _unique_capped(MAX_ADDRESSES)] = []
    hours: dict[str, HoursEntry] | None = None
    coordinates: Coordinates | None = None

    # Social
    social_links: Annotated[list[SocialLink], BeforeValidator(_clean_social_links)] = []

    # Branding
    logo_url: str | None = None
    brand_colors: Annotated[list[str], AfterValidator(_clean_colors)] = []
    fonts: Annotated[list[str], _unique_capped(MAX_FONTS)] = []
    typography: Typography | None = None
    design_tokens: DesignTokens | None = None

    # Content
    business_description: str | None = None
    tagline: str | None = None
    key_features: Annotated[list[str], _unique_capped(MAX_KEY_FEATURES)] = []
    hero_section: HeroSection | None = None
    hero_images: Annotated[list[HeroImage], _capped(MAX_HERO_IMAGES)] = []
    galleries: Annotated[list[Gallery], _capped(MAX_GALLERIES)] = []

    # Metadata
    site_title: str | None = None
    site_description: str | None = None
    favicon: str | None = None

    structured_content: StructuredContent = Field(default_factory=StructuredContent)
    page_content: PageContent | None = None

    def has_contact(self) -> bool:
        return bool(self.emails or self.phones or self.addresses)

    def has_branding(self) -> bool:
        return bool(self.brand_colors) or self.logo_url is not None

    def has_content(self) -> bool:
        return (
            self.site_title is not None
            or self.business_description is not None
            or bool(self.key_features)
        )
