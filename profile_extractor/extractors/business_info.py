import logging

from profile_extractor.extractors import branding, contact, content, structured
from profile_extractor.extractors.chain import parse_html, safely
from profile_extractor.extractors.design_tokens import extract_design_tokens
from profile_extractor.schemas.business_info import ExtractedBusinessInfo, StructuredContent

logger = logging.getLogger(__name__)


def extract_business_info(html: str, base_url: str) -> ExtractedBusinessInfo:
    """Best-effort algorithmic extraction from one page. Never raises.

    Every sub-extractor runs in isolation: one that fails contributes its
    empty default and a debug log line.
    """
    try:
        soup = parse_html(html)
    except Exception:
        logger.warning("Could not parse HTML for %s", base_url, exc_info=True)
        return ExtractedBusinessInfo()

    structured_content = safely(structured.extract_structured_content, StructuredContent(), soup, base_url)

    info = ExtractedBusinessInfo(
        emails=safely(contact.extract_emails, [], soup),
        phones=safely(contact.extract_phones, [], soup),
        addresses=safely(contact.extract_addresses, [], soup),
        hours=safely(structured.hours_by_day, None, structured_content.business_hours),
        coordinates=safely(contact.extract_coordinates, None, soup),
        social_links=safely(contact.extract_social_links, [], soup),
        logo_url=safely(branding.extract_logo, None, soup, base_url),
        brand_colors=safely(branding.extract_brand_colors, [], soup),
        fonts=safely(branding.extract_fonts, [], soup),
        typography=safely(branding.extract_typography, None, soup),
        design_tokens=safely(extract_design_tokens, None, soup),
        business_description=safely(content.extract_business_description, None, soup),
        tagline=safely(content.extract_tagline, None, soup),
        key_features=safely(content.extract_key_features, [], soup),
        hero_section=safely(content.extract_hero_section, None, soup, base_url),
        hero_images=safely(content.extract_hero_images, [], soup, base_url),
        galleries=safely(content.extract_galleries, [], soup, base_url),
        site_title=safely(content.extract_site_title, None, soup),
        site_description=safely(content.extract_site_description, None, soup),
        favicon=safely(branding.find_favicon, None, soup, base_url),
        structured_content=structured_content,
        page_content=safely(content.extract_page_content, None, soup),
    )

    logger.debug(
        "Algorithmic extraction for %s: %d emails, %d phones, %d colors, logo=%s",
        base_url, len(info.emails), len(info.phones), len(info.brand_colors), info.logo_url is not None,
    )
    return info
