import asyncio
import logging
import time

from profile_extractor.config import ExtractionConfig
from profile_extractor.exceptions.custom import ExtractionError
from profile_extractor.extractors.business_info import extract_business_info
from profile_extractor.extractors.chain import resolve_url
from profile_extractor.extractors.preprocessors import (
    extract_favicon,
    preprocess_for_image_extraction,
    preprocess_for_text,
    preprocess_for_vision,
)
from profile_extractor.prompts import contact as contact_prompt
from profile_extractor.prompts import content as content_prompt
from profile_extractor.prompts import images as images_prompt
from profile_extractor.prompts import social_proof as social_proof_prompt
from profile_extractor.prompts import visual as visual_prompt
from profile_extractor.schemas.business_info import (
    ExtractedBusinessInfo,
    FooterContent,
    Gallery,
    GalleryImage,
    HeroImage,
    HeroSection,
    SocialLink,
    StructuredContent,
)
from profile_extractor.schemas.llm import (
    ContactExtraction,
    ContentExtraction,
    ExtractionMetadata,
    ImageExtraction,
    SocialProofExtraction,
    VisualBrandAnalysis,
)
from profile_extractor.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

_PHASE2_LABELS = ("2A", "2B", "2C", "2D")


def count_data_categories(info: ExtractedBusinessInfo) -> int:
    return sum((info.has_contact(), info.has_branding(), info.has_content()))


def _resolve_hero(hero: HeroSection | None, base_url: str) -> HeroSection | None:
    if hero is None:
        return None
    return hero.model_copy(update={
        "cta_link": resolve_url(hero.cta_link, base_url) if hero.cta_link else None,
        "background_image": resolve_url(hero.background_image, base_url) if hero.background_image else None,
    })


def _resolve_gallery(gallery: Gallery, base_url: str) -> Gallery:
    images = []
    for image in gallery.images:
        url = resolve_url(image.url, base_url)
        if url:
            images.append(image.model_copy(update={"url": url}))
    return gallery.model_copy(update={"images": images})


def _resolve_structured(structured: StructuredContent | None, base_url: str) -> StructuredContent:
    if structured is None:
        return StructuredContent()
    footer = structured.footer_content
    if footer is not None:
        links = []
        for link in footer.important_links:
            url = resolve_url(link.url, base_url)
            if url:
                links.append(link.model_copy(update={"url": url}))
        footer = FooterContent(
            copyright_text=footer.copyright_text,
            important_links=links,
            additional_info=footer.additional_info,
        )
    return structured.model_copy(update={"footer_content": footer})


def merge_llm_results(
    html: str,
    base_url: str,
    visual: VisualBrandAnalysis | None,
    contact: ContactExtraction | None,
    content: ContentExtraction | None,
    social_proof: SocialProofExtraction | None,
    images: ImageExtraction | None,
) -> ExtractedBusinessInfo:
    """Combine phase outputs: contact from 2A, branding from 1, content from 2B,
    structured content from 2C, hero and gallery images from 2D.
    """
    hero_section = _resolve_hero(content.hero_section if content else None, base_url)
    galleries = [_resolve_gallery(g, base_url) for g in (content.galleries if content else [])]
    hero_images: list[HeroImage] = []

    if images and images.images:
        heroes = sorted(
            (img for img in images.images if img.type == "hero" and resolve_url(img.url, base_url)),
            key=lambda img: -img.confidence,
        )
        if heroes:
            primary = resolve_url(heroes[0].url, base_url)
            hero_section = (hero_section or HeroSection()).model_copy(update={"background_image": primary})
            hero_images = [
                HeroImage(
                    url=resolve_url(img.url, base_url),
                    context=img.context,
                    alt=img.alt,
                    dimensions=img.dimensions,
                    confidence=img.confidence,
                )
                for img in heroes
            ]

        gallery_images = [
            GalleryImage(
                url=resolve_url(img.url, base_url),
                alt=img.alt,
                width=img.dimensions.width if img.dimensions else None,
                height=img.dimensions.height if img.dimensions else None,
            )
            for img in images.images
            if img.type == "gallery" and resolve_url(img.url, base_url)
        ]
        if gallery_images:
            galleries = [Gallery(type="grid", images=gallery_images)]

    social_links = [
        SocialLink(platform=link.platform, url=url)
        for link in (contact.social_links if contact else [])
        if (url := resolve_url(link.url, base_url))
    ]
    favicon = resolve_url(content.favicon, base_url) if content and content.favicon else None

    return ExtractedBusinessInfo(
        emails=contact.emails if contact else [],
        phones=contact.phones if contact else [],
        addresses=contact.addresses if contact else [],
        hours=contact.hours if contact else None,
        coordinates=contact.coordinates if contact else None,
        social_links=social_links,
        logo_url=resolve_url(visual.logo_url, base_url) if visual and visual.logo_url else None,
        brand_colors=visual.brand_colors if visual else [],
        fonts=visual.fonts if visual else [],
        typography=visual.typography if visual else None,
        design_tokens=visual.design_tokens if visual else None,
        business_description=content.business_description if content else None,
        tagline=content.tagline if content else None,
        key_features=content.key_features if content else [],
        hero_section=hero_section,
        hero_images=hero_images,
        galleries=galleries,
        site_title=content.site_title if content else None,
        site_description=content.site_description if content else None,
        favicon=favicon or extract_favicon(html, base_url),
        structured_content=_resolve_structured(social_proof.structured_content if social_proof else None, base_url),
        page_content=content.page_content if content else None,
    )


class LLMExtractionService:
    """Two-phase LLM extraction with an algorithmic fallback.

    Phase 1 is a vision call for brand identity. Phase 2 runs contact,
    content, social-proof and image calls concurrently. A failed phase only
    leaves its fields empty; if the merged result covers fewer than
    ``min_data_categories`` of contact/branding/content, the algorithmic
    extractor's result is returned instead.
    """

    def __init__(self, llm: LLMClient, config: ExtractionConfig | None = None):
        self._llm = llm
        self._config = config or ExtractionConfig()

    async def extract_business_info_with_llm(
        self, html: str, base_url: str, screenshot: str | None = None,
    ) -> ExtractedBusinessInfo:
        info, _metadata = await self.extract_with_metadata(html, base_url, screenshot)
        return info

    async def extract_with_metadata(
        self, html: str, base_url: str, screenshot: str | None = None,
    ) -> tuple[ExtractedBusinessInfo, ExtractionMetadata]:
        start = time.monotonic()
        metadata = ExtractionMetadata()
        try:
            info = await self._extract(html, base_url, screenshot, metadata)
        except Exception as exc:
            metadata.errors.append(f"Extraction failed: {exc}")
            metadata.duration_ms = int((time.monotonic() - start) * 1000)
            logger.exception("LLM extraction failed for %s", base_url)
            if not self._config.enable_fallback:
                raise ExtractionError(f"LLM extraction failed for {base_url}: {exc}") from exc
            logger.warning("Using algorithmic extraction for %s", base_url)
            metadata.used_fallback = True
            return extract_business_info(html, base_url), metadata

        metadata.duration_ms = int((time.monotonic() - start) * 1000)
        if self._config.log_metrics:
            logger.info(
                "LLM extraction for %s finished in %dms (success=%s, fallback=%s, errors=%d)",
                base_url, metadata.duration_ms, metadata.success, metadata.used_fallback, len(metadata.errors),
            )
        return info, metadata

    async def _extract(
        self, html: str, base_url: str, screenshot: str | None, metadata: ExtractionMetadata,
    ) -> ExtractedBusinessInfo:
        cfg = self._config
        visual_html = preprocess_for_vision(html, cfg.vision_max_bytes)
        text = preprocess_for_text(html, base_url, cfg.text_max_bytes)
        image_html = preprocess_for_image_extraction(html, cfg.image_max_bytes)
        if cfg.log_metrics:
            logger.info(
                "Preprocessed %s: vision=%d bytes, text=%d bytes, images=%d bytes",
                base_url, len(visual_html.encode()), len(text.encode()), len(image_html.encode()),
            )

        # Phase 1
        visual: VisualBrandAnalysis | None = None
        try:
            visual = await self._visual_brand(visual_html, base_url, screenshot)
            metadata.phase1_complete = True
            if cfg.log_metrics:
                logger.info(
                    "Phase 1 complete: %d colors, logo=%s, confidence=%.2f",
                    len(visual.brand_colors), visual.logo_url is not None, visual.confidence,
                )
        except Exception as exc:
            metadata.errors.append(f"Phase 1 failed: {exc}")
            logger.warning("Phase 1 failed for %s: %s", base_url, exc)

        # Phase 2
        results = await asyncio.gather(
            self._text_phase(contact_prompt, ContactExtraction, text, base_url),
            self._text_phase(content_prompt, ContentExtraction, text, base_url),
            self._text_phase(social_proof_prompt, SocialProofExtraction, text, base_url),
            self._text_phase(images_prompt, ImageExtraction, image_html, base_url),
            return_exceptions=True,
        )
        for label, res in zip(_PHASE2_LABELS, results):
            if isinstance(res, BaseException):
                metadata.errors.append(f"Phase {label} failed: {res}")
                logger.warning("Phase %s failed for %s: %s", label, base_url, res)
            else:
                setattr(metadata, f"phase{label.lower()}_complete", True)

        contact: ContactExtraction | None = results[0] if not isinstance(results[0], BaseException) else None
        content: ContentExtraction | None = results[1] if not isinstance(results[1], BaseException) else None
        social_proof: SocialProofExtraction | None = (
            results[2] if not isinstance(results[2], BaseException) else None
        )
        images: ImageExtraction | None = results[3] if not isinstance(results[3], BaseException) else None

        if images is not None and not images.has_minimum_data(cfg.min_confidence):
            metadata.warnings.append("Phase 2D returned insufficient image data")
            logger.info("Phase 2D returned insufficient image data for %s", base_url)
            images = None

        if cfg.log_metrics:
            logger.info(
                "Phase 2 for %s: emails=%d phones=%d title=%s testimonials=%d images=%d",
                base_url,
                len(contact.emails) if contact else 0,
                len(contact.phones) if contact else 0,
                content.site_title if content else None,
                len(social_proof.structured_content.testimonials)
                if social_proof and social_proof.structured_content else 0,
                len(images.images) if images else 0,
            )

        result = merge_llm_results(html, base_url, visual, contact, content, social_proof, images)

        metadata.success = count_data_categories(result) >= cfg.min_data_categories
        if not metadata.success and cfg.enable_fallback:
            metadata.warnings.append("Insufficient LLM data, using fallback")
            metadata.used_fallback = True
            logger.warning("Insufficient LLM data for %s, falling back to algorithmic extraction", base_url)
            return extract_business_info(html, base_url)
        return result

    async def _visual_brand(self, html: str, base_url: str, screenshot: str | None) -> VisualBrandAnalysis:
        prompt = visual_prompt.build_prompt(html, base_url, screenshot)
        if self._config.log_prompts:
            logger.debug("Phase 1 prompt: %.500s", prompt)

        user_content: str | list[dict] = prompt
        if screenshot:
            user_content = [{"type": "text", "text": prompt}, {"type": "image", "image": screenshot}]
        messages = [
            {"role": "system", "content": visual_prompt.SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]
        response = await self._llm.complete_with_vision(
            messages, self._config.vision_model, self._config.phase1_options,
        )
        return VisualBrandAnalysis.model_validate(response.content)

    async def _text_phase(self, prompt_module, model_cls, document: str, base_url: str):
        prompt = prompt_module.build_prompt(document, base_url)
        if self._config.log_prompts:
            logger.debug("%s prompt: %.500s", model_cls.__name__, prompt)
        response = await self._llm.complete(
            prompt, prompt_module.SYSTEM_PROMPT, self._config.phase2_options, self._config.text_model,
        )
        return model_cls.model_validate(response.content)
