"""Tests for LLMExtractionService with a mocked LLMClient."""

from unittest.mock import AsyncMock, patch

import pytest

from profile_extractor.config import ExtractionConfig
from profile_extractor.exceptions.custom import ExtractionError, LLMError
from profile_extractor.extractors.business_info import extract_business_info
from profile_extractor.prompts import contact as contact_prompt
from profile_extractor.prompts import content as content_prompt
from profile_extractor.prompts import images as images_prompt
from profile_extractor.prompts import social_proof as social_proof_prompt
from profile_extractor.schemas.business_info import ExtractedBusinessInfo
from profile_extractor.services.llm_client import LLMClient, LLMResponse
from profile_extractor.services.llm_extractor import (
    LLMExtractionService,
    count_data_categories,
    merge_llm_results,
)

BASE = "https://acme.com"

HTML = """
<html><head><title>Algo Title</title><meta name="theme-color" content="#aa3300"></head>
<body><header><img class="logo" src="/logo.png"></header>
<p>Email us at algo@acme.com</p></body></html>
"""


def _response(content: dict) -> LLMResponse:
    return LLMResponse(content=content, model="test")


def _llm(text_replies: dict | None = None, visual_reply=None) -> AsyncMock:
    """LLM double answering text calls by system prompt.

    Missing phases (and a missing visual reply) raise LLMError.
    """
    replies = text_replies or {}
    llm = AsyncMock(spec=LLMClient)

    async def _complete(user_prompt, system_prompt, options, model):
        reply = replies.get(system_prompt)
        if reply is None:
            raise LLMError("phase unavailable")
        if isinstance(reply, BaseException):
            raise reply
        return _response(reply)

    async def _vision(messages, model, options):
        if visual_reply is None:
            raise LLMError("vision unavailable", status_code=503)
        if isinstance(visual_reply, BaseException):
            raise visual_reply
        return _response(visual_reply)

    llm.complete.side_effect = _complete
    llm.complete_with_vision.side_effect = _vision
    return llm


# --- Fallback ---


async def test_all_phases_fail_falls_back_to_algorithmic():
    service = LLMExtractionService(_llm())

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info == extract_business_info(HTML, BASE)
    assert metadata.used_fallback
    assert not metadata.success
    assert not metadata.phase1_complete
    assert len(metadata.errors) == 5


async def test_gate_one_category_triggers_fallback():
    llm = _llm({content_prompt.SYSTEM_PROMPT: {"siteTitle": "LLM Title", "confidence": 0.9}})
    service = LLMExtractionService(llm)

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info.site_title == "Algo Title"
    assert metadata.used_fallback
    assert metadata.phase2b_complete
    assert "Insufficient LLM data, using fallback" in metadata.warnings


async def test_gate_two_categories_keeps_llm_result():
    llm = _llm(
        {content_prompt.SYSTEM_PROMPT: {"siteTitle": "LLM Title", "confidence": 0.9}},
        visual_reply={"brandColors": ["#112233"], "confidence": 0.8},
    )
    service = LLMExtractionService(llm)

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info.site_title == "LLM Title"
    assert info.brand_colors == ["#112233"]
    assert info.emails == []
    assert metadata.success
    assert not metadata.used_fallback
    assert metadata.phase1_complete


async def test_fallback_disabled_returns_thin_result():
    service = LLMExtractionService(_llm(), ExtractionConfig(enable_fallback=False))

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info.site_title is None
    assert not metadata.success
    assert not metadata.used_fallback


async def test_unexpected_phase1_error_does_not_stop_phase2():
    llm = _llm(
        {
            content_prompt.SYSTEM_PROMPT: {"siteTitle": "LLM Title", "confidence": 0.9},
            contact_prompt.SYSTEM_PROMPT: {"emails": ["hello@acme.com"], "confidence": 0.9},
        },
        visual_reply=KeyError("content"),
    )
    service = LLMExtractionService(llm)

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info.site_title == "LLM Title"
    assert info.emails == ["hello@acme.com"]
    assert not metadata.phase1_complete
    assert metadata.phase2a_complete
    assert metadata.phase2b_complete
    assert not metadata.used_fallback
    assert any(error.startswith("Phase 1 failed") for error in metadata.errors)


async def test_unexpected_error_falls_back():
    service = LLMExtractionService(_llm())

    with patch("profile_extractor.services.llm_extractor.merge_llm_results", side_effect=RuntimeError("boom")):
        info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert info == extract_business_info(HTML, BASE)
    assert metadata.used_fallback
    assert any("boom" in error for error in metadata.errors)


async def test_unexpected_error_without_fallback_raises():
    service = LLMExtractionService(_llm(), ExtractionConfig(enable_fallback=False))

    with patch("profile_extractor.services.llm_extractor.merge_llm_results", side_effect=RuntimeError("boom")):
        with pytest.raises(ExtractionError):
            await service.extract_business_info_with_llm(HTML, BASE)


async def test_invalid_phase_payload_is_a_phase_failure():
    llm = _llm(
        {
            content_prompt.SYSTEM_PROMPT: {"siteTitle": "LLM Title", "confidence": 0.9},
            contact_prompt.SYSTEM_PROMPT: {"emails": "not-a-list", "confidence": 0.9},
        },
        visual_reply={"brandColors": ["#112233"], "confidence": 0.8},
    )
    service = LLMExtractionService(llm)

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert not metadata.phase2a_complete
    assert metadata.phase2b_complete
    assert info.site_title == "LLM Title"


# --- Phase wiring ---


async def test_phase2_calls_run_with_their_prompts():
    llm = _llm()
    service = LLMExtractionService(llm)

    await service.extract_with_metadata(HTML, BASE)

    systems = {call.args[1] for call in llm.complete.call_args_list}
    assert systems == {
        contact_prompt.SYSTEM_PROMPT,
        content_prompt.SYSTEM_PROMPT,
        social_proof_prompt.SYSTEM_PROMPT,
        images_prompt.SYSTEM_PROMPT,
    }
    assert llm.complete_with_vision.await_count == 1


async def test_screenshot_is_sent_as_image_part():
    llm = _llm()
    service = LLMExtractionService(llm)

    await service.extract_with_metadata(HTML, BASE, screenshot="QUJD")

    messages = llm.complete_with_vision.call_args.args[0]
    assert messages[0]["role"] == "system"
    assert messages[1]["content"][1] == {"type": "image", "image": "QUJD"}


async def test_low_confidence_images_are_dropped_with_warning():
    llm = _llm(
        {
            content_prompt.SYSTEM_PROMPT: {"siteTitle": "LLM Title", "confidence": 0.9},
            images_prompt.SYSTEM_PROMPT: {
                "images": [{"url": "/hero.jpg", "type": "hero", "confidence": 0.9}],
                "confidence": 0.1,
            },
        },
        visual_reply={"brandColors": ["#112233"], "confidence": 0.8},
    )
    service = LLMExtractionService(llm)

    info, metadata = await service.extract_with_metadata(HTML, BASE)

    assert metadata.phase2d_complete
    assert "Phase 2D returned insufficient image data" in metadata.warnings
    assert info.hero_images == []


# --- Merging ---


def test_merge_layers_images_onto_hero_and_gallery():
    from profile_extractor.schemas.llm import ContentExtraction, ImageExtraction

    content = ContentExtraction.model_validate({
        "siteTitle": "Acme",
        "heroSection": {"headline": "Hello", "ctaLink": "/start"},
        "confidence": 0.9,
    })
    images = ImageExtraction.model_validate({
        "images": [
            {"url": "/hero-low.jpg", "type": "hero", "confidence": 0.4},
            {"url": "/hero-high.jpg", "type": "hero", "confidence": 0.95},
            {"url": "/g1.jpg", "type": "gallery", "confidence": 0.7, "dimensions": {"width": 800, "height": 600}},
            {"url": "/g2.jpg", "type": "gallery", "confidence": 0.7},
            {"url": "data:image/png;base64,xx", "type": "gallery", "confidence": 0.7},
        ],
        "confidence": 0.8,
    })

    info = merge_llm_results(HTML, BASE, None, None, content, None, images)

    assert info.hero_section.headline == "Hello"
    assert info.hero_section.cta_link == "https://acme.com/start"
    assert info.hero_section.background_image == "https://acme.com/hero-high.jpg"
    assert [img.url for img in info.hero_images] == [
        "https://acme.com/hero-high.jpg", "https://acme.com/hero-low.jpg",
    ]
    [gallery] = info.galleries
    assert gallery.type == "grid"
    assert [img.url for img in gallery.images] == ["https://acme.com/g1.jpg", "https://acme.com/g2.jpg"]
    assert gallery.images[0].width == 800


def test_merge_resolves_contact_and_branding():
    from profile_extractor.schemas.llm import ContactExtraction, VisualBrandAnalysis

    contact = ContactExtraction.model_validate({
        "emails": ["HI@ACME.CO", "hi@acme.co"],
        "socialLinks": [{"platform": "Instagram", "url": "https://instagram.com/acme"}],
        "confidence": 0.9,
    })
    visual = VisualBrandAnalysis.model_validate({"logoUrl": "/logo.svg", "brandColors": ["#112233"]})

    info = merge_llm_results(HTML, BASE, visual, contact, None, None, None)

    assert info.emails == ["hi@acme.co"]
    assert info.social_links[0].platform == "instagram"
    assert info.logo_url == "https://acme.com/logo.svg"


def test_count_data_categories():
    assert count_data_categories(ExtractedBusinessInfo()) == 0
    assert count_data_categories(ExtractedBusinessInfo(site_title="x")) == 1
    assert count_data_categories(ExtractedBusinessInfo(site_title="x", brand_colors=["#112233"])) == 2
    assert count_data_categories(
        ExtractedBusinessInfo(site_title="x", logo_url="https://a/l.png", phones=["555-123-4567"])
    ) == 3


def test_merge_normalizes_llm_brand_colors():
    from profile_extractor.schemas.llm import VisualBrandAnalysis

    visual = VisualBrandAnalysis.model_validate({
        "brandColors": ["#FF0000", "#ff0000", "rgb(255,0,0)", "red", "#0A0"],
    })

    info = merge_llm_results(HTML, BASE, visual, None, None, None, None)

    assert info.brand_colors == ["#ff0000", "#00aa00"]
