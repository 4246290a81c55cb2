import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from profile_extractor.config import GenerationOptions
from profile_extractor.exceptions.custom import LLMError

logger = logging.getLogger(__name__)

TIMEOUT = 60.0

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_DATA_URI_RE = re.compile(r"^data:(image/[a-z0-9.+-]+);base64,(.*)$", re.IGNORECASE | re.DOTALL)


@dataclass
class LLMResponse:
    content: dict[str, Any]
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None
    raw_text: str = field(default="", repr=False)


def try_parse_json(text: str) -> dict | None:
    """Recover a JSON object from a model reply.

    Tries fenced blocks, then the whole reply, then the outermost ``{...}`` span.
    """
    candidates = [m.group(1).strip() for m in _FENCE_RE.finditer(text)]
    candidates.append(text.strip())
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            obj = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(obj, dict):
            return obj
    return None


def _image_block(image: str) -> dict:
    m = _DATA_URI_RE.match(image.strip())
    media_type, data = (m.group(1).lower(), m.group(2)) if m else ("image/png", image.strip())
    return {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": data}}


def _content_blocks(content: str | list[dict]) -> str | list[dict]:
    """Translate ``{"type": "text"}`` / ``{"type": "image"}`` parts into Anthropic blocks."""
    if isinstance(content, str):
        return content
    blocks: list[dict] = []
    for part in content:
        if part.get("type") == "image":
            blocks.append(_image_block(part["image"]))
        else:
            blocks.append({"type": "text", "text": part.get("text", "")})
    return blocks


class LLMClient:
    def __init__(self, api_key: str, timeout: float = TIMEOUT):
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout)

    async def complete(
        self,
        user_prompt: str,
        system_prompt: str,
        options: GenerationOptions,
        model: str,
    ) -> LLMResponse:
        return await self._create(
            model=model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            options=options,
        )

    async def complete_with_vision(
        self,
        messages: list[dict],
        model: str,
        options: GenerationOptions,
    ) -> LLMResponse:
        """Send a multimodal conversation.

        ``messages`` are ``{"role", "content"}`` dicts; system messages become
        the system prompt and image parts carry a base64 payload or data URI.
        """
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        chat = [
            {"role": m["role"], "content": _content_blocks(m["content"])}
            for m in messages
            if m["role"] != "system"
        ]
        return await self._create(model=model, system=system, messages=chat, options=options)

    async def _create(self, model: str, system: str, messages: list[dict], options: GenerationOptions) -> LLMResponse:
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                system=system,
                messages=messages,
            )
        except anthropic.APIStatusError as exc:
            logger.warning("Claude API returned %d for model %s", exc.status_code, model)
            raise LLMError(f"Claude API error: {exc.message}", status_code=exc.status_code) from exc
        except anthropic.APIError as exc:
            logger.warning("Claude API call failed for model %s: %s", model, exc)
            raise LLMError(f"Claude API call failed: {exc}") from exc

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        parsed = try_parse_json(text)
        if parsed is None:
            logger.warning("Unparseable reply from %s: %.200s", model, text)
            raise LLMError("Model reply was not a JSON object")

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=parsed,
            model=model,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
            raw_text=text,
        )
