"""Prompt construction and LLM calls that produce raw slide JSON."""

from __future__ import annotations

import logging
import re
import textwrap
from typing import Optional

from LLM_API.data_classes import BaseRequest
from LLM_API.exceptions import LLMAuthenticationError, LLMError, classify_error

from .config import Settings
from .errors import ContentSourceError
from .models import Deck
from .styles import StyleOptions

LOGGER = logging.getLogger(__name__)

_SLIDE_COUNT = re.compile(r"(\d+)\s*(?:slides?|pages?)", re.IGNORECASE)

DEFAULT_SLIDE_GUIDANCE = (
    "Create an appropriate number of slides (typically 5-12) based on the content "
    "depth and complexity. For simple topics use 5-7 slides, for comprehensive "
    "topics use 8-12 slides."
)


def requested_slide_count(topic: str, style: StyleOptions) -> Optional[int]:
    """A count written in the topic ("10 slides") wins over the style hint."""

    match = _SLIDE_COUNT.search(topic or "")
    if match:
        return int(match.group(1))
    return style.slide_count_hint


def build_generation_prompt(topic: str, style: StyleOptions) -> str:
    palette = style.palette
    count = requested_slide_count(topic, style)
    guidance = f"Create exactly {count} slides as requested." if count else DEFAULT_SLIDE_GUIDANCE
    elements = ", ".join(style.element_labels())
    image_field = (
        '"imageDescription": "Describe relevant image"'
        if style.include_images
        else '"imageDescription": null'
    )

    return textwrap.dedent(
        f"""\
        Create a comprehensive presentation about: "{topic}"

        STRICT REQUIREMENTS:
        1. Return ONLY valid JSON without any markdown formatting or code blocks
        2. Use this exact color scheme:
           - Primary Color: {palette.primary}
           - Secondary Color: {palette.secondary}
           - Background Color: {palette.background}
        3. Presentation Style: {style.presentation_kind_label}
        4. {guidance}
        5. Tone: {style.tone}
        6. Target Audience: {style.audience}
        7. Include Images: {"Yes" if style.include_images else "No"}
        8. Selected Elements: {elements or "Standard elements"}

        EXACT JSON FORMAT (no deviations):
        {{
          "title": "Presentation Title Here",
          "slides": [
            {{
              "slideNumber": 1,
              "title": "Slide Title",
              "content": "Main content paragraph when needed",
              "bulletPoints": ["Point 1", "Point 2", "Point 3"],
              "type": "title|content|conclusion|introduction",
              "primaryColor": "{palette.primary}",
              "secondaryColor": "{palette.secondary}",
              "backgroundColor": "{palette.background}",
              {image_field}
            }}
          ]
        }}

        CONTENT GUIDELINES:
        - Create engaging, informative content appropriate for {style.audience} audience
        - Use {style.tone} tone throughout
        - Each slide should have 3-5 bullet points OR a detailed content paragraph
        - Include compelling titles that grab attention
        - Vary slide types: title slide, content slides, conclusion slide
        - Make content flow logically from introduction to conclusion
        - Image descriptions must be specific search keywords, e.g.
          "business team collaboration meeting office" rather than "team work"

        Return the JSON immediately without any explanation or formatting."""
    )


def build_edit_prompt(instruction: str, deck: Deck, style: StyleOptions) -> str:
    return textwrap.dedent(
        """\
        You are an AI assistant that edits PowerPoint slide content. Based on the
        user's editing request, modify the existing slide content and return the
        updated JSON structure.

        User editing request: {instruction}

        Current presentation JSON:
        {deck_json}

        Return the same JSON structure with the requested modifications applied.
        Keep every slide's primaryColor, secondaryColor and backgroundColor unless
        the request asks to change them (default scheme: {primary}, {secondary},
        {background}). Return ONLY valid JSON."""
    ).format(
        instruction=instruction,
        deck_json=deck.to_json(),
        primary=style.palette.primary,
        secondary=style.palette.secondary,
        background=style.palette.background,
    )


class ContentSource:
    """Ask an LLM client for slide JSON; only raises :class:`ContentSourceError`."""

    def __init__(self, llm_client, *, max_tokens: Optional[int] = None) -> None:
        self.llm_client = llm_client
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentSource":
        from LLM_API.providers import create_model

        keys = {
            "gemini": settings.gemini_api_key,
            "openai": settings.openai_api_key,
            "claude": settings.anthropic_api_key,
        }
        try:
            client = create_model(
                settings.llm_provider,
                api_key=keys.get(settings.llm_provider),
                model_name=settings.llm_model,
            )
        except LLMError as exc:
            raise ContentSourceError(
                f"{settings.llm_provider} is not configured: {exc.message}",
                provider=settings.llm_provider,
                retryable=False,
                original_error=exc,
            ) from exc
        except ValueError as exc:
            raise ContentSourceError(str(exc), retryable=False, original_error=exc) from exc
        return cls(client)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, topic: str, style: StyleOptions) -> str:
        if not topic or not topic.strip():
            raise ContentSourceError("A presentation topic is required", retryable=False)
        return self._call(build_generation_prompt(topic.strip(), style))

    def edit(self, instruction: str, deck: Deck, style: StyleOptions) -> str:
        if not instruction or not instruction.strip():
            raise ContentSourceError("An editing request is required", retryable=False)
        return self._call(build_edit_prompt(instruction.strip(), deck, style))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _call(self, prompt: str) -> str:
        provider = getattr(self.llm_client, "model_name", None) or type(self.llm_client).__name__
        # clients without a provider config are assumed to accept JSON mode
        config = getattr(self.llm_client, "provider_config", None)
        json_mode = getattr(config, "supports_json_mode", True)
        request = BaseRequest(prompt=prompt, max_tokens=self.max_tokens, json_mode=json_mode)
        try:
            response = self.llm_client.generate_content(request)
        except LLMError as exc:
            raise self._to_content_error(exc, provider) from exc
        except Exception as exc:
            raise ContentSourceError(
                f"Content source call failed: {exc}", provider=provider, original_error=exc
            ) from exc

        if getattr(response, "error", None):
            raise self._to_content_error(classify_error(response.error, provider), provider)
        text = getattr(response, "text", "") or ""
        if not text.strip():
            raise ContentSourceError("Content source returned an empty response", provider=provider)
        LOGGER.info("Content source returned %d characters", len(text))
        return text

    def _to_content_error(self, exc: LLMError, provider: str) -> ContentSourceError:
        if isinstance(exc, LLMAuthenticationError):
            return ContentSourceError(
                "Invalid API key. Please check your API key configuration.",
                provider=provider,
                retryable=False,
                original_error=exc,
            )
        return ContentSourceError(
            "Failed to generate slides. Please try again.",
            provider=provider,
            original_error=exc,
        )
