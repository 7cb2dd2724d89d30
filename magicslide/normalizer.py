"""Validate and repair raw LLM slide payloads into :class:`Deck` objects."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from .errors import NormalizationFailure
from .models import (
    DEFAULT_DECK_TITLE,
    DEFAULT_PALETTE,
    Deck,
    Palette,
    SlideKind,
    SlideRecord,
)

LOGGER = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

PLACEHOLDER_SLIDES: Tuple[Tuple[str, SlideKind, Tuple[str, ...]], ...] = (
    (
        "Welcome to Your Presentation",
        SlideKind.TITLE,
        (
            "AI-powered content generation",
            "Custom color schemes and themes",
            "Professional presentation format",
            "Engaging visual design",
        ),
    ),
    (
        "Main Content Section",
        SlideKind.CONTENT,
        (
            "Colorful and engaging slides",
            "Professional design elements",
            "Easy to read and understand",
            "Customizable themes and layouts",
        ),
    ),
)


@dataclass(frozen=True, slots=True)
class NormalizedDeck:
    """The raw payload was usable and produced ``deck``."""

    deck: Deck
    is_placeholder = False


@dataclass(frozen=True, slots=True)
class PlaceholderDeck:
    """The raw payload was rejected; ``deck`` is the guaranteed fallback."""

    deck: Deck
    reason: str
    is_placeholder = True


NormalizationResult = Union[NormalizedDeck, PlaceholderDeck]


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def normalize(raw: Any, style_defaults: Palette = DEFAULT_PALETTE) -> NormalizationResult:
    """Normalize ``raw`` into a deck; never raises for malformed input."""

    try:
        payload = parse_raw_content(raw)
        deck = build_deck(payload, style_defaults)
    except NormalizationFailure as exc:
        LOGGER.warning("Falling back to placeholder deck: %s", exc.message)
        return PlaceholderDeck(deck=placeholder_deck(style_defaults), reason=exc.message)
    return NormalizedDeck(deck=deck)


def normalize_or_placeholder(raw: Any, style_defaults: Palette = DEFAULT_PALETTE) -> Deck:
    return normalize(raw, style_defaults).deck


def strip_code_fences(text: str) -> str:
    """Remove markdown fences and any prose surrounding the JSON object."""

    cleaned = _CODE_FENCE.sub("", text.strip())
    match = _JSON_OBJECT.search(cleaned)
    if match:
        return match.group(0)
    return cleaned


def parse_raw_content(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        raise NormalizationFailure(f"Unsupported raw content type: {type(raw).__name__}")

    # the whole reply is tried first so a top-level array is never mistaken
    # for the first object inside it
    try:
        payload = json.loads(_CODE_FENCE.sub("", raw.strip()))
    except json.JSONDecodeError:
        try:
            payload = json.loads(strip_code_fences(raw))
        except json.JSONDecodeError as exc:
            LOGGER.debug("Failed to parse slide payload: %s", raw[:500])
            raise NormalizationFailure(f"Invalid JSON: {exc.msg}", original_error=exc) from exc

    if not isinstance(payload, dict):
        raise NormalizationFailure("Slide payload must be a JSON object")
    return payload


def build_deck(payload: Mapping[str, Any], style_defaults: Palette) -> Deck:
    entries = payload.get("slides")
    if not isinstance(entries, list):
        raise NormalizationFailure("Slide payload has no 'slides' array")
    if not entries:
        raise NormalizationFailure("Slide payload contains zero slides")

    slides: List[SlideRecord] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise NormalizationFailure(
                f"Slide entry {position + 1} is {type(entry).__name__}, expected an object"
            )
        slides.append(_build_slide(entry, position + 1, style_defaults))

    return Deck(title=_text(payload.get("title")) or DEFAULT_DECK_TITLE, slides=tuple(slides))


def placeholder_deck(style_defaults: Palette = DEFAULT_PALETTE) -> Deck:
    slides = tuple(
        SlideRecord(index=idx, title=title, kind=kind, bullets=bullets, palette=style_defaults)
        for idx, (title, kind, bullets) in enumerate(PLACEHOLDER_SLIDES, start=1)
    )
    return Deck(title=DEFAULT_DECK_TITLE, slides=slides)


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------

def _build_slide(entry: Mapping[str, Any], index: int, style_defaults: Palette) -> SlideRecord:
    # slideNumber in the payload is advisory only; position decides the index
    bullets = _bullets(entry.get("bulletPoints"))
    paragraph = None if bullets else _text(entry.get("content"))
    palette = Palette(
        primary=_color(entry.get("primaryColor")) or style_defaults.primary,
        secondary=_color(entry.get("secondaryColor")) or style_defaults.secondary,
        background=_color(entry.get("backgroundColor")) or style_defaults.background,
    )
    return SlideRecord(
        index=index,
        title=_text(entry.get("title")) or f"Slide {index}",
        kind=SlideKind.parse(entry.get("type")),
        bullets=bullets,
        paragraph=paragraph,
        image_query=_query(entry.get("imageDescription")),
        palette=palette,
    )


def _text(value: Any) -> Optional[str]:
    """Return ``value`` unchanged when it is a non-blank string."""

    if isinstance(value, str) and value.strip():
        return value
    return None


def _query(value: Any) -> Optional[str]:
    text = _text(value)
    return text.strip() if text else None


def _bullets(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item.strip())


def _color(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    match = _HEX_COLOR.match(value.strip())
    if not match:
        return None
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits}"
