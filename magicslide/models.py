"""Data models describing normalized decks and the artifacts built from them."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

DEFAULT_DECK_TITLE = "Generated Presentation"
PPTX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.presentationml.presentation"
)
HTML_MEDIA_TYPE = "text/html"

_UNSAFE_FILE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\ud800-\udfff]+')


class SlideKind(str, Enum):
    """Role of a slide within the narrative of the deck."""

    TITLE = "title"
    CONTENT = "content"
    INTRODUCTION = "introduction"
    CONCLUSION = "conclusion"

    @classmethod
    def parse(cls, value: Any) -> "SlideKind":
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.CONTENT


@dataclass(frozen=True, slots=True)
class Palette:
    """Primary, secondary and background colours as ``#RRGGBB`` strings."""

    primary: str = "#2563eb"
    secondary: str = "#3b82f6"
    background: str = "#f8fafc"

    def to_dict(self) -> Dict[str, str]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "background": self.background,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Palette":
        default = cls()
        return cls(
            primary=data.get("primary") or default.primary,
            secondary=data.get("secondary") or default.secondary,
            background=data.get("background") or default.background,
        )


DEFAULT_PALETTE = Palette()


@dataclass(frozen=True, slots=True)
class ImageRef:
    """Resolved illustration for a slide."""

    url: str
    alt_text: str
    source: str = "unknown"

    @property
    def is_placeholder(self) -> bool:
        return self.source == "placeholder"

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "alt_text": self.alt_text, "source": self.source}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageRef":
        return cls(
            url=data.get("url", ""),
            alt_text=data.get("alt_text", ""),
            source=data.get("source", "unknown"),
        )


@dataclass(frozen=True, slots=True)
class SlideRecord:
    """A single slide after normalization.

    The body is either ``bullets`` or ``paragraph``; when both arrive from the
    content source the bullet list wins and ``paragraph`` stays ``None``.
    """

    index: int
    title: str
    kind: SlideKind = SlideKind.CONTENT
    bullets: Tuple[str, ...] = ()
    paragraph: Optional[str] = None
    image_query: Optional[str] = None
    image: Optional[ImageRef] = None
    palette: Palette = DEFAULT_PALETTE

    @property
    def body_kind(self) -> str:
        if self.bullets:
            return "bullets"
        if self.paragraph:
            return "paragraph"
        return "empty"

    def with_image(self, image: Optional[ImageRef]) -> "SlideRecord":
        return replace(self, image=image)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "slideNumber": self.index,
            "title": self.title,
            "type": self.kind.value,
            "primaryColor": self.palette.primary,
            "secondaryColor": self.palette.secondary,
            "backgroundColor": self.palette.background,
        }
        if self.bullets:
            payload["bulletPoints"] = list(self.bullets)
        if self.paragraph:
            payload["content"] = self.paragraph
        if self.image_query:
            payload["imageDescription"] = self.image_query
        if self.image is not None:
            payload["image"] = self.image.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SlideRecord":
        image_data = data.get("image")
        return cls(
            index=int(data.get("slideNumber", 1)),
            title=data.get("title", ""),
            kind=SlideKind.parse(data.get("type")),
            bullets=tuple(data.get("bulletPoints", [])),
            paragraph=data.get("content"),
            image_query=data.get("imageDescription"),
            image=ImageRef.from_dict(image_data) if image_data else None,
            palette=Palette(
                primary=data.get("primaryColor", DEFAULT_PALETTE.primary),
                secondary=data.get("secondaryColor", DEFAULT_PALETTE.secondary),
                background=data.get("backgroundColor", DEFAULT_PALETTE.background),
            ),
        )


@dataclass(frozen=True, slots=True)
class Deck:
    """Ordered, immutable collection of slides handed to the assembler."""

    title: str
    slides: Tuple[SlideRecord, ...]

    def __post_init__(self) -> None:
        if not self.slides:
            raise ValueError("A deck requires at least one slide")

    @property
    def theme_palette(self) -> Palette:
        return self.slides[0].palette

    def image_requests(self) -> List[SlideRecord]:
        return [slide for slide in self.slides if slide.image_query]

    def with_images(self, images: Mapping[int, Optional[ImageRef]]) -> "Deck":
        """Return a copy of the deck with ``images`` keyed by slide index."""

        slides = tuple(
            slide.with_image(images[slide.index]) if slide.index in images else slide
            for slide in self.slides
        )
        return replace(self, slides=slides)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "slides": [slide.to_dict() for slide in self.slides],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Deck":
        slides = tuple(
            SlideRecord.from_dict(item) for item in data.get("slides", [])
        )
        return cls(title=data.get("title") or DEFAULT_DECK_TITLE, slides=slides)


@dataclass(frozen=True, slots=True)
class Artifact:
    """Binary output of the assembler or the fallback renderer."""

    data: bytes
    media_type: str
    extension: str
    backend: str
    degraded: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.data)

    def suggested_file_name(self, title: str) -> str:
        stem = _UNSAFE_FILE_CHARS.sub("_", title or "").strip(" ._")
        if not stem:
            stem = "presentation"
        if self.degraded:
            stem = f"{stem}_PowerPoint_Ready"
        return f"{stem}{self.extension}"
