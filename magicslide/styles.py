"""Presentation customisation options offered to the user."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .models import DEFAULT_PALETTE, Palette

COLOR_SCHEMES: Dict[str, Palette] = {
    "Professional Blue": DEFAULT_PALETTE,
    "Modern Purple": Palette("#7c3aed", "#8b5cf6", "#faf5ff"),
    "Creative Orange": Palette("#ea580c", "#fb923c", "#fff7ed"),
    "Nature Green": Palette("#059669", "#10b981", "#f0fdf4"),
    "Elegant Gray": Palette("#374151", "#6b7280", "#f9fafb"),
    "Vibrant Pink": Palette("#db2777", "#ec4899", "#fdf2f8"),
    "Tech Cyan": Palette("#0891b2", "#06b6d4", "#f0f9ff"),
    "Warm Red": Palette("#dc2626", "#ef4444", "#fef2f2"),
}

PRESENTATION_KINDS: Dict[str, str] = {
    "business": "Business Presentation",
    "educational": "Educational Content",
    "creative": "Creative Showcase",
    "pitch": "Startup Pitch",
    "marketing": "Marketing Campaign",
    "report": "Report & Analytics",
}

SLIDE_ELEMENTS: Dict[str, str] = {
    "title": "Title Slide",
    "agenda": "Agenda/Outline",
    "content": "Content Slides",
    "image": "Image Slides",
    "quote": "Quote Slides",
    "stats": "Statistics",
    "timeline": "Timeline",
    "team": "Team Introduction",
    "contact": "Contact Info",
    "thankyou": "Thank You",
}

TONES = ("professional", "casual", "creative", "academic", "enthusiastic")
AUDIENCES = ("general", "executives", "students", "technical", "investors", "customers")

MIN_SLIDE_COUNT = 5
MAX_SLIDE_COUNT = 20


@dataclass(slots=True)
class StyleOptions:
    """User supplied options that shape the generated deck."""

    palette: Palette = DEFAULT_PALETTE
    scheme_name: str = "Professional Blue"
    presentation_kind: str = "business"
    slide_count_hint: Optional[int] = None
    tone: str = "professional"
    audience: str = "general"
    include_images: bool = True
    required_elements: List[str] = field(default_factory=list)

    @classmethod
    def from_scheme(cls, scheme_name: str, **kwargs: Any) -> "StyleOptions":
        if scheme_name not in COLOR_SCHEMES:
            raise KeyError(f"Unknown colour scheme '{scheme_name}'")
        return cls(palette=COLOR_SCHEMES[scheme_name], scheme_name=scheme_name, **kwargs)

    @property
    def presentation_kind_label(self) -> str:
        return PRESENTATION_KINDS.get(self.presentation_kind, self.presentation_kind)

    def element_labels(self) -> List[str]:
        return [SLIDE_ELEMENTS.get(item, item) for item in self.required_elements]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "palette": self.palette.to_dict(),
            "scheme_name": self.scheme_name,
            "presentation_kind": self.presentation_kind,
            "slide_count_hint": self.slide_count_hint,
            "tone": self.tone,
            "audience": self.audience,
            "include_images": self.include_images,
            "required_elements": list(self.required_elements),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StyleOptions":
        count = data.get("slide_count_hint")
        return cls(
            palette=Palette.from_dict(data.get("palette", {})),
            scheme_name=data.get("scheme_name", "Professional Blue"),
            presentation_kind=data.get("presentation_kind", "business"),
            slide_count_hint=int(count) if count else None,
            tone=data.get("tone", "professional"),
            audience=data.get("audience", "general"),
            include_images=bool(data.get("include_images", True)),
            required_elements=list(data.get("required_elements", [])),
        )
