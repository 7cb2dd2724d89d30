"""Degraded HTML rendition of a deck used when package assembly fails."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from .models import HTML_MEDIA_TYPE, Artifact, Deck, SlideRecord
from .package_backend import escape_markup

LOGGER = logging.getLogger(__name__)

IMPORT_HINT = (
    "To import into PowerPoint: Select all (Ctrl+A), Copy (Ctrl+C), "
    "then paste into PowerPoint and save as .pptx"
)

_STYLE = """
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: 'Calibri', 'Arial', sans-serif; font-size: 18px; line-height: 1.5;
       color: #333; background: white; width: 25.4cm; margin: 0 auto; padding: 20px; }}
.title-slide {{ page-break-after: always; text-align: center; padding: 100px 40px;
               background: linear-gradient(135deg, {primary}, {secondary}); color: white;
               border-radius: 15px; margin-bottom: 40px; min-height: 19cm; }}
.title-slide h1 {{ font-size: 54px; margin-bottom: 30px; }}
.slide {{ page-break-after: always; background: {background}; border: 3px solid {primary};
         border-radius: 15px; padding: 60px; margin-bottom: 40px; min-height: 19cm; }}
.slide-header {{ display: flex; justify-content: space-between; margin-bottom: 40px;
                padding-bottom: 20px; border-bottom: 4px solid {primary}; }}
.slide-type {{ text-transform: uppercase; letter-spacing: 1px; color: {secondary}; }}
.slide h2 {{ font-size: 40px; margin-bottom: 30px; }}
.bullet-points li {{ font-size: 24px; margin: 12px 0 12px 30px; }}
.content-text {{ font-size: 24px; }}
.image-container {{ text-align: center; margin-top: 30px; }}
.slide-image {{ max-width: 80%; border-radius: 10px; }}
.image-caption {{ font-style: italic; color: #666; font-size: 16px; margin-top: 10px; }}
.image-placeholder {{ border: 2px dashed {secondary}; border-radius: 10px; padding: 40px;
                     text-align: center; margin-top: 30px; color: #666; }}
.presentation-footer {{ page-break-before: always; text-align: center; padding: 60px;
                       color: #666; }}
@media print {{ .slide, .title-slide {{ page-break-after: always; }} }}
"""


class HtmlFallbackRenderer:
    """Render a self-contained HTML document; never raises."""

    name = "html-fallback"

    def __init__(self, clock=None) -> None:
        self.clock = clock or datetime.now

    def render(self, deck: Deck) -> Artifact:
        try:
            data = self._render_document(deck).encode("utf-8")
        except Exception as exc:
            LOGGER.error("Styled fallback rendering failed, emitting plain outline: %s", exc)
            # last resort: unencodable characters become "?"
            data = _plain_outline(deck).encode("utf-8", errors="replace")
        return Artifact(
            data=data,
            media_type=HTML_MEDIA_TYPE,
            extension=".html",
            backend=self.name,
            degraded=True,
            metadata={"slides": len(deck.slides)},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _render_document(self, deck: Deck) -> str:
        palette = deck.theme_palette
        title = escape_markup(deck.title)
        style = _STYLE.format(
            primary=escape_markup(palette.primary),
            secondary=escape_markup(palette.secondary),
            background=escape_markup(palette.background),
        )
        generated = self.clock().strftime("%Y-%m-%d %H:%M")
        sections = "\n".join(_slide_section(slide) for slide in deck.slides)
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"<title>{title}</title>\n<style>{style}</style>\n</head>\n<body>\n"
            '<div class="title-slide">\n'
            f"<h1>{title}</h1>\n"
            f"<div>{len(deck.slides)} Slides &#8226; Created with MagicSlide AI</div>\n"
            f"<div>{generated}</div>\n"
            "</div>\n"
            f"{sections}\n"
            '<div class="presentation-footer">\n'
            f"<p><strong>Presentation:</strong> {title}</p>\n"
            f"<p><strong>Slides:</strong> {len(deck.slides)}</p>\n"
            f"<p><em>{escape_markup(IMPORT_HINT)}</em></p>\n"
            "</div>\n"
            "</body>\n</html>\n"
        )


def _slide_section(slide: SlideRecord) -> str:
    parts: List[str] = [
        f'<section class="slide slide-{slide.kind.value}" id="slide-{slide.index}">',
        '<div class="slide-header">'
        f'<div class="slide-type">{escape_markup(slide.kind.value)}</div>'
        f'<div class="slide-number">Slide {slide.index}</div></div>',
        f'<h2 style="color: {escape_markup(slide.palette.primary)}">{escape_markup(slide.title)}</h2>',
    ]
    if slide.bullets:
        items = "".join(f"<li>{escape_markup(item)}</li>" for item in slide.bullets)
        parts.append(f'<ul class="bullet-points">{items}</ul>')
    elif slide.paragraph:
        parts.append(f'<div class="content-text">{escape_markup(slide.paragraph)}</div>')

    image_block = _image_block(slide)
    if image_block:
        parts.append(image_block)
    parts.append("</section>")
    return "\n".join(parts)


def _image_block(slide: SlideRecord) -> Optional[str]:
    if slide.image is not None:
        alt = escape_markup(slide.image.alt_text)
        return (
            '<div class="image-container">'
            f'<img class="slide-image" src="{escape_markup(slide.image.url)}" alt="{alt}">'
            f'<div class="image-caption">{alt}</div></div>'
        )
    if slide.image_query:
        return (
            '<div class="image-placeholder"><div>Suggested Image</div>'
            f"<div>{escape_markup(slide.image_query)}</div></div>"
        )
    return None


def _plain_outline(deck: Deck) -> str:
    lines = [f"<h1>{escape_markup(deck.title)}</h1>"]
    for slide in deck.slides:
        lines.append(f"<h2>{slide.index}. {escape_markup(slide.title)}</h2>")
        lines.extend(f"<p>{escape_markup(item)}</p>" for item in slide.bullets)
        if slide.paragraph:
            lines.append(f"<p>{escape_markup(slide.paragraph)}</p>")
    return "<!DOCTYPE html>\n<html><body>\n" + "\n".join(lines) + "\n</body></html>\n"


__all__ = ["HtmlFallbackRenderer", "IMPORT_HINT"]
