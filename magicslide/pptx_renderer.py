"""Render :class:`Deck` objects into PPTX files through python-pptx."""

from __future__ import annotations

import io
import logging

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Emu, Pt

from .errors import AssemblyFailure
from .models import PPTX_MEDIA_TYPE, Artifact, Deck, SlideKind, SlideRecord
from .ooxml import (
    APP_NAME,
    BODY_CX,
    BODY_FULL_CY,
    BODY_X,
    BODY_Y,
    CAPTION_CY,
    SLIDE_CX,
    SLIDE_CY,
    TITLE_BOX,
    body_height,
    image_frame,
)
from .package_backend import DEFAULT_MIN_ARTIFACT_BYTES, PackageBackend, strip_illegal_xml_chars

LOGGER = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6


class SlideDeckRenderer(PackageBackend):
    """Library backed alternative to :class:`OOXMLPackageBackend`.

    Images are not embedded; the image region carries the alt text and a
    hyperlink to the resolved URL.
    """

    name = "python-pptx"

    def __init__(self, *, min_artifact_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES) -> None:
        super().__init__(min_artifact_bytes=min_artifact_bytes)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build(self, deck: Deck) -> Artifact:
        try:
            data = self.render_document(deck).getvalue()
        except Exception as exc:
            raise AssemblyFailure(f"python-pptx rendering failed: {exc}", original_error=exc) from exc

        self.check_plausible_size(data)
        return Artifact(
            data=data,
            media_type=PPTX_MEDIA_TYPE,
            extension=".pptx",
            backend=self.name,
            metadata={"slides": len(deck.slides)},
        )

    def render_document(self, deck: Deck) -> io.BytesIO:
        """Return a PPTX stream that represents ``deck``."""

        presentation = Presentation()
        presentation.slide_width = Emu(SLIDE_CX)
        presentation.slide_height = Emu(SLIDE_CY)
        layout = presentation.slide_layouts[BLANK_LAYOUT_INDEX]

        for record in deck.slides:
            slide = presentation.slides.add_slide(layout)
            self._write_slide(slide, record)

        properties = presentation.core_properties
        properties.title = strip_illegal_xml_chars(deck.title)
        properties.author = APP_NAME
        properties.last_modified_by = APP_NAME

        buffer = io.BytesIO()
        presentation.save(buffer)
        buffer.seek(0)
        LOGGER.info("Rendered %d slide(s) with python-pptx", len(deck.slides))
        return buffer

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _write_slide(self, slide, record: SlideRecord) -> None:
        palette = record.palette
        background = slide.background.fill
        background.solid()
        background.fore_color.rgb = _rgb(palette.background)

        x, y, cx, cy = TITLE_BOX
        title_frame = slide.shapes.add_textbox(Emu(x), Emu(y), Emu(cx), Emu(cy)).text_frame
        title_frame.word_wrap = True
        title_frame.vertical_anchor = MSO_ANCHOR.MIDDLE
        paragraph = title_frame.paragraphs[0]
        paragraph.alignment = PP_ALIGN.CENTER if record.kind is SlideKind.TITLE else PP_ALIGN.LEFT
        _add_run(paragraph, record.title, size=44, color=palette.primary, bold=True)

        has_image_region = record.image is not None or bool(record.image_query)
        body_cy = body_height(record) if has_image_region else BODY_FULL_CY
        if body_cy and (record.bullets or record.paragraph):
            body_frame = slide.shapes.add_textbox(
                Emu(BODY_X), Emu(BODY_Y), Emu(BODY_CX), Emu(body_cy)
            ).text_frame
            body_frame.word_wrap = True
            lines = [f"• {item}" for item in record.bullets] or [record.paragraph]
            for idx, line in enumerate(lines):
                paragraph = body_frame.paragraphs[0] if idx == 0 else body_frame.add_paragraph()
                _add_run(paragraph, line, size=24, color="#333333")

        if has_image_region:
            self._write_image_region(slide, record)

    def _write_image_region(self, slide, record: SlideRecord) -> None:
        x, y, cx, cy = image_frame(record)
        frame = slide.shapes.add_textbox(Emu(x), Emu(y), Emu(cx), Emu(cy))
        frame.fill.solid()
        frame.fill.fore_color.rgb = RGBColor(0xE5, 0xE7, 0xEB)
        text_frame = frame.text_frame
        text_frame.word_wrap = True
        text_frame.vertical_anchor = MSO_ANCHOR.MIDDLE
        paragraph = text_frame.paragraphs[0]
        paragraph.alignment = PP_ALIGN.CENTER

        label = record.image.alt_text if record.image else record.image_query
        run = _add_run(paragraph, f"[Image: {label}]", size=12, color="#666666", italic=True)
        if record.image is not None:
            run.hyperlink.address = strip_illegal_xml_chars(record.image.url)
            caption = slide.shapes.add_textbox(
                Emu(BODY_X), Emu(y + cy), Emu(BODY_CX), Emu(CAPTION_CY)
            ).text_frame.paragraphs[0]
            caption.alignment = PP_ALIGN.CENTER
            _add_run(caption, record.image.alt_text, size=12, color="#666666", italic=True)


def _rgb(color: str) -> RGBColor:
    return RGBColor.from_string(color.lstrip("#").upper())


def _add_run(paragraph, text: str, *, size: int, color: str, bold: bool = False, italic: bool = False):
    run = paragraph.add_run()
    run.text = strip_illegal_xml_chars(text)
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.italic = italic
    run.font.color.rgb = _rgb(color)
    return run
