"""Write decks as Office Open XML presentation packages without a template.

The package is assembled in strictly sequential stages: the content-type
manifest, the relationship graph, the static theme/master/layout parts, one
part per slide, and finally the zip container. Every string coming from the
deck passes through :func:`escape_markup` exactly once, at insertion.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from zipfile import ZIP_DEFLATED, ZipFile

from .errors import AssemblyFailure
from .models import PPTX_MEDIA_TYPE, Artifact, Deck, Palette, SlideKind, SlideRecord
from .package_backend import DEFAULT_MIN_ARTIFACT_BYTES, PackageBackend, escape_markup

LOGGER = logging.getLogger(__name__)

APP_NAME = "MagicSlide AI"

SLIDE_CX = 9144000
SLIDE_CY = 6858000

# presentation.xml.rels: rId1 is the master, slide N is rId{SLIDE_REL_OFFSET + N}
SLIDE_REL_OFFSET = 1
SLIDE_ID_BASE = 255
MASTER_ID = 2147483648
LAYOUT_ID = 2147483649

TITLE_BOX = (457200, 274638, 8229600, 1143000)
BODY_X = 457200
BODY_Y = 1600200
BODY_CX = 8229600
BODY_FULL_CY = 4525963
BODY_PADDING = 182880
BULLET_LINE_EMU = 457200
PARAGRAPH_BODY_CY = 2500000
IMAGE_GAP = 152400
CAPTION_CY = 369332
BOTTOM_MARGIN = 274638
MIN_IMAGE_CY = 914400

TITLE_FONT_SIZE = 4400
BODY_FONT_SIZE = 2400
CAPTION_FONT_SIZE = 1200
BODY_TEXT_COLOR = "333333"
CAPTION_TEXT_COLOR = "666666"

NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_P = "http://schemas.openxmlformats.org/presentationml/2006/main"
NS_RELS = "http://schemas.openxmlformats.org/package/2006/relationships"
REL_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
NAMESPACES = f'xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}"'

CT_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
CT_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
CT_MASTER = "application/vnd.openxmlformats-officedocument.presentationml.slideMaster+xml"
CT_LAYOUT = "application/vnd.openxmlformats-officedocument.presentationml.slideLayout+xml"
CT_THEME = "application/vnd.openxmlformats-officedocument.theme+xml"
CT_CORE = "application/vnd.openxmlformats-package.core-properties+xml"
CT_APP = "application/vnd.openxmlformats-officedocument.extended-properties+xml"

PRESENTATION_PART = "ppt/presentation.xml"
THEME_PART = "ppt/theme/theme1.xml"
MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
LAYOUT_PART = "ppt/slideLayouts/slideLayout1.xml"
CORE_PART = "docProps/core.xml"
APP_PART = "docProps/app.xml"
MANIFEST_PART = "[Content_Types].xml"


@dataclass(frozen=True, slots=True)
class PlannedPart:
    name: str
    content_type: str


def slide_part_name(index: int) -> str:
    return f"ppt/slides/slide{index}.xml"


def slide_rel_id(index: int) -> str:
    return f"rId{SLIDE_REL_OFFSET + index}"


def plan_parts(deck: Deck) -> List[PlannedPart]:
    """Every overridden part of the package, in the order it is written."""

    parts = [
        PlannedPart(PRESENTATION_PART, CT_PRESENTATION),
        PlannedPart(THEME_PART, CT_THEME),
        PlannedPart(MASTER_PART, CT_MASTER),
        PlannedPart(LAYOUT_PART, CT_LAYOUT),
        PlannedPart(CORE_PART, CT_CORE),
        PlannedPart(APP_PART, CT_APP),
    ]
    parts.extend(PlannedPart(slide_part_name(slide.index), CT_SLIDE) for slide in deck.slides)
    return parts


class OOXMLPackageBackend(PackageBackend):
    """Primary backend that writes the presentation XML by hand."""

    name = "ooxml"

    def __init__(
        self,
        *,
        min_artifact_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES,
        clock=None,
    ) -> None:
        super().__init__(min_artifact_bytes=min_artifact_bytes)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build(self, deck: Deck) -> Artifact:
        try:
            plan = plan_parts(deck)
            parts: Dict[str, str] = {MANIFEST_PART: render_manifest(plan)}
            parts.update(self._relationship_parts(deck))
            parts.update(self._static_parts(deck))
            parts.update(self._slide_parts(deck))
            verify_parts(plan, parts)
            data = self._package(parts)
        except AssemblyFailure:
            raise
        except Exception as exc:
            raise AssemblyFailure(
                f"OOXML assembly failed: {exc}", original_error=exc
            ) from exc

        self.check_plausible_size(data)
        LOGGER.info(
            "Assembled %d slide(s) into %d byte package", len(deck.slides), len(data)
        )
        return Artifact(
            data=data,
            media_type=PPTX_MEDIA_TYPE,
            extension=".pptx",
            backend=self.name,
            metadata={"slides": len(deck.slides), "parts": len(parts)},
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def _relationship_parts(self, deck: Deck) -> Dict[str, str]:
        presentation_rels = [
            _relationship("rId1", "slideMaster", "slideMasters/slideMaster1.xml")
        ]
        presentation_rels.extend(
            _relationship(slide_rel_id(slide.index), "slide", f"slides/slide{slide.index}.xml")
            for slide in deck.slides
        )
        parts = {
            "_rels/.rels": _relationships(
                [
                    _relationship("rId1", "officeDocument", PRESENTATION_PART),
                    _relationship(
                        "rId2",
                        "metadata/core-properties",
                        CORE_PART,
                        base="http://schemas.openxmlformats.org/package/2006/relationships",
                    ),
                    _relationship("rId3", "extended-properties", APP_PART),
                ]
            ),
            "ppt/_rels/presentation.xml.rels": _relationships(presentation_rels),
            "ppt/slideMasters/_rels/slideMaster1.xml.rels": _relationships(
                [
                    _relationship("rId1", "slideLayout", "../slideLayouts/slideLayout1.xml"),
                    _relationship("rId2", "theme", "../theme/theme1.xml"),
                ]
            ),
            "ppt/slideLayouts/_rels/slideLayout1.xml.rels": _relationships(
                [_relationship("rId1", "slideMaster", "../slideMasters/slideMaster1.xml")]
            ),
        }
        for slide in deck.slides:
            rels = [_relationship("rId1", "slideLayout", "../slideLayouts/slideLayout1.xml")]
            if slide.image is not None:
                rels.append(
                    _relationship("rId2", "image", escape_markup(slide.image.url), external=True)
                )
            parts[f"ppt/slides/_rels/slide{slide.index}.xml.rels"] = _relationships(rels)
        return parts

    def _static_parts(self, deck: Deck) -> Dict[str, str]:
        return {
            PRESENTATION_PART: _presentation_xml(deck),
            THEME_PART: _theme_xml(deck.theme_palette),
            MASTER_PART: _master_xml(),
            LAYOUT_PART: _layout_xml(),
            CORE_PART: _core_xml(deck.title, self.clock()),
            APP_PART: _app_xml(deck),
        }

    def _slide_parts(self, deck: Deck) -> Dict[str, str]:
        return {slide_part_name(slide.index): render_slide_xml(slide) for slide in deck.slides}

    def _package(self, parts: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED, compresslevel=6) as zf:
            # the manifest must be the first entry in the container
            zf.writestr(MANIFEST_PART, parts[MANIFEST_PART])
            for name, xml in parts.items():
                if name != MANIFEST_PART:
                    zf.writestr(name, xml)
        return buffer.getvalue()


# ----------------------------------------------------------------------
# Manifest
# ----------------------------------------------------------------------

def render_manifest(plan: List[PlannedPart]) -> str:
    overrides = "".join(
        f'<Override PartName="/{part.name}" ContentType="{part.content_type}"/>'
        for part in plan
    )
    return (
        XML_DECLARATION
        + '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        + overrides
        + "</Types>"
    )


def verify_parts(plan: List[PlannedPart], parts: Dict[str, str]) -> None:
    planned = {part.name for part in plan}
    emitted = {
        name
        for name in parts
        if name != MANIFEST_PART and not name.endswith(".rels")
    }
    if planned != emitted:
        missing = sorted(planned - emitted)
        unexpected = sorted(emitted - planned)
        raise AssemblyFailure(
            f"Manifest does not match emitted parts (missing={missing}, unexpected={unexpected})"
        )


# ----------------------------------------------------------------------
# Relationships
# ----------------------------------------------------------------------

def _relationship(
    rel_id: str,
    rel_type: str,
    target: str,
    *,
    base: str = REL_BASE,
    external: bool = False,
) -> str:
    mode = ' TargetMode="External"' if external else ""
    return f'<Relationship Id="{rel_id}" Type="{base}/{rel_type}" Target="{target}"{mode}/>'


def _relationships(items: List[str]) -> str:
    return XML_DECLARATION + f'<Relationships xmlns="{NS_RELS}">' + "".join(items) + "</Relationships>"


# ----------------------------------------------------------------------
# Static parts
# ----------------------------------------------------------------------

def _hex(color: str) -> str:
    return color.lstrip("#").upper()


def _presentation_xml(deck: Deck) -> str:
    slide_ids = "".join(
        f'<p:sldId id="{SLIDE_ID_BASE + slide.index}" r:id="{slide_rel_id(slide.index)}"/>'
        for slide in deck.slides
    )
    return (
        XML_DECLARATION
        + f"<p:presentation {NAMESPACES} saveSubsetFonts=\"1\">"
        f'<p:sldMasterIdLst><p:sldMasterId id="{MASTER_ID}" r:id="rId1"/></p:sldMasterIdLst>'
        f"<p:sldIdLst>{slide_ids}</p:sldIdLst>"
        f'<p:sldSz cx="{SLIDE_CX}" cy="{SLIDE_CY}" type="screen4x3"/>'
        '<p:notesSz cx="6858000" cy="9144000"/>'
        "<p:defaultTextStyle/>"
        "</p:presentation>"
    )


def _theme_xml(palette: Palette) -> str:
    return (
        XML_DECLARATION
        + f'<a:theme xmlns:a="{NS_A}" name="MagicSlide">'
        "<a:themeElements>"
        '<a:clrScheme name="MagicSlide">'
        '<a:dk1><a:srgbClr val="000000"/></a:dk1>'
        '<a:lt1><a:srgbClr val="FFFFFF"/></a:lt1>'
        '<a:dk2><a:srgbClr val="1F2937"/></a:dk2>'
        f'<a:lt2><a:srgbClr val="{_hex(palette.background)}"/></a:lt2>'
        f'<a:accent1><a:srgbClr val="{_hex(palette.primary)}"/></a:accent1>'
        f'<a:accent2><a:srgbClr val="{_hex(palette.secondary)}"/></a:accent2>'
        '<a:accent3><a:srgbClr val="A5A5A5"/></a:accent3>'
        '<a:accent4><a:srgbClr val="FFC000"/></a:accent4>'
        '<a:accent5><a:srgbClr val="5B9BD5"/></a:accent5>'
        '<a:accent6><a:srgbClr val="70AD47"/></a:accent6>'
        '<a:hlink><a:srgbClr val="0563C1"/></a:hlink>'
        '<a:folHlink><a:srgbClr val="954F72"/></a:folHlink>'
        "</a:clrScheme>"
        '<a:fontScheme name="MagicSlide">'
        '<a:majorFont><a:latin typeface="Calibri Light"/><a:ea typeface=""/><a:cs typeface=""/></a:majorFont>'
        '<a:minorFont><a:latin typeface="Calibri"/><a:ea typeface=""/><a:cs typeface=""/></a:minorFont>'
        "</a:fontScheme>"
        '<a:fmtScheme name="MagicSlide">'
        "<a:fillStyleLst>"
        '<a:solidFill><a:schemeClr val="phClr"/></a:solidFill>'
        '<a:solidFill><a:schemeClr val="phClr"><a:tint val="50000"/></a:schemeClr></a:solidFill>'
        '<a:solidFill><a:schemeClr val="phClr"><a:shade val="80000"/></a:schemeClr></a:solidFill>'
        "</a:fillStyleLst>"
        "<a:lnStyleLst>"
        '<a:ln w="9525"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></a:ln>'
        '<a:ln w="25400"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></a:ln>'
        '<a:ln w="38100"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></a:ln>'
        "</a:lnStyleLst>"
        "<a:effectStyleLst>"
        "<a:effectStyle><a:effectLst/></a:effectStyle>"
        "<a:effectStyle><a:effectLst/></a:effectStyle>"
        "<a:effectStyle><a:effectLst/></a:effectStyle>"
        "</a:effectStyleLst>"
        "<a:bgFillStyleLst>"
        '<a:solidFill><a:schemeClr val="phClr"/></a:solidFill>'
        '<a:solidFill><a:schemeClr val="phClr"><a:tint val="95000"/></a:schemeClr></a:solidFill>'
        '<a:solidFill><a:schemeClr val="phClr"><a:shade val="90000"/></a:schemeClr></a:solidFill>'
        "</a:bgFillStyleLst>"
        "</a:fmtScheme>"
        "</a:themeElements>"
        "<a:objectDefaults/><a:extraClrSchemeLst/>"
        "</a:theme>"
    )


_EMPTY_GROUP = (
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
    '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
)


def _master_xml() -> str:
    return (
        XML_DECLARATION
        + f"<p:sldMaster {NAMESPACES}>"
        "<p:cSld>"
        '<p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>'
        f"<p:spTree>{_EMPTY_GROUP}</p:spTree>"
        "</p:cSld>"
        '<p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" '
        'accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6" '
        'hlink="hlink" folHlink="folHlink"/>'
        f'<p:sldLayoutIdLst><p:sldLayoutId id="{LAYOUT_ID}" r:id="rId1"/></p:sldLayoutIdLst>'
        "<p:txStyles><p:titleStyle/><p:bodyStyle/><p:otherStyle/></p:txStyles>"
        "</p:sldMaster>"
    )


def _layout_xml() -> str:
    return (
        XML_DECLARATION
        + f'<p:sldLayout {NAMESPACES} type="blank" preserve="1">'
        f'<p:cSld name="Blank"><p:spTree>{_EMPTY_GROUP}</p:spTree></p:cSld>'
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>"
        "</p:sldLayout>"
    )


def _core_xml(title: str, created: datetime) -> str:
    stamp = created.strftime("%Y-%m-%dT%H:%M:%SZ")
    return (
        XML_DECLARATION
        + '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/" '
        'xmlns:dcmitype="http://purl.org/dc/dcmitype/" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        f"<dc:title>{escape_markup(title)}</dc:title>"
        f"<dc:creator>{APP_NAME}</dc:creator>"
        f"<cp:lastModifiedBy>{APP_NAME}</cp:lastModifiedBy>"
        "<cp:revision>1</cp:revision>"
        f'<dcterms:created xsi:type="dcterms:W3CDTF">{stamp}</dcterms:created>'
        f'<dcterms:modified xsi:type="dcterms:W3CDTF">{stamp}</dcterms:modified>'
        "</cp:coreProperties>"
    )


def _app_xml(deck: Deck) -> str:
    return (
        XML_DECLARATION
        + '<Properties xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties" '
        'xmlns:vt="http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes">'
        f"<Application>{APP_NAME}</Application>"
        "<PresentationFormat>On-screen Show (4:3)</PresentationFormat>"
        f"<Slides>{len(deck.slides)}</Slides>"
        "<AppVersion>16.0000</AppVersion>"
        "</Properties>"
    )


# ----------------------------------------------------------------------
# Slide parts
# ----------------------------------------------------------------------

def body_height(slide: SlideRecord) -> int:
    """Vertical space reserved for the body when an image follows it."""

    if slide.bullets:
        return min(PARAGRAPH_BODY_CY, BODY_PADDING + BULLET_LINE_EMU * len(slide.bullets))
    if slide.paragraph:
        return PARAGRAPH_BODY_CY
    return 0


def image_frame(slide: SlideRecord) -> Tuple[int, int, int, int]:
    """Return ``(x, y, cx, cy)`` of the image region below the body."""

    reserved = body_height(slide)
    y = BODY_Y + reserved + (IMAGE_GAP if reserved else 0)
    cy = max(MIN_IMAGE_CY, SLIDE_CY - BOTTOM_MARGIN - CAPTION_CY - y)
    cx = min(BODY_CX, cy * 4 // 3)
    x = (SLIDE_CX - cx) // 2
    return x, y, cx, cy


def render_slide_xml(slide: SlideRecord) -> str:
    palette = slide.palette
    shapes: List[str] = [_title_shape(slide)]
    has_image_region = slide.image is not None or bool(slide.image_query)

    body_cy = body_height(slide) if has_image_region else BODY_FULL_CY
    if slide.bullets:
        shapes.append(_bullet_shape(slide.bullets, body_cy, palette))
    elif slide.paragraph:
        shapes.append(_paragraph_shape(slide.paragraph, body_cy))

    if has_image_region:
        shapes.extend(_image_shapes(slide))

    return (
        XML_DECLARATION
        + f"<p:sld {NAMESPACES}>"
        "<p:cSld>"
        f'<p:bg><p:bgPr><a:solidFill><a:srgbClr val="{_hex(palette.background)}"/></a:solidFill>'
        "<a:effectLst/></p:bgPr></p:bg>"
        f"<p:spTree>{_EMPTY_GROUP}{''.join(shapes)}</p:spTree>"
        "</p:cSld>"
        "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>"
        "</p:sld>"
    )


def _run(text: str, *, size: int, color: str, bold: bool = False, italic: bool = False) -> str:
    flags = (' b="1"' if bold else "") + (' i="1"' if italic else "")
    return (
        f'<a:r><a:rPr lang="en-US" sz="{size}"{flags} dirty="0">'
        f'<a:solidFill><a:srgbClr val="{color}"/></a:solidFill></a:rPr>'
        f"<a:t>{escape_markup(text)}</a:t></a:r>"
    )


def _text_shape(
    shape_id: int,
    name: str,
    frame: Tuple[int, int, int, int],
    paragraphs: str,
    *,
    anchor: str = "t",
    fill: Optional[str] = None,
) -> str:
    x, y, cx, cy = frame
    fill_xml = f'<a:solidFill><a:srgbClr val="{fill}"/></a:solidFill>' if fill else "<a:noFill/>"
    return (
        "<p:sp>"
        f'<p:nvSpPr><p:cNvPr id="{shape_id}" name="{name}"/><p:cNvSpPr txBox="1"/><p:nvPr/></p:nvSpPr>'
        "<p:spPr>"
        f'<a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        f'<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>{fill_xml}'
        "</p:spPr>"
        f'<p:txBody><a:bodyPr wrap="square" rtlCol="0" anchor="{anchor}"><a:normAutofit/></a:bodyPr>'
        f"<a:lstStyle/>{paragraphs}</p:txBody>"
        "</p:sp>"
    )


def _title_shape(slide: SlideRecord) -> str:
    align = "ctr" if slide.kind is SlideKind.TITLE else "l"
    paragraph = (
        f'<a:p><a:pPr algn="{align}"/>'
        + _run(slide.title, size=TITLE_FONT_SIZE, color=_hex(slide.palette.primary), bold=True)
        + "</a:p>"
    )
    return _text_shape(2, "Title", TITLE_BOX, paragraph, anchor="ctr")


def _bullet_shape(bullets, body_cy: int, palette: Palette) -> str:
    paragraphs = "".join(
        '<a:p><a:pPr marL="342900" indent="-342900">'
        f'<a:buClr><a:srgbClr val="{_hex(palette.secondary)}"/></a:buClr>'
        '<a:buFont typeface="Arial"/><a:buChar char="&#8226;"/></a:pPr>'
        + _run(bullet, size=BODY_FONT_SIZE, color=BODY_TEXT_COLOR)
        + "</a:p>"
        for bullet in bullets
    )
    return _text_shape(3, "Body", (BODY_X, BODY_Y, BODY_CX, body_cy), paragraphs)


def _paragraph_shape(text: str, body_cy: int) -> str:
    paragraph = "<a:p>" + _run(text, size=BODY_FONT_SIZE, color=BODY_TEXT_COLOR) + "</a:p>"
    return _text_shape(3, "Body", (BODY_X, BODY_Y, BODY_CX, body_cy), paragraph)


def _image_shapes(slide: SlideRecord) -> List[str]:
    x, y, cx, cy = image_frame(slide)
    caption_frame = (BODY_X, y + cy, BODY_CX, CAPTION_CY)

    if slide.image is None:
        # resolution was skipped: draw a labelled frame holding the suggestion
        label = (
            '<a:p><a:pPr algn="ctr"/>'
            + _run(f"[Image: {slide.image_query}]", size=CAPTION_FONT_SIZE, color=CAPTION_TEXT_COLOR, italic=True)
            + "</a:p>"
        )
        return [
            _text_shape(4, "Image Placeholder", (x, y, cx, cy), label, anchor="ctr", fill="E5E7EB")
        ]

    alt = escape_markup(slide.image.alt_text)
    picture = (
        "<p:pic>"
        f'<p:nvPicPr><p:cNvPr id="4" name="Picture 4" descr="{alt}"/>'
        '<p:cNvPicPr><a:picLocks noChangeAspect="1"/></p:cNvPicPr><p:nvPr/></p:nvPicPr>'
        '<p:blipFill><a:blip r:link="rId2"/><a:stretch><a:fillRect/></a:stretch></p:blipFill>'
        "<p:spPr>"
        f'<a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
        "</p:spPr>"
        "</p:pic>"
    )
    caption = (
        '<a:p><a:pPr algn="ctr"/>'
        + _run(slide.image.alt_text, size=CAPTION_FONT_SIZE, color=CAPTION_TEXT_COLOR, italic=True)
        + "</a:p>"
    )
    return [picture, _text_shape(5, "Image Caption", caption_frame, caption)]
