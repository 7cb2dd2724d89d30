import io
import re
from datetime import datetime, timezone
from zipfile import ZipFile

import pytest

from magicslide.assembler import DeckAssembler
from magicslide.errors import AssemblyFailure
from magicslide.models import Deck, ImageRef, Palette, SlideKind, SlideRecord
from magicslide.ooxml import (
    MANIFEST_PART,
    OOXMLPackageBackend,
    PlannedPart,
    plan_parts,
    render_slide_xml,
    slide_rel_id,
    verify_parts,
)

FIXED_CLOCK = lambda: datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)  # noqa: E731


def _deck(count: int = 3, **slide_kwargs) -> Deck:
    slides = tuple(
        SlideRecord(
            index=idx,
            title=f"Slide {idx}",
            kind=SlideKind.TITLE if idx == 1 else SlideKind.CONTENT,
            bullets=(f"Point {idx}a", f"Point {idx}b"),
            **slide_kwargs,
        )
        for idx in range(1, count + 1)
    )
    return Deck(title="Quarterly Review", slides=slides)


def _open(data: bytes) -> ZipFile:
    return ZipFile(io.BytesIO(data))


def _text_outside_tags(xml: str) -> str:
    return re.sub(r"<[^>]*>", "", xml)


def test_package_contains_expected_parts():
    artifact = OOXMLPackageBackend(clock=FIXED_CLOCK).build(_deck(3))

    assert artifact.extension == ".pptx"
    assert artifact.backend == "ooxml"
    assert not artifact.degraded
    assert artifact.metadata["slides"] == 3
    with _open(artifact.data) as zf:
        names = zf.namelist()
        assert names[0] == MANIFEST_PART
        for expected in (
            "_rels/.rels",
            "ppt/presentation.xml",
            "ppt/_rels/presentation.xml.rels",
            "ppt/theme/theme1.xml",
            "ppt/slideMasters/slideMaster1.xml",
            "ppt/slideLayouts/slideLayout1.xml",
            "docProps/core.xml",
            "docProps/app.xml",
            "ppt/slides/slide1.xml",
            "ppt/slides/slide3.xml",
            "ppt/slides/_rels/slide2.xml.rels",
        ):
            assert expected in names
        assert zf.testzip() is None


def test_manifest_declares_one_override_per_slide():
    artifact = OOXMLPackageBackend().build(_deck(4))

    with _open(artifact.data) as zf:
        manifest = zf.read(MANIFEST_PART).decode("utf-8")
        slide_parts = [name for name in zf.namelist() if re.fullmatch(r"ppt/slides/slide\d+\.xml", name)]

    assert manifest.count("presentationml.slide+xml") == 4
    assert len(slide_parts) == 4


def test_relationship_ids_are_stable():
    artifact = OOXMLPackageBackend().build(_deck(3))

    with _open(artifact.data) as zf:
        rels = zf.read("ppt/_rels/presentation.xml.rels").decode("utf-8")
        presentation = zf.read("ppt/presentation.xml").decode("utf-8")

    assert 'Id="rId1"' in rels and "slideMasters/slideMaster1.xml" in rels
    for idx in (1, 2, 3):
        assert slide_rel_id(idx) == f"rId{idx + 1}"
        assert f'Id="rId{idx + 1}"' in rels
        assert f'<p:sldId id="{255 + idx}" r:id="rId{idx + 1}"/>' in presentation


def test_theme_uses_deck_palette():
    palette = Palette("#7c3aed", "#8b5cf6", "#faf5ff")
    artifact = OOXMLPackageBackend().build(_deck(2, palette=palette))

    with _open(artifact.data) as zf:
        theme = zf.read("ppt/theme/theme1.xml").decode("utf-8")
        slide = zf.read("ppt/slides/slide2.xml").decode("utf-8")

    assert '<a:accent1><a:srgbClr val="7C3AED"/>' in theme
    assert '<a:accent2><a:srgbClr val="8B5CF6"/>' in theme
    assert '<a:lt2><a:srgbClr val="FAF5FF"/>' in theme
    assert 'val="FAF5FF"' in slide


def test_image_query_text_is_escaped_once():
    slide = SlideRecord(index=1, title="Future", image_query="AI & Robots <2025>")

    xml = render_slide_xml(slide)

    assert "AI &amp; Robots &lt;2025&gt;" in xml
    assert "&amp;amp;" not in xml
    assert "<2025>" not in xml
    assert "&" not in _text_outside_tags(xml).replace("&amp;", "").replace("&lt;", "").replace(
        "&gt;", ""
    )


def test_resolved_image_is_linked_externally():
    image = ImageRef(url="https://img.example/a.jpg?w=800&h=600", alt_text='Team "A" & co', source="pexels")
    deck = Deck(
        title="Images",
        slides=(SlideRecord(index=1, title="Pic", image_query="team", image=image),),
    )

    artifact = OOXMLPackageBackend().build(deck)

    with _open(artifact.data) as zf:
        rels = zf.read("ppt/slides/_rels/slide1.xml.rels").decode("utf-8")
        xml = zf.read("ppt/slides/slide1.xml").decode("utf-8")

    assert 'Target="https://img.example/a.jpg?w=800&amp;h=600" TargetMode="External"' in rels
    assert '<a:blip r:link="rId2"/>' in xml
    assert 'descr="Team &quot;A&quot; &amp; co"' in xml


def test_deck_title_is_escaped_in_core_properties():
    deck = Deck(title="R&D <Plan>", slides=_deck(1).slides)

    artifact = OOXMLPackageBackend(clock=FIXED_CLOCK).build(deck)

    with _open(artifact.data) as zf:
        core = zf.read("docProps/core.xml").decode("utf-8")
    assert "<dc:title>R&amp;D &lt;Plan&gt;</dc:title>" in core
    assert "2024-01-02T03:04:05Z" in core


def test_verify_parts_detects_missing_slide():
    plan = [PlannedPart("ppt/slides/slide1.xml", "x"), PlannedPart("ppt/slides/slide2.xml", "x")]

    with pytest.raises(AssemblyFailure):
        verify_parts(plan, {MANIFEST_PART: "", "ppt/slides/slide1.xml": ""})


def test_plan_parts_lists_static_parts_and_slides():
    names = [part.name for part in plan_parts(_deck(2))]

    assert names[:6] == [
        "ppt/presentation.xml",
        "ppt/theme/theme1.xml",
        "ppt/slideMasters/slideMaster1.xml",
        "ppt/slideLayouts/slideLayout1.xml",
        "docProps/core.xml",
        "docProps/app.xml",
    ]
    assert names[6:] == ["ppt/slides/slide1.xml", "ppt/slides/slide2.xml"]


def test_truncated_package_is_an_assembly_failure(monkeypatch):
    backend = OOXMLPackageBackend()
    monkeypatch.setattr(backend, "_package", lambda parts: b"x" * 400)

    with pytest.raises(AssemblyFailure):
        backend.build(_deck(2))


def test_assembler_falls_back_when_package_is_implausibly_small(monkeypatch):
    backend = OOXMLPackageBackend()
    monkeypatch.setattr(backend, "_package", lambda parts: b"x" * 400)
    assembler = DeckAssembler([backend])

    result = assembler.assemble(_deck(2))

    assert result.degraded
    assert result.artifact.extension == ".html"
    assert result.artifact.size > 0
    assert result.failures and result.failures[0].startswith("ooxml:")


def test_package_opens_with_python_pptx():
    pptx = pytest.importorskip("pptx")
    image = ImageRef(url="https://img.example/b.jpg", alt_text="chart", source="unsplash")
    deck = Deck(
        title="Readable",
        slides=(
            SlideRecord(index=1, title="Opening", kind=SlideKind.TITLE, paragraph="Hello & welcome"),
            SlideRecord(index=2, title="Details", bullets=("one", "two"), image_query="chart", image=image),
        ),
    )

    artifact = OOXMLPackageBackend().build(deck)
    prs = pptx.Presentation(io.BytesIO(artifact.data))

    assert len(prs.slides) == 2
    texts = [
        shape.text_frame.text
        for slide in prs.slides
        for shape in slide.shapes
        if shape.has_text_frame
    ]
    assert "Opening" in texts
    assert "Hello & welcome" in texts
    assert "one\ntwo" in texts
