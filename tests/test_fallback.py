from datetime import datetime

from magicslide.fallback import IMPORT_HINT, HtmlFallbackRenderer
from magicslide.models import Deck, ImageRef, Palette, SlideKind, SlideRecord


def _deck() -> Deck:
    palette = Palette("#dc2626", "#ef4444", "#fef2f2")
    return Deck(
        title="Risks & <Mitigations>",
        slides=(
            SlideRecord(index=1, title="Overview", kind=SlideKind.TITLE, paragraph="Why <this> matters", palette=palette),
            SlideRecord(index=2, title="Top risks", bullets=("Supply & demand", "FX"), palette=palette),
            SlideRecord(
                index=3,
                title="Team",
                image_query="team photo",
                image=ImageRef(url="https://img.example/t.jpg", alt_text="Our team", source="unsplash"),
                palette=palette,
            ),
            SlideRecord(index=4, title="Next", image_query="roadmap chart", palette=palette),
        ),
    )


def test_fallback_renders_every_slide():
    renderer = HtmlFallbackRenderer(clock=lambda: datetime(2024, 5, 1, 9, 30))

    artifact = renderer.render(_deck())
    html = artifact.data.decode("utf-8")

    assert artifact.degraded
    assert artifact.media_type == "text/html"
    assert artifact.extension == ".html"
    assert html.count('<section class="slide') == 4
    assert "<title>Risks &amp; &lt;Mitigations&gt;</title>" in html
    assert "Why &lt;this&gt; matters" in html
    assert "<li>Supply &amp; demand</li>" in html
    assert '<img class="slide-image" src="https://img.example/t.jpg" alt="Our team">' in html
    assert "Suggested Image" in html and "roadmap chart" in html
    assert "2024-05-01 09:30" in html
    assert "#dc2626" in html
    assert "page-break-after: always" in html


def test_fallback_includes_import_instructions():
    html = HtmlFallbackRenderer().render(_deck()).data.decode("utf-8")

    assert IMPORT_HINT in html


def test_fallback_survives_styling_errors():
    def broken_clock():
        raise RuntimeError("clock unavailable")

    artifact = HtmlFallbackRenderer(clock=broken_clock).render(_deck())
    html = artifact.data.decode("utf-8")

    assert artifact.degraded
    assert artifact.size > 0
    assert "<h2>2. Top risks</h2>" in html
    assert "<p>Supply &amp; demand</p>" in html


def test_degraded_file_name_marks_powerpoint_ready():
    artifact = HtmlFallbackRenderer().render(_deck())

    assert artifact.suggested_file_name("Q3/Q4 Review") == "Q3_Q4 Review_PowerPoint_Ready.html"


def test_single_empty_slide_still_renders():
    deck = Deck(title="Solo", slides=(SlideRecord(index=1, title="Lonely"),))

    artifact = HtmlFallbackRenderer().render(deck)
    html = artifact.data.decode("utf-8")

    assert html.count('<section class="slide') == 1
    assert "Lonely" in html
    assert "Suggested Image" not in html


def test_lone_surrogates_are_dropped_from_html():
    deck = Deck(title="Bad \ud800 deck", slides=(SlideRecord(index=1, title="Half \udc00 pair", bullets=("x\udfff",)),))

    artifact = HtmlFallbackRenderer().render(deck)
    html = artifact.data.decode("utf-8")

    assert "Bad  deck" in html
    assert "Half  pair" in html
    assert "<li>x</li>" in html


def test_plain_outline_replaces_unencodable_text(monkeypatch):
    deck = Deck(title="Outline", slides=(SlideRecord(index=1, title="Kept"),))
    monkeypatch.setattr("magicslide.fallback.escape_markup", lambda value: str(value) + "\ud800")
    renderer = HtmlFallbackRenderer()
    monkeypatch.setattr(renderer, "_render_document", lambda deck: "\udfff")

    artifact = renderer.render(deck)

    assert artifact.degraded
    assert b"Kept?" in artifact.data


def test_file_name_drops_lone_surrogates():
    artifact = HtmlFallbackRenderer().render(_deck())

    assert artifact.suggested_file_name("Plan \ud800B") == "Plan _B_PowerPoint_Ready.html"
