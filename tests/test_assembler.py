import pytest

from magicslide.assembler import DeckAssembler
from magicslide.config import BACKEND_PYTHON_PPTX, Settings
from magicslide.errors import AssemblyFailure
from magicslide.models import Artifact, Deck, SlideRecord
from magicslide.normalizer import normalize
from magicslide.ooxml import OOXMLPackageBackend
from magicslide.package_backend import PackageBackend, escape_markup


class _FailingBackend(PackageBackend):
    name = "failing"

    def build(self, deck):
        raise AssemblyFailure("zip stage crashed")


class _CrashingBackend(PackageBackend):
    name = "crashing"

    def build(self, deck):
        raise KeyError("slide")


@pytest.fixture
def deck():
    return Deck(title="Assembly", slides=(SlideRecord(index=1, title="Only", bullets=("a",)),))


def test_primary_backend_result_is_returned(deck):
    result = DeckAssembler().assemble(deck)

    assert not result.degraded
    assert result.message is None
    assert result.artifact.backend == "ooxml"
    assert result.failures == []


def test_next_backend_is_tried_after_failure(deck):
    assembler = DeckAssembler([_FailingBackend(), OOXMLPackageBackend()])

    result = assembler.assemble(deck)

    assert not result.degraded
    assert result.artifact.backend == "ooxml"
    assert result.failures == ["failing: zip stage crashed"]


def test_all_failures_produce_degraded_html(deck):
    assembler = DeckAssembler([_FailingBackend(), _CrashingBackend()])

    result = assembler.assemble(deck)

    assert result.degraded
    assert isinstance(result.artifact, Artifact)
    assert result.artifact.degraded
    assert result.artifact.extension == ".html"
    assert "PowerPoint" in result.message
    assert len(result.failures) == 2


def test_from_settings_selects_backend():
    default = DeckAssembler.from_settings(Settings())
    library = DeckAssembler.from_settings(Settings(package_backend=BACKEND_PYTHON_PPTX))
    unknown = DeckAssembler.from_settings(Settings(package_backend="keynote", min_artifact_bytes=99))

    assert [backend.name for backend in default.backends] == ["ooxml", "python-pptx"]
    assert [backend.name for backend in library.backends] == ["python-pptx", "ooxml"]
    assert unknown.backends[0].name == "ooxml"
    assert all(backend.min_artifact_bytes == 99 for backend in unknown.backends)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("AI & Robots <2025>", "AI &amp; Robots &lt;2025&gt;"),
        ('say "hi"', "say &quot;hi&quot;"),
        ("it's", "it&apos;s"),
        ("bell\x07char", "bellchar"),
        (None, ""),
    ],
)
def test_escape_markup(raw, expected):
    assert escape_markup(raw) == expected


def test_escape_markup_drops_lone_surrogates():
    assert escape_markup("a\ud800b\udfffc") == "abc"


def test_lone_surrogate_titles_still_assemble():
    deck = normalize('{"title": "T", "slides": [{"title": "Bad \\ud800 title", "bulletPoints": ["x\\udc00"]}]}').deck

    assert deck.slides[0].title == "Bad \ud800 title"
    result = DeckAssembler().assemble(deck)

    assert not result.degraded
    assert result.artifact.extension == ".pptx"


def test_lone_surrogate_titles_survive_the_fallback():
    deck = Deck(title="Bad \ud800", slides=(SlideRecord(index=1, title="Half \udc00 pair"),))

    result = DeckAssembler([_FailingBackend()]).assemble(deck)

    assert result.degraded
    assert "Half  pair" in result.artifact.data.decode("utf-8")


def test_chained_library_backend_takes_over(deck, monkeypatch):
    assembler = DeckAssembler.from_settings(Settings())
    monkeypatch.setattr(assembler.backends[0], "_package", lambda parts: b"tiny")

    result = assembler.assemble(deck)

    assert not result.degraded
    assert result.artifact.backend == "python-pptx"
    assert result.failures[0].startswith("ooxml:")
