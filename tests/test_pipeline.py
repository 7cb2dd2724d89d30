import asyncio
import io
from zipfile import ZipFile

import httpx
import pytest

from magicslide.assembler import DeckAssembler
from magicslide.config import Settings
from magicslide.content_source import ContentSource
from magicslide.delivery import FileSystemDelivery
from magicslide.errors import ContentSourceError
from magicslide.images import ImageResolver, default_providers
from magicslide.ooxml import OOXMLPackageBackend
from magicslide.pipeline import PresentationPipeline
from magicslide.styles import StyleOptions
from tests.llm_stubs import ScriptedLLM, slide_payload


def _offline_resolver() -> ImageResolver:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    return ImageResolver(default_providers(), timeout=1.0, transport=httpx.MockTransport(handler))


def _pipeline(llm, **kwargs) -> PresentationPipeline:
    return PresentationPipeline(ContentSource(llm), resolver=_offline_resolver(), **kwargs)


def _slide_parts(data: bytes):
    with ZipFile(io.BytesIO(data)) as zf:
        return sorted(name for name in zf.namelist() if name.startswith("ppt/slides/slide"))


def test_generate_builds_pptx_with_placeholder_images():
    llm = ScriptedLLM([slide_payload(5, with_images=True)])

    result = _pipeline(llm).generate("Team offsite", StyleOptions())

    assert not result.degraded
    assert not result.placeholder
    assert result.message is None
    assert len(result.deck.slides) == 5
    assert all(slide.image.is_placeholder for slide in result.deck.slides)
    assert _slide_parts(result.artifact.data) == [f"ppt/slides/slide{idx}.xml" for idx in range(1, 6)]
    assert result.file_name == "Stub Deck.pptx"


def test_images_are_skipped_when_disabled():
    llm = ScriptedLLM([slide_payload(2, with_images=True)])

    result = _pipeline(llm).generate("Team offsite", StyleOptions(include_images=False))

    assert all(slide.image is None for slide in result.deck.slides)
    assert all(slide.image_query for slide in result.deck.slides)


def test_unreadable_reply_produces_placeholder_deck():
    result = _pipeline(ScriptedLLM(["Sorry, I cannot help with that."])).generate("Topic")

    assert result.placeholder
    assert [slide.title for slide in result.deck.slides] == [
        "Welcome to Your Presentation",
        "Main Content Section",
    ]
    assert result.artifact.extension == ".pptx"
    assert "starter deck" in result.message


def test_content_source_errors_propagate():
    pipeline = _pipeline(ScriptedLLM([""], error="429 RESOURCE_EXHAUSTED"))

    with pytest.raises(ContentSourceError):
        pipeline.generate("Topic")


def test_failed_packaging_still_delivers_html(tmp_path, monkeypatch):
    backend = OOXMLPackageBackend()
    monkeypatch.setattr(backend, "_package", lambda parts: b"tiny")
    pipeline = _pipeline(
        ScriptedLLM([slide_payload(2)]),
        assembler=DeckAssembler([backend]),
        delivery=FileSystemDelivery(tmp_path),
    )

    result = pipeline.generate("Topic")

    assert result.degraded
    assert result.saved_to == tmp_path / "Stub Deck_PowerPoint_Ready.html"
    assert result.saved_to.read_bytes() == result.artifact.data
    assert "HTML" in result.message


def test_edit_sends_current_deck_and_uses_style_palette():
    first = slide_payload(2)
    edited = {"title": "Edited", "slides": [{"title": "Shorter"}]}
    llm = ScriptedLLM([first, edited])
    pipeline = _pipeline(llm)
    style = StyleOptions.from_scheme("Nature Green")

    original = pipeline.generate("Topic", style)
    result = pipeline.edit("Merge everything into one slide", original.deck, style)

    assert "Slide title 2" in llm.prompts[1]
    assert result.deck.title == "Edited"
    assert result.deck.slides[0].palette == style.palette


def test_build_from_saved_json():
    pipeline = _pipeline(ScriptedLLM(["{}"]))

    result = pipeline.build('{"title": "Offline", "slides": [{"title": "One"}]}')

    assert result.deck.title == "Offline"
    assert len(_slide_parts(result.artifact.data)) == 1


def test_from_settings_wires_components(tmp_path):
    settings = Settings(output_dir=tmp_path, package_backend="python-pptx")

    pipeline = PresentationPipeline.from_settings(settings, content_source=ContentSource(ScriptedLLM(["{}"])))

    assert isinstance(pipeline.delivery, FileSystemDelivery)
    assert pipeline.delivery.output_dir == tmp_path
    assert pipeline.assembler.backends[0].name == "python-pptx"


def test_build_async_runs_inside_an_event_loop():
    pipeline = _pipeline(ScriptedLLM(["{}"]))

    async def scenario():
        return await pipeline.build_async(slide_payload(3, with_images=True))

    result = asyncio.run(scenario())

    assert not result.degraded
    assert all(slide.image.is_placeholder for slide in result.deck.slides)
    assert len(_slide_parts(result.artifact.data)) == 3
