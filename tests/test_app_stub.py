from LLM_API.data_classes import BaseRequest

import app
from magicslide.content_source import ContentSource, build_edit_prompt, build_generation_prompt
from magicslide.normalizer import normalize
from magicslide.pipeline import PresentationPipeline
from magicslide.styles import StyleOptions


def test_extract_topic_reads_generation_prompt():
    prompt = build_generation_prompt("Urban beekeeping", StyleOptions())

    assert app._extract_topic(prompt) == "Urban beekeeping"


def test_extract_topic_reads_edit_request():
    deck = normalize({"slides": [{"title": "x"}]}).deck
    prompt = build_edit_prompt("Add a slide about honey", deck, StyleOptions())

    assert app._extract_topic(prompt) == "Add a slide about honey"


def test_extract_topic_handles_missing_marker():
    assert app._extract_topic("") == "Your Topic"
    assert "plain" in app._extract_topic("plain request text", max_width=20)


def test_stub_llm_returns_normalizable_deck():
    llm = app.StubSlideLLM(slide_count=6)
    request = BaseRequest(prompt=build_generation_prompt("Urban beekeeping", StyleOptions()))

    response = llm.generate_content(request)
    result = normalize(response.text)

    assert response.model_used == "stub-slides"
    assert not result.is_placeholder
    deck = result.deck
    assert deck.title == "Urban beekeeping"
    assert len(deck.slides) == 6
    assert deck.slides[0].image_query == "Urban beekeeping"
    assert deck.slides[-1].title == "Thank You"


def test_stub_llm_drives_the_pipeline():
    pipeline = PresentationPipeline(ContentSource(app.StubSlideLLM()))

    result = pipeline.generate("Urban beekeeping", StyleOptions(include_images=False))

    assert not result.degraded
    assert result.file_name == "Urban beekeeping.pptx"
    assert len(result.deck.slides) == 5
