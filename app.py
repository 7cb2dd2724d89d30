"""Streamlit UI for the MagicSlide presentation generator."""

from __future__ import annotations

import json
import textwrap
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional

import streamlit as st

from LLM_API.data_classes import BaseResponse

from magicslide.config import BACKEND_OOXML, BACKEND_PYTHON_PPTX, Settings, configure_logging
from magicslide.content_source import ContentSource, requested_slide_count
from magicslide.errors import ContentSourceError, DeliveryFailure
from magicslide.models import Deck
from magicslide.pipeline import PipelineResult, PresentationPipeline
from magicslide.storage import ChatMessage, SessionStore
from magicslide.styles import (
    AUDIENCES,
    COLOR_SCHEMES,
    MAX_SLIDE_COUNT,
    MIN_SLIDE_COUNT,
    PRESENTATION_KINDS,
    SLIDE_ELEMENTS,
    TONES,
    StyleOptions,
)

STUB_CHOICE = "Stub generator"
PROVIDER_CHOICES = {
    "Gemini (environment)": "gemini",
    "OpenAI (environment)": "openai",
    "Claude (environment)": "claude",
}

_TOPIC_MARKER = 'Create a comprehensive presentation about: "'
_EDIT_MARKER = "User editing request: "


def _extract_topic(prompt: str, *, max_width: int = 60) -> str:
    """Return the quoted topic (or the edit request) embedded in ``prompt``."""

    if not prompt:
        return "Your Topic"
    if _TOPIC_MARKER in prompt:
        section = prompt.split(_TOPIC_MARKER, 1)[1].split('"', 1)[0]
    elif _EDIT_MARKER in prompt:
        section = prompt.split(_EDIT_MARKER, 1)[1].split("\n", 1)[0]
    else:
        section = prompt
    section = section.strip().replace("\n", " ")
    if not section:
        return "Your Topic"
    return textwrap.shorten(section, width=max_width, placeholder="...")


class StubSlideLLM:
    """Offline stand-in for an LLM client, used for demos and tests."""

    model_name = "stub-slides"

    def __init__(self, *, slide_count: int = 5) -> None:
        self.slide_count = slide_count

    def generate_content(self, request) -> BaseResponse:
        topic = _extract_topic(getattr(request, "prompt", ""))
        payload = {"title": topic, "slides": self._slides(topic)}
        return BaseResponse(text=json.dumps(payload, ensure_ascii=False), model_used="stub-slides")

    def _slides(self, topic: str) -> List[Dict[str, Any]]:
        slides: List[Dict[str, Any]] = [
            {
                "slideNumber": 1,
                "title": topic,
                "type": "title",
                "content": f"An overview of {topic}",
                "imageDescription": topic,
            }
        ]
        for idx in range(2, self.slide_count):
            slides.append(
                {
                    "slideNumber": idx,
                    "title": f"Key point {idx - 1}",
                    "type": "content",
                    "bulletPoints": [
                        f"What {topic} means in practice",
                        "Evidence and examples",
                        "Next steps",
                    ],
                }
            )
        slides.append(
            {
                "slideNumber": self.slide_count,
                "title": "Thank You",
                "type": "conclusion",
                "bulletPoints": ["Questions and discussion"],
            }
        )
        return slides


@st.cache_resource(show_spinner=False)
def load_settings() -> Settings:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return settings


@st.cache_resource(show_spinner=False)
def load_session_store(_settings: Settings) -> SessionStore:
    return SessionStore.from_settings(_settings)


def _instantiate_content_source(choice: str, settings: Settings) -> ContentSource:
    provider = PROVIDER_CHOICES.get(choice)
    if provider is None:
        return ContentSource(StubSlideLLM())
    try:
        return ContentSource.from_settings(
            replace(settings, llm_provider=provider)
        )
    except ContentSourceError as exc:
        st.warning(f"Could not initialise {choice}; using the stub generator instead.")
        st.text(exc.message)
        return ContentSource(StubSlideLLM())


def _style_from_sidebar() -> StyleOptions:
    scheme = st.selectbox("Color scheme", list(COLOR_SCHEMES), index=0)
    palette = COLOR_SCHEMES[scheme]
    st.markdown(
        " ".join(
            f"<span style='background:{color};padding:0 12px;border-radius:4px'>&nbsp;</span>"
            for color in (palette.primary, palette.secondary, palette.background)
        ),
        unsafe_allow_html=True,
    )
    kind = st.selectbox(
        "Presentation type",
        list(PRESENTATION_KINDS),
        format_func=lambda key: PRESENTATION_KINDS[key],
    )
    auto_count = st.checkbox("Let the AI choose the slide count", value=True)
    slide_count = None
    if not auto_count:
        slide_count = st.slider("Slides", MIN_SLIDE_COUNT, MAX_SLIDE_COUNT, 8)
    tone = st.selectbox("Tone", TONES)
    audience = st.selectbox("Audience", AUDIENCES)
    include_images = st.checkbox("Include images", value=True)
    elements = st.multiselect(
        "Slide elements",
        list(SLIDE_ELEMENTS),
        format_func=lambda key: SLIDE_ELEMENTS[key],
    )
    return StyleOptions.from_scheme(
        scheme,
        presentation_kind=kind,
        slide_count_hint=slide_count,
        tone=tone,
        audience=audience,
        include_images=include_images,
        required_elements=elements,
    )


def _render_deck(deck: Deck) -> None:
    tabs = st.tabs([f"{slide.index}. {slide.title}" for slide in deck.slides])
    for tab, slide in zip(tabs, deck.slides):
        with tab:
            st.markdown(f"### {slide.title}")
            st.caption(f"Type: {slide.kind.value}")
            for bullet in slide.bullets:
                st.markdown(f"- {bullet}")
            if slide.paragraph:
                st.write(slide.paragraph)
            if slide.image is not None:
                st.image(slide.image.url, caption=slide.image.alt_text)
            elif slide.image_query:
                st.info(f"Suggested image: {slide.image_query}")


def _render_result(result: PipelineResult) -> None:
    if result.message:
        st.warning(result.message)
    st.download_button(
        "Download presentation",
        data=result.artifact.data,
        file_name=result.file_name,
        mime=result.artifact.media_type,
        type="primary",
    )
    _render_deck(result.deck)


def _run(action, *args) -> Optional[PipelineResult]:
    try:
        return action(*args)
    except ContentSourceError as exc:
        st.error(exc.message)
    except DeliveryFailure as exc:
        st.error(f"The presentation was built but could not be saved: {exc.message}")
    return None


def main() -> None:
    st.set_page_config(page_title="MagicSlide AI", layout="wide")
    st.title("MagicSlide AI")

    settings = load_settings()
    store = load_session_store(settings)

    st.session_state.setdefault("session_id", uuid.uuid4().hex)
    st.session_state.setdefault("messages", [])
    st.session_state.setdefault("result", None)

    with st.sidebar:
        st.header("Generation settings")
        default_choice = next(
            (label for label, name in PROVIDER_CHOICES.items() if name == settings.llm_provider),
            STUB_CHOICE,
        )
        choices = (STUB_CHOICE, *PROVIDER_CHOICES)
        llm_choice = st.radio(
            "Content source",
            choices,
            index=choices.index(default_choice) if settings.has_llm_credentials() else 0,
            help="Use the stub generator when no API key is configured.",
        )
        backend = st.radio(
            "Package backend",
            (BACKEND_OOXML, BACKEND_PYTHON_PPTX),
            index=0 if settings.package_backend != BACKEND_PYTHON_PPTX else 1,
            horizontal=True,
        )
        style = _style_from_sidebar()

        st.divider()
        st.subheader("Chat history")
        if st.button("New chat"):
            st.session_state["session_id"] = uuid.uuid4().hex
            st.session_state["messages"] = []
            st.session_state["result"] = None
        for session in store.list_sessions()[:20]:
            if st.button(session["title"], key=f"session-{session['id']}"):
                st.session_state["session_id"] = session["id"]
                st.session_state["messages"] = store.load_messages(session["id"])
                st.session_state["result"] = None

    content_source = _instantiate_content_source(llm_choice, settings)
    pipeline = PresentationPipeline.from_settings(
        replace(settings, package_backend=backend),
        content_source=content_source,
        deliver=False,
    )

    messages: List[ChatMessage] = st.session_state["messages"]
    for message in messages:
        with st.chat_message("assistant" if message.is_bot else "user"):
            st.markdown(message.content)

    topic = st.text_area(
        "What should the presentation be about?",
        height=120,
        placeholder="e.g. Climate change solutions for small businesses, 8 slides",
    )
    count = requested_slide_count(topic, style)
    if count:
        st.caption(f"{count} slides will be requested.")

    col_generate, col_edit = st.columns(2)
    with col_generate:
        if st.button("Generate presentation", type="primary"):
            if not topic.strip():
                st.error("Please describe the presentation you want.")
            else:
                with st.spinner("Generating slides..."):
                    result = _run(pipeline.generate, topic, style)
                if result is not None:
                    messages.append(ChatMessage(content=topic))
                    messages.append(
                        ChatMessage(
                            content=f"Created '{result.deck.title}' with {len(result.deck.slides)} slides.",
                            is_bot=True,
                            slide_data=result.deck.to_dict(),
                        )
                    )
                    st.session_state["result"] = result
                    store.save_messages(messages, st.session_state["session_id"])
                    store.save_presentation(result.deck, st.session_state["session_id"])

    current: Optional[PipelineResult] = st.session_state.get("result")
    with col_edit:
        if st.button("Apply edit", disabled=current is None):
            if not topic.strip():
                st.error("Describe the change you want, e.g. 'make slide 3 shorter'.")
            else:
                with st.spinner("Updating slides..."):
                    result = _run(pipeline.edit, topic, current.deck, style)
                if result is not None:
                    messages.append(ChatMessage(content=topic))
                    messages.append(
                        ChatMessage(
                            content=f"Updated '{result.deck.title}'.",
                            is_bot=True,
                            slide_data=result.deck.to_dict(),
                        )
                    )
                    st.session_state["result"] = result
                    store.save_messages(messages, st.session_state["session_id"])
                    store.save_presentation(result.deck, st.session_state["session_id"])

    st.divider()
    current = st.session_state.get("result")
    if current is not None:
        st.subheader(current.deck.title)
        _render_result(current)
        st.download_button(
            "Download slide JSON",
            data=current.deck.to_json().encode("utf-8"),
            file_name="slides.json",
            mime="application/json",
        )
    else:
        saved = store.load_presentation(st.session_state["session_id"])
        if saved is not None:
            st.info("Restored the last presentation of this chat. Generate again to download it.")
            _render_deck(saved)


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
