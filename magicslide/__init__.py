"""Turn LLM slide content into downloadable PowerPoint decks."""

from .assembler import AssemblyResult, DeckAssembler
from .config import Settings, configure_logging
from .content_source import ContentSource
from .delivery import FileSystemDelivery
from .errors import (
    AssemblyFailure,
    ContentSourceError,
    DeliveryFailure,
    ImageResolutionFailure,
    MagicSlideError,
    NormalizationFailure,
)
from .fallback import HtmlFallbackRenderer
from .images import ImageResolver
from .models import Artifact, Deck, ImageRef, Palette, SlideKind, SlideRecord
from .normalizer import NormalizedDeck, PlaceholderDeck, normalize
from .ooxml import OOXMLPackageBackend
from .pipeline import PipelineResult, PresentationPipeline
from .pptx_renderer import SlideDeckRenderer
from .storage import ChatMessage, SessionStore
from .styles import COLOR_SCHEMES, StyleOptions

__all__ = [
    "Artifact",
    "AssemblyFailure",
    "AssemblyResult",
    "COLOR_SCHEMES",
    "ChatMessage",
    "ContentSource",
    "ContentSourceError",
    "Deck",
    "DeckAssembler",
    "DeliveryFailure",
    "FileSystemDelivery",
    "HtmlFallbackRenderer",
    "ImageRef",
    "ImageResolutionFailure",
    "ImageResolver",
    "MagicSlideError",
    "NormalizationFailure",
    "NormalizedDeck",
    "OOXMLPackageBackend",
    "Palette",
    "PipelineResult",
    "PlaceholderDeck",
    "PresentationPipeline",
    "SessionStore",
    "SlideDeckRenderer",
    "SlideKind",
    "SlideRecord",
    "Settings",
    "StyleOptions",
    "configure_logging",
    "normalize",
]
