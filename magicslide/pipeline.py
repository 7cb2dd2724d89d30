"""End-to-end flow: content source -> normalizer -> images -> assembler -> delivery."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .assembler import DeckAssembler
from .config import Settings
from .content_source import ContentSource
from .delivery import ArtifactDelivery, FileSystemDelivery
from .images import ImageResolver
from .models import Artifact, Deck
from .normalizer import NormalizationResult, normalize
from .styles import StyleOptions

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineResult:
    deck: Deck
    artifact: Artifact
    degraded: bool = False
    placeholder: bool = False
    message: Optional[str] = None
    saved_to: Optional[Path] = None

    @property
    def file_name(self) -> str:
        return self.artifact.suggested_file_name(self.deck.title)


class PresentationPipeline:
    """Coordinate one generation or edit request.

    Only :class:`~magicslide.errors.ContentSourceError` and
    :class:`~magicslide.errors.DeliveryFailure` escape ``generate`` and
    ``edit``. Malformed content becomes the placeholder deck, failed image
    lookups become placeholder images and a failed package build becomes the
    HTML fallback.
    """

    def __init__(
        self,
        content_source: ContentSource,
        resolver: Optional[ImageResolver] = None,
        assembler: Optional[DeckAssembler] = None,
        delivery: Optional[ArtifactDelivery] = None,
    ) -> None:
        self.content_source = content_source
        self.resolver = resolver or ImageResolver()
        self.assembler = assembler or DeckAssembler()
        self.delivery = delivery

    @classmethod
    def from_settings(
        cls, settings: Settings, *, content_source: Optional[ContentSource] = None, deliver: bool = True
    ) -> "PresentationPipeline":
        return cls(
            content_source or ContentSource.from_settings(settings),
            resolver=ImageResolver.from_settings(settings),
            assembler=DeckAssembler.from_settings(settings),
            delivery=FileSystemDelivery(settings.output_dir) if deliver else None,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, topic: str, style: Optional[StyleOptions] = None) -> PipelineResult:
        style = style or StyleOptions()
        LOGGER.info("Generating presentation for topic: %s", topic)
        raw = self.content_source.generate(topic, style)
        return self.build(raw, style)

    def edit(self, instruction: str, deck: Deck, style: Optional[StyleOptions] = None) -> PipelineResult:
        style = style or StyleOptions()
        LOGGER.info("Editing presentation '%s'", deck.title)
        raw = self.content_source.edit(instruction, deck, style)
        return self.build(raw, style)

    def build(self, raw, style: Optional[StyleOptions] = None) -> PipelineResult:
        """Run everything after the content source on an already fetched payload.

        Image resolution runs under :func:`asyncio.run`, so this must not be
        called from a running event loop; await :meth:`build_async` there.
        """

        style = style or StyleOptions()
        normalized = normalize(raw, style.palette)
        deck = normalized.deck
        if style.include_images and deck.image_requests():
            deck = asyncio.run(self._resolve_images(deck))
        return self._finish(normalized, deck)

    async def build_async(self, raw, style: Optional[StyleOptions] = None) -> PipelineResult:
        style = style or StyleOptions()
        normalized = normalize(raw, style.palette)
        deck = normalized.deck
        if style.include_images and deck.image_requests():
            deck = await self._resolve_images(deck)
        return self._finish(normalized, deck)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _finish(self, normalized: NormalizationResult, deck: Deck) -> PipelineResult:
        assembly = self.assembler.assemble(deck)
        messages: List[str] = []
        if normalized.is_placeholder:
            messages.append("The generated content could not be read, so a starter deck was used.")
        if assembly.message:
            messages.append(assembly.message)

        result = PipelineResult(
            deck=deck,
            artifact=assembly.artifact,
            degraded=assembly.degraded,
            placeholder=normalized.is_placeholder,
            message=" ".join(messages) or None,
        )
        if self.delivery is not None:
            result.saved_to = self.delivery.deliver(result.artifact, result.file_name)
        return result

    async def _resolve_images(self, deck: Deck) -> Deck:
        async with self.resolver:
            return await self.resolver.resolve_deck(deck)
