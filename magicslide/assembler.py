"""Choose a package backend and divert to the HTML fallback on failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import BACKEND_OOXML, BACKEND_PYTHON_PPTX, Settings
from .errors import AssemblyFailure
from .fallback import IMPORT_HINT, HtmlFallbackRenderer
from .models import Artifact, Deck
from .ooxml import OOXMLPackageBackend
from .package_backend import PackageBackend
from .pptx_renderer import SlideDeckRenderer

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AssemblyResult:
    """Artifact plus whether it came from the degraded fallback path."""

    artifact: Artifact
    degraded: bool = False
    message: Optional[str] = None
    failures: List[str] = field(default_factory=list)


class DeckAssembler:
    """Try each backend in order; the fallback renderer guarantees an artifact."""

    def __init__(
        self,
        backends: Optional[Sequence[PackageBackend]] = None,
        *,
        fallback: Optional[HtmlFallbackRenderer] = None,
    ) -> None:
        self.backends = list(backends) if backends is not None else [OOXMLPackageBackend()]
        self.fallback = fallback or HtmlFallbackRenderer()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeckAssembler":
        """Build the configured backend first, then the other PPTX backend."""

        ooxml = OOXMLPackageBackend(min_artifact_bytes=settings.min_artifact_bytes)
        library = SlideDeckRenderer(min_artifact_bytes=settings.min_artifact_bytes)
        if settings.package_backend == BACKEND_PYTHON_PPTX:
            return cls([library, ooxml])
        if settings.package_backend != BACKEND_OOXML:
            LOGGER.warning(
                "Unknown package backend '%s', using %s", settings.package_backend, BACKEND_OOXML
            )
        return cls([ooxml, library])

    def assemble(self, deck: Deck) -> AssemblyResult:
        failures: List[str] = []
        for backend in self.backends:
            try:
                artifact = backend.build(deck)
            except AssemblyFailure as exc:
                LOGGER.warning("Backend %s failed: %s", backend.name, exc.message)
                failures.append(f"{backend.name}: {exc.message}")
                continue
            except Exception as exc:
                LOGGER.exception("Backend %s raised unexpectedly", backend.name)
                failures.append(f"{backend.name}: {exc}")
                continue
            return AssemblyResult(artifact=artifact, failures=failures)

        LOGGER.warning("All package backends failed; rendering HTML fallback")
        return AssemblyResult(
            artifact=self.fallback.render(deck),
            degraded=True,
            message=(
                "The PowerPoint file could not be built, so the presentation was "
                f"saved as HTML instead. {IMPORT_HINT}."
            ),
            failures=failures,
        )
