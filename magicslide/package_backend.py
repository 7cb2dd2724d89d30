"""Interface shared by every presentation package backend."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from xml.sax.saxutils import escape

from .errors import AssemblyFailure
from .models import Artifact, Deck

DEFAULT_MIN_ARTIFACT_BYTES = 2048

_MARKUP_ENTITIES = {'"': "&quot;", "'": "&apos;"}
# Characters XML 1.0 cannot carry even when escaped
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def strip_illegal_xml_chars(value: object) -> str:
    return _ILLEGAL_XML_CHARS.sub("", "" if value is None else str(value))


def escape_markup(value: object) -> str:
    """Replace ``& < > " '`` with named entities for insertion into XML/HTML."""

    return escape(strip_illegal_xml_chars(value), _MARKUP_ENTITIES)


class PackageBackend(ABC):
    """Turn a deck into a presentation artifact or raise :class:`AssemblyFailure`."""

    name = "backend"

    def __init__(self, *, min_artifact_bytes: int = DEFAULT_MIN_ARTIFACT_BYTES) -> None:
        self.min_artifact_bytes = min_artifact_bytes

    @abstractmethod
    def build(self, deck: Deck) -> Artifact:
        """Return a complete artifact for ``deck``."""

    def check_plausible_size(self, data: bytes) -> None:
        if len(data) < self.min_artifact_bytes:
            raise AssemblyFailure(
                f"{self.name} produced {len(data)} bytes, expected at least "
                f"{self.min_artifact_bytes}; the package is empty or truncated"
            )
