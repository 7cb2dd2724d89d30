"""Hand finished artifacts to the caller."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .errors import DeliveryFailure
from .models import Artifact

LOGGER = logging.getLogger(__name__)


class ArtifactDelivery(Protocol):
    def deliver(self, artifact: Artifact, suggested_file_name: str) -> Path:
        ...


class FileSystemDelivery:
    """Write artifacts into ``output_dir``.

    A failed write raises :class:`DeliveryFailure`; the artifact object is
    untouched so the caller can retry without rebuilding it.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def deliver(self, artifact: Artifact, suggested_file_name: str) -> Path:
        if not artifact.data:
            raise DeliveryFailure("Refusing to deliver an empty artifact", retryable=False)

        target = self.output_dir / Path(suggested_file_name).name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(artifact.data)
        except OSError as exc:
            raise DeliveryFailure(
                f"Could not save {target}: {exc.strerror or exc}", original_error=exc
            ) from exc
        LOGGER.info("Saved %s (%d bytes)", target, artifact.size)
        return target
