"""Command line entry point: ``python -m magicslide``."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .config import BACKEND_OOXML, BACKEND_PYTHON_PPTX, Settings, configure_logging
from .content_source import ContentSource
from .errors import ContentSourceError, DeliveryFailure
from .pipeline import PresentationPipeline
from .styles import COLOR_SCHEMES, StyleOptions

LOGGER = logging.getLogger("magicslide")


class _OfflineSource(ContentSource):
    """Content source that never calls an LLM; used with ``--from-json``."""

    def __init__(self) -> None:
        super().__init__(llm_client=None)

    def _call(self, prompt: str) -> str:
        raise ContentSourceError("No content source configured", retryable=False)


def build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a PowerPoint deck from a topic")
    parser.add_argument("topic", nargs="?", help="What the presentation should be about")
    parser.add_argument("--from-json", type=Path, help="Build from a saved slide JSON file")
    parser.add_argument("--output-dir", type=Path, help="Directory for the generated file")
    parser.add_argument("--backend", choices=(BACKEND_OOXML, BACKEND_PYTHON_PPTX))
    parser.add_argument("--scheme", choices=sorted(COLOR_SCHEMES), default="Professional Blue")
    parser.add_argument("--slides", type=int, help="Preferred slide count")
    parser.add_argument("--no-images", action="store_true", help="Skip image lookup")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_cli()
    args = parser.parse_args(argv)
    if not args.topic and args.from_json is None:
        parser.error("either a topic or --from-json is required")

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    if args.output_dir is not None:
        settings = replace(settings, output_dir=args.output_dir)
    if args.backend:
        settings = replace(settings, package_backend=args.backend)

    style = StyleOptions.from_scheme(
        args.scheme, slide_count_hint=args.slides, include_images=not args.no_images
    )

    try:
        if args.from_json is not None:
            pipeline = PresentationPipeline.from_settings(settings, content_source=_OfflineSource())
            result = pipeline.build(args.from_json.read_text(encoding="utf-8"), style)
        else:
            pipeline = PresentationPipeline.from_settings(settings)
            result = pipeline.generate(args.topic, style)
    except (ContentSourceError, DeliveryFailure) as exc:
        LOGGER.error("%s", exc)
        return 1
    except OSError as exc:
        LOGGER.error("Could not read %s: %s", args.from_json, exc)
        return 1

    if result.message:
        LOGGER.warning(result.message)
    print(result.saved_to)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution utility
    raise SystemExit(main())
