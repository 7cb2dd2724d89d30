"""Runtime configuration loaded from the environment (and ``.env``)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

BACKEND_OOXML = "ooxml"
BACKEND_PYTHON_PPTX = "python-pptx"


@dataclass(slots=True)
class Settings:
    """Settings shared by the CLI, the Streamlit app and the pipeline."""

    llm_provider: str = "gemini"
    llm_model: Optional[str] = None
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    pexels_api_key: Optional[str] = None
    pixabay_api_key: Optional[str] = None
    package_backend: str = BACKEND_OOXML
    image_timeout: float = 8.0
    min_artifact_bytes: int = 2048
    redis_url: Optional[str] = None
    history_path: Path = Path("output/chat_history.json")
    output_dir: Path = Path("output")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            llm_provider=os.getenv("MAGICSLIDE_LLM_PROVIDER", "gemini").lower(),
            llm_model=os.getenv("MAGICSLIDE_LLM_MODEL") or None,
            gemini_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            pexels_api_key=os.getenv("PEXELS_API_KEY") or None,
            pixabay_api_key=os.getenv("PIXABAY_API_KEY") or None,
            package_backend=os.getenv("MAGICSLIDE_PACKAGE_BACKEND", BACKEND_OOXML).lower(),
            image_timeout=float(os.getenv("MAGICSLIDE_IMAGE_TIMEOUT", "8.0")),
            min_artifact_bytes=int(os.getenv("MAGICSLIDE_MIN_ARTIFACT_BYTES", "2048")),
            redis_url=os.getenv("REDIS_URL") or None,
            history_path=Path(
                os.getenv("MAGICSLIDE_HISTORY_PATH", "output/chat_history.json")
            ),
            output_dir=Path(os.getenv("MAGICSLIDE_OUTPUT_DIR", "output")),
            log_level=os.getenv("MAGICSLIDE_LOG_LEVEL", "INFO").upper(),
        )

    def has_llm_credentials(self) -> bool:
        keys = {
            "gemini": self.gemini_api_key,
            "openai": self.openai_api_key,
            "claude": self.anthropic_api_key,
        }
        return bool(keys.get(self.llm_provider))


def configure_logging(level: str = "INFO") -> None:
    """Apply a basic logging format for the CLI and Streamlit entry points."""

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
