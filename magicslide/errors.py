from typing import Optional
from datetime import datetime


class MagicSlideError(Exception):
    """Base exception for every failure raised inside the slide pipeline"""

    stage = "general"

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self):
        return f"[{self.stage}] {self.message}"


class ContentSourceError(MagicSlideError):
    """The LLM content source is unavailable or rejected the request"""

    stage = "content_source"

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        retryable: bool = True,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, retryable=retryable, original_error=original_error)
        self.provider = provider


class NormalizationFailure(MagicSlideError):
    """Raw slide content could not be parsed into a deck"""

    stage = "normalization"


class ImageResolutionFailure(MagicSlideError):
    """A single image provider failed to return a usable URL"""

    stage = "image_resolution"

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, original_error=original_error)
        self.provider = provider


class AssemblyFailure(MagicSlideError):
    """A package backend could not produce a plausible artifact"""

    stage = "assembly"


class DeliveryFailure(MagicSlideError):
    """Handing the finished artifact to the caller failed"""

    stage = "delivery"

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = True,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, retryable=retryable, original_error=original_error)
