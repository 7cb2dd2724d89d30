from typing import Optional
from datetime import datetime


class LLMError(Exception):
    """Base exception for all LLM-related errors"""

    error_type = "general"

    def __init__(
        self,
        message: str,
        provider: str = "",
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.retry_after = retry_after
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self):
        return f"[{self.provider}] {self.error_type}: {self.message}"


class LLMAPIError(LLMError):
    """API request failed"""
    error_type = "api_error"


class LLMAuthenticationError(LLMError):
    """Missing or invalid API key"""
    error_type = "authentication"


class LLMRateLimitError(LLMError):
    """Rate limit or quota exceeded"""
    error_type = "rate_limit"


class LLMTimeoutError(LLMError):
    """Request timed out"""
    error_type = "timeout"


_ERROR_MARKERS = (
    (LLMAuthenticationError, ("api_key_invalid", "invalid api key", "incorrect api key",
                              "authentication", "unauthorized", "401", "permission_denied")),
    (LLMRateLimitError, ("rate limit", "rate_limit", "quota", "resource_exhausted", "429")),
    (LLMTimeoutError, ("timed out", "timeout", "deadline")),
)


def classify_error(message: str, provider: str = "") -> LLMError:
    """Map a provider error message onto the exception hierarchy"""
    lowered = (message or "").lower()
    for error_cls, markers in _ERROR_MARKERS:
        if any(marker in lowered for marker in markers):
            return error_cls(message, provider=provider)
    return LLMAPIError(message, provider=provider)
