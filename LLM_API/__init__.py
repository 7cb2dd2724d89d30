"""
LLM API Package - Unified text generation interface for multiple LLM providers
"""

from .base import CallModel
from .data_classes import BaseRequest, BaseResponse, ProviderConfig
from .exceptions import (
    LLMError, LLMAPIError, LLMAuthenticationError,
    LLMRateLimitError, LLMTimeoutError,
    classify_error
)

__version__ = "2.0.0"
__all__ = [
    'CallModel',
    'BaseRequest', 'BaseResponse', 'ProviderConfig',
    'LLMError', 'LLMAPIError', 'LLMAuthenticationError',
    'LLMRateLimitError', 'LLMTimeoutError',
    'classify_error',
]
