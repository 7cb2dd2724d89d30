"""
LLM Provider Implementations
"""

from typing import Optional

from ..base import CallModel
from .claude import ClaudeModel
from .gemini import GeminiModel
from .openai import OpenAIModel

PROVIDERS = {
    "gemini": GeminiModel,
    "openai": OpenAIModel,
    "claude": ClaudeModel,
}


def create_model(
    provider: str, api_key: Optional[str] = None, model_name: Optional[str] = None
) -> CallModel:
    """Instantiate a provider by its short name"""
    try:
        model_cls = PROVIDERS[provider.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown LLM provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}"
        ) from None
    if model_name:
        return model_cls(api_key=api_key, model_name=model_name)
    return model_cls(api_key=api_key)


__all__ = ['ClaudeModel', 'GeminiModel', 'OpenAIModel', 'PROVIDERS', 'create_model']
