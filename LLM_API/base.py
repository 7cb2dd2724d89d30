"""Abstract base class that normalises the provider interface."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Optional

from dotenv import load_dotenv

from .data_classes import BaseRequest, BaseResponse, ProviderConfig
from .exceptions import LLMAuthenticationError


class CallModel(ABC):
    """Abstract base class for all LLM providers."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key
        self.model_name = model_name
        self.client = None
        self.provider_config = self._get_provider_config()
        self.setup_client()

    @abstractmethod
    def setup_client(self) -> None:
        """Initialise the provider client."""

    @abstractmethod
    def _get_provider_config(self) -> ProviderConfig:
        """Return provider specific configuration metadata."""

    @abstractmethod
    def generate_content(self, request: BaseRequest) -> BaseResponse:
        """Generate text; failures are reported through ``BaseResponse.error``."""

    # ------------------------------------------------------------------
    # Utility helpers
    # ------------------------------------------------------------------
    def get_provider_name(self) -> str:
        return self.provider_config.provider_name

    def _resolve_api_key(self) -> str:
        load_dotenv()
        env_vars = self.provider_config.api_key_envs
        api_key = self.api_key or next(
            (os.getenv(name) for name in env_vars if os.getenv(name)), None
        )
        if not api_key:
            raise LLMAuthenticationError(
                f"API key required. Set {' or '.join(env_vars)} in your .env file or pass api_key",
                provider=self.provider_config.provider_name,
            )
        return api_key

    def _model_for(self, request: BaseRequest) -> str:
        return request.model_name or self.model_name or self.provider_config.model_name

    def _max_tokens_for(self, request: BaseRequest) -> Optional[int]:
        limit = self.provider_config.max_tokens_limit
        if request.max_tokens and limit:
            return min(request.max_tokens, limit)
        return request.max_tokens
