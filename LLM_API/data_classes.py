from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple


# ========== Requests / Responses ==========

@dataclass
class BaseRequest:
    """Single prompt sent to a text generation provider"""
    prompt: str = ""
    system_prompt: Optional[str] = None
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    json_mode: bool = False  # ask the provider for a bare JSON object

    def to_dict(self) -> Dict[str, Any]:
        """Non-empty fields only, for logging and request building"""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class BaseResponse:
    """Provider reply; ``error`` is set instead of raising"""
    text: str = ""
    model_used: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def success(self) -> bool:
        return self.error is None


# ========== Provider metadata ==========

@dataclass
class ProviderConfig:
    """Static facts about a provider"""
    provider_name: str = ""
    model_name: str = ""
    api_key_envs: Tuple[str, ...] = ()  # checked in order
    supports_json_mode: bool = True
    max_tokens_limit: Optional[int] = None
    default_max_tokens: int = 4096
