from typing import Optional, Dict, Any
from google import genai
from google.genai import types
from ..data_classes import BaseRequest, BaseResponse, ProviderConfig
from ..base import CallModel
from ..exceptions import classify_error


class GeminiModel(CallModel):
    """Gemini API implementation of CallModel"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "gemini-2.5-flash"):
        super().__init__(api_key=api_key, model_name=model_name)

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="Gemini",
            model_name=self.model_name or "gemini-2.5-flash",
            api_key_envs=("GOOGLE_API_KEY", "GEMINI_API_KEY"),
            supports_json_mode=True,
            max_tokens_limit=8192,
        )

    def setup_client(self):
        self.client = genai.Client(api_key=self._resolve_api_key())

    def generate_content(self, request: BaseRequest) -> BaseResponse:
        model = self._model_for(request)
        config: Dict[str, Any] = {}
        if request.json_mode:
            config["response_mime_type"] = "application/json"
        if request.system_prompt:
            config["system_instruction"] = request.system_prompt
        max_tokens = self._max_tokens_for(request)
        if max_tokens:
            config["max_output_tokens"] = max_tokens
        if request.temperature is not None:
            config["temperature"] = request.temperature
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=types.GenerateContentConfig(**config) if config else None,
            )
            usage = None
            metadata = getattr(response, "usage_metadata", None)
            if metadata is not None:
                usage = {
                    "prompt_tokens": getattr(metadata, "prompt_token_count", 0) or 0,
                    "completion_tokens": getattr(metadata, "candidates_token_count", 0) or 0,
                    "total_tokens": getattr(metadata, "total_token_count", 0) or 0,
                }
            return BaseResponse(
                text=getattr(response, "text", "") or "",
                model_used=model,
                usage=usage,
                raw_response=response,
            )
        except Exception as e:
            return BaseResponse(
                text="",
                model_used=model,
                error=str(e),
                error_type=classify_error(str(e), "Gemini").error_type,
            )
