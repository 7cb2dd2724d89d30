from typing import Optional, Dict, Any
from openai import OpenAI
from ..data_classes import BaseRequest, BaseResponse, ProviderConfig
from ..base import CallModel
from ..exceptions import classify_error


class OpenAIModel(CallModel):
    """OpenAI Responses API implementation of CallModel"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "gpt-5"):
        super().__init__(api_key=api_key, model_name=model_name)

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="OpenAI",
            model_name=self.model_name or "gpt-5",
            api_key_envs=("OPENAI_API_KEY",),
            supports_json_mode=True,
            max_tokens_limit=128000,
        )

    def setup_client(self):
        self.client = OpenAI(api_key=self._resolve_api_key())

    def generate_content(self, request: BaseRequest) -> BaseResponse:
        model = self._model_for(request)
        request_data: Dict[str, Any] = {"model": model, "input": request.prompt}
        if request.system_prompt:
            request_data["instructions"] = request.system_prompt
        if request.json_mode:
            request_data["text"] = {"format": {"type": "json_object"}}
        max_tokens = self._max_tokens_for(request)
        if max_tokens:
            request_data["max_output_tokens"] = max_tokens
        try:
            response = self.client.responses.create(**request_data)
            usage = None
            if getattr(response, "usage", None) is not None:
                usage = {
                    "prompt_tokens": getattr(response.usage, "input_tokens", 0),
                    "completion_tokens": getattr(response.usage, "output_tokens", 0),
                    "total_tokens": getattr(response.usage, "total_tokens", 0),
                }
            return BaseResponse(
                text=getattr(response, "output_text", "") or "",
                model_used=model,
                usage=usage,
                raw_response=response,
            )
        except Exception as e:
            return BaseResponse(
                text="",
                model_used=model,
                error=str(e),
                error_type=classify_error(str(e), "OpenAI").error_type,
            )
