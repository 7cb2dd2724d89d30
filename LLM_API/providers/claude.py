from typing import Optional, Dict, Any
import anthropic
from ..data_classes import BaseRequest, BaseResponse, ProviderConfig
from ..base import CallModel
from ..exceptions import classify_error


class ClaudeModel(CallModel):
    """Anthropic Messages API implementation of CallModel"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "claude-sonnet-4-5"):
        super().__init__(api_key=api_key, model_name=model_name)

    def _get_provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_name="Claude",
            model_name=self.model_name or "claude-sonnet-4-5",
            api_key_envs=("ANTHROPIC_API_KEY",),
            supports_json_mode=False,
            max_tokens_limit=64000,
            default_max_tokens=8192,
        )

    def setup_client(self):
        self.client = anthropic.Anthropic(api_key=self._resolve_api_key())

    def generate_content(self, request: BaseRequest) -> BaseResponse:
        model = self._model_for(request)
        try:
            request_params: Dict[str, Any] = {
                "model": model,
                "max_tokens": self._max_tokens_for(request) or self.provider_config.default_max_tokens,
                "messages": [{"role": "user", "content": request.prompt}],
            }
            if request.system_prompt:
                request_params["system"] = request.system_prompt
            if request.temperature is not None:
                request_params["temperature"] = request.temperature

            response = self.client.messages.create(**request_params)

            text_content = "".join(
                block.text for block in response.content if block.type == "text"
            )
            usage = None
            if hasattr(response, "usage"):
                input_tokens = getattr(response.usage, "input_tokens", 0)
                output_tokens = getattr(response.usage, "output_tokens", 0)
                usage = {
                    "prompt_tokens": input_tokens,
                    "completion_tokens": output_tokens,
                    "total_tokens": input_tokens + output_tokens,
                }
            return BaseResponse(
                text=text_content,
                model_used=model,
                usage=usage,
                raw_response=response,
            )
        except Exception as e:
            return BaseResponse(
                text="",
                model_used=model,
                error=str(e),
                error_type=classify_error(str(e), "Claude").error_type,
            )
