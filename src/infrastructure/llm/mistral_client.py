import logging

import httpx
from mistralai import Mistral, models

from src.application.ports import GenerationRequest, LLMPort
from src.domain.errors import UpstreamServiceError
from src.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class MistralLLMAdapter(LLMPort):
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._client = None
        self._model = self.settings.mistral_model
        self._init_client()

    def _init_client(self):
        api_key = self.settings.mistral_api_key
        if not api_key:
            logger.error("Mistral API key is missing.")
            self._client = None
            return
        self._client = Mistral(api_key=api_key)

    def _build_kwargs(self, request: GenerationRequest) -> dict:
        kwargs = {
            "model": request.model or self._model,
            "messages": request.messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if request.json_output:
            kwargs["response_format"] = {"type": "json_object"}
        for name in ("top_p", "frequency_penalty", "presence_penalty"):
            value = getattr(request, name)
            if value is not None:
                kwargs[name] = value
        return kwargs

    async def generate(self, request: GenerationRequest) -> str:
        if not self._client:
            raise UpstreamServiceError.unreachable("Mistral client not initialized (missing API key)")
        try:
            response = await self._client.chat.complete_async(**self._build_kwargs(request))
        except models.SDKError as e:
            logger.error("Mistral returned %s: %s", e.status_code, e.body)
            raise UpstreamServiceError.from_response(e.status_code, e.body) from e
        except models.HTTPValidationError as e:
            logger.error("Mistral rejected the request: %s", e.data)
            raise UpstreamServiceError.from_response(422, e.data) from e
        except httpx.HTTPError as e:
            logger.exception("Mistral chat call failed: %s", e)
            raise UpstreamServiceError.unreachable(str(e) or type(e).__name__) from e

        # Return the assistant content
        if not response or not response.choices:
            return ""
        content = response.choices[0].message.content
        if isinstance(content, list):
            content = "".join(getattr(chunk, "text", "") for chunk in content)
        return content or ""
