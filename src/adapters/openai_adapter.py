"""
OpenAI adapter for text and vision completions.

- Async I/O for all operations
- Structured logging with elapsed_ms
- Never log secrets, API keys or image payloads
"""

import os
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from adapters.base import BaseAdapter
from common.errors import ProviderError, ProviderNotConfiguredError
from common.logging import TimedLogger, get_logger
from common.models import GenerationRequest, GenerationResult, OutputFormat, TokenUsage

logger = get_logger(__name__)


class OpenAIAdapter(BaseAdapter):
    """Chat-completions adapter; images are sent as image_url content parts."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_key_env: str = "OPENAI_API_KEY",
        client: Optional[AsyncOpenAI] = None,
    ):
        self._api_key_env = api_key_env
        self._api_key = api_key if api_key is not None else os.getenv(api_key_env)
        self._client = client

        logger.info(
            event="openai_adapter_initialized",
            configured=self.configured,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    def supports_images(self) -> bool:
        return True

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ProviderNotConfiguredError(
                    f"OpenAI API key not configured. Please set {self._api_key_env}."
                )
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    @staticmethod
    def build_messages(request: GenerationRequest) -> List[Dict[str, Any]]:
        """Translate a GenerationRequest into chat messages."""
        messages: List[Dict[str, Any]] = []
        if request.system_instructions:
            messages.append({"role": "system", "content": request.system_instructions})

        if request.images:
            content: List[Dict[str, Any]] = [{"type": "text", "text": request.prompt}]
            for image in request.images:
                content.append({"type": "image_url", "image_url": {"url": image}})
            messages.append({"role": "user", "content": content})
        else:
            messages.append({"role": "user", "content": request.prompt})
        return messages

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        client = self._get_client()

        params: Dict[str, Any] = {
            "model": request.model_id,
            "messages": self.build_messages(request),
            "temperature": request.temperature,
            "max_tokens": request.max_output_tokens,
        }
        if request.output_format == OutputFormat.STRICT_JSON:
            params["response_format"] = {"type": "json_object"}

        with TimedLogger(
            logger,
            "openai_chat_completion",
            model=request.model_id,
            image_count=len(request.images),
            output_format=request.output_format.value,
        ):
            try:
                response = await client.chat.completions.create(**params)

            except openai.APIStatusError as e:
                logger.error(
                    event="openai_api_error",
                    status_code=e.status_code,
                    error=str(e),
                )
                raise ProviderError(
                    "Failed to generate text from OpenAI",
                    status_code=e.status_code,
                    details=e.response.text if e.response is not None else str(e),
                ) from e

            except openai.APITimeoutError as e:
                logger.error(event="openai_timeout", error=str(e))
                raise ProviderError(
                    "OpenAI API timeout", status_code=504, details=str(e)
                ) from e

            except openai.APIConnectionError as e:
                logger.error(event="openai_connection_error", error=str(e))
                raise ProviderError(
                    "Could not reach OpenAI", status_code=502, details=str(e)
                ) from e

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        logger.info(event="openai_text_generated", text_length=len(text))
        return GenerationResult(text=text, usage=usage)
