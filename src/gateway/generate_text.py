"""
generate-text HTTP service using FastAPI.

Accepts {prompt, images?, system?, temperature?, max_tokens?, format?, model?},
relays it to the configured model provider and answers {text, usage?}.
- Async/await for all I/O operations
- Structured logging with elapsed_ms
- CORS headers on every response, empty 200 for preflight
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from adapters.base import BaseAdapter
from adapters.openai_adapter import OpenAIAdapter
from common.config import Config
from common.errors import ErrorKind, ProviderError, ProviderNotConfiguredError
from common.logging import TimedLogger, get_logger
from common.models import GenerationRequest, OutputFormat

logger = get_logger(__name__)


class GenerateTextBody(BaseModel):
    """Wire body of a generate-text call."""

    prompt: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    system: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    format: OutputFormat = OutputFormat.PLAIN_TEXT
    model: Optional[str] = None


class GenerateTextService:
    """FastAPI application wrapping one model provider adapter."""

    def __init__(self, config: Config, adapter: Optional[BaseAdapter] = None):
        self.config = config
        self.adapter = adapter or OpenAIAdapter(
            api_key_env=config.generation.provider_api_key_env
        )
        self.app = FastAPI(title="Pantry AI generate-text", version="0.1.0")
        self.cors_headers = {
            "Access-Control-Allow-Origin": config.service.allow_origin,
            "Access-Control-Allow-Headers": config.service.allow_headers,
        }

        self._setup_routes()

    def _json(self, content: Dict[str, Any], status_code: int = 200) -> JSONResponse:
        return JSONResponse(content, status_code=status_code, headers=self.cors_headers)

    def _setup_routes(self) -> None:
        """Setup FastAPI routes."""

        @self.app.options("/generate-text")
        async def preflight() -> Response:
            """CORS preflight."""
            return Response(status_code=200, headers=self.cors_headers)

        @self.app.post("/generate-text")
        async def generate_text(request: Request) -> JSONResponse:
            return await self._handle_generate(request)

        @self.app.get("/health")
        async def health_check() -> JSONResponse:
            """Health check endpoint."""
            configured = await self.adapter.health_check()
            return self._json(
                {
                    "status": "healthy" if configured else "degraded",
                    "provider": self.adapter.provider_name,
                    "provider_configured": configured,
                }
            )

    def _to_generation_request(self, body: GenerateTextBody) -> GenerationRequest:
        defaults = self.config.generation
        return GenerationRequest(
            prompt=body.prompt,
            images=body.images,
            system_instructions=body.system,
            temperature=(
                body.temperature if body.temperature is not None else defaults.default_temperature
            ),
            max_output_tokens=body.max_tokens or defaults.default_max_tokens,
            output_format=body.format,
            model_id=body.model or defaults.default_model,
        )

    async def _handle_generate(self, request: Request) -> JSONResponse:
        try:
            raw = await request.json()
        except ValueError:
            return self._json({"error": "Request body must be JSON"}, status_code=400)

        if not isinstance(raw, dict):
            return self._json({"error": "Request body must be a JSON object"}, status_code=400)

        try:
            body = GenerateTextBody.model_validate(raw)
        except ValidationError as e:
            return self._json(
                {"error": "Invalid request", "details": str(e)}, status_code=400
            )

        if not body.prompt:
            return self._json({"error": "Prompt is required"}, status_code=400)

        logger.info(
            event="generate_text_received",
            prompt_length=len(body.prompt),
            image_count=len(body.images),
            has_system=bool(body.system),
            format=body.format.value,
            model=body.model,
        )

        if not self.adapter.configured:
            logger.error(event="generate_text_provider_not_configured")
            return self._configuration_missing(
                f"{self.adapter.provider_name} API key not configured. "
                f"Please add {self.config.generation.provider_api_key_env} to the service secrets."
            )

        with TimedLogger(logger, "generate_text_completed", provider=self.adapter.provider_name):
            try:
                result = await self.adapter.generate(self._to_generation_request(body))

            except ProviderNotConfiguredError as e:
                return self._configuration_missing(e.message)

            except ProviderError as e:
                logger.error(
                    event="generate_text_provider_error",
                    status_code=e.status_code,
                    details=e.details,
                )
                content: Dict[str, Any] = {"error": e.message}
                if e.details:
                    content["details"] = e.details
                status = e.status_code if e.status_code >= 400 else 502
                return self._json(content, status_code=status)

            except Exception as e:
                logger.error(event="generate_text_failed", error=str(e), exc_info=True)
                return self._json({"error": str(e) or "Internal server error"}, status_code=500)

        content = {"text": result.text}
        if result.usage is not None:
            content["usage"] = result.usage.model_dump()
        return self._json(content)

    def _configuration_missing(self, message: str) -> JSONResponse:
        return self._json(
            {"error": message, "code": ErrorKind.CONFIGURATION_MISSING.value},
            status_code=500,
        )


def create_generate_text_app(config: Config, adapter: Optional[BaseAdapter] = None) -> FastAPI:
    """Create and configure the generate-text FastAPI application."""
    service = GenerateTextService(config, adapter)
    return service.app
