"""
Extraction gateway: normalized "invoke the generator" transport.

invoke(GenerationRequest) returns a GenerationResult or raises GatewayError
with one of CONFIGURATION_MISSING, UNREACHABLE, UPSTREAM_REJECTED or
UPSTREAM_ERROR. The gateway never interprets the generated text.
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from adapters.base import BaseAdapter
from common.config import GenerationConfig
from common.errors import ErrorKind, GatewayError, ProviderError, ProviderNotConfiguredError
from common.logging import TimedLogger, get_logger
from common.models import GenerationRequest, GenerationResult

logger = get_logger(__name__)


class ExtractionGateway(ABC):
    """Base class for generator transports."""

    @abstractmethod
    async def invoke(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation; raises GatewayError on failure."""

    async def aclose(self) -> None:
        """Release transport resources."""


class HttpExtractionGateway(ExtractionGateway):
    """Calls the generate-text service over HTTP."""

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        service_token: Optional[str] = None,
    ):
        self.config = config or GenerationConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        if service_token is None:
            service_token = os.getenv(self.config.service_token_env)
        self._service_token = service_token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._service_token:
            headers["Authorization"] = f"Bearer {self._service_token}"
        return headers

    async def invoke(self, request: GenerationRequest) -> GenerationResult:
        with TimedLogger(
            logger,
            "gateway_invoke",
            model=request.model_id,
            image_count=len(request.images),
            output_format=request.output_format.value,
        ):
            try:
                response = await self._client.post(
                    self.config.endpoint_url,
                    json=request.to_wire(),
                    headers=self._headers(),
                )
            except httpx.TimeoutException as e:
                logger.warning(event="gateway_timeout", error=str(e))
                raise GatewayError(
                    ErrorKind.UNREACHABLE,
                    "Request timed out. Please try again.",
                    details=str(e),
                ) from e
            except httpx.TransportError as e:
                logger.warning(event="gateway_unreachable", error=str(e))
                raise GatewayError(ErrorKind.UNREACHABLE, details=str(e)) from e

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> GenerationResult:
        payload = _json_or_none(response)

        if response.is_success:
            try:
                if not isinstance(payload, dict):
                    raise ValueError("response body is not a JSON object")
                return GenerationResult.model_validate(payload)
            except (ValueError, ValidationError) as e:
                logger.error(
                    event="gateway_bad_success_body",
                    status_code=response.status_code,
                    error=str(e),
                )
                raise GatewayError(ErrorKind.UPSTREAM_ERROR, details=str(e)) from e

        error = payload.get("error") if isinstance(payload, dict) else None
        details = payload.get("details") if isinstance(payload, dict) else None

        logger.error(
            event="gateway_upstream_failure",
            status_code=response.status_code,
            error=error,
            details=details,
        )

        if isinstance(payload, dict) and payload.get("code") == ErrorKind.CONFIGURATION_MISSING.value:
            raise GatewayError(ErrorKind.CONFIGURATION_MISSING, details=error)

        if isinstance(error, str) and error:
            raise GatewayError(
                ErrorKind.UPSTREAM_REJECTED,
                details=f"{response.status_code}: {error}" + (f" ({details})" if details else ""),
            )

        raise GatewayError(
            ErrorKind.UPSTREAM_ERROR,
            details=f"{response.status_code}: {response.text[:200]}",
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class DirectExtractionGateway(ExtractionGateway):
    """Calls a provider adapter in-process, without the HTTP hop."""

    def __init__(self, adapter: BaseAdapter):
        self.adapter = adapter

    async def invoke(self, request: GenerationRequest) -> GenerationResult:
        if not self.adapter.configured:
            raise GatewayError(
                ErrorKind.CONFIGURATION_MISSING,
                details=f"{self.adapter.provider_name} credential not configured",
            )
        try:
            return await self.adapter.generate(request)
        except ProviderNotConfiguredError as e:
            raise GatewayError(ErrorKind.CONFIGURATION_MISSING, details=e.message) from e
        except ProviderError as e:
            kind = ErrorKind.UNREACHABLE if e.status_code in (502, 504) else ErrorKind.UPSTREAM_REJECTED
            raise GatewayError(
                kind, details=f"{e.status_code}: {e.message}" + (f" ({e.details})" if e.details else "")
            ) from e


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
