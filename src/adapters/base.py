"""
Base adapter interface for model providers.

Adapters run on the service side of the generate-text endpoint (or inside a
DirectExtractionGateway) and translate a GenerationRequest into one provider
call.
"""

from abc import ABC, abstractmethod

from common.models import GenerationRequest, GenerationResult


class BaseAdapter(ABC):
    """Base class for model provider adapters."""

    provider_name: str = "base"

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether the provider credential is available."""

    def supports_images(self) -> bool:
        """Whether this adapter can accept image inputs."""
        return False

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Run one non-streaming completion.

        Raises:
            ProviderNotConfiguredError: credential missing
            ProviderError: the provider failed or returned a non-2xx status
        """

    async def health_check(self) -> bool:
        """Health check; by default only checks configuration."""
        return self.configured
