"""
Error taxonomy shared by every AI-backed operation.

Failures travel internally as PantryAIError and leave a component only as an
OperationError inside a failed RequestState.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    CONFIGURATION_MISSING = "configuration_missing"  # Server-side credential absent, fatal
    UNREACHABLE = "unreachable"  # Transport failure, caller may retry
    UPSTREAM_REJECTED = "upstream_rejected"  # Generator refused with an explanation
    UPSTREAM_ERROR = "upstream_error"  # Any other non-2xx / unusable response
    MALFORMED_MODEL_OUTPUT = "malformed_model_output"  # Text did not parse as expected shape
    EMPTY_INPUT = "empty_input"  # Caller precondition violated, no network call
    INVALID_UPSTREAM_SHAPE = "invalid_upstream_shape"  # Valid JSON, required fields missing


DEFAULT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION_MISSING: "The AI service is not configured. Please contact support.",
    ErrorKind.UNREACHABLE: "Network error. Please check your connection and try again.",
    ErrorKind.UPSTREAM_REJECTED: "The AI service rejected the request. Please try again later.",
    ErrorKind.UPSTREAM_ERROR: "The AI service failed to respond. Please try again.",
    ErrorKind.MALFORMED_MODEL_OUTPUT: "The AI response could not be read. Please try again.",
    ErrorKind.EMPTY_INPUT: "Nothing to process. Please provide some input first.",
    ErrorKind.INVALID_UPSTREAM_SHAPE: "Invalid response from server. Please try again.",
}


class OperationError(BaseModel):
    """Public, user-safe description of a failed operation."""

    model_config = {"frozen": True}

    kind: ErrorKind
    message: str = Field(description="Human-readable, user-safe message")
    details: Optional[str] = Field(default=None, description="Diagnostic details, for logs only")

    @property
    def retryable(self) -> bool:
        """Whether re-invoking the operation may succeed."""
        return self.kind in (
            ErrorKind.UNREACHABLE,
            ErrorKind.UPSTREAM_ERROR,
            ErrorKind.MALFORMED_MODEL_OUTPUT,
        )


class PantryAIError(Exception):
    """Internal exception carrying an ErrorKind."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.details = details
        super().__init__(self.message)

    def to_operation_error(self) -> OperationError:
        """Convert to the public error model."""
        return OperationError(kind=self.kind, message=self.message, details=self.details)


class GatewayError(PantryAIError):
    """Failure raised by an ExtractionGateway."""


class ProviderError(Exception):
    """Failure raised by a model provider adapter on the service side."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ProviderNotConfiguredError(ProviderError):
    """The provider credential is not configured."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
