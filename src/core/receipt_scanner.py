"""
Receipt scanning: image -> generator -> strict JSON parse -> enrichment.

Parsing is all-or-nothing: if any entry fails the item shape, the whole
receipt is rejected as MALFORMED_MODEL_OUTPUT.
"""

import base64
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError

from common.capabilities import NoopPantryRefresh, PantryRefresh
from common.config import ReceiptConfig
from common.errors import ErrorKind, PantryAIError
from common.logging import TimedLogger, get_logger
from common.models import (
    EnrichedPantryItem,
    GenerationRequest,
    OutputFormat,
    RawExtractedItem,
)
from common.result import Err, Ok, Result, try_parse_json
from core.lifecycle import RequestLifecycle, RequestState, RequestStatus
from core.prompts import RECEIPT_PROMPT, RECEIPT_SYSTEM_INSTRUCTIONS
from enrichment.categories import classify
from enrichment.expiration import ExpirationPredictor, predict
from gateway.extraction_gateway import ExtractionGateway

logger = get_logger(__name__)

UNREADABLE_RECEIPT_MESSAGE = "Could not read receipt. Please try again with a clearer photo."

_ITEMS_ADAPTER = TypeAdapter(List[RawExtractedItem])


class ScanStatus(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    SUCCESS = "success"
    ERROR = "error"


_SCAN_STATUS = {
    RequestStatus.IDLE: ScanStatus.IDLE,
    RequestStatus.IN_FLIGHT: ScanStatus.SCANNING,
    RequestStatus.SUCCEEDED: ScanStatus.SUCCESS,
    RequestStatus.FAILED: ScanStatus.ERROR,
}


def encode_image(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def parse_receipt_items(text: str) -> "Result[List[RawExtractedItem], str]":
    """Strictly parse generator text as a JSON array of receipt items."""
    parsed = try_parse_json(text)
    if not parsed.is_ok():
        return Err(f"not JSON: {parsed.error.message}")
    if not isinstance(parsed.value, list):
        return Err(f"expected a JSON array, got {type(parsed.value).__name__}")
    try:
        return Ok(_ITEMS_ADAPTER.validate_python(parsed.value))
    except ValidationError as e:
        return Err(f"{e.error_count()} invalid item field(s): {e.errors()[0]['msg']}")


def enrich_item(item: RawExtractedItem, refrigerated: bool, today: date) -> EnrichedPantryItem:
    """Attach category and predicted expiration date to an extracted item."""
    category = classify(item.name)
    return EnrichedPantryItem(
        **item.model_dump(include=set(RawExtractedItem.model_fields)),
        category=category,
        predicted_expiration_date=predict(item.name, refrigerated, today, category=category),
    )


class ReceiptItemExtractor:
    """Receipt scanner with an idle / scanning / success / error state."""

    def __init__(
        self,
        gateway: ExtractionGateway,
        config: Optional[ReceiptConfig] = None,
        clock: Optional[Callable[[], date]] = None,
        pantry_refresh: Optional[PantryRefresh] = None,
    ):
        self.gateway = gateway
        self.config = config or ReceiptConfig()
        self.predictor = ExpirationPredictor(clock)
        self.pantry_refresh = pantry_refresh or NoopPantryRefresh()
        self.lifecycle: RequestLifecycle[List[EnrichedPantryItem]] = RequestLifecycle(
            "receipt_scan"
        )

    @property
    def status(self) -> ScanStatus:
        return _SCAN_STATUS[self.lifecycle.state.status]

    @property
    def is_loading(self) -> bool:
        return self.status == ScanStatus.SCANNING

    @property
    def error(self) -> Optional[str]:
        error = self.lifecycle.error
        return error.message if error is not None else None

    @property
    def items(self) -> Optional[List[EnrichedPantryItem]]:
        return self.lifecycle.data

    def reset(self) -> None:
        self.lifecycle.reset()

    async def scan(
        self, image_bytes: bytes, mime_type: str = "image/jpeg"
    ) -> RequestState[List[EnrichedPantryItem]]:
        """Scan a receipt photo. Never raises; the outcome is the returned state."""
        if not image_bytes:
            return self.lifecycle.fail(
                PantryAIError(
                    ErrorKind.EMPTY_INPUT, "No receipt image provided."
                ).to_operation_error()
            )

        state = await self.lifecycle.start(lambda: self.extract_items(image_bytes, mime_type))
        if state.is_succeeded and self.pantry_refresh.available:
            try:
                self.pantry_refresh.refresh()
            except Exception as e:
                logger.warning(event="pantry_refresh_failed", error=str(e))
        return state

    async def extract_items(
        self, image_bytes: bytes, mime_type: str = "image/jpeg"
    ) -> List[EnrichedPantryItem]:
        """
        Extract and enrich the food items on a receipt.

        Raises:
            PantryAIError: gateway failure or MALFORMED_MODEL_OUTPUT
        """
        request = GenerationRequest(
            prompt=RECEIPT_PROMPT,
            images=[encode_image(image_bytes, mime_type)],
            system_instructions=RECEIPT_SYSTEM_INSTRUCTIONS,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_tokens,
            # JSON-object mode cannot return a top-level array; the parser enforces the shape
            output_format=OutputFormat.PLAIN_TEXT,
            model_id=self.config.model,
        )

        with TimedLogger(logger, "receipt_scan", image_size=len(image_bytes)):
            result = await self.gateway.invoke(request)

        parsed = parse_receipt_items(result.text)
        if not parsed.is_ok():
            logger.error(
                event="receipt_parse_failed",
                reason=parsed.error,
                text_preview=result.text[:200],
            )
            raise PantryAIError(
                ErrorKind.MALFORMED_MODEL_OUTPUT,
                UNREADABLE_RECEIPT_MESSAGE,
                details=parsed.error,
            )

        today = self.predictor.today()
        items = [
            enrich_item(item, self.config.assume_refrigerated, today) for item in parsed.value
        ]
        logger.info(event="receipt_items_extracted", item_count=len(items))
        return items
