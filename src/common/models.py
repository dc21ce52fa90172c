"""
Shared data models for the pantry AI backend.

- Pydantic models for data validation
- Type hints throughout
"""

import warnings
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class FoodCategory(str, Enum):
    """Closed set of pantry category tags."""

    DAIRY = "dairy"
    MEAT = "meat"
    SEAFOOD = "seafood"
    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    GRAINS = "grains"
    BAKERY = "bakery"
    BEVERAGES = "beverages"
    CONDIMENTS = "condiments"
    SNACKS = "snacks"
    FROZEN = "frozen"
    CANNED_GOODS = "canned_goods"
    SPICES = "spices"
    OTHER = "other"


class OutputFormat(str, Enum):
    """Desired output format of the generator (wire values)."""

    PLAIN_TEXT = "text"
    STRICT_JSON = "json"


class GenerationRequest(BaseModel):
    """Normalized request to the external generator. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(min_length=1)
    images: List[str] = Field(
        default_factory=list, description="Encoded images (data URIs), 0 or 1 in current use"
    )
    system_instructions: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1000, gt=0)
    output_format: OutputFormat = OutputFormat.PLAIN_TEXT
    model_id: str = "gpt-4o-mini"

    def to_wire(self) -> Dict[str, Any]:
        """Render the generate-text request body."""
        body: Dict[str, Any] = {
            "prompt": self.prompt,
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
            "format": self.output_format.value,
            "model": self.model_id,
        }
        if self.images:
            body["images"] = list(self.images)
        if self.system_instructions:
            body["system"] = self.system_instructions
        return body


class TokenUsage(BaseModel):
    """Token accounting reported by the generator."""

    model_config = ConfigDict(extra="ignore")

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class GenerationResult(BaseModel):
    """Raw generator output. text is NOT validated against any schema."""

    text: str
    usage: Optional[TokenUsage] = None


class RawExtractedItem(BaseModel):
    """One line item read off a receipt by the generator."""

    model_config = ConfigDict(extra="ignore")

    name: str
    # JSON numbers only: numeric strings, booleans and non-finite values are rejected
    quantity: float = Field(gt=0, strict=True, allow_inf_nan=False)
    unit: str
    price: Optional[float] = Field(default=None, ge=0, strict=True, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class EnrichedPantryItem(RawExtractedItem):
    """Extracted item with deterministic category and expiration estimate."""

    category: FoodCategory
    predicted_expiration_date: date


class RecipeSuggestion(BaseModel):
    """A recipe proposed by the generator."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(min_length=1)
    ingredients: List[str]
    instructions: str
    prep_time_minutes: int = Field(
        gt=0,
        validation_alias=AliasChoices("prep_time_minutes", "prepTimeMinutes", "prepTime"),
    )
    servings: int = Field(gt=0)
    category: str
    match_percentage: float = Field(
        ge=0,
        le=100,
        validation_alias=AliasChoices("match_percentage", "matchPercentage"),
    )
    cuisine: Optional[str] = None
    origin: Optional[str] = None
    cultural_context: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cultural_context", "culturalContext"),
    )
    validated: bool = Field(
        default=True, description="False for entries kept without passing validation"
    )

    @field_validator("validated", mode="before")
    @classmethod
    def _validated_is_not_wire_input(cls, value: Any) -> bool:
        # Only model_construct may produce an unvalidated entry
        return True


class RecipeSuggestionsResult(BaseModel):
    """Outcome of a successful recipe suggestion call."""

    recipes: List[RecipeSuggestion]
    duration_ms: float
    token_usage: Optional[TokenUsage] = None


class Preferences(BaseModel):
    """Optional recipe preferences, passed verbatim into the prompt."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    dietary: Optional[str] = None
    cuisine: Optional[str] = None
    difficulty: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_legacy_alias(cls, data: Any) -> Any:
        # Deprecated: "dietaryRestrictions" is accepted only for older clients.
        if isinstance(data, dict) and "dietaryRestrictions" in data:
            warnings.warn(
                "'dietaryRestrictions' is deprecated, use 'dietary'",
                DeprecationWarning,
                stacklevel=2,
            )
            data = dict(data)
            legacy = data.pop("dietaryRestrictions")
            if isinstance(legacy, (list, tuple)):
                legacy = ", ".join(str(v) for v in legacy if v)
            if legacy and not data.get("dietary"):
                data["dietary"] = legacy
        return data

    def is_empty(self) -> bool:
        return not (self.dietary or self.cuisine or self.difficulty)
