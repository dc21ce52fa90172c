"""
Recipe suggestions from pantry item names.

The response must be a JSON object with a "recipes" array. How individual
entries are checked is decided by RecipeValidationPolicy:
- lenient: only the array is required, every entry is kept
- strict: one malformed entry fails the whole batch
- filter: malformed entries are dropped
"""

import time
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from common.config import RecipeConfig, RecipeValidationPolicy
from common.errors import ErrorKind, OperationError, PantryAIError
from common.logging import get_logger
from common.models import (
    GenerationRequest,
    OutputFormat,
    Preferences,
    RecipeSuggestion,
    RecipeSuggestionsResult,
)
from common.result import try_parse_json
from core.lifecycle import RequestLifecycle, RequestState
from core.prompts import RECIPE_SYSTEM_INSTRUCTIONS, build_recipe_prompt
from gateway.extraction_gateway import ExtractionGateway

logger = get_logger(__name__)

EMPTY_PANTRY_MESSAGE = "Please add items to your pantry first"
INVALID_PREFERENCES_MESSAGE = "Recipe preferences must be text values."

# Field values used for entries kept as-is under the lenient policy
_LENIENT_DEFAULTS: Dict[str, Any] = {
    "name": "",
    "ingredients": [],
    "instructions": "",
    "prep_time_minutes": 0,
    "servings": 0,
    "category": "",
    "match_percentage": 0.0,
    "cuisine": None,
    "origin": None,
    "cultural_context": None,
}

_WIRE_NAMES = {
    "prep_time_minutes": ("prep_time_minutes", "prepTimeMinutes", "prepTime"),
    "match_percentage": ("match_percentage", "matchPercentage"),
    "cultural_context": ("cultural_context", "culturalContext"),
}


def _best_effort_recipe(entry: Any) -> RecipeSuggestion:
    """Carry an entry that failed validation without rejecting it."""
    source = entry if isinstance(entry, dict) else {}
    values = dict(_LENIENT_DEFAULTS)
    for field in values:
        for key in _WIRE_NAMES.get(field, (field,)):
            if key in source:
                values[field] = source[key]
                break
    values["validated"] = False
    return RecipeSuggestion.model_construct(**values)


def validate_recipes(
    entries: List[Any], policy: RecipeValidationPolicy
) -> List[RecipeSuggestion]:
    """Apply the per-recipe validation policy to the raw "recipes" entries."""
    recipes: List[RecipeSuggestion] = []
    for index, entry in enumerate(entries):
        try:
            recipes.append(RecipeSuggestion.model_validate(entry))
            continue
        except ValidationError as e:
            reason = f"recipe {index}: {e.errors()[0]['msg']}"

        if policy == RecipeValidationPolicy.STRICT:
            raise PantryAIError(
                ErrorKind.INVALID_UPSTREAM_SHAPE, "Invalid recipe data format", details=reason
            )
        if policy == RecipeValidationPolicy.FILTER:
            logger.warning(event="recipe_entry_dropped", reason=reason)
            continue

        logger.info(event="recipe_entry_kept_unvalidated", reason=reason)
        recipes.append(_best_effort_recipe(entry))
    return recipes


class RecipeSuggestionEngine:
    """Generates recipe suggestions behind a loading / success / error state."""

    def __init__(self, gateway: ExtractionGateway, config: Optional[RecipeConfig] = None):
        self.gateway = gateway
        self.config = config or RecipeConfig()
        self.lifecycle: RequestLifecycle[RecipeSuggestionsResult] = RequestLifecycle(
            "recipe_suggestions"
        )

    @property
    def loading(self) -> bool:
        return self.lifecycle.is_loading

    @property
    def error(self) -> Optional[str]:
        error = self.lifecycle.error
        return error.message if error is not None else None

    @property
    def data(self) -> Optional[RecipeSuggestionsResult]:
        return self.lifecycle.data

    def reset(self) -> None:
        self.lifecycle.reset()

    async def suggest(
        self,
        pantry_item_names: Sequence[str],
        preferences: Optional[Union[Preferences, Dict[str, Any]]] = None,
    ) -> RequestState[RecipeSuggestionsResult]:
        """Suggest recipes. Never raises; the outcome is the returned state."""
        names = _clean_names(pantry_item_names)
        if not names:
            logger.warning(event="recipe_suggestions_empty_input")
            return self.lifecycle.fail(
                OperationError(kind=ErrorKind.EMPTY_INPUT, message=EMPTY_PANTRY_MESSAGE)
            )

        try:
            preferences = _coerce_preferences(preferences)
        except PantryAIError as e:
            logger.warning(event="recipe_suggestions_invalid_preferences", details=e.details)
            return self.lifecycle.fail(e.to_operation_error())

        return await self.lifecycle.start(lambda: self.generate(names, preferences))

    async def generate(
        self,
        pantry_item_names: Sequence[str],
        preferences: Optional[Union[Preferences, Dict[str, Any]]] = None,
    ) -> RecipeSuggestionsResult:
        """
        Ask the generator for recipes and validate the response.

        Raises:
            PantryAIError: EMPTY_INPUT, gateway failures, MALFORMED_MODEL_OUTPUT
                or INVALID_UPSTREAM_SHAPE
        """
        names = _clean_names(pantry_item_names)
        if not names:
            raise PantryAIError(ErrorKind.EMPTY_INPUT, EMPTY_PANTRY_MESSAGE)

        preferences = _coerce_preferences(preferences)

        request = GenerationRequest(
            prompt=build_recipe_prompt(names, preferences, self.config.recipe_count),
            system_instructions=RECIPE_SYSTEM_INSTRUCTIONS,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_tokens,
            output_format=OutputFormat.STRICT_JSON,
            model_id=self.config.model,
        )

        logger.info(
            event="recipe_suggestions_requested",
            item_count=len(names),
            has_preferences=preferences is not None and not preferences.is_empty(),
        )

        started = time.perf_counter()
        result = await self.gateway.invoke(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        parsed = try_parse_json(result.text)
        if not parsed.is_ok():
            logger.error(
                event="recipe_response_not_json",
                reason=parsed.error.message,
                text_preview=result.text[:200],
            )
            raise PantryAIError(
                ErrorKind.MALFORMED_MODEL_OUTPUT,
                "The recipe response could not be read. Please try again.",
                details=parsed.error.message,
            )

        payload = parsed.value
        entries = payload.get("recipes") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            logger.error(event="recipe_response_missing_recipes", payload_type=type(payload).__name__)
            raise PantryAIError(
                ErrorKind.INVALID_UPSTREAM_SHAPE,
                details="response has no 'recipes' array",
            )

        recipes = validate_recipes(entries, self.config.validation_policy)
        logger.info(
            event="recipe_suggestions_received",
            recipe_count=len(recipes),
            duration_ms=duration_ms,
        )
        return RecipeSuggestionsResult(
            recipes=recipes, duration_ms=duration_ms, token_usage=result.usage
        )


def _coerce_preferences(
    preferences: Optional[Union[Preferences, Dict[str, Any]]],
) -> Optional[Preferences]:
    if preferences is None or isinstance(preferences, Preferences):
        return preferences
    try:
        return Preferences.model_validate(preferences)
    except ValidationError as e:
        raise PantryAIError(
            ErrorKind.EMPTY_INPUT, INVALID_PREFERENCES_MESSAGE, details=str(e)
        ) from e


def _clean_names(names: Optional[Sequence[str]]) -> List[str]:
    return [n.strip() for n in (names or []) if isinstance(n, str) and n.strip()]
