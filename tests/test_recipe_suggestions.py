"""
Tests for recipe suggestions and the per-recipe validation policy.
"""

import json

import pytest

from common.config import RecipeConfig, RecipeValidationPolicy
from common.errors import ErrorKind, GatewayError, PantryAIError
from common.models import OutputFormat, Preferences
from conftest import FakeGateway
from core.prompts import build_recipe_prompt
from core.recipe_suggestions import (
    EMPTY_PANTRY_MESSAGE,
    INVALID_PREFERENCES_MESSAGE,
    RecipeSuggestionEngine,
    validate_recipes,
)


def recipe(name="Omelette", **overrides):
    entry = {
        "name": name,
        "cuisine": "French",
        "ingredients": ["eggs", "milk", "butter"],
        "instructions": "Whisk, pour and fold.",
        "prepTime": 10,
        "servings": 2,
        "category": "Breakfast",
        "matchPercentage": 100,
    }
    entry.update(overrides)
    return entry


FIVE_RECIPES = json.dumps({"recipes": [recipe(f"Recipe {i}") for i in range(5)]})

# second entry lacks servings, third has a negative prep time
MIXED_RECIPES = [
    recipe("Good"),
    {k: v for k, v in recipe("No servings").items() if k != "servings"},
    recipe("Bad prep", prepTime=-5),
]


@pytest.mark.asyncio
async def test_suggest_returns_all_recipes():
    """Test a well-formed response yields every recipe with usage and timing."""
    gateway = FakeGateway(FIVE_RECIPES)
    engine = RecipeSuggestionEngine(gateway)

    state = await engine.suggest(["eggs", "milk"])

    assert state.is_succeeded
    assert not engine.loading
    assert engine.error is None
    assert len(engine.data.recipes) == 5
    assert engine.data.recipes[0].prep_time_minutes == 10
    assert engine.data.token_usage.total_tokens == 30
    assert engine.data.duration_ms >= 0


@pytest.mark.asyncio
async def test_suggest_request_shape():
    """Test the request asks for strict JSON and embeds names and preferences."""
    gateway = FakeGateway(json.dumps({"recipes": []}))
    engine = RecipeSuggestionEngine(gateway, RecipeConfig(recipe_count=3, max_tokens=2000))

    await engine.suggest(["  eggs ", "", "spinach"], {"dietary": "vegetarian", "cuisine": "Italian"})

    request = gateway.requests[0]
    assert request.output_format == OutputFormat.STRICT_JSON
    assert request.max_output_tokens == 2000
    assert request.images == []
    assert "eggs, spinach" in request.prompt
    assert "Suggest 3 recipes" in request.prompt
    assert "vegetarian" in request.prompt
    assert "Italian" in request.prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("names", [[], ["", "   "], None])
async def test_suggest_empty_pantry_makes_no_call(names):
    """Test empty input fails without contacting the generator."""
    gateway = FakeGateway()
    engine = RecipeSuggestionEngine(gateway)

    state = await engine.suggest(names)

    assert state.is_failed
    assert state.error.kind == ErrorKind.EMPTY_INPUT
    assert engine.error == EMPTY_PANTRY_MESSAGE
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_empty_recipes_array_is_success():
    """Test an empty recipes array is an empty success."""
    engine = RecipeSuggestionEngine(FakeGateway(json.dumps({"recipes": []})))

    state = await engine.suggest(["rice"])

    assert state.is_succeeded
    assert engine.data.recipes == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ['{"meals": []}', "[]", '{"recipes": "none"}'])
async def test_missing_recipes_array_is_invalid_shape(text):
    """Test a JSON response without a recipes array is INVALID_UPSTREAM_SHAPE."""
    engine = RecipeSuggestionEngine(FakeGateway(text))

    state = await engine.suggest(["rice"])

    assert state.error.kind == ErrorKind.INVALID_UPSTREAM_SHAPE


@pytest.mark.asyncio
async def test_non_json_response_is_malformed():
    """Test unparseable output is MALFORMED_MODEL_OUTPUT."""
    engine = RecipeSuggestionEngine(FakeGateway("Here are some recipes: ..."))

    state = await engine.suggest(["rice"])

    assert state.error.kind == ErrorKind.MALFORMED_MODEL_OUTPUT


@pytest.mark.asyncio
async def test_gateway_failure_surfaces():
    """Test gateway errors become the failed state."""
    engine = RecipeSuggestionEngine(
        FakeGateway(GatewayError(ErrorKind.CONFIGURATION_MISSING))
    )

    state = await engine.suggest(["rice"])

    assert state.error.kind == ErrorKind.CONFIGURATION_MISSING
    assert not state.error.retryable


def test_lenient_policy_keeps_every_entry():
    """Test lenient validation preserves the count and the given fields."""
    recipes = validate_recipes(MIXED_RECIPES, RecipeValidationPolicy.LENIENT)

    assert [r.name for r in recipes] == ["Good", "No servings", "Bad prep"]
    assert recipes[1].servings == 0
    assert recipes[1].prep_time_minutes == 10
    assert recipes[2].prep_time_minutes == -5
    assert [r.validated for r in recipes] == [True, False, False]


def test_filter_policy_drops_bad_entries():
    """Test filter validation keeps only well-formed entries."""
    recipes = validate_recipes(MIXED_RECIPES, RecipeValidationPolicy.FILTER)
    assert [r.name for r in recipes] == ["Good"]
    assert recipes[0].validated


@pytest.mark.asyncio
async def test_strict_policy_fails_batch():
    """Test strict validation rejects the whole response for one bad entry."""
    engine = RecipeSuggestionEngine(
        FakeGateway(json.dumps({"recipes": MIXED_RECIPES})),
        RecipeConfig(validation_policy=RecipeValidationPolicy.STRICT),
    )

    state = await engine.suggest(["eggs"])

    assert state.error.kind == ErrorKind.INVALID_UPSTREAM_SHAPE
    assert engine.error == "Invalid recipe data format"


def test_lenient_policy_tolerates_non_object_entries():
    """Test a non-object entry is carried with default fields."""
    recipes = validate_recipes(["just a string"], RecipeValidationPolicy.LENIENT)
    assert len(recipes) == 1
    assert recipes[0].name == ""
    assert recipes[0].validated is False


@pytest.mark.asyncio
async def test_legacy_preferences_alias_reaches_prompt():
    """Test the deprecated dietaryRestrictions key still influences the prompt."""
    gateway = FakeGateway(json.dumps({"recipes": []}))
    engine = RecipeSuggestionEngine(gateway)

    with pytest.warns(DeprecationWarning):
        await engine.suggest(["tofu"], {"dietaryRestrictions": ["vegan"]})

    assert "vegan" in gateway.requests[0].prompt


def test_prompt_without_preferences():
    """Test no preferences section is rendered for empty preferences."""
    prompt = build_recipe_prompt(["eggs"], Preferences(), 5)
    assert "Preferences" not in prompt
    assert "eggs" in prompt


@pytest.mark.asyncio
async def test_reset_clears_state():
    """Test reset returns the engine to idle."""
    engine = RecipeSuggestionEngine(FakeGateway(FIVE_RECIPES))
    await engine.suggest(["eggs"])

    engine.reset()

    assert engine.data is None
    assert engine.error is None
    assert not engine.loading


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "preferences",
    [
        {"dietary": ["vegan", 3], "cuisine": 5},
        {"difficulty": {"level": "easy"}},
    ],
)
async def test_invalid_preferences_fail_before_the_call(preferences):
    """Test non-text preferences are a caller error and never reach the generator."""
    gateway = FakeGateway(FIVE_RECIPES)
    engine = RecipeSuggestionEngine(gateway)

    state = await engine.suggest(["rice"], preferences)

    assert state.is_failed
    assert state.error.kind == ErrorKind.EMPTY_INPUT
    assert not state.error.retryable
    assert engine.error == INVALID_PREFERENCES_MESSAGE
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_generate_raises_for_invalid_preferences():
    """Test the raising API reports invalid preferences with their validation details."""
    engine = RecipeSuggestionEngine(FakeGateway(FIVE_RECIPES))

    with pytest.raises(PantryAIError) as excinfo:
        await engine.generate(["rice"], {"cuisine": 5})

    assert excinfo.value.kind == ErrorKind.EMPTY_INPUT
    assert "cuisine" in excinfo.value.details
