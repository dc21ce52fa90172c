"""Prompts and system instructions sent to the generator."""

from typing import Optional, Sequence

from common.models import Preferences

RECEIPT_SYSTEM_INSTRUCTIONS = """\
You are an expert at reading grocery receipts and extracting structured data.
Return ONLY a JSON array, with no surrounding text, of objects shaped like:
[{"name": "Item Name", "quantity": 1, "unit": "pcs", "price": 5.99}]
- name: the product name, expanded from receipt abbreviations where obvious
- quantity: a positive number (estimate 1 if not shown)
- unit: pcs, kg, g, L, mL, lbs, oz, cups, tbsp or tsp
- price: the line price if visible, otherwise omit it
Only include food and drink items. Skip non-food products, totals, taxes,
discounts, payment lines and store information.
If no food items are visible, return [].
"""

RECEIPT_PROMPT = (
    "Analyze this receipt image and extract all food items as a JSON array "
    "following the instructions."
)

RECIPE_SYSTEM_INSTRUCTIONS = """\
You are a creative chef who suggests practical home recipes from the
ingredients a user already has. Always answer with a single JSON object of
the form {"recipes": [...]} and nothing else.
"""

_RECIPE_SHAPE = (
    '{"name": string, "cuisine": string, "origin": string, "culturalContext": string, '
    '"ingredients": [string], "instructions": string, "prepTime": minutes as integer, '
    '"servings": integer, "category": string, "matchPercentage": number 0-100}'
)


def build_recipe_prompt(
    pantry_item_names: Sequence[str],
    preferences: Optional[Preferences] = None,
    recipe_count: int = 5,
) -> str:
    """Prompt embedding the pantry names and the verbatim preferences."""
    lines = [
        f"Suggest {recipe_count} recipes that make the most of these pantry items:",
        ", ".join(pantry_item_names),
        "",
    ]

    if preferences is not None and not preferences.is_empty():
        lines.append("Preferences:")
        if preferences.dietary:
            lines.append(f"- Dietary: {preferences.dietary}")
        if preferences.cuisine:
            lines.append(f"- Cuisine: {preferences.cuisine}")
        if preferences.difficulty:
            lines.append(f"- Difficulty: {preferences.difficulty}")
        lines.append("")

    lines.extend(
        [
            "matchPercentage is the share of the recipe's ingredients found in the pantry list.",
            f'Return JSON: {{"recipes": [{_RECIPE_SHAPE}, ...]}}',
        ]
    )
    return "\n".join(lines)
