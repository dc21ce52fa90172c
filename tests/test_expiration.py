"""
Tests for shelf-life estimation.
"""

from datetime import datetime, timedelta

import pytest

from common.models import FoodCategory
from conftest import FIXED_TODAY
from enrichment.expiration import (
    DEFAULT_SHELF_LIFE,
    DEFAULT_STORAGE_TIP,
    FRESH_FOOD_RULES,
    SHELF_LIFE_DAYS,
    ExpirationPredictor,
    ExpirationStatus,
    days_until_expiration,
    expiration_status,
    is_fresh_food,
    item_shelf_life,
    match_fresh_food,
    predict,
    shelf_life_days,
    shelf_life_range,
    storage_tips,
)


@pytest.mark.parametrize("category", list(FoodCategory))
@pytest.mark.parametrize("refrigerated", [True, False])
def test_prediction_is_strictly_after_purchase(category, refrigerated):
    """Test every category and storage condition yields a future date."""
    assert predict("", refrigerated, FIXED_TODAY, category=category) > FIXED_TODAY


def test_refrigeration_extends_shelf_life():
    """Test refrigerated storage lasts longer than room temperature for every entry."""
    for category, shelf_life in SHELF_LIFE_DAYS.items():
        assert shelf_life.refrigerated_days > shelf_life.room_temp_days >= 1, category
    assert DEFAULT_SHELF_LIFE.refrigerated_days > DEFAULT_SHELF_LIFE.room_temp_days >= 1


def test_other_category_uses_default():
    """Test OTHER falls back to the default shelf life."""
    assert shelf_life_days(FoodCategory.OTHER, True) == DEFAULT_SHELF_LIFE.refrigerated_days
    assert shelf_life_days(FoodCategory.OTHER, False) == DEFAULT_SHELF_LIFE.room_temp_days


def test_predict_milk():
    """Test milk uses its fresh-food rule rather than the dairy category."""
    assert predict("Milk", True, FIXED_TODAY) == FIXED_TODAY + timedelta(days=6)
    assert predict("Milk", False, FIXED_TODAY) == FIXED_TODAY + timedelta(days=1)


def test_predict_unknown_item():
    """Test unrecognised items get a short default estimate."""
    assert predict("Mystery Box", True, FIXED_TODAY) == FIXED_TODAY + timedelta(
        days=DEFAULT_SHELF_LIFE.refrigerated_days
    )


def test_predict_accepts_datetime():
    """Test a datetime reference is reduced to its date."""
    now = datetime(2025, 3, 10, 23, 59)
    assert predict("Milk", True, now) == FIXED_TODAY + timedelta(days=6)


def test_days_until_expiration():
    """Test day arithmetic in both directions."""
    assert days_until_expiration(FIXED_TODAY + timedelta(days=4), FIXED_TODAY) == 4
    assert days_until_expiration(FIXED_TODAY - timedelta(days=2), FIXED_TODAY) == -2


@pytest.mark.parametrize(
    "offset, expected",
    [
        (-1, ExpirationStatus.EXPIRED),
        (0, ExpirationStatus.NEAR_EXPIRY),
        (3, ExpirationStatus.NEAR_EXPIRY),
        (4, ExpirationStatus.FRESH),
    ],
)
def test_expiration_status(offset, expected):
    """Test status thresholds around the near-expiry window."""
    assert expiration_status(FIXED_TODAY + timedelta(days=offset), FIXED_TODAY) == expected


def test_predictor_uses_injected_clock(fixed_clock):
    """Test ExpirationPredictor reads today from its clock."""
    predictor = ExpirationPredictor(clock=fixed_clock)

    assert predictor.today() == FIXED_TODAY
    assert predictor.predict("Salmon") == FIXED_TODAY + timedelta(days=2)
    assert predictor.predict("Salmon", refrigerated=False) == FIXED_TODAY + timedelta(days=1)
    assert predictor.status(FIXED_TODAY - timedelta(days=1)) == ExpirationStatus.EXPIRED


@pytest.mark.parametrize("rule", FRESH_FOOD_RULES, ids=lambda rule: rule.label)
def test_fresh_food_rules_keep_refrigeration_longer(rule):
    """Test every fresh-food rule lasts at least a day and longer in the fridge."""
    shelf_life = rule.shelf_life
    assert shelf_life.refrigerated_days > shelf_life.room_temp_days >= 1
    assert rule.min_days <= shelf_life.refrigerated_days <= max(rule.max_days, 2)


@pytest.mark.parametrize(
    "name, refrigerated_days",
    [
        ("Chicken Breast", 2),
        ("Salmon Fillet", 2),
        ("Large Eggs", 35),
        ("Bananas", 5),
        ("Baby Spinach", 5),
        ("Cheddar Block", 21),
    ],
)
def test_fresh_food_rules_take_precedence(name, refrigerated_days):
    """Test item-level rules override the category estimate."""
    assert predict(name, True, FIXED_TODAY) == FIXED_TODAY + timedelta(days=refrigerated_days)


def test_room_temperature_is_clamped_below_refrigerated():
    """Test pantry staples that keep well at room temperature still keep longer chilled."""
    onions = item_shelf_life("Yellow Onions")
    assert onions.refrigerated_days == 45
    assert onions.room_temp_days == 44
    assert item_shelf_life("Bananas").room_temp_days == 4


def test_processed_forms_use_the_category():
    """Test canned, dried and similar forms skip the fresh-food rules."""
    assert match_fresh_food("Canned Peaches") is None
    assert item_shelf_life("Canned Peaches") == SHELF_LIFE_DAYS[FoodCategory.FRUITS]
    assert match_fresh_food("Chicken Soup") is None
    assert match_fresh_food("Tomato Paste") is None


def test_explicit_category_is_the_fallback():
    """Test a given category is used only when no fresh-food rule matches."""
    assert item_shelf_life("Mystery Box", FoodCategory.GRAINS) == SHELF_LIFE_DAYS[
        FoodCategory.GRAINS
    ]
    assert item_shelf_life("Milk", FoodCategory.GRAINS).refrigerated_days == 6


@pytest.mark.parametrize(
    "name, label",
    [
        ("Green Onions", "green onions"),
        ("Red Onion", "onions"),
        ("Eggplant", "eggplant"),
        ("Free Range Eggs", "eggs"),
        ("Ground Turkey", "ground meat"),
        ("Sweet Potatoes", "potatoes"),
    ],
)
def test_match_fresh_food_picks_the_specific_rule(name, label):
    """Test earlier, more specific rules win and words are matched whole."""
    assert match_fresh_food(name).label == label


def test_shelf_life_range():
    """Test the documented refrigerated range is reported for known fresh food."""
    assert shelf_life_range("Milk") == (5, 7)
    assert shelf_life_range("Strawberries") == (3, 7)
    assert shelf_life_range("Rice") is None


def test_storage_tips():
    """Test storage advice for fresh food and the packaged default."""
    assert storage_tips("Chicken Thighs") == "Keep refrigerated at 40°F (4°C) or below"
    assert "crisper" in storage_tips("Broccoli")
    assert storage_tips("Pasta") == DEFAULT_STORAGE_TIP
    assert storage_tips("") == DEFAULT_STORAGE_TIP


@pytest.mark.parametrize(
    "name, fresh",
    [
        ("Apples", True),
        ("Salmon", True),
        ("Greek Yogurt", True),
        ("Canned Tuna", False),
        ("Orange Juice", False),
        ("Spaghetti", False),
        ("", False),
    ],
)
def test_is_fresh_food(name, fresh):
    """Test perishables are recognised and processed forms are not."""
    assert is_fresh_food(name) is fresh
