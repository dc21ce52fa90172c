"""
Shelf-life estimation.

Fresh food is looked up item by item in FRESH_FOOD_RULES; everything else
(and preserved fresh food such as "canned tuna") falls back to the
per-category SHELF_LIFE_DAYS table.

All functions take the reference date explicitly; ExpirationPredictor wraps
them around an injected clock.
"""

import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Pattern, Tuple, Union

from common.models import FoodCategory
from enrichment.categories import classify, keyword_pattern, normalize_name

DateLike = Union[date, datetime]


class ShelfLife(NamedTuple):
    refrigerated_days: int
    room_temp_days: int

    def days(self, refrigerated: bool) -> int:
        return self.refrigerated_days if refrigerated else self.room_temp_days


# Refrigerated storage is always strictly longer than room temperature,
# and every duration is at least one day.
SHELF_LIFE_DAYS: Dict[FoodCategory, ShelfLife] = {
    FoodCategory.DAIRY: ShelfLife(7, 1),
    FoodCategory.MEAT: ShelfLife(3, 1),
    FoodCategory.SEAFOOD: ShelfLife(2, 1),
    FoodCategory.FRUITS: ShelfLife(10, 5),
    FoodCategory.VEGETABLES: ShelfLife(7, 3),
    FoodCategory.GRAINS: ShelfLife(180, 120),
    FoodCategory.BAKERY: ShelfLife(7, 3),
    FoodCategory.BEVERAGES: ShelfLife(30, 14),
    FoodCategory.CONDIMENTS: ShelfLife(180, 90),
    FoodCategory.SNACKS: ShelfLife(120, 90),
    FoodCategory.FROZEN: ShelfLife(90, 1),
    FoodCategory.CANNED_GOODS: ShelfLife(730, 540),
    FoodCategory.SPICES: ShelfLife(400, 365),
}

# Unknown items get a short estimate so the user reviews them early.
DEFAULT_SHELF_LIFE = ShelfLife(5, 2)

NEAR_EXPIRY_DAYS = 3


class FreshFoodRule(NamedTuple):
    """Item-level shelf life for fresh food, checked before the category table."""

    label: str
    keywords: Tuple[str, ...]
    min_days: int
    max_days: int
    room_temp_days: int
    storage: str

    @property
    def shelf_life(self) -> ShelfLife:
        # Refrigerated is the rounded mid-range; room temperature stays in [1, refrigerated)
        refrigerated = max(2, int((self.min_days + self.max_days) / 2 + 0.5))
        return ShelfLife(refrigerated, min(max(1, self.room_temp_days), refrigerated - 1))


_KEEP_COLD = "Keep refrigerated at 40°F (4°C) or below"
_CRISPER = "Refrigerate in crisper drawer"
_RIPEN_THEN_CHILL = "Ripen at room temperature, then refrigerate"
_COOL_DARK = "Store in cool, dark, well-ventilated place"

# Processed forms keep their category shelf life ("canned tuna", "chicken soup")
_PRESERVED_MARKERS = re.compile(
    r"\b(?:canned|tinned|frozen|dried|powder|juice|sauce|paste|soup|broth|chips)\b"
)

# (label, keywords, min_days, max_days, room_temp_days, storage); earlier rules win
FRESH_FOOD_RULES: Tuple[FreshFoodRule, ...] = tuple(
    FreshFoodRule(*row)
    for row in (
        ("ground meat", ("ground chicken", "ground turkey", "ground pork", "minced meat"),
         1, 2, 0, _KEEP_COLD),
        ("fresh meat", ("beef", "steak", "ground beef", "pork", "lamb", "veal", "meat"),
         2, 5, 0, _KEEP_COLD),
        ("poultry", ("chicken", "turkey", "duck", "poultry"), 1, 3, 0, _KEEP_COLD),
        ("seafood", ("fish", "salmon", "tuna", "cod", "shrimp", "prawn", "crab", "lobster",
                     "seafood", "shellfish"),
         1, 2, 0, _KEEP_COLD),
        ("eggs", ("egg",), 28, 42, 21, "Store in refrigerator for best quality"),
        ("fresh milk", ("milk", "fresh milk", "whole milk", "skim milk"), 5, 7, 0, _KEEP_COLD),
        ("soft cheese", ("mozzarella", "ricotta", "cottage cheese", "cream cheese", "soft cheese"),
         5, 10, 0, _KEEP_COLD),
        ("hard cheese", ("cheddar", "parmesan", "swiss", "gouda", "hard cheese"),
         14, 28, 0, _KEEP_COLD),
        ("berries", ("strawberry", "blueberry", "raspberry", "blackberry", "berries"),
         3, 7, 1, "Refrigerate unwashed in original container"),
        ("citrus", ("orange", "lemon", "lime", "grapefruit", "citrus"),
         14, 28, 7, "Store at room temperature or refrigerate for longer life"),
        ("apples", ("apple",), 30, 60, 7, "Refrigerate for best quality"),
        ("bananas", ("banana",), 3, 7, 5, "Store at room temperature until ripe, then refrigerate"),
        ("stone fruits", ("peach", "plum", "nectarine", "apricot"), 3, 7, 3, _RIPEN_THEN_CHILL),
        ("grapes", ("grape",), 5, 10, 3, "Refrigerate unwashed in original bag"),
        ("melons", ("watermelon", "cantaloupe", "honeydew", "melon"),
         5, 10, 3, "Store whole at room temperature, refrigerate after cutting"),
        ("tropical fruits", ("mango", "pineapple", "papaya", "kiwi"), 5, 10, 3, _RIPEN_THEN_CHILL),
        ("leafy greens", ("lettuce", "spinach", "kale", "arugula", "salad", "greens", "chard",
                          "collard greens"),
         3, 7, 1, "Refrigerate in crisper drawer, keep slightly moist"),
        ("broccoli and cauliflower", ("broccoli", "cauliflower"), 5, 10, 2, _CRISPER),
        ("carrots", ("carrot",), 14, 28, 7, "Refrigerate in crisper drawer, remove greens"),
        ("tomatoes", ("tomato",),
         5, 10, 5, "Store at room temperature until ripe, then refrigerate"),
        ("peppers", ("pepper", "bell pepper", "capsicum", "chili", "jalapeño"),
         7, 14, 3, _CRISPER),
        ("cucumbers", ("cucumber",), 5, 10, 3, _CRISPER),
        ("mushrooms", ("mushroom", "portobello", "shiitake"),
         5, 10, 1, "Refrigerate in paper bag, not plastic"),
        ("potatoes", ("potato", "sweet potato", "yam"),
         30, 60, 45, "Store in cool, dark, well-ventilated place (50-60°F)"),
        ("green onions", ("green onion", "scallion", "spring onion"),
         5, 10, 2, "Refrigerate in plastic bag or stand in water"),
        ("onions", ("onion", "vidalia"),
         30, 60, 45, "Store in cool, dark, well-ventilated place (45-55°F). "
         "Keep away from potatoes."),
        ("garlic", ("garlic",),
         60, 120, 90, "Store in cool, dark, well-ventilated place (60-65°F). Do not refrigerate."),
        ("shallots", ("shallot",), 21, 45, 30, _COOL_DARK),
        ("ginger", ("ginger", "ginger root"),
         14, 28, 7, "Refrigerate in crisper drawer or freeze for longer storage"),
        ("celery", ("celery",), 10, 21, 3, "Refrigerate in crisper drawer, wrap in foil"),
        ("asparagus", ("asparagus",),
         3, 7, 1, "Refrigerate standing in water or wrapped in damp towel"),
        ("zucchini and squash", ("zucchini", "squash"), 5, 10, 3, _CRISPER),
        ("eggplant", ("eggplant", "aubergine"),
         5, 10, 3, "Store at room temperature or refrigerate"),
        ("cabbage", ("cabbage",), 10, 21, 5, _CRISPER),
        ("beets", ("beet", "beetroot"), 10, 21, 5, "Refrigerate in crisper drawer, remove greens"),
        ("radishes", ("radish",), 7, 14, 3, "Refrigerate in crisper drawer, remove greens"),
        ("corn", ("corn", "sweet corn", "corn on the cob"),
         2, 5, 1, "Refrigerate in husk for best quality"),
        ("green beans", ("green beans", "string beans", "snap beans"), 5, 10, 2, _CRISPER),
        ("peas", ("peas", "green peas", "snap peas", "snow peas"), 3, 7, 1, _CRISPER),
        ("fresh herbs", ("basil", "cilantro", "parsley", "mint", "dill", "thyme", "rosemary",
                         "oregano", "sage", "herbs"),
         5, 10, 2, "Refrigerate in damp paper towel or stand in water"),
    )
)

_COMPILED_FRESH_RULES: Tuple[Tuple[FreshFoodRule, Tuple[Pattern[str], ...]], ...] = tuple(
    (rule, tuple(keyword_pattern(k) for k in rule.keywords)) for rule in FRESH_FOOD_RULES
)

DEFAULT_STORAGE_TIP = "Store according to package instructions"

_FRESH_CATEGORIES = frozenset(
    {
        FoodCategory.MEAT,
        FoodCategory.SEAFOOD,
        FoodCategory.DAIRY,
        FoodCategory.FRUITS,
        FoodCategory.VEGETABLES,
    }
)


class ExpirationStatus(str, Enum):
    FRESH = "fresh"
    NEAR_EXPIRY = "near_expiry"
    EXPIRED = "expired"


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def shelf_life_days(category: FoodCategory, refrigerated: bool = True) -> int:
    """Estimated shelf life in days for a category and storage condition."""
    return SHELF_LIFE_DAYS.get(category, DEFAULT_SHELF_LIFE).days(refrigerated)


def predict(
    item_name: str,
    refrigerated: bool,
    now: DateLike,
    category: Optional[FoodCategory] = None,
) -> date:
    """Predict the expiration date of an item bought on ``now``."""
    days = item_shelf_life(item_name, category).days(refrigerated)
    return _as_date(now) + timedelta(days=days)


def match_fresh_food(item_name: str) -> Optional[FreshFoodRule]:
    """First fresh-food rule with a keyword in the name, if any."""
    name = normalize_name(item_name)
    if not name or _PRESERVED_MARKERS.search(name):
        return None
    for rule, patterns in _COMPILED_FRESH_RULES:
        if any(p.search(name) for p in patterns):
            return rule
    return None


def item_shelf_life(item_name: str, category: Optional[FoodCategory] = None) -> ShelfLife:
    """Shelf life from the fresh-food rules, falling back to the category table."""
    rule = match_fresh_food(item_name)
    if rule is not None:
        return rule.shelf_life
    if category is None:
        category = classify(item_name)
    return SHELF_LIFE_DAYS.get(category, DEFAULT_SHELF_LIFE)


def shelf_life_range(item_name: str) -> Optional[Tuple[int, int]]:
    """(min, max) refrigerated days for known fresh food, else None."""
    rule = match_fresh_food(item_name)
    return (rule.min_days, rule.max_days) if rule is not None else None


def storage_tips(item_name: str) -> str:
    rule = match_fresh_food(item_name)
    return rule.storage if rule is not None else DEFAULT_STORAGE_TIP


def is_fresh_food(item_name: str, category: Optional[FoodCategory] = None) -> bool:
    """Whether the item is perishable fresh food without a printed date."""
    if _PRESERVED_MARKERS.search(normalize_name(item_name)):
        return False
    if match_fresh_food(item_name) is not None:
        return True
    if category is None:
        category = classify(item_name)
    return category in _FRESH_CATEGORIES


def days_until_expiration(expiration_date: DateLike, today: DateLike) -> int:
    return (_as_date(expiration_date) - _as_date(today)).days


def expiration_status(expiration_date: DateLike, today: DateLike) -> ExpirationStatus:
    """FRESH, NEAR_EXPIRY (0-3 days left) or EXPIRED (past the date)."""
    days = days_until_expiration(expiration_date, today)
    if days < 0:
        return ExpirationStatus.EXPIRED
    if days <= NEAR_EXPIRY_DAYS:
        return ExpirationStatus.NEAR_EXPIRY
    return ExpirationStatus.FRESH


class ExpirationPredictor:
    """Expiration predictor bound to a clock."""

    def __init__(self, clock: Optional[Callable[[], DateLike]] = None):
        self._clock = clock or date.today

    def today(self) -> date:
        return _as_date(self._clock())

    def predict(self, item_name: str, refrigerated: bool = True) -> date:
        return predict(item_name, refrigerated, self.today())

    def status(self, expiration_date: DateLike) -> ExpirationStatus:
        return expiration_status(expiration_date, self.today())
