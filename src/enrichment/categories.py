"""
Keyword-rule food categorization.

Rules are checked in table order and the first matching rule wins, so the
table is ordered from most specific (high priority) to most general. Many
names hit several rules ("chicken soup" is both meat and canned goods);
the order decides.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern, Tuple

from common.models import FoodCategory


@dataclass(frozen=True)
class CategoryRule:
    category: FoodCategory
    priority: int
    keywords: Tuple[str, ...]


CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        FoodCategory.DAIRY,
        10,
        (
            "milk", "cheese", "butter", "cream", "yogurt", "yoghurt",
            "cheddar", "mozzarella", "parmesan", "brie", "gouda", "feta",
            "cottage cheese", "cream cheese", "sour cream", "whipped cream",
            "ice cream", "gelato", "custard", "pudding",
            "kefir", "buttermilk", "half and half", "heavy cream",
            "ricotta", "mascarpone", "swiss cheese", "provolone",
        ),
    ),
    CategoryRule(
        FoodCategory.MEAT,
        10,
        (
            "beef", "steak", "pork", "lamb", "veal", "bacon", "ham",
            "sausage", "hot dog", "salami", "pepperoni", "prosciutto",
            "ground beef", "ground pork", "meatball", "burger", "patty",
            "ribs", "brisket", "roast", "chop", "cutlet", "tenderloin",
            "sirloin", "ribeye", "filet", "meat", "venison", "duck",
        ),
    ),
    CategoryRule(
        FoodCategory.SEAFOOD,
        10,
        (
            "fish", "salmon", "tuna", "cod", "tilapia", "halibut", "trout",
            "shrimp", "prawn", "crab", "lobster", "clam", "mussel", "oyster",
            "scallop", "squid", "octopus", "calamari", "anchovy", "sardine",
            "mackerel", "herring", "catfish", "bass", "snapper", "swordfish",
            "seafood", "shellfish", "caviar", "roe",
        ),
    ),
    # Poultry is stored as meat but ranks below red meat and seafood
    CategoryRule(
        FoodCategory.MEAT,
        9,
        (
            "chicken", "turkey", "poultry", "wings", "drumstick", "breast",
            "thigh", "chicken breast", "turkey breast", "ground chicken",
            "ground turkey", "rotisserie", "roasted chicken",
        ),
    ),
    CategoryRule(
        FoodCategory.FRUITS,
        8,
        (
            "apple", "banana", "orange", "grape", "strawberry", "blueberry",
            "raspberry", "blackberry", "cherry", "peach", "pear", "plum",
            "watermelon", "melon", "cantaloupe", "honeydew", "mango", "pineapple",
            "kiwi", "papaya", "lemon", "lime", "grapefruit", "tangerine",
            "apricot", "nectarine", "pomegranate", "fig", "date", "persimmon",
            "berries", "citrus", "fruit", "avocado", "coconut", "passion fruit",
        ),
    ),
    CategoryRule(
        FoodCategory.VEGETABLES,
        8,
        (
            "lettuce", "spinach", "kale", "arugula", "cabbage", "broccoli",
            "cauliflower", "carrot", "celery", "cucumber", "tomato", "pepper",
            "bell pepper", "chili", "jalapeño", "onion", "garlic", "shallot",
            "leek", "scallion", "green onion", "potato", "sweet potato", "yam",
            "corn", "peas", "beans", "green beans", "asparagus", "zucchini",
            "squash", "eggplant", "mushroom", "radish", "beet", "turnip",
            "parsnip", "rutabaga", "artichoke", "brussels sprouts", "chard",
            "collard greens", "bok choy", "ginger", "vegetable", "veggie",
        ),
    ),
    CategoryRule(
        FoodCategory.GRAINS,
        7,
        (
            "bread", "rice", "pasta", "noodle", "cereal", "oats", "oatmeal",
            "quinoa", "couscous", "barley", "wheat", "flour", "cornmeal",
            "bagel", "muffin", "croissant", "baguette", "roll", "bun",
            "tortilla", "pita", "wrap", "cracker", "grain", "granola",
            "ramen", "spaghetti", "macaroni", "fettuccine", "linguine",
        ),
    ),
    CategoryRule(
        FoodCategory.BAKERY,
        7,
        (
            "cake", "cookie", "brownie", "pie", "tart", "pastry", "donut",
            "danish", "scone", "biscuit", "waffle", "pancake", "cupcake",
            "bread loaf", "sourdough", "ciabatta", "focaccia",
        ),
    ),
    CategoryRule(
        FoodCategory.BEVERAGES,
        7,
        (
            "juice", "soda", "cola", "pepsi", "sprite", "fanta", "water",
            "tea", "coffee", "latte", "cappuccino", "espresso", "beer",
            "wine", "champagne", "cocktail", "smoothie", "shake", "drink",
            "beverage", "lemonade", "iced tea", "energy drink", "sports drink",
            "coconut water", "almond milk", "soy milk", "oat milk",
        ),
    ),
    CategoryRule(
        FoodCategory.CONDIMENTS,
        6,
        (
            "ketchup", "mustard", "mayonnaise", "mayo", "relish", "pickle",
            "sauce", "salsa", "dressing", "vinegar", "oil", "olive oil",
            "soy sauce", "hot sauce", "bbq sauce", "teriyaki", "worcestershire",
            "honey", "jam", "jelly", "marmalade", "syrup", "maple syrup",
            "peanut butter", "almond butter", "nutella", "spread", "dip",
            "hummus", "guacamole", "salad dressing", "ranch", "caesar",
        ),
    ),
    CategoryRule(
        FoodCategory.SNACKS,
        6,
        (
            "chips", "crisps", "popcorn", "pretzels", "crackers", "nuts",
            "almonds", "cashews", "peanuts", "walnuts", "trail mix",
            "candy", "chocolate", "gummy", "lollipop", "caramel",
            "snack", "bar", "granola bar", "protein bar", "energy bar",
            "oreo", "cookie", "biscuit", "wafer",
        ),
    ),
    CategoryRule(
        FoodCategory.FROZEN,
        5,
        (
            "frozen", "ice", "popsicle", "frozen dinner", "tv dinner",
            "frozen pizza", "frozen vegetables", "frozen fruit",
        ),
    ),
    CategoryRule(
        FoodCategory.CANNED_GOODS,
        5,
        (
            "canned", "can", "soup", "broth", "stock", "beans",
            "chickpeas", "lentils", "tomato sauce", "tomato paste",
            "canned tuna", "canned salmon", "canned corn", "canned peas",
        ),
    ),
    CategoryRule(
        FoodCategory.SPICES,
        4,
        (
            "salt", "pepper", "spice", "herb", "basil", "oregano", "thyme",
            "rosemary", "sage", "parsley", "cilantro", "dill", "mint",
            "cinnamon", "cumin", "paprika", "turmeric", "curry", "chili powder",
            "garlic powder", "onion powder", "ginger powder", "nutmeg",
            "cloves", "cardamom", "coriander", "fennel", "bay leaf",
        ),
    ),
)


def keyword_pattern(keyword: str) -> Pattern[str]:
    """Whole-word match for a keyword and its simple plurals."""
    forms = [re.escape(keyword) + "(?:es|s)?"]
    if keyword.endswith("y"):
        forms.append(re.escape(keyword[:-1]) + "ies")
    return re.compile(r"\b(?:" + "|".join(forms) + r")\b")


_COMPILED_RULES: Tuple[Tuple[CategoryRule, Tuple[Pattern[str], ...]], ...] = tuple(
    (rule, tuple(keyword_pattern(k) for k in rule.keywords)) for rule in CATEGORY_RULES
)


_PUNCTUATION = re.compile(r"[^\w\s']|_")
_LETTER_DIGIT = re.compile(r"(?<=[^\W\d_])(?=\d)|(?<=\d)(?=[^\W\d_])")


def normalize_name(item_name: str) -> str:
    """Lowercase, split digits and punctuation off words ("milk2%" -> "milk 2"), collapse spaces."""
    name = _PUNCTUATION.sub(" ", (item_name or "").lower())
    name = _LETTER_DIGIT.sub(" ", name)
    return " ".join(name.split())


def classify(item_name: str) -> FoodCategory:
    """Return the category of the first rule with a keyword in the name, else OTHER."""
    name = normalize_name(item_name)
    if not name:
        return FoodCategory.OTHER
    for rule, patterns in _COMPILED_RULES:
        if any(p.search(name) for p in patterns):
            return rule.category
    return FoodCategory.OTHER


def category_suggestions(item_name: str, limit: int = 3) -> List[Tuple[FoodCategory, int]]:
    """
    Rank candidate categories for a name.

    Confidence is min(100, matches * 20 + priority * 5); each category is
    reported once with its best-scoring rule.
    """
    name = normalize_name(item_name)
    if not name:
        return []

    best: dict = {}
    for rule, patterns in _COMPILED_RULES:
        matches = sum(1 for p in patterns if p.search(name))
        if not matches:
            continue
        confidence = min(100, matches * 20 + rule.priority * 5)
        if confidence > best.get(rule.category, -1):
            best[rule.category] = confidence

    ranked = sorted(best.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[:limit]
