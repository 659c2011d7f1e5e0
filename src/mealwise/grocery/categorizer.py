"""Keyword-based grocery category lookup."""

from __future__ import annotations

from typing import Tuple

from mealwise.models.shopping import Category

PRODUCE_KEYWORDS = (
    "onion", "garlic", "tomato", "pepper", "lettuce", "carrot", "potato", "celery",
    "broccoli", "spinach", "mushroom", "zucchini", "cucumber", "avocado", "lemon", "lime",
    "apple", "banana", "berry", "cilantro", "parsley", "basil", "ginger", "jalape", "corn",
    "bean sprout", "cabbage", "kale", "arugula", "scallion", "shallot", "squash", "pea",
)

MEAT_SEAFOOD_KEYWORDS = (
    "chicken", "beef", "pork", "turkey", "bacon", "sausage", "ham", "steak",
    "ground", "salmon", "shrimp", "fish", "tuna", "lamb", "crab", "lobster", "meat",
)

DAIRY_EGGS_KEYWORDS = (
    "milk", "cheese", "butter", "cream", "yogurt", "egg", "sour cream",
    "mozzarella", "parmesan", "cheddar", "ricotta", "whipping cream",
)

BAKERY_KEYWORDS = ("bread", "roll", "tortilla", "bun", "pita", "naan", "baguette", "croissant")

FROZEN_KEYWORDS = ("frozen",)

# Checked in order; first hit wins.
CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.PRODUCE, PRODUCE_KEYWORDS),
    (Category.MEAT_SEAFOOD, MEAT_SEAFOOD_KEYWORDS),
    (Category.DAIRY_EGGS, DAIRY_EGGS_KEYWORDS),
    (Category.BAKERY, BAKERY_KEYWORDS),
    (Category.FROZEN, FROZEN_KEYWORDS),
)

DEFAULT_CATEGORY = Category.PANTRY


def categorize(name: str) -> Category:
    """Return the store section for an ingredient name.

    Keywords are matched as substrings of the lower-cased name, so "chicken breast" hits
    "chicken" and "frozen peas" hits the produce keyword "pea" before "frozen". Names that
    match nothing are treated as pantry staples.
    """
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


__all__ = ["CATEGORY_KEYWORDS", "DEFAULT_CATEGORY", "categorize"]
