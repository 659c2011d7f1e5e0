"""Keyword categorizer tests."""

from __future__ import annotations

import pytest

from mealwise.grocery.categorizer import CATEGORY_KEYWORDS, categorize
from mealwise.models.shopping import Category


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("chicken breast", Category.MEAT_SEAFOOD),
        ("cheddar cheese", Category.DAIRY_EGGS),
        ("olive oil", Category.PANTRY),
        ("Yellow ONION", Category.PRODUCE),
        ("ground beef", Category.MEAT_SEAFOOD),
        ("sourdough bread", Category.BAKERY),
        ("frozen dumplings", Category.FROZEN),
        ("frozen peas", Category.PRODUCE),
        ("basmati rice", Category.PANTRY),
    ],
)
def test_categorize_examples(name, expected):
    assert categorize(name) == expected


def test_category_priority_order():
    assert [category for category, _ in CATEGORY_KEYWORDS] == [
        Category.PRODUCE,
        Category.MEAT_SEAFOOD,
        Category.DAIRY_EGGS,
        Category.BAKERY,
        Category.FROZEN,
    ]
    # Produce is checked before dairy.
    assert categorize("garlic butter") == Category.PRODUCE


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("meat & seafood", Category.MEAT_SEAFOOD),
        (" Bakery ", Category.BAKERY),
        ("Spices", Category.OTHER),
        (None, Category.OTHER),
        (Category.FROZEN, Category.FROZEN),
    ],
)
def test_category_coerce(value, expected):
    assert Category.coerce(value) == expected
