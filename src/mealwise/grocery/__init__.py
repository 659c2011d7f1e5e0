"""Ingredient extraction, categorization and aggregation for shopping lists."""

from mealwise.grocery.aggregator import aggregate_ingredients, normalize_key
from mealwise.grocery.categorizer import categorize
from mealwise.grocery.extractor import (
    HeuristicIngredientExtractor,
    LLMIngredientExtractor,
    default_strategies,
    extract_ingredients,
    parse_ingredient_line,
)

__all__ = [
    "HeuristicIngredientExtractor",
    "LLMIngredientExtractor",
    "aggregate_ingredients",
    "categorize",
    "default_strategies",
    "extract_ingredients",
    "normalize_key",
    "parse_ingredient_line",
]
