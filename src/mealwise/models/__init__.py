"""Pydantic models defining shared data contracts."""

from mealwise.models.plan import PlanEntry
from mealwise.models.recipe import CandidateRecipe, Complexity, UsageRecord
from mealwise.models.shopping import (
    AggregatedItem,
    Category,
    ParsedIngredientLine,
    ShoppingList,
    ShoppingListItem,
    Staple,
)
from mealwise.models.suggestion import DAY_NAMES, SKIPPED_LABEL, ConstraintSpec, DaySuggestion

__all__ = [
    "AggregatedItem",
    "CandidateRecipe",
    "Category",
    "Complexity",
    "ConstraintSpec",
    "DAY_NAMES",
    "DaySuggestion",
    "ParsedIngredientLine",
    "PlanEntry",
    "SKIPPED_LABEL",
    "ShoppingList",
    "ShoppingListItem",
    "Staple",
    "UsageRecord",
]
