"""Turn planned recipes into persisted shopping lists."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from mealwise.db.plans import list_plans
from mealwise.db.recipes import get_recipes
from mealwise.db.shopping_lists import create_list
from mealwise.models.recipe import CandidateRecipe
from mealwise.models.shopping import AggregatedItem, ShoppingList, ShoppingListItem

from .aggregator import aggregate_ingredients
from .extractor import IngredientExtractor, default_strategies, extract_ingredients

logger = logging.getLogger(__name__)


def default_list_name(days: int) -> str:
    return f"Next {days} Dinners"


def build_shopping_items(
    recipes: Sequence[CandidateRecipe],
    strategies: Optional[Iterable[IngredientExtractor]] = None,
) -> List[AggregatedItem]:
    """Extract every recipe's ingredients and merge them into aggregated entries."""

    chain = list(strategies) if strategies is not None else default_strategies()
    lines = extract_ingredients(recipes, chain)
    return aggregate_ingredients(lines)


def _to_list_item(item: AggregatedItem) -> ShoppingListItem:
    return ShoppingListItem(
        name=item.name,
        quantity=item.quantity,
        category=item.category,
        recipe_ids=list(item.recipe_ids),
        recipe_names=list(item.recipe_names),
        original_texts=list(item.original_texts),
        is_checked=False,
    )


def create_list_from_plans(
    owner_id: str,
    start_date: date,
    days: int,
    *,
    name: Optional[str] = None,
    strategies: Optional[Iterable[IngredientExtractor]] = None,
) -> ShoppingList:
    """Build and store a list covering the recipes planned for ``days`` dates from ``start_date``.

    Each recipe contributes once, however many dates it was planned on. Dates without a recipe
    (skipped or labelled) contribute nothing; an empty range still produces an empty list.
    """

    if days < 1:
        raise ValueError("days must be at least 1")
    end_date = start_date + timedelta(days=days - 1)

    planned_ids = [
        entry.recipe_id
        for entry in list_plans(owner_id, start=start_date, end=end_date)
        if entry.recipe_id is not None
    ]
    recipes = get_recipes(owner_id, planned_ids)

    items = build_shopping_items(recipes, strategies)
    shopping_list = create_list(
        owner_id,
        name=name or default_list_name(days),
        items=[_to_list_item(item) for item in items],
        start_date=start_date,
        end_date=end_date,
    )
    logger.info(
        "Created shopping list %s with %s item(s) from %s recipe(s) (%s to %s)",
        shopping_list.id,
        len(shopping_list.items),
        len(recipes),
        start_date,
        end_date,
    )
    return shopping_list


__all__ = ["build_shopping_items", "create_list_from_plans", "default_list_name"]
