"""Dependency definitions for the Mealwise API server."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, List, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from mealwise.config import Settings, get_settings
from mealwise.db.plans import delete_plan, list_plans, list_usage_history, upsert_plan
from mealwise.db.recipes import create_recipe, list_recipes, mark_recipes_used
from mealwise.grocery.builder import create_list_from_plans
from mealwise.models.plan import PlanEntry
from mealwise.models.recipe import CandidateRecipe, UsageRecord
from mealwise.models.shopping import ShoppingList
from mealwise.planner.app.planner import generate_week_suggestions, get_alternative_suggestion

RecipeProvider = Callable[[str], List[CandidateRecipe]]
RecipeCreator = Callable[[str, dict], CandidateRecipe]
HistoryProvider = Callable[[str], List[UsageRecord]]
WeekSuggester = Callable[..., list]
AlternativeSuggester = Callable[..., Optional[CandidateRecipe]]
PlanSaver = Callable[..., PlanEntry]
PlanRemover = Callable[[str, date], bool]
PlanProvider = Callable[[str, Optional[date], Optional[date]], List[PlanEntry]]
UsageMarker = Callable[[str, list], int]
ShoppingListBuilder = Callable[[str, date, int, Optional[str]], ShoppingList]


def get_owner_id(
    x_owner_id: Optional[str] = Header(default=None, alias="X-Owner-ID"),
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the household owner from the request, falling back to the configured default."""

    owner = (x_owner_id or "").strip()
    return owner or settings.default_owner


def get_recipe_provider() -> RecipeProvider:
    return lambda owner_id: list_recipes(owner_id)


def get_recipe_creator() -> RecipeCreator:
    return lambda owner_id, payload: create_recipe(owner_id, **payload)


def get_history_provider() -> HistoryProvider:
    settings = get_settings()

    def _provider(owner_id: str) -> List[UsageRecord]:
        since = date.today() - timedelta(days=settings.suggestion_history_days)
        return list_usage_history(owner_id, since=since)

    return _provider


def get_week_suggester() -> WeekSuggester:
    return generate_week_suggestions


def get_alternative_suggester() -> AlternativeSuggester:
    return get_alternative_suggestion


def get_plan_saver() -> PlanSaver:
    return lambda owner_id, plan_date, recipe_id, label, is_confirmed=True: upsert_plan(
        owner_id,
        plan_date,
        recipe_id=recipe_id,
        label=label,
        is_confirmed=is_confirmed,
    )


def get_plan_remover() -> PlanRemover:
    return delete_plan


def get_plan_provider() -> PlanProvider:
    return lambda owner_id, start, end: list_plans(owner_id, start=start, end=end)


def get_usage_marker() -> UsageMarker:
    return mark_recipes_used


def get_shopping_list_builder() -> ShoppingListBuilder:
    return lambda owner_id, start_date, days, name=None: create_list_from_plans(
        owner_id,
        start_date,
        days,
        name=name,
    )


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
