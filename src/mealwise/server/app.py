"""ASGI application for Mealwise."""
# mypy: ignore-errors

from __future__ import annotations

import logging
import re
from datetime import date
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from mealwise import __version__, metrics
from mealwise.config import Settings, get_settings
from mealwise.db import shopping_lists as shopping_store
from mealwise.db import staples as staples_store
from mealwise.db.recipes import get_recipe, list_recipes
from mealwise.errors import InvalidInputError
from mealwise.logging_utils import configure_logging as configure_app_logging
from mealwise.models.plan import PlanEntry
from mealwise.models.recipe import CandidateRecipe, Complexity
from mealwise.models.shopping import Category, ListStatus, ShoppingList, Staple
from mealwise.models.suggestion import ConstraintSpec, DaySuggestion
from mealwise.server import deps

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.llm_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def _parse_plan_date(value: str) -> Optional[date]:
    if not _ISO_DATE_RE.match(value or ""):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Mealwise Dinner Planner", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    access_logger = logging.getLogger("mealwise.access")

    @application.middleware("http")
    async def log_request_response(request: Request, call_next):
        """Tag each request with an id, log it and record request metrics."""

        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = perf_counter()
        method = request.method
        path = request.url.path
        try:
            response: Response = await call_next(request)
        except Exception:
            duration_ms = (perf_counter() - start) * 1000
            access_logger.exception(
                "HTTP %s %s status=500 duration_ms=%.2f",
                method,
                path,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            raise

        duration_ms = (perf_counter() - start) * 1000
        response.headers.setdefault("X-Request-ID", request_id)
        if settings.log_requests:
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
        metrics.REQUEST_COUNT.labels(
            method=method,
            path=path,
            status=str(response.status_code),
        ).inc()
        metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
        return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.get("/recipes", response_model=list[CandidateRecipe], summary="List recipes")
    def recipes_list(
        search: Optional[str] = Query(default=None, max_length=255),
        tag: Optional[str] = Query(default=None, max_length=64),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> list[CandidateRecipe]:
        return list_recipes(owner_id, search=search, tag=tag)

    @application.post(
        "/recipes",
        response_model=CandidateRecipe,
        status_code=status.HTTP_201_CREATED,
        summary="Create recipe",
    )
    def recipes_create(
        payload: RecipeCreateRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        creator: deps.RecipeCreator = Depends(deps.get_recipe_creator),
    ) -> CandidateRecipe:
        return creator(owner_id, payload.model_dump())

    @application.get("/recipes/{recipe_id}", response_model=CandidateRecipe, summary="Get recipe")
    def recipes_get(
        recipe_id: str,
        owner_id: str = Depends(deps.get_owner_id),
    ) -> CandidateRecipe:
        recipe = get_recipe(owner_id, recipe_id)
        if recipe is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
        return recipe

    @application.post(
        "/suggestions/generate",
        response_model=list[DaySuggestion],
        summary="Suggest dinners for the coming days",
    )
    def suggestions_generate(
        spec: ConstraintSpec,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        recipe_provider: deps.RecipeProvider = Depends(deps.get_recipe_provider),
        history_provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        suggester: deps.WeekSuggester = Depends(deps.get_week_suggester),
    ) -> list[DaySuggestion]:
        pool = recipe_provider(owner_id)
        history = history_provider(owner_id)
        suggestions = suggester(spec, pool, history=history)
        logger.info(
            "Generated %s suggestion slot(s) from %s recipe(s)",
            len(suggestions),
            len(pool),
            extra={"owner_id": owner_id},
        )
        return suggestions

    @application.post(
        "/suggestions/alternative",
        response_model=CandidateRecipe,
        summary="Suggest a replacement recipe for one date",
    )
    def suggestions_alternative(
        payload: AlternativeRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        recipe_provider: deps.RecipeProvider = Depends(deps.get_recipe_provider),
        history_provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        suggester: deps.AlternativeSuggester = Depends(deps.get_alternative_suggester),
    ) -> CandidateRecipe:
        recipe = suggester(
            payload.date,
            recipe_provider(owner_id),
            payload.exclude_ids,
            avoid_repeats=payload.avoid_repeats,
            vegetarian_only=payload.vegetarian_only,
            prefer_simple=payload.prefer_simple,
            history=history_provider(owner_id),
        )
        if recipe is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No alternative recipes available",
            )
        return recipe

    @application.post(
        "/suggestions/approve",
        response_model=ApproveResponse,
        summary="Save accepted suggestions as plans",
    )
    def suggestions_approve(
        payload: ApproveRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        recipe_provider: deps.RecipeProvider = Depends(deps.get_recipe_provider),
        saver: deps.PlanSaver = Depends(deps.get_plan_saver),
        usage_marker: deps.UsageMarker = Depends(deps.get_usage_marker),
    ) -> ApproveResponse:
        known_ids = {recipe.id for recipe in recipe_provider(owner_id)}
        saved: list[PlanEntry] = []
        usage: list[tuple[str, date]] = []

        for entry in payload.suggestions:
            plan_date = _parse_plan_date(entry.date)
            if plan_date is None:
                logger.info("Skipping suggestion with invalid date %r", entry.date)
                continue
            if entry.is_skipped and entry.label:
                saved.append(saver(owner_id, plan_date, None, entry.label))
                continue
            if entry.recipe_id and entry.recipe_id in known_ids:
                saved.append(saver(owner_id, plan_date, entry.recipe_id, None))
                usage.append((entry.recipe_id, plan_date))
                continue
            logger.info("Skipping suggestion for %s without a known recipe or label", plan_date)

        if usage:
            usage_marker(owner_id, usage)
        return ApproveResponse(message="Week approved successfully!", plans=saved)

    @application.get("/plans", response_model=list[PlanEntry], summary="List saved plans")
    def plans_list(
        start: Optional[date] = Query(default=None),
        end: Optional[date] = Query(default=None),
        owner_id: str = Depends(deps.get_owner_id),
        provider: deps.PlanProvider = Depends(deps.get_plan_provider),
    ) -> list[PlanEntry]:
        return provider(owner_id, start, end)

    @application.put(
        "/plans/{plan_date}",
        response_model=PlanEntry,
        summary="Set the recipe or label planned for one date",
    )
    def plans_update(
        plan_date: str,
        payload: PlanUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        saver: deps.PlanSaver = Depends(deps.get_plan_saver),
        usage_marker: deps.UsageMarker = Depends(deps.get_usage_marker),
    ) -> PlanEntry:
        parsed = _parse_plan_date(plan_date)
        if parsed is None:
            raise InvalidInputError("Invalid date format. Use YYYY-MM-DD")

        if payload.recipe_id:
            if get_recipe(owner_id, payload.recipe_id) is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
            plan = saver(owner_id, parsed, payload.recipe_id, None, payload.is_confirmed)
            usage_marker(owner_id, [(payload.recipe_id, parsed)])
            return plan
        if payload.label:
            return saver(owner_id, parsed, None, payload.label, payload.is_confirmed)
        raise InvalidInputError("Either recipe_id or label is required")

    @application.delete(
        "/plans/{plan_date}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Clear the plan for one date",
    )
    def plans_delete(
        plan_date: str,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        remover: deps.PlanRemover = Depends(deps.get_plan_remover),
    ) -> None:
        parsed = _parse_plan_date(plan_date)
        if parsed is None:
            raise InvalidInputError("Invalid date format. Use YYYY-MM-DD")
        if not remover(owner_id, parsed):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Plan not found for this date",
            )

    @application.post(
        "/shopping-lists",
        response_model=ShoppingList,
        status_code=status.HTTP_201_CREATED,
        summary="Create a shopping list from planned dinners",
    )
    def shopping_lists_create(
        payload: ShoppingListCreateRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
        builder: deps.ShoppingListBuilder = Depends(deps.get_shopping_list_builder),
    ) -> ShoppingList:
        return builder(owner_id, payload.start_date, payload.days, payload.name)

    @application.get(
        "/shopping-lists",
        response_model=list[ShoppingList],
        summary="List shopping lists",
    )
    def shopping_lists_list(
        list_status: Optional[ListStatus] = Query(default=None, alias="status"),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> list[ShoppingList]:
        return shopping_store.list_lists(owner_id, status=list_status)

    @application.get(
        "/shopping-lists/{list_id}",
        response_model=ShoppingList,
        summary="Get shopping list",
    )
    def shopping_lists_get(
        list_id: int,
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        shopping_list = shopping_store.get_list(owner_id, list_id)
        if shopping_list is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
        return shopping_list

    @application.put(
        "/shopping-lists/{list_id}",
        response_model=ShoppingList,
        summary="Rename a shopping list or change its status",
    )
    def shopping_lists_update(
        list_id: int,
        payload: ShoppingListUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        try:
            return shopping_store.update_list(
                owner_id, list_id, **payload.model_dump(exclude_unset=True, exclude_none=True)
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.delete(
        "/shopping-lists/{list_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a shopping list",
    )
    def shopping_lists_delete(
        list_id: int,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> None:
        try:
            shopping_store.delete_list(owner_id, list_id)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.post(
        "/shopping-lists/{list_id}/items",
        response_model=ShoppingList,
        status_code=status.HTTP_201_CREATED,
        summary="Add a custom item",
    )
    def shopping_list_items_add(
        list_id: int,
        payload: CustomItemRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        if not payload.name.strip():
            raise InvalidInputError("Item name is required")
        try:
            shopping_list = shopping_store.add_custom_item(
                owner_id,
                list_id,
                name=payload.name,
                quantity=payload.quantity,
                category=payload.category or Category.OTHER,
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

        if payload.save_to_staples:
            staples_store.upsert_staple(
                owner_id,
                name=payload.name,
                quantity=payload.quantity or None,
                category=payload.category,
            )
        return shopping_list

    @application.post(
        "/shopping-lists/{list_id}/staples",
        response_model=ShoppingList,
        summary="Add saved staples to a shopping list",
    )
    def shopping_list_staples_add(
        list_id: int,
        payload: AddStaplesRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        try:
            return staples_store.add_staples_to_list(owner_id, list_id, payload.staple_ids)
        except InvalidInputError:
            raise
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.put(
        "/shopping-lists/{list_id}/items/{index}",
        response_model=ShoppingList,
        summary="Update an item by position",
    )
    def shopping_list_items_update(
        list_id: int,
        index: int,
        payload: ItemUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        try:
            return shopping_store.update_item(
                owner_id,
                list_id,
                index,
                **payload.model_dump(exclude_unset=True, exclude_none=True),
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.delete(
        "/shopping-lists/{list_id}/items/{index}",
        response_model=ShoppingList,
        summary="Remove an item by position",
    )
    def shopping_list_items_delete(
        list_id: int,
        index: int,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> ShoppingList:
        try:
            return shopping_store.remove_item(owner_id, list_id, index)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.get("/staples", response_model=list[Staple], summary="List staples")
    def staples_list(owner_id: str = Depends(deps.get_owner_id)) -> list[Staple]:
        return staples_store.list_staples(owner_id)

    @application.post(
        "/staples",
        response_model=Staple,
        status_code=status.HTTP_201_CREATED,
        summary="Create a staple or record another use of an existing one",
    )
    def staples_upsert(
        payload: StapleRequest,
        response: Response,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> Staple:
        staple, created = staples_store.upsert_staple(
            owner_id,
            name=payload.name,
            quantity=payload.quantity,
            category=payload.category,
        )
        if not created:
            response.status_code = status.HTTP_200_OK
        return staple

    @application.delete(
        "/staples/{staple_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a staple",
    )
    def staples_delete(
        staple_id: int,
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> None:
        try:
            staples_store.delete_staple(owner_id, staple_id)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.delete(
        "/staples",
        response_model=StaplesClearedResponse,
        summary="Delete all staples",
    )
    def staples_clear(
        auth: None = Depends(deps.require_api_token),
        owner_id: str = Depends(deps.get_owner_id),
    ) -> StaplesClearedResponse:
        deleted = staples_store.clear_staples(owner_id)
        return StaplesClearedResponse(message="All staples cleared", deleted_count=deleted)

    return application


class RecipeCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    ingredients_text: str = Field(default="", max_length=20000)
    directions_text: str = Field(default="", max_length=20000)
    tags: list[str] = Field(default_factory=list)
    complexity: Optional[Complexity] = Field(default=None)
    is_vegetarian: bool = Field(default=False)
    last_used_date: Optional[date] = Field(default=None)


class AlternativeRequest(BaseModel):
    date: str = Field(min_length=1, max_length=32)
    exclude_ids: list[str] = Field(default_factory=list)
    avoid_repeats: bool = Field(default=True)
    vegetarian_only: bool = Field(default=False)
    prefer_simple: bool = Field(default=False)


class ApprovedSuggestion(BaseModel):
    date: str = Field(default="", max_length=32)
    recipe_id: Optional[str] = Field(default=None, max_length=64)
    label: Optional[str] = Field(default=None, max_length=255)
    is_skipped: bool = Field(default=False)


class ApproveRequest(BaseModel):
    suggestions: list[ApprovedSuggestion] = Field(min_length=1)


class ApproveResponse(BaseModel):
    message: str
    plans: list[PlanEntry] = Field(default_factory=list)


class ShoppingListCreateRequest(BaseModel):
    start_date: date
    days: int = Field(default=7, ge=1, le=31)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)


class ShoppingListUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[ListStatus] = Field(default=None)


class CustomItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    quantity: str = Field(default="", max_length=255)
    category: Optional[Category] = Field(default=None)
    save_to_staples: bool = Field(default=True)


class ItemUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[str] = Field(default=None, max_length=255)
    category: Optional[Category] = Field(default=None)
    is_checked: Optional[bool] = Field(default=None)


class PlanUpdateRequest(BaseModel):
    recipe_id: Optional[str] = Field(default=None, max_length=64)
    label: Optional[str] = Field(default=None, max_length=255)
    is_confirmed: bool = Field(default=False)


class StapleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    quantity: Optional[str] = Field(default=None, max_length=255)
    category: Optional[Category] = Field(default=None)


class StaplesClearedResponse(BaseModel):
    message: str
    deleted_count: int


class AddStaplesRequest(BaseModel):
    staple_ids: list[int] = Field(min_length=1)


app = create_app()

__all__ = ["app", "create_app"]
