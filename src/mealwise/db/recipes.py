"""Recipe store helpers."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import or_, select

from mealwise.models.recipe import CandidateRecipe

from .models import RecipeORM
from .repository import session_scope


def _to_model(row: RecipeORM) -> CandidateRecipe:
    return CandidateRecipe.model_validate(
        {
            "id": str(row.id),
            "title": row.title,
            "is_vegetarian": row.is_vegetarian,
            "complexity": row.complexity,
            "last_used_date": row.last_used_date,
            "ingredients_text": row.ingredients_text or "",
            "tags": list(row.tags or []),
            "updated_at": row.updated_at,
        }
    )


def _int_ids(recipe_ids: Iterable[str]) -> List[int]:
    ids: List[int] = []
    for value in recipe_ids:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    return ids


def create_recipe(
    owner_id: str,
    *,
    title: str,
    ingredients_text: str = "",
    directions_text: str = "",
    tags: Optional[Iterable[str]] = None,
    complexity: Optional[str] = None,
    is_vegetarian: bool = False,
    last_used_date: Optional[date] = None,
) -> CandidateRecipe:
    with session_scope() as session:
        row = RecipeORM(
            owner_id=owner_id,
            title=title.strip(),
            ingredients_text=ingredients_text,
            directions_text=directions_text,
            tags=[tag.strip() for tag in (tags or []) if tag and tag.strip()],
            complexity=complexity,
            is_vegetarian=is_vegetarian,
            last_used_date=last_used_date,
        )
        session.add(row)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def list_recipes(
    owner_id: str,
    *,
    search: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[CandidateRecipe]:
    """Return the owner's recipes, newest first, optionally filtered by text and tag."""

    with session_scope() as session:
        stmt = select(RecipeORM).where(RecipeORM.owner_id == owner_id)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(RecipeORM.title.ilike(pattern), RecipeORM.ingredients_text.ilike(pattern))
            )
        stmt = stmt.order_by(RecipeORM.updated_at.desc(), RecipeORM.id.desc())
        rows = session.execute(stmt).scalars().all()
        recipes = [_to_model(row) for row in rows]

    if tag:
        wanted = tag.strip().lower()
        recipes = [recipe for recipe in recipes if wanted in {t.lower() for t in recipe.tags}]
    return recipes


def get_recipe(owner_id: str, recipe_id: str) -> Optional[CandidateRecipe]:
    ids = _int_ids([recipe_id])
    if not ids:
        return None
    with session_scope() as session:
        row = session.get(RecipeORM, ids[0])
        if row is None or row.owner_id != owner_id:
            return None
        return _to_model(row)


def get_recipes(owner_id: str, recipe_ids: Iterable[str]) -> List[CandidateRecipe]:
    """Fetch recipes by id, preserving the requested order and skipping unknown ids."""

    ids = _int_ids(recipe_ids)
    if not ids:
        return []
    with session_scope() as session:
        rows = (
            session.execute(
                select(RecipeORM).where(RecipeORM.owner_id == owner_id, RecipeORM.id.in_(ids))
            )
            .scalars()
            .all()
        )
        by_id = {row.id: _to_model(row) for row in rows}
    return [by_id[value] for value in dict.fromkeys(ids) if value in by_id]


def mark_recipes_used(owner_id: str, usage: Iterable[tuple[str, date]]) -> int:
    """Overwrite ``last_used_date`` with the approved date for each (recipe id, date) pair.

    The stored date may move backwards when an earlier day is re-approved. Within one batch the
    latest date per recipe wins. Returns the number of recipes touched.
    """

    latest: dict[int, date] = {}
    for recipe_id, used_on in usage:
        for value in _int_ids([recipe_id]):
            if value not in latest or used_on > latest[value]:
                latest[value] = used_on
    if not latest:
        return 0

    with session_scope() as session:
        rows = (
            session.execute(
                select(RecipeORM).where(
                    RecipeORM.owner_id == owner_id, RecipeORM.id.in_(list(latest))
                )
            )
            .scalars()
            .all()
        )
        for row in rows:
            row.last_used_date = latest[row.id]
        return len(rows)


__all__ = [
    "create_recipe",
    "get_recipe",
    "get_recipes",
    "list_recipes",
    "mark_recipes_used",
]
