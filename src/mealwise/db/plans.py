"""Calendar plan persistence helpers."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select

from mealwise.models.plan import PlanEntry
from mealwise.models.recipe import UsageRecord

from .models import PlanORM
from .recipes import _to_model as _recipe_to_model
from .repository import session_scope


def _to_model(row: PlanORM) -> PlanEntry:
    return PlanEntry.model_validate(
        {
            "id": row.id,
            "owner_id": row.owner_id,
            "date": row.date,
            "recipe_id": str(row.recipe_id) if row.recipe_id is not None else None,
            "recipe": _recipe_to_model(row.recipe) if row.recipe is not None else None,
            "label": row.label,
            "is_confirmed": row.is_confirmed,
        }
    )


def upsert_plan(
    owner_id: str,
    plan_date: date,
    *,
    recipe_id: Optional[str] = None,
    label: Optional[str] = None,
    is_confirmed: bool = True,
) -> PlanEntry:
    """Store the plan for ``(owner_id, plan_date)``, replacing any existing entry."""

    with session_scope() as session:
        row = session.execute(
            select(PlanORM).where(PlanORM.owner_id == owner_id, PlanORM.date == plan_date)
        ).scalar_one_or_none()
        if row is None:
            row = PlanORM(owner_id=owner_id, date=plan_date)
            session.add(row)

        row.recipe_id = int(recipe_id) if recipe_id is not None else None
        row.label = label
        row.is_confirmed = is_confirmed
        session.flush()
        session.refresh(row)
        return _to_model(row)


def list_plans(
    owner_id: str,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PlanEntry]:
    """Return plans ordered by date, bounded inclusively by ``start``/``end``."""

    with session_scope() as session:
        stmt = select(PlanORM).where(PlanORM.owner_id == owner_id)
        if start is not None:
            stmt = stmt.where(PlanORM.date >= start)
        if end is not None:
            stmt = stmt.where(PlanORM.date <= end)
        rows = session.execute(stmt.order_by(PlanORM.date.asc())).unique().scalars().all()
        return [_to_model(row) for row in rows]


def list_usage_history(owner_id: str, *, since: date) -> List[UsageRecord]:
    """Confirmed recipe plans on or after ``since``, oldest first."""

    history: List[UsageRecord] = []
    for entry in list_plans(owner_id, start=since):
        if not entry.is_confirmed or entry.recipe is None:
            continue
        history.append(
            UsageRecord(
                recipe_id=entry.recipe.id,
                title=entry.recipe.title,
                date=entry.date,
                tags=list(entry.recipe.tags),
            )
        )
    return history


def delete_plan(owner_id: str, plan_date: date) -> bool:
    """Remove the plan stored for ``plan_date``; returns False when there was none."""

    with session_scope() as session:
        row = session.execute(
            select(PlanORM).where(PlanORM.owner_id == owner_id, PlanORM.date == plan_date)
        ).scalar_one_or_none()
        if row is None:
            return False
        session.delete(row)
        return True


__all__ = ["delete_plan", "list_plans", "list_usage_history", "upsert_plan"]
