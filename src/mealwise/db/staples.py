"""Staple item persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, select

from mealwise.errors import InvalidInputError
from mealwise.models.shopping import Category, ShoppingList, Staple

from .models import ShoppingListItemORM, StapleORM
from .repository import session_scope
from .shopping_lists import _load_list, _to_model as _list_to_model


def _to_model(row: StapleORM) -> Staple:
    return Staple.model_validate(
        {
            "id": row.id,
            "owner_id": row.owner_id,
            "name": row.name,
            "quantity": row.quantity or "",
            "category": Category.coerce(row.category),
            "usage_count": row.usage_count,
            "last_used_at": row.last_used_at,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


def _name_key(name: str) -> str:
    return " ".join(name.lower().split())


def list_staples(owner_id: str) -> List[Staple]:
    """Return the owner's staples, most frequently used first."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(StapleORM)
                .where(StapleORM.owner_id == owner_id)
                .order_by(StapleORM.usage_count.desc(), StapleORM.name_key.asc())
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def upsert_staple(
    owner_id: str,
    *,
    name: str,
    quantity: Optional[str] = None,
    category: Optional[str | Category] = None,
) -> Tuple[Staple, bool]:
    """Record a use of the staple called ``name`` (matched case-insensitively).

    An existing staple takes the new spelling, and the quantity or category when given, and its
    usage count goes up by one. Returns the staple and whether it was newly created.
    """

    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError("Staple name is required")

    with session_scope() as session:
        row = session.execute(
            select(StapleORM).where(
                StapleORM.owner_id == owner_id,
                StapleORM.name_key == _name_key(cleaned),
            )
        ).scalar_one_or_none()
        created = row is None
        if created:
            row = StapleORM(
                owner_id=owner_id,
                name=cleaned,
                name_key=_name_key(cleaned),
                quantity=(quantity or "").strip(),
                category=Category.coerce(category or Category.OTHER).value,
                usage_count=1,
            )
            session.add(row)
        else:
            row.name = cleaned
            if quantity is not None:
                row.quantity = quantity.strip()
            if category:
                row.category = Category.coerce(category).value
            row.usage_count += 1
            row.last_used_at = func.now()
        session.flush()
        session.refresh(row)
        return _to_model(row), created


def delete_staple(owner_id: str, staple_id: int) -> None:
    with session_scope() as session:
        row = session.get(StapleORM, staple_id)
        if row is None or row.owner_id != owner_id:
            raise ValueError(f"Staple {staple_id} not found")
        session.delete(row)


def clear_staples(owner_id: str) -> int:
    """Delete every staple the owner has; returns how many were removed."""

    with session_scope() as session:
        result = session.execute(delete(StapleORM).where(StapleORM.owner_id == owner_id))
        return result.rowcount or 0


def add_staples_to_list(owner_id: str, list_id: int, staple_ids: Iterable[int]) -> ShoppingList:
    """Append the chosen staples to a shopping list and count the use of each one.

    Unknown ids are ignored; raises ``InvalidInputError`` when none of them name a staple and
    ``ValueError`` when the list does not exist.
    """

    wanted = list(dict.fromkeys(staple_ids))
    with session_scope() as session:
        shopping_list = _load_list(session, owner_id, list_id)
        rows = (
            session.execute(
                select(StapleORM).where(StapleORM.owner_id == owner_id, StapleORM.id.in_(wanted))
            )
            .scalars()
            .all()
        )
        if not rows:
            raise InvalidInputError("No valid staples found")

        by_id = {row.id: row for row in rows}
        for staple_id in wanted:
            staple = by_id.get(staple_id)
            if staple is None:
                continue
            shopping_list.items.append(
                ShoppingListItemORM(
                    position=len(shopping_list.items),
                    name=staple.name,
                    quantity=staple.quantity or "",
                    category=Category.coerce(staple.category).value,
                    recipe_ids=[],
                    recipe_names=[],
                    original_texts=[],
                    is_checked=False,
                )
            )
            staple.usage_count += 1
            staple.last_used_at = func.now()
        session.flush()
        session.refresh(shopping_list)
        return _list_to_model(shopping_list)


__all__ = [
    "add_staples_to_list",
    "clear_staples",
    "delete_staple",
    "list_staples",
    "upsert_staple",
]
