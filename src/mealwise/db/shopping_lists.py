"""Shopping list persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select

from mealwise.models.shopping import Category, ShoppingList, ShoppingListItem

from .models import ShoppingListItemORM, ShoppingListORM
from .repository import session_scope

_UNSET = object()


def _item_to_model(row: ShoppingListItemORM) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "name": row.name,
            "quantity": row.quantity or "",
            "category": Category.coerce(row.category),
            "recipe_ids": list(row.recipe_ids or []),
            "recipe_names": list(row.recipe_names or []),
            "original_texts": list(row.original_texts or []),
            "is_checked": row.is_checked,
        }
    )


def _to_model(row: ShoppingListORM) -> ShoppingList:
    return ShoppingList.model_validate(
        {
            "id": row.id,
            "owner_id": row.owner_id,
            "name": row.name,
            "status": row.status,
            "start_date": row.start_date,
            "end_date": row.end_date,
            "items": [_item_to_model(item) for item in row.items],
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


def _item_row(item: ShoppingListItem, position: int) -> ShoppingListItemORM:
    return ShoppingListItemORM(
        position=position,
        name=item.name.strip(),
        quantity=item.quantity,
        category=Category.coerce(item.category).value,
        recipe_ids=list(item.recipe_ids),
        recipe_names=list(item.recipe_names),
        original_texts=list(item.original_texts),
        is_checked=item.is_checked,
    )


def _load_list(session, owner_id: str, list_id: int) -> ShoppingListORM:
    row = session.get(ShoppingListORM, list_id)
    if row is None or row.owner_id != owner_id:
        raise ValueError(f"Shopping list {list_id} not found")
    return row


def _load_item(row: ShoppingListORM, index: int) -> ShoppingListItemORM:
    if index < 0 or index >= len(row.items):
        raise ValueError(f"Item {index} not found on shopping list {row.id}")
    return row.items[index]


def _reindex(row: ShoppingListORM) -> None:
    for position, item in enumerate(row.items):
        item.position = position


def create_list(
    owner_id: str,
    *,
    name: str,
    items: Iterable[ShoppingListItem] = (),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ShoppingList:
    with session_scope() as session:
        row = ShoppingListORM(
            owner_id=owner_id,
            name=name.strip(),
            status="active",
            start_date=start_date,
            end_date=end_date,
        )
        row.items = [_item_row(item, position) for position, item in enumerate(items)]
        session.add(row)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def get_list(owner_id: str, list_id: int) -> Optional[ShoppingList]:
    with session_scope() as session:
        row = session.get(ShoppingListORM, list_id)
        if row is None or row.owner_id != owner_id:
            return None
        return _to_model(row)


def list_lists(owner_id: str, *, status: Optional[str] = None) -> List[ShoppingList]:
    """Return the owner's lists, most recently created first."""

    with session_scope() as session:
        stmt = select(ShoppingListORM).where(ShoppingListORM.owner_id == owner_id)
        if status:
            stmt = stmt.where(ShoppingListORM.status == status)
        stmt = stmt.order_by(ShoppingListORM.created_at.desc(), ShoppingListORM.id.desc())
        rows = session.execute(stmt).scalars().all()
        return [_to_model(row) for row in rows]


def update_list(
    owner_id: str,
    list_id: int,
    *,
    name: str | object = _UNSET,
    status: str | object = _UNSET,
) -> ShoppingList:
    with session_scope() as session:
        row = _load_list(session, owner_id, list_id)
        if name is not _UNSET:
            row.name = str(name).strip()
        if status is not _UNSET:
            row.status = str(status)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def update_item(
    owner_id: str,
    list_id: int,
    index: int,
    *,
    name: str | object = _UNSET,
    quantity: str | object = _UNSET,
    category: str | object = _UNSET,
    is_checked: bool | object = _UNSET,
) -> ShoppingList:
    """Patch the item at ``index`` (its position on the list)."""

    with session_scope() as session:
        row = _load_list(session, owner_id, list_id)
        item = _load_item(row, index)
        if name is not _UNSET:
            item.name = str(name).strip()
        if quantity is not _UNSET:
            item.quantity = str(quantity or "").strip()
        if category is not _UNSET:
            item.category = Category.coerce(category).value
        if is_checked is not _UNSET:
            item.is_checked = bool(is_checked)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def add_custom_item(
    owner_id: str,
    list_id: int,
    *,
    name: str,
    quantity: str = "",
    category: str | Category = Category.OTHER,
) -> ShoppingList:
    """Append a hand-entered item that is not tied to any recipe."""

    with session_scope() as session:
        row = _load_list(session, owner_id, list_id)
        row.items.append(
            ShoppingListItemORM(
                position=len(row.items),
                name=name.strip(),
                quantity=(quantity or "").strip(),
                category=Category.coerce(category).value,
                recipe_ids=[],
                recipe_names=[],
                original_texts=[],
                is_checked=False,
            )
        )
        session.flush()
        session.refresh(row)
        return _to_model(row)


def remove_item(owner_id: str, list_id: int, index: int) -> ShoppingList:
    with session_scope() as session:
        row = _load_list(session, owner_id, list_id)
        item = _load_item(row, index)
        row.items.remove(item)
        _reindex(row)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def delete_list(owner_id: str, list_id: int) -> None:
    with session_scope() as session:
        row = _load_list(session, owner_id, list_id)
        session.delete(row)


__all__ = [
    "add_custom_item",
    "create_list",
    "delete_list",
    "get_list",
    "list_lists",
    "remove_item",
    "update_item",
    "update_list",
]
