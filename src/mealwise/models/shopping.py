"""Ingredient extraction and shopping list models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Grocery store sections used to group shopping list items."""

    PRODUCE = "Produce"
    MEAT_SEAFOOD = "Meat & Seafood"
    DAIRY_EGGS = "Dairy & Eggs"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BAKERY = "Bakery"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: object) -> "Category":
        """Map free-form category text onto the enumeration (unknown -> Other)."""

        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.OTHER


class ParsedIngredientLine(BaseModel):
    """Single structured ingredient line extracted from a recipe."""

    recipe_id: str
    recipe_name: str = Field(default="")
    original_text: str
    name: str
    quantity: str = Field(default="")
    category: Category = Field(default=Category.PANTRY)

    model_config = ConfigDict(frozen=True)


class AggregatedItem(BaseModel):
    """Consolidated shopping entry merged across recipes."""

    key: str
    name: str
    quantity: str = Field(default="")
    category: Category
    recipe_ids: list[str] = Field(default_factory=list)
    recipe_names: list[str] = Field(default_factory=list)
    original_texts: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


ListStatus = Literal["active", "completed", "archived"]


class ShoppingListItem(BaseModel):
    """Persisted entry on a shopping list."""

    name: str
    quantity: str = Field(default="")
    category: Category = Field(default=Category.OTHER)
    recipe_ids: list[str] = Field(default_factory=list)
    recipe_names: list[str] = Field(default_factory=list)
    original_texts: list[str] = Field(default_factory=list)
    is_checked: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class ShoppingList(BaseModel):
    """Named, dated shopping list owned by a household member."""

    id: int
    owner_id: str
    name: str
    status: ListStatus = Field(default="active")
    start_date: Optional[date] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    items: list[ShoppingListItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)


class Staple(BaseModel):
    """Item the household buys regularly, remembered for quick re-adding to lists."""

    id: int
    owner_id: str
    name: str
    quantity: str = Field(default="")
    category: Category = Field(default=Category.OTHER)
    usage_count: int = Field(default=1, ge=0)
    last_used_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)


__all__ = [
    "AggregatedItem",
    "Category",
    "ListStatus",
    "ParsedIngredientLine",
    "ShoppingList",
    "ShoppingListItem",
    "Staple",
]
