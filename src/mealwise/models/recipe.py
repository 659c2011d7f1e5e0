"""Recipe and usage-history models consumed by the suggestion engine."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Complexity = Literal["simple", "medium", "complex"]


class CandidateRecipe(BaseModel):
    """Read-only recipe snapshot supplied by the recipe store."""

    id: str = Field(min_length=1)
    title: str
    is_vegetarian: bool = Field(default=False)
    complexity: Optional[Complexity] = Field(default=None)
    last_used_date: Optional[date] = Field(default=None)
    ingredients_text: str = Field(default="")
    tags: list[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class UsageRecord(BaseModel):
    """A recipe that was planned on a given date."""

    recipe_id: str
    title: str
    date: date
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = ["CandidateRecipe", "Complexity", "UsageRecord"]
