"""Persisted calendar plan models."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mealwise.models.recipe import CandidateRecipe


class PlanEntry(BaseModel):
    """Accepted suggestion stored for a single (owner, date)."""

    id: int
    owner_id: str
    date: date
    recipe_id: Optional[str] = Field(default=None)
    recipe: Optional[CandidateRecipe] = Field(default=None)
    label: Optional[str] = Field(default=None)
    is_confirmed: bool = Field(default=True)

    model_config = ConfigDict(frozen=True)


__all__ = ["PlanEntry"]
