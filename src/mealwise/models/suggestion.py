"""Constraint and suggestion models for weekly planning."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mealwise.models.recipe import CandidateRecipe

SKIPPED_LABEL = "Eating Out"
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class ConstraintSpec(BaseModel):
    """Per-request planning constraints."""

    start_date: date
    days_to_skip: list[int] = Field(default_factory=list)
    avoid_repeats: bool = Field(default=True)
    vegetarian_only: bool = Field(default=False)
    prefer_simple: bool = Field(default=False)
    days: int = Field(default=7, ge=1, le=14)

    model_config = ConfigDict(frozen=True)

    @field_validator("days_to_skip")
    @classmethod
    def dedupe_skips(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


class DaySuggestion(BaseModel):
    """One calendar slot in a weekly suggestion set."""

    date: date
    day_of_week: int = Field(ge=0)
    day_name: str
    recipe_id: Optional[str] = Field(default=None)
    recipe: Optional[CandidateRecipe] = Field(default=None)
    label: Optional[str] = Field(default=None)
    is_skipped: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_slot_contents(self) -> "DaySuggestion":
        if self.recipe is not None and self.recipe_id != self.recipe.id:
            raise ValueError("recipe_id must match the attached recipe")
        if self.recipe_id is not None and self.label is not None:
            raise ValueError("a slot cannot carry both a recipe and a label")
        if self.is_skipped and (self.label is None or self.recipe_id is not None):
            raise ValueError("skipped slots carry a label and no recipe")
        return self

    def with_recipe(self, recipe: Optional[CandidateRecipe]) -> "DaySuggestion":
        """Return a copy of this slot assigned to ``recipe`` (or cleared)."""

        return self.model_copy(
            update={"recipe": recipe, "recipe_id": recipe.id if recipe else None}
        )


__all__ = ["ConstraintSpec", "DaySuggestion", "DAY_NAMES", "SKIPPED_LABEL"]
