"""Model builders shared by unit and integration tests."""

from __future__ import annotations

from mealwise.models.recipe import CandidateRecipe


def make_recipe(recipe_id: str, **kwargs) -> CandidateRecipe:
    defaults = {
        "id": recipe_id,
        "title": f"Recipe {recipe_id}",
        "is_vegetarian": False,
        "complexity": None,
        "last_used_date": None,
        "ingredients_text": "",
        "tags": [],
        "updated_at": None,
    }
    defaults.update(kwargs)
    return CandidateRecipe.model_validate(defaults)
