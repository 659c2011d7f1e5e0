"""Command-line interface for Mealwise."""

from __future__ import annotations

import json
import random
from datetime import date
from typing import Optional

import typer
from pydantic import TypeAdapter

from mealwise.grocery.builder import build_shopping_items
from mealwise.models.recipe import CandidateRecipe, UsageRecord
from mealwise.models.suggestion import ConstraintSpec
from mealwise.planner.app.planner import generate_week_suggestions

app = typer.Typer(help="Mealwise dinner suggestion and shopping list commands.")

_RECIPES = TypeAdapter(list[CandidateRecipe])
_HISTORY = TypeAdapter(list[UsageRecord])


def _load_json(path: str) -> object:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _emit(payload: object, pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        typer.echo(json.dumps(payload))


@app.command()
def suggest(
    payload_path: str,
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed the shuffle for repeatable output."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Suggest dinners from a JSON file holding "constraints", "recipes" and optional "history".
    """
    try:
        payload = _load_json(payload_path)
        if not isinstance(payload, dict):
            raise ValueError("payload must be a JSON object")
        spec = ConstraintSpec.model_validate(payload.get("constraints") or {})
        recipes = _RECIPES.validate_python(payload.get("recipes") or [])
        history = _HISTORY.validate_python(payload.get("history") or [])
        today = date.fromisoformat(str(payload["today"])) if payload.get("today") else None
        suggestions = generate_week_suggestions(
            spec,
            recipes,
            history=history,
            today=today,
            rng=random.Random(seed) if seed is not None else None,
        )
    except (OSError, ValueError) as exc:
        typer.secho(f"Invalid payload: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    _emit([suggestion.model_dump(mode="json") for suggestion in suggestions], pretty)


@app.command("shopping-list")
def shopping_list(
    recipes_path: str,
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Print aggregated shopping items for the recipes in a JSON array file.
    """
    try:
        recipes = _RECIPES.validate_python(_load_json(recipes_path))
    except (OSError, ValueError) as exc:
        typer.secho(f"Invalid recipes: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    items = build_shopping_items(recipes)
    _emit([item.model_dump(mode="json") for item in items], pretty)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``mealwise`` console script."""
    app(prog_name="mealwise", args=argv)


if __name__ == "__main__":
    main()
