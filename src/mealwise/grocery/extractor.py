"""Ingredient extraction strategies.

Two strategies turn free-text ingredient blocks into ``ParsedIngredientLine`` rows: an
LLM-backed batch parser and a deterministic line parser. ``extract_ingredients`` tries them
in order and returns the first complete result; results are never mixed.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from mealwise import metrics
from mealwise.config import get_settings
from mealwise.errors import ExternalServiceUnavailable
from mealwise.llm.client import CompletionClient, build_llm_client, extract_json_array
from mealwise.models.recipe import CandidateRecipe
from mealwise.models.shopping import Category, ParsedIngredientLine

from .categorizer import categorize

logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"^(?:[-*•·]+\s*|\d+[.)]\s+)+")

_NUMBER = r"\d+(?:\.\d+)?(?:\s+\d+/\d+|/\d+)?"
_GLYPH = r"(?:\d+\s*)?[½¼¾⅓⅔⅛]"
_QUANTITY = rf"(?:{_GLYPH}|{_NUMBER}(?:\s*[-–]\s*{_NUMBER})?)"
_UNITS = (
    r"cups?|tablespoons?|tbsps?|teaspoons?|tsps?|ounces?|oz|pounds?|lbs?|kilograms?|kg|"
    r"grams?|g|milliliters?|ml|liters?|litres?|l|quarts?|qts?|pints?|pts?|gallons?|gals?|"
    r"cans?|packages?|bags?|bunch(?:es)?|cloves?|stalks?|heads?|slices?|pieces?|sticks?|sprigs?"
)
_LINE_RE = re.compile(
    rf"^(?P<quantity>{_QUANTITY})\s*(?:(?P<unit>{_UNITS})\b\.?)?\s*(?:of\s+)?(?P<name>.*)$",
    re.IGNORECASE,
)

EXTRACTION_SYSTEM_PROMPT = (
    "You parse recipe ingredient lists into structured grocery data. Respond with ONLY a JSON "
    'array: [{"name":"item name","quantity":"amount with unit","category":"Category",'
    '"recipeId":"id","originalText":"original line"}]. No explanation, no markdown fences.'
)

EXTRACTION_USER_PROMPT = (
    "Parse the ingredients from these recipes into structured data. For each ingredient line, "
    'extract the item name (normalized, e.g. "onion" not "large yellow onion"), quantity with '
    'unit (e.g. "2 lbs", "1 cup", "3"), and categorize it.\n\n'
    "RECIPES:\n{recipes_json}\n\n"
    "CATEGORIES (pick one per item):\n"
    "- Produce (fruits, vegetables, herbs, fresh items)\n"
    "- Meat & Seafood (chicken, beef, fish, etc.)\n"
    "- Dairy & Eggs (milk, cheese, butter, eggs, yogurt)\n"
    "- Pantry (oils, spices, canned goods, pasta, rice, flour, sugar, sauces)\n"
    "- Frozen (frozen vegetables, frozen meals, ice cream)\n"
    "- Bakery (bread, rolls, tortillas, baked goods)\n"
    "- Other (anything that doesn't fit above)"
)


class IngredientExtractor(Protocol):
    """Strategy contract: return parsed lines, or None when the strategy is unavailable."""

    name: str

    def extract(self, recipes: Sequence[CandidateRecipe]) -> Optional[List[ParsedIngredientLine]]:
        ...


def ingredient_lines(text: str) -> List[str]:
    """Split an ingredient block into trimmed, non-blank lines."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def strip_markers(line: str) -> str:
    """Remove leading bullets and list numbering ("-", "*", "•", "1.", "2)")."""
    return _MARKER_RE.sub("", line.strip()).strip()


def parse_ingredient_line(line: str) -> Tuple[str, str]:
    """Split a single ingredient line into ``(name, quantity)``.

    ``"2 cups flour"`` gives ``("flour", "2 cups")``; lines without a leading amount keep the
    whole cleaned text as the name and an empty quantity.
    """
    cleaned = strip_markers(line)
    match = _LINE_RE.match(cleaned)
    if not match:
        return cleaned, ""

    amount = " ".join(match.group("quantity").split())
    unit = match.group("unit")
    quantity = f"{amount} {unit}" if unit else amount
    name = match.group("name").strip() or cleaned
    return name, quantity


class HeuristicIngredientExtractor:
    """Deterministic line parser; always available."""

    name = "heuristic"

    def extract(self, recipes: Sequence[CandidateRecipe]) -> List[ParsedIngredientLine]:
        results: List[ParsedIngredientLine] = []
        for recipe in recipes:
            for line in ingredient_lines(recipe.ingredients_text):
                name, quantity = parse_ingredient_line(line)
                if not name:
                    continue
                results.append(
                    ParsedIngredientLine(
                        recipe_id=recipe.id,
                        recipe_name=recipe.title,
                        original_text=line,
                        name=name,
                        quantity=quantity,
                        category=categorize(name),
                    )
                )
        return results


class LLMIngredientExtractor:
    """Batch every recipe into one LLM request; any failure voids the whole batch."""

    name = "llm"

    def __init__(self, client: CompletionClient, *, max_tokens: Optional[int] = None) -> None:
        self._client = client
        self._max_tokens = max_tokens

    def extract(self, recipes: Sequence[CandidateRecipe]) -> Optional[List[ParsedIngredientLine]]:
        recipe_data = [
            {"id": recipe.id, "title": recipe.title, "ingredients": recipe.ingredients_text}
            for recipe in recipes
            if (recipe.ingredients_text or "").strip()
        ]
        if not recipe_data:
            return []

        prompt = EXTRACTION_USER_PROMPT.format(
            recipes_json=json.dumps(recipe_data, ensure_ascii=False, separators=(",", ":"))
        )
        try:
            content = self._client.complete(
                EXTRACTION_SYSTEM_PROMPT, prompt, max_tokens=self._max_tokens
            )
            parsed = json.loads(extract_json_array(content))
            lines = self._coerce_lines(parsed, {recipe.id: recipe.title for recipe in recipes})
        except ExternalServiceUnavailable as exc:
            logger.warning("AI ingredient parsing unavailable (using fallback): %s", exc)
            metrics.LLM_CALLS.labels(feature="extraction", outcome="unavailable").inc()
            return None
        except ValueError as exc:
            logger.warning("AI ingredient parsing returned an invalid payload (using fallback): %s", exc)
            metrics.LLM_CALLS.labels(feature="extraction", outcome="invalid").inc()
            return None

        metrics.LLM_CALLS.labels(feature="extraction", outcome="ok").inc()
        return lines

    @staticmethod
    def _coerce_lines(payload: object, recipe_names: dict[str, str]) -> List[ParsedIngredientLine]:
        if not isinstance(payload, list):
            raise ValueError("expected a JSON array of ingredient objects")

        lines: List[ParsedIngredientLine] = []
        for entry in payload:
            if not isinstance(entry, dict):
                raise ValueError(f"expected an ingredient object, got {entry!r}")
            recipe_id = str(entry.get("recipeId") or "").strip()
            if recipe_id not in recipe_names:
                raise ValueError(f"unknown recipeId {recipe_id!r}")
            name = str(entry.get("name") or "").strip() or "Unknown"
            lines.append(
                ParsedIngredientLine(
                    recipe_id=recipe_id,
                    recipe_name=recipe_names[recipe_id],
                    original_text=str(entry.get("originalText") or "").strip(),
                    name=name,
                    quantity=str(entry.get("quantity") or "").strip(),
                    category=Category.coerce(entry.get("category")),
                )
            )
        return lines


def extract_ingredients(
    recipes: Sequence[CandidateRecipe],
    strategies: Iterable[IngredientExtractor],
) -> List[ParsedIngredientLine]:
    """Run strategies in order and return the first non-None result.

    The heuristic extractor is appended when the supplied strategies do not end with one, so
    a result is always produced.
    """
    ordered = list(strategies)
    if not ordered or not isinstance(ordered[-1], HeuristicIngredientExtractor):
        ordered.append(HeuristicIngredientExtractor())

    for strategy in ordered:
        result = strategy.extract(recipes)
        if result is None:
            continue
        metrics.INGREDIENT_EXTRACTIONS.labels(strategy=strategy.name).inc()
        logger.info(
            "Extracted %s ingredient line(s) from %s recipe(s) using %s strategy",
            len(result),
            len(recipes),
            strategy.name,
        )
        return result
    return []  # pragma: no cover - the heuristic strategy never returns None


def default_strategies() -> List[IngredientExtractor]:
    """Return the configured strategy chain (LLM first when enabled)."""

    settings = get_settings()
    strategies: List[IngredientExtractor] = []
    if settings.ai_extraction_enabled:
        client = build_llm_client(max_tokens=settings.extraction_max_tokens)
        if client is not None:
            strategies.append(LLMIngredientExtractor(client, max_tokens=settings.extraction_max_tokens))
    strategies.append(HeuristicIngredientExtractor())
    return strategies


__all__ = [
    "HeuristicIngredientExtractor",
    "IngredientExtractor",
    "LLMIngredientExtractor",
    "default_strategies",
    "extract_ingredients",
    "ingredient_lines",
    "parse_ingredient_line",
    "strip_markers",
]
