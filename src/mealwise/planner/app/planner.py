"""Suggestion engine entry point.

Weekly suggestions and single-slot alternatives are produced by the deterministic
filter/assigner pipeline, optionally refined by the LLM adapter. Whichever path runs,
callers receive the same types: a list of ``DaySuggestion`` or an optional
``CandidateRecipe``.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Collection, Iterable, List, Optional, Sequence

from mealwise import metrics
from mealwise.models.recipe import CandidateRecipe, UsageRecord
from mealwise.models.suggestion import ConstraintSpec, DaySuggestion

from .ai_suggestions import AISuggestionAdapter, build_suggestion_adapter
from .assigner import (
    assign_week,
    build_slots,
    complexity_rank,
    rank_alternatives,
    select_alternative,
)
from .constraint_filter import filter_candidates
from .utils import parse_iso_date

logger = logging.getLogger(__name__)

_FROM_SETTINGS = object()


def _resolve_adapter(ai_adapter: object) -> Optional[AISuggestionAdapter]:
    if ai_adapter is _FROM_SETTINGS:
        return build_suggestion_adapter()
    return ai_adapter  # type: ignore[return-value]


def _prefer_simple(eligible: List[CandidateRecipe], slots_needed: int) -> List[CandidateRecipe]:
    """Keep only the simplest recipes when there are more than enough to fill the week."""
    if len(eligible) <= slots_needed:
        return eligible
    ranked = sorted(eligible, key=complexity_rank)
    return ranked[:slots_needed]


def _merge_ai_assignment(
    slots: Sequence[DaySuggestion],
    eligible: Sequence[CandidateRecipe],
    mapping: dict[date, str],
    rng: random.Random,
) -> List[DaySuggestion]:
    """Apply the LLM mapping, filling any dates it left out from unused recipes."""

    by_id = {recipe.id: recipe for recipe in eligible}
    used = set(mapping.values())
    leftovers = [recipe for recipe in eligible if recipe.id not in used]
    rng.shuffle(leftovers)
    backfill = leftovers or list(eligible)

    merged: List[DaySuggestion] = []
    cursor = 0
    for slot in slots:
        if slot.is_skipped:
            merged.append(slot)
            continue
        recipe_id = mapping.get(slot.date)
        if recipe_id is not None:
            merged.append(slot.with_recipe(by_id[recipe_id]))
            continue
        merged.append(slot.with_recipe(backfill[cursor % len(backfill)]))
        cursor += 1
    return merged


def generate_week_suggestions(
    spec: ConstraintSpec,
    pool: Iterable[CandidateRecipe],
    *,
    history: Sequence[UsageRecord] = (),
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
    ai_adapter: object = _FROM_SETTINGS,
) -> List[DaySuggestion]:
    """Generate a span of day suggestions, preferring the LLM adapter when configured."""

    rng = rng or random.Random()
    slots = build_slots(spec)
    eligible = filter_candidates(
        pool,
        vegetarian_only=spec.vegetarian_only,
        avoid_repeats=spec.avoid_repeats,
        today=today,
    )
    open_dates = [slot.date for slot in slots if not slot.is_skipped]
    if spec.prefer_simple:
        eligible = _prefer_simple(eligible, len(open_dates))

    if not eligible:
        logger.info("Nothing to suggest: no eligible recipes for %s", spec.start_date)
        return slots

    adapter = _resolve_adapter(ai_adapter)
    if adapter is not None and open_dates:
        mapping = adapter.suggest(eligible, history, open_dates)
        if mapping:
            metrics.SUGGESTION_RUNS.labels(source="ai").inc()
            logger.info("AI suggestions filled %s of %s day(s)", len(mapping), len(open_dates))
            return _merge_ai_assignment(slots, eligible, mapping, rng)

    metrics.SUGGESTION_RUNS.labels(source="heuristic").inc()
    return assign_week(spec, eligible, rng=rng)


def get_alternative_suggestion(
    target_date: date | str,
    pool: Iterable[CandidateRecipe],
    exclude_ids: Collection[str] = (),
    *,
    avoid_repeats: bool = True,
    vegetarian_only: bool = False,
    prefer_simple: bool = False,
    history: Sequence[UsageRecord] = (),
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
    ai_adapter: object = _FROM_SETTINGS,
) -> Optional[CandidateRecipe]:
    """Return one replacement recipe for ``target_date`` or None when nothing is eligible."""

    slot_date = parse_iso_date(target_date)
    recipes = list(pool)
    excluded = set(exclude_ids)

    adapter = _resolve_adapter(ai_adapter)
    if adapter is not None:
        eligible = filter_candidates(
            recipes,
            vegetarian_only=vegetarian_only,
            avoid_repeats=avoid_repeats,
            today=today,
        )
        remaining = rank_alternatives(
            [recipe for recipe in eligible if recipe.id not in excluded],
            prefer_simple=prefer_simple,
        )
        if not remaining:
            return None
        mapping = adapter.suggest(remaining, history, [slot_date])
        if mapping and slot_date in mapping:
            metrics.SUGGESTION_RUNS.labels(source="ai").inc()
            chosen = mapping[slot_date]
            return next(recipe for recipe in remaining if recipe.id == chosen)

    metrics.SUGGESTION_RUNS.labels(source="heuristic").inc()
    return select_alternative(
        recipes,
        excluded,
        avoid_repeats=avoid_repeats,
        vegetarian_only=vegetarian_only,
        prefer_simple=prefer_simple,
        today=today,
        rng=rng,
    )


__all__ = ["generate_week_suggestions", "get_alternative_suggestion"]
