"""Weekly slot assignment and single-slot alternative selection."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, timezone
from typing import Collection, Iterable, List, Optional, Sequence

from mealwise.models.recipe import CandidateRecipe
from mealwise.models.suggestion import DAY_NAMES, SKIPPED_LABEL, ConstraintSpec, DaySuggestion

from .constraint_filter import filter_candidates
from .utils import span_dates, validate_skip_slots

logger = logging.getLogger(__name__)

ALTERNATIVE_POOL_SIZE = 10
ALTERNATIVE_PICK_SIZE = 5

_COMPLEXITY_ORDER = {"simple": 0, "medium": 1, "complex": 2}
_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def build_slots(spec: ConstraintSpec) -> List[DaySuggestion]:
    """Create the empty slot list for ``spec``, labelling skipped days."""

    validate_skip_slots(spec)
    skipped = set(spec.days_to_skip)
    slots: List[DaySuggestion] = []
    for index, slot_date in enumerate(span_dates(spec.start_date, spec.days)):
        is_skipped = index in skipped
        slots.append(
            DaySuggestion(
                date=slot_date,
                day_of_week=index,
                day_name=DAY_NAMES[index % len(DAY_NAMES)],
                label=SKIPPED_LABEL if is_skipped else None,
                is_skipped=is_skipped,
            )
        )
    return slots


def assign_week(
    spec: ConstraintSpec,
    eligible: Sequence[CandidateRecipe],
    *,
    rng: Optional[random.Random] = None,
) -> List[DaySuggestion]:
    """Distribute ``eligible`` recipes across the non-skipped slots of ``spec``.

    The eligible list is shuffled with ``rng`` and walked in order. When slots outnumber
    recipes the walk wraps around, so repeats only occur once every recipe has been used.
    An empty eligible list leaves every non-skipped slot unassigned.
    """

    slots = build_slots(spec)
    if not eligible:
        return slots

    shuffled = list(eligible)
    (rng or random.Random()).shuffle(shuffled)

    assigned: List[DaySuggestion] = []
    cursor = 0
    for slot in slots:
        if slot.is_skipped:
            assigned.append(slot)
            continue
        assigned.append(slot.with_recipe(shuffled[cursor % len(shuffled)]))
        cursor += 1

    if cursor > len(shuffled):
        logger.info(
            "Weekly assignment wrapped around: %s slot(s) for %s eligible recipe(s)",
            cursor,
            len(shuffled),
        )
    return assigned


def complexity_rank(recipe: CandidateRecipe) -> int:
    """Sort key placing simple recipes first and untiered recipes last."""
    return _COMPLEXITY_ORDER.get(recipe.complexity or "", len(_COMPLEXITY_ORDER))


def _recency_key(recipe: CandidateRecipe) -> datetime:
    stamp = recipe.updated_at
    if stamp is None:
        return _NEVER
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp


def rank_alternatives(
    candidates: Iterable[CandidateRecipe],
    *,
    prefer_simple: bool = False,
) -> List[CandidateRecipe]:
    """Order candidates most-recently-updated first (simplest first when requested)."""

    ordered = sorted(candidates, key=_recency_key, reverse=True)
    if prefer_simple:
        ordered.sort(key=complexity_rank)
    return ordered[:ALTERNATIVE_POOL_SIZE]


def select_alternative(
    pool: Iterable[CandidateRecipe],
    exclude_ids: Collection[str] = (),
    *,
    avoid_repeats: bool = True,
    vegetarian_only: bool = False,
    prefer_simple: bool = False,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> Optional[CandidateRecipe]:
    """Pick one replacement recipe, or None when nothing remains after filtering."""

    excluded = set(exclude_ids)
    eligible = filter_candidates(
        pool,
        vegetarian_only=vegetarian_only,
        avoid_repeats=avoid_repeats,
        today=today,
    )
    remaining = [recipe for recipe in eligible if recipe.id not in excluded]
    if not remaining:
        return None

    top = rank_alternatives(remaining, prefer_simple=prefer_simple)
    picks = top[:ALTERNATIVE_PICK_SIZE]
    return (rng or random.Random()).choice(picks)


__all__ = [
    "ALTERNATIVE_PICK_SIZE",
    "ALTERNATIVE_POOL_SIZE",
    "assign_week",
    "build_slots",
    "complexity_rank",
    "rank_alternatives",
    "select_alternative",
]
