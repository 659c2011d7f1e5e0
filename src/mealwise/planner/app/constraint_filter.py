"""Rule-based eligibility filter backing the meal suggestion engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from mealwise.models.recipe import CandidateRecipe

logger = logging.getLogger(__name__)

MIN_LOOKBACK_DAYS = 3
MAX_LOOKBACK_DAYS = 10


def lookback_window_days(pool_size: int) -> int:
    """Return the repeat-avoidance window for a pool of ``pool_size`` recipes.

    The window shrinks with the library so small collections still have options:
    ``clamp(pool_size // 2, 3, 10)``.
    """
    return max(MIN_LOOKBACK_DAYS, min(max(pool_size, 0) // 2, MAX_LOOKBACK_DAYS))


@dataclass(frozen=True)
class RuleResult:
    """Outcome of applying an individual rule to a recipe."""

    name: str
    passed: bool
    details: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FilterSnapshot:
    """Request-scoped values shared across rule evaluations."""

    vegetarian_only: bool
    avoid_repeats: bool
    current_date: date
    window_days: int

    @property
    def cutoff(self) -> date:
        return self.current_date - timedelta(days=self.window_days)


class ConstraintRule:
    """Base class contract for all eligibility rules."""

    name: str

    def evaluate(self, recipe: CandidateRecipe, snapshot: FilterSnapshot) -> RuleResult:
        raise NotImplementedError


class VegetarianRule(ConstraintRule):
    name = "vegetarian_only"

    def evaluate(self, recipe: CandidateRecipe, snapshot: FilterSnapshot) -> RuleResult:
        if not snapshot.vegetarian_only or recipe.is_vegetarian:
            return RuleResult(self.name, True)
        return RuleResult(self.name, False, details=("recipe is not vegetarian",))


class RepeatWindowRule(ConstraintRule):
    name = "repeat_window"

    def evaluate(self, recipe: CandidateRecipe, snapshot: FilterSnapshot) -> RuleResult:
        if not snapshot.avoid_repeats or recipe.last_used_date is None:
            return RuleResult(self.name, True)
        if recipe.last_used_date < snapshot.cutoff:
            return RuleResult(self.name, True)
        return RuleResult(
            self.name,
            False,
            details=(
                f"used on {recipe.last_used_date.isoformat()}, "
                f"within {snapshot.window_days}-day window",
            ),
        )


class ConstraintFilter:
    """Evaluate candidate recipes against hard eligibility rules."""

    def __init__(self, rules: Optional[Sequence[ConstraintRule]] = None) -> None:
        self._rules = tuple(rules) if rules is not None else (VegetarianRule(), RepeatWindowRule())

    def is_eligible(self, recipe: CandidateRecipe, snapshot: FilterSnapshot) -> bool:
        for rule in self._rules:
            result = rule.evaluate(recipe, snapshot)
            if not result.passed:
                logger.debug("Recipe %s rejected by %s: %s", recipe.id, rule.name, result.details)
                return False
        return True

    def apply(
        self,
        pool: Iterable[CandidateRecipe],
        *,
        vegetarian_only: bool,
        avoid_repeats: bool,
        today: Optional[date] = None,
    ) -> List[CandidateRecipe]:
        """Return the eligible subset of ``pool`` in input order."""
        recipes = list(pool)
        snapshot = FilterSnapshot(
            vegetarian_only=vegetarian_only,
            avoid_repeats=avoid_repeats,
            current_date=today or date.today(),
            window_days=lookback_window_days(len(recipes)),
        )
        eligible = [recipe for recipe in recipes if self.is_eligible(recipe, snapshot)]
        logger.debug(
            "Constraint filter kept %s of %s recipe(s) (window=%sd vegetarian_only=%s avoid_repeats=%s)",
            len(eligible),
            len(recipes),
            snapshot.window_days,
            vegetarian_only,
            avoid_repeats,
        )
        return eligible


def filter_candidates(
    pool: Iterable[CandidateRecipe],
    *,
    vegetarian_only: bool = False,
    avoid_repeats: bool = True,
    today: Optional[date] = None,
) -> List[CandidateRecipe]:
    """Filter a recipe pool with the default rule set."""
    return ConstraintFilter().apply(
        pool,
        vegetarian_only=vegetarian_only,
        avoid_repeats=avoid_repeats,
        today=today,
    )


__all__ = [
    "ConstraintFilter",
    "ConstraintRule",
    "FilterSnapshot",
    "RepeatWindowRule",
    "RuleResult",
    "VegetarianRule",
    "filter_candidates",
    "lookback_window_days",
]
