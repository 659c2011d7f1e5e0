"""Eligibility filter tests."""

from __future__ import annotations

from datetime import timedelta

import pytest

from mealwise.planner.app.constraint_filter import (
    ConstraintFilter,
    FilterSnapshot,
    RepeatWindowRule,
    filter_candidates,
    lookback_window_days,
)
from tests.factories import make_recipe


@pytest.mark.parametrize(
    ("pool_size", "expected"),
    [(0, 3), (1, 3), (5, 3), (6, 3), (7, 3), (8, 4), (12, 6), (20, 10), (21, 10), (200, 10)],
)
def test_lookback_window_clamps_half_the_pool(pool_size, expected):
    assert lookback_window_days(pool_size) == expected


def test_filter_returns_subset_in_input_order(recipe_pool, today):
    eligible = filter_candidates(recipe_pool, vegetarian_only=True, today=today)

    assert [recipe.id for recipe in eligible] == ["r1", "r3", "r5", "r7"]
    assert all(recipe in recipe_pool for recipe in eligible)


def test_filter_without_constraints_keeps_everything(recipe_pool, today):
    assert filter_candidates(recipe_pool, avoid_repeats=False, today=today) == recipe_pool


def test_repeat_window_excludes_recent_and_keeps_older_recipes(today):
    # Four recipes -> three-day window -> cutoff is today - 3 days.
    pool = [
        make_recipe("never"),
        make_recipe("yesterday", last_used_date=today - timedelta(days=1)),
        make_recipe("at-cutoff", last_used_date=today - timedelta(days=3)),
        make_recipe("before-cutoff", last_used_date=today - timedelta(days=4)),
    ]

    eligible = filter_candidates(pool, today=today)

    assert [recipe.id for recipe in eligible] == ["never", "before-cutoff"]


def test_repeat_window_excludes_future_planned_recipes(today):
    pool = [make_recipe("planned", last_used_date=today + timedelta(days=2)), make_recipe("free")]

    eligible = filter_candidates(pool, today=today)

    assert [recipe.id for recipe in eligible] == ["free"]


def test_repeat_window_scales_with_pool_size(today):
    used_five_days_ago = make_recipe("target", last_used_date=today - timedelta(days=5))
    small_pool = [used_five_days_ago] + [make_recipe(f"s{i}") for i in range(3)]
    large_pool = [used_five_days_ago] + [make_recipe(f"l{i}") for i in range(19)]

    assert "target" in {r.id for r in filter_candidates(small_pool, today=today)}
    assert "target" not in {r.id for r in filter_candidates(large_pool, today=today)}


def test_avoid_repeats_disabled_ignores_last_used(today):
    pool = [make_recipe("recent", last_used_date=today)]

    assert filter_candidates(pool, avoid_repeats=False, today=today) == pool


def test_empty_pool_is_valid(today):
    assert filter_candidates([], vegetarian_only=True, today=today) == []


def test_custom_rule_set_only_applies_given_rules(recipe_pool, today):
    engine = ConstraintFilter(rules=[RepeatWindowRule()])

    eligible = engine.apply(recipe_pool, vegetarian_only=True, avoid_repeats=True, today=today)

    assert eligible == recipe_pool


def test_rule_reports_rejection_details(today):
    snapshot = FilterSnapshot(
        vegetarian_only=False,
        avoid_repeats=True,
        current_date=today,
        window_days=3,
    )
    result = RepeatWindowRule().evaluate(make_recipe("x", last_used_date=today), snapshot)

    assert result.passed is False
    assert "3-day window" in result.details[0]
