"""Recipe and plan store tests."""

from __future__ import annotations

from datetime import date

from mealwise.db.plans import delete_plan, list_plans, list_usage_history, upsert_plan
from mealwise.db.recipes import (
    create_recipe,
    get_recipe,
    get_recipes,
    list_recipes,
    mark_recipes_used,
)

OWNER = "household"


def test_create_and_list_recipes_scoped_by_owner():
    created = create_recipe(
        OWNER,
        title="  Lentil Soup ",
        ingredients_text="1 cup lentils",
        tags=["soup", " ", "vegan"],
        complexity="simple",
        is_vegetarian=True,
    )
    create_recipe("someone-else", title="Steak")

    recipes = list_recipes(OWNER)

    assert [recipe.title for recipe in recipes] == ["Lentil Soup"]
    assert created.id.isdigit()
    assert created.tags == ["soup", "vegan"]
    assert created.updated_at is not None
    assert get_recipe(OWNER, created.id) == created
    assert get_recipe("someone-else", created.id) is None
    assert get_recipe(OWNER, "not-a-number") is None


def test_list_recipes_filters_by_search_and_tag():
    create_recipe(OWNER, title="Chicken Curry", ingredients_text="1 lb chicken", tags=["Indian"])
    create_recipe(OWNER, title="Pasta", ingredients_text="200 g spaghetti\n1 cup chicken stock")
    create_recipe(OWNER, title="Salad", tags=["quick"])

    assert {r.title for r in list_recipes(OWNER, search="chicken")} == {"Chicken Curry", "Pasta"}
    assert [r.title for r in list_recipes(OWNER, tag="indian")] == ["Chicken Curry"]
    assert list_recipes(OWNER, search="chicken", tag="quick") == []


def test_get_recipes_preserves_request_order():
    first = create_recipe(OWNER, title="First")
    second = create_recipe(OWNER, title="Second")

    fetched = get_recipes(OWNER, [second.id, "999", first.id, second.id])

    assert [recipe.title for recipe in fetched] == ["Second", "First"]


def test_mark_recipes_used_overwrites_with_approved_date():
    recipe = create_recipe(OWNER, title="Tacos", last_used_date=date(2025, 3, 1))

    touched = mark_recipes_used(
        OWNER, [(recipe.id, date(2025, 3, 12)), (recipe.id, date(2025, 3, 10))]
    )

    assert touched == 1
    assert get_recipe(OWNER, recipe.id).last_used_date == date(2025, 3, 12)
    assert mark_recipes_used(OWNER, [(recipe.id, date(2025, 2, 1))]) == 1
    assert get_recipe(OWNER, recipe.id).last_used_date == date(2025, 2, 1)
    assert mark_recipes_used(OWNER, []) == 0
    assert mark_recipes_used("someone-else", [(recipe.id, date(2025, 4, 1))]) == 0


def test_upsert_plan_replaces_entry_for_same_date():
    soup = create_recipe(OWNER, title="Soup")
    tacos = create_recipe(OWNER, title="Tacos")

    first = upsert_plan(OWNER, date(2025, 3, 10), recipe_id=soup.id)
    second = upsert_plan(OWNER, date(2025, 3, 10), recipe_id=tacos.id)

    plans = list_plans(OWNER)
    assert len(plans) == 1
    assert second.id == first.id
    assert plans[0].recipe_id == tacos.id
    assert plans[0].recipe.title == "Tacos"

    labelled = upsert_plan(OWNER, date(2025, 3, 10), label="Eating Out")
    assert labelled.recipe_id is None
    assert labelled.recipe is None
    assert labelled.label == "Eating Out"


def test_list_plans_bounds_are_inclusive():
    soup = create_recipe(OWNER, title="Soup")
    for day in (9, 10, 11, 12):
        upsert_plan(OWNER, date(2025, 3, day), recipe_id=soup.id)

    plans = list_plans(OWNER, start=date(2025, 3, 10), end=date(2025, 3, 11))

    assert [plan.date for plan in plans] == [date(2025, 3, 10), date(2025, 3, 11)]


def test_usage_history_only_includes_confirmed_recipe_plans():
    soup = create_recipe(OWNER, title="Soup", tags=["comfort"])
    upsert_plan(OWNER, date(2025, 3, 1), recipe_id=soup.id)
    upsert_plan(OWNER, date(2025, 3, 5), recipe_id=soup.id)
    upsert_plan(OWNER, date(2025, 3, 6), label="Eating Out")
    upsert_plan(OWNER, date(2025, 3, 7), recipe_id=soup.id, is_confirmed=False)

    history = list_usage_history(OWNER, since=date(2025, 3, 2))

    assert [(record.recipe_id, record.date) for record in history] == [(soup.id, date(2025, 3, 5))]
    assert history[0].tags == ["comfort"]


def test_delete_plan_only_removes_the_given_date():
    soup = create_recipe(OWNER, title="Soup")
    upsert_plan(OWNER, date(2025, 3, 10), recipe_id=soup.id)
    upsert_plan(OWNER, date(2025, 3, 11), label="Eating Out")

    assert delete_plan(OWNER, date(2025, 3, 10)) is True
    assert delete_plan(OWNER, date(2025, 3, 10)) is False
    assert delete_plan("someone-else", date(2025, 3, 11)) is False
    assert [plan.date for plan in list_plans(OWNER)] == [date(2025, 3, 11)]
    assert get_recipe(OWNER, soup.id) is not None
