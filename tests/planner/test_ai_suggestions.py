"""LLM suggestion adapter tests (stub completion clients, no network)."""

from __future__ import annotations

import json
from datetime import date

import pytest

from mealwise.config import get_settings
from mealwise.errors import ExternalServiceUnavailable
from mealwise.models.recipe import UsageRecord
from mealwise.planner.app.ai_suggestions import (
    AISuggestionAdapter,
    build_suggestion_adapter,
    validate_assignments,
)
from tests.factories import make_recipe

DATES = [date(2025, 3, 10), date(2025, 3, 11)]


class StubClient:
    def __init__(self, reply: str | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(self, system, user, *, max_tokens=None):
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def eligible():
    return [
        make_recipe("a", title="Pad Thai", tags=["thai"], complexity="medium"),
        make_recipe("b", title="Fish Tacos", tags=["mexican"], last_used_date=date(2025, 2, 1)),
        make_recipe("c", title="Dal", tags=["indian"], complexity="simple"),
    ]


def test_suggest_returns_validated_mapping(eligible):
    reply = json.dumps(
        [
            {"date": "2025-03-10", "recipeId": "c"},
            {"date": "2025-03-11", "recipeId": "a"},
        ]
    )
    adapter = AISuggestionAdapter(StubClient(reply))

    assert adapter.suggest(eligible, [], DATES) == {DATES[0]: "c", DATES[1]: "a"}


def test_suggest_accepts_fenced_json(eligible):
    reply = 'Here you go:\n```json\n[{"date": "2025-03-10", "recipeId": "b"}]\n```'
    adapter = AISuggestionAdapter(StubClient(reply))

    assert adapter.suggest(eligible, [], DATES) == {DATES[0]: "b"}


def test_suggest_drops_unknown_ids_and_unrequested_dates(eligible):
    reply = json.dumps(
        [
            {"date": "2025-03-10", "recipeId": "zzz"},
            {"date": "2025-03-20", "recipeId": "a"},
            {"date": "not-a-date", "recipeId": "a"},
            {"date": "2025-03-11", "recipeId": "b"},
        ]
    )
    adapter = AISuggestionAdapter(StubClient(reply))

    assert adapter.suggest(eligible, [], DATES) == {DATES[1]: "b"}


@pytest.mark.parametrize(
    "reply",
    [
        "I cannot help with that.",
        json.dumps({"date": "2025-03-10", "recipeId": "a"}),
        json.dumps(["a", "b"]),
        json.dumps([{"date": "2025-03-10", "recipeId": "zzz"}]),
        "[]",
    ],
)
def test_suggest_returns_none_for_unusable_replies(eligible, reply):
    adapter = AISuggestionAdapter(StubClient(reply))

    assert adapter.suggest(eligible, [], DATES) is None


def test_suggest_returns_none_when_client_unavailable(eligible):
    adapter = AISuggestionAdapter(StubClient(error=ExternalServiceUnavailable("timeout")))

    assert adapter.suggest(eligible, [], DATES) is None


def test_suggest_skips_call_without_recipes_or_dates(eligible):
    client = StubClient("[]")
    adapter = AISuggestionAdapter(client)

    assert adapter.suggest([], [], DATES) is None
    assert adapter.suggest(eligible, [], []) is None
    assert client.calls == []


def test_prompt_summarises_recipes_history_and_days(eligible):
    history = [
        UsageRecord(recipe_id="a", title="Pad Thai", date=date(2025, 3, 2), tags=["thai"]),
        UsageRecord(recipe_id="a", title="Pad Thai", date=date(2025, 3, 6), tags=["thai"]),
    ]
    adapter = AISuggestionAdapter(StubClient("[]"), history_days=14)

    prompt = adapter.build_prompt(eligible, history, DATES)

    assert "Monday (2025-03-10)" in prompt
    assert "Tuesday (2025-03-11)" in prompt
    assert '"recentPlanCount":2' in prompt
    assert '"lastUsed":"never"' in prompt
    assert '"lastUsed":"2025-02-01"' in prompt
    assert "2025-03-06: Pad Thai [thai]" in prompt
    assert "last 14 days" in prompt


def test_prompt_caps_recipe_summaries():
    pool = [make_recipe(f"r{i}", title=f"Dish {i}") for i in range(8)]
    adapter = AISuggestionAdapter(StubClient("[]"), recipe_limit=3)

    prompt = adapter.build_prompt(pool, [], DATES)

    assert "Dish 2" in prompt
    assert "Dish 3" not in prompt


def test_validate_assignments_keeps_last_entry_per_date():
    entries = [
        {"date": "2025-03-10", "recipeId": "a"},
        {"date": "2025-03-10", "recipeId": "b"},
        "garbage",
    ]

    mapping = validate_assignments(entries, eligible_ids={"a", "b"}, dates=DATES)

    assert mapping == {DATES[0]: "b"}


def test_build_adapter_requires_flag_and_endpoint(monkeypatch):
    assert build_suggestion_adapter() is None

    monkeypatch.setenv("MEALWISE_AI_SUGGESTIONS_ENABLED", "true")
    get_settings.cache_clear()
    assert build_suggestion_adapter() is None

    monkeypatch.setenv("MEALWISE_LLM_BASE_URL", "http://llm.test/v1")
    get_settings.cache_clear()
    assert isinstance(build_suggestion_adapter(), AISuggestionAdapter)
