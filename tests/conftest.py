"""Shared pytest fixtures for the Mealwise test suite."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Generator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mealwise.config import get_settings
from mealwise.db.repository import reset_repository_state
from mealwise.models.recipe import CandidateRecipe
from mealwise.server.app import create_app
from tests.factories import make_recipe

TODAY = date(2025, 3, 10)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def recipe_pool() -> List[CandidateRecipe]:
    """Eight recipes: mixed vegetarian flags, complexity tiers and recency."""

    base = datetime(2025, 3, 1, 12, 0)
    return [
        make_recipe("r1", title="Chickpea Curry", is_vegetarian=True, complexity="simple",
                    updated_at=base + timedelta(days=7)),
        make_recipe("r2", title="Beef Tacos", complexity="medium", updated_at=base + timedelta(days=6)),
        make_recipe("r3", title="Mushroom Risotto", is_vegetarian=True, complexity="complex",
                    updated_at=base + timedelta(days=5)),
        make_recipe("r4", title="Salmon Bowls", complexity="simple", updated_at=base + timedelta(days=4)),
        make_recipe("r5", title="Veggie Lasagna", is_vegetarian=True, complexity="complex",
                    updated_at=base + timedelta(days=3)),
        make_recipe("r6", title="Chicken Stir Fry", complexity="medium", updated_at=base + timedelta(days=2)),
        make_recipe("r7", title="Lentil Soup", is_vegetarian=True, updated_at=base + timedelta(days=1)),
        make_recipe("r8", title="Pork Chops", complexity="medium", updated_at=base),
    ]


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database and no LLM endpoint."""

    db_path = tmp_path / "test_mealwise.db"
    monkeypatch.setenv("MEALWISE_DATABASE_PATH", str(db_path))
    for key in (
        "MEALWISE_API_TOKEN",
        "MEALWISE_LLM_BASE_URL",
        "MEALWISE_LLM_API_KEY",
        "MEALWISE_AI_SUGGESTIONS_ENABLED",
        "MEALWISE_AI_EXTRACTION_ENABLED",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("MEALWISE_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
