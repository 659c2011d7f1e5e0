"""LLM-backed refinement of weekly recipe assignment."""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from mealwise import metrics
from mealwise.config import get_settings
from mealwise.errors import ExternalServiceUnavailable
from mealwise.llm.client import CompletionClient, build_llm_client, extract_json_array
from mealwise.models.recipe import CandidateRecipe, UsageRecord
from mealwise.models.suggestion import DAY_NAMES

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a meal planning assistant. Pick one recipe per requested day from the "
    "provided list. Respond with ONLY a JSON array like "
    '[{"date": "YYYY-MM-DD", "recipeId": "..."}]. '
    "No explanation, no markdown fences."
)

USER_PROMPT_TEMPLATE = (
    "DAYS TO FILL: {days}\n\n"
    "AVAILABLE RECIPES (JSON):\n{recipes_json}\n\n"
    "RECENT MEAL HISTORY (last {history_days} days):\n{history}\n\n"
    "RULES:\n"
    "- Pick one recipe per day from the list above. Use each recipe at most once.\n"
    "- Prefer recipes with lower recentPlanCount and older/no lastUsed date.\n"
    "- Ensure cuisine diversity (check tags, avoid 3+ same-cuisine in a row).\n"
    "- Pair complementary meals (light after heavy, vary complexity across the week).\n"
    "- Only use recipe ids and dates that appear above."
)


def _format_day(value: date) -> str:
    return f"{DAY_NAMES[value.weekday()]} ({value.isoformat()})"


def _format_history(history: Sequence[UsageRecord]) -> str:
    if not history:
        return "None"
    ordered = sorted(history, key=lambda record: record.date, reverse=True)
    return "\n".join(
        f"{record.date.isoformat()}: {record.title} [{', '.join(record.tags)}]"
        for record in ordered
    )


class AISuggestionAdapter:
    """Ask the LLM for a date -> recipe mapping and validate it against the request."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        recipe_limit: int = 50,
        history_days: int = 14,
        max_tokens: Optional[int] = None,
    ) -> None:
        self._client = client
        self._recipe_limit = max(1, recipe_limit)
        self._history_days = history_days
        self._max_tokens = max_tokens

    def build_prompt(
        self,
        eligible: Sequence[CandidateRecipe],
        history: Sequence[UsageRecord],
        dates: Sequence[date],
    ) -> str:
        plan_counts = Counter(record.recipe_id for record in history)
        summaries = [
            {
                "id": recipe.id,
                "title": recipe.title,
                "tags": list(recipe.tags),
                "complexity": recipe.complexity or "medium",
                "lastUsed": recipe.last_used_date.isoformat() if recipe.last_used_date else "never",
                "recentPlanCount": plan_counts.get(recipe.id, 0),
            }
            for recipe in list(eligible)[: self._recipe_limit]
        ]
        return USER_PROMPT_TEMPLATE.format(
            days=", ".join(_format_day(value) for value in dates),
            recipes_json=json.dumps(summaries, ensure_ascii=False, separators=(",", ":")),
            history_days=self._history_days,
            history=_format_history(history),
        )

    def suggest(
        self,
        eligible: Sequence[CandidateRecipe],
        history: Sequence[UsageRecord],
        dates: Sequence[date],
    ) -> Optional[dict[date, str]]:
        """Return a validated mapping, or None when the LLM path is unavailable."""

        if not eligible or not dates:
            return None

        prompt = self.build_prompt(eligible, history, dates)
        try:
            content = self._client.complete(SYSTEM_PROMPT, prompt, max_tokens=self._max_tokens)
        except ExternalServiceUnavailable as exc:
            logger.warning("AI suggestion call failed; using heuristic assignment: %s", exc)
            metrics.LLM_CALLS.labels(feature="suggestions", outcome="unavailable").inc()
            return None

        try:
            entries = json.loads(extract_json_array(content))
        except json.JSONDecodeError as exc:
            snippet = content.strip().replace("\n", " ")[:200]
            logger.warning("AI suggestion response was not JSON (%s); payload=%s", exc, snippet)
            metrics.LLM_CALLS.labels(feature="suggestions", outcome="invalid").inc()
            return None
        if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
            logger.warning("AI suggestion response was not an array of objects; ignoring it")
            metrics.LLM_CALLS.labels(feature="suggestions", outcome="invalid").inc()
            return None

        mapping = validate_assignments(entries, eligible_ids={r.id for r in eligible}, dates=dates)
        if not mapping:
            logger.warning("AI suggestion response contained no usable entries")
            metrics.LLM_CALLS.labels(feature="suggestions", outcome="empty").inc()
            return None

        metrics.LLM_CALLS.labels(feature="suggestions", outcome="ok").inc()
        return mapping


def validate_assignments(
    entries: Iterable[object],
    *,
    eligible_ids: set[str],
    dates: Sequence[date],
) -> dict[date, str]:
    """Keep entries whose date was requested and whose recipe id is eligible."""

    requested = set(dates)
    mapping: dict[date, str] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.debug("Dropping non-object AI entry %r", entry)
            continue
        recipe_id = str(entry.get("recipeId") or "").strip()
        try:
            entry_date = date.fromisoformat(str(entry.get("date") or "").strip())
        except ValueError:
            logger.debug("Dropping AI entry with malformed date %r", entry.get("date"))
            continue
        if entry_date not in requested:
            logger.debug("Dropping AI entry for unrequested date %s", entry_date)
            continue
        if recipe_id not in eligible_ids:
            logger.debug("Dropping AI entry with unknown recipe id %r", recipe_id)
            continue
        mapping[entry_date] = recipe_id
    return mapping


def build_suggestion_adapter() -> AISuggestionAdapter | None:
    """Create the adapter when AI suggestions are enabled and an endpoint is configured."""

    settings = get_settings()
    if not settings.ai_suggestions_enabled:
        return None
    client = build_llm_client()
    if client is None:
        return None
    return AISuggestionAdapter(
        client,
        recipe_limit=settings.suggestion_recipe_limit,
        history_days=settings.suggestion_history_days,
    )


__all__ = ["AISuggestionAdapter", "build_suggestion_adapter", "validate_assignments"]
