"""Prometheus metrics definitions for Mealwise."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "mealwise_http_requests_total",
    "Total number of HTTP requests processed by the Mealwise API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "mealwise_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Mealwise API",
    ["method", "path"],
)

SUGGESTION_RUNS = Counter(
    "mealwise_suggestion_runs_total",
    "Weekly suggestion and alternative runs by the path that produced them",
    ["source"],
)

INGREDIENT_EXTRACTIONS = Counter(
    "mealwise_ingredient_extractions_total",
    "Ingredient extraction passes by the strategy that produced them",
    ["strategy"],
)

LLM_CALLS = Counter(
    "mealwise_llm_calls_total",
    "Outbound LLM calls by feature and outcome",
    ["feature", "outcome"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SUGGESTION_RUNS",
    "INGREDIENT_EXTRACTIONS",
    "LLM_CALLS",
]
