"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/mealwise.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for authenticated endpoints.",
    )
    default_owner: str = Field(
        default="household",
        description="Owner id used when requests do not carry an X-Owner-ID header.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        description="LLM base URL (OpenAI-compatible runtime, Ollama or Anthropic).",
    )
    llm_provider: str = Field(
        default="openai",
        description="LLM provider (openai, ollama or anthropic).",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier passed to the LLM endpoint.",
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="API key sent to the LLM endpoint when required.",
    )
    llm_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for LLM calls.",
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Maximum tokens to request for suggestion calls.",
    )
    llm_timeout_seconds: float = Field(
        default=20.0,
        description="Timeout applied to every outbound LLM request.",
    )
    ai_suggestions_enabled: bool = Field(
        default=False,
        description="Refine weekly suggestions with the LLM when true.",
    )
    ai_extraction_enabled: bool = Field(
        default=False,
        description="Parse recipe ingredients with the LLM before the heuristic parser.",
    )
    extraction_max_tokens: int = Field(
        default=4096,
        description="Maximum tokens to request for ingredient extraction calls.",
    )
    suggestion_history_days: int = Field(
        default=14,
        description="Days of plan history shared with the LLM as context.",
    )
    suggestion_recipe_limit: int = Field(
        default=50,
        description="Maximum number of recipe summaries included in suggestion prompts.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip().strip('"').strip("'")
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


# env var -> (settings field, converter)
_ENV_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "MEALWISE_DATABASE_PATH": ("database_path", Path),
    "MEALWISE_API_TOKEN": ("api_token", str),
    "MEALWISE_DEFAULT_OWNER": ("default_owner", str),
    "MEALWISE_LOG_LEVEL": ("log_level", str),
    "MEALWISE_LOG_FORMAT": ("log_format", str),
    "MEALWISE_LOG_REQUESTS": ("log_requests", _coerce_bool),
    "MEALWISE_LLM_BASE_URL": ("llm_base_url", str),
    "MEALWISE_LLM_PROVIDER": ("llm_provider", str),
    "MEALWISE_LLM_MODEL": ("llm_model", str),
    "MEALWISE_LLM_API_KEY": ("llm_api_key", str),
    "MEALWISE_LLM_TEMPERATURE": ("llm_temperature", float),
    "MEALWISE_LLM_MAX_TOKENS": ("llm_max_tokens", int),
    "MEALWISE_LLM_TIMEOUT": ("llm_timeout_seconds", float),
    "MEALWISE_AI_SUGGESTIONS_ENABLED": ("ai_suggestions_enabled", _coerce_bool),
    "MEALWISE_AI_EXTRACTION_ENABLED": ("ai_extraction_enabled", _coerce_bool),
    "MEALWISE_EXTRACTION_MAX_TOKENS": ("extraction_max_tokens", int),
    "MEALWISE_SUGGESTION_HISTORY_DAYS": ("suggestion_history_days", int),
    "MEALWISE_SUGGESTION_RECIPE_LIMIT": ("suggestion_recipe_limit", int),
}


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    for env_key, (field_name, convert) in _ENV_FIELDS.items():
        raw_value = _env(env_key)
        if not raw_value:
            continue
        try:
            payload[field_name] = convert(raw_value)
        except ValueError:
            continue
    # ANTHROPIC_API_KEY is honoured when no dedicated key is configured.
    if "llm_api_key" not in payload and (anthropic_key := _env("ANTHROPIC_API_KEY")):
        payload["llm_api_key"] = anthropic_key
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
