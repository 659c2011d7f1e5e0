"""HTTP client for the external LLM used by suggestions and ingredient extraction."""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

import httpx

from mealwise.config import get_settings
from mealwise.errors import ExternalServiceUnavailable

logger = logging.getLogger(__name__)

ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
_JSON_ARRAY_BLOCK_RE = re.compile(r"```(?:json)?\s*(\[.*?\])\s*```", re.DOTALL)


class CompletionClient(Protocol):
    """Capability used by the AI strategies; anything with ``complete`` can stand in."""

    def complete(self, system: str, user: str, *, max_tokens: int | None = None) -> str:
        """Return the model's text reply, raising ExternalServiceUnavailable on failure."""


class HttpCompletionClient:
    """Call an OpenAI-compatible, Ollama or Anthropic chat endpoint over httpx."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        provider: str = "openai",
        api_key: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        timeout: float = 20.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._provider = (provider or "openai").strip().lower()
        self._api_key = api_key
        self._temperature = max(0.0, float(temperature))
        self._max_tokens = max(1, int(max_tokens))
        self._timeout = max(0.1, float(timeout))

    @property
    def provider(self) -> str:
        return self._provider

    def complete(self, system: str, user: str, *, max_tokens: int | None = None) -> str:
        tokens = max(1, int(max_tokens)) if max_tokens else self._max_tokens
        if self._provider == "ollama":
            endpoint, payload, headers = self._ollama_request(system, user, tokens)
        elif self._provider == "anthropic":
            endpoint, payload, headers = self._anthropic_request(system, user, tokens)
        else:
            endpoint, payload, headers = self._openai_request(system, user, tokens)

        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(endpoint, json=payload, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise ExternalServiceUnavailable(f"LLM request timed out after {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceUnavailable(f"LLM request failed: {exc}") from exc
        except ValueError as exc:
            raise ExternalServiceUnavailable(f"LLM returned a non-JSON body: {exc}") from exc

        content = self._extract_content(body)
        if not content:
            raise ExternalServiceUnavailable(f"{self._provider} response did not include content.")
        return content

    def _openai_request(self, system: str, user: str, max_tokens: int):
        endpoint = self._base_url
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        payload = {
            "model": self._model,
            "temperature": self._temperature,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        return endpoint, payload, headers

    def _ollama_request(self, system: str, user: str, max_tokens: int):
        endpoint = self._base_url
        if not endpoint.endswith("/api/chat"):
            endpoint = f"{endpoint}/api/chat"
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "num_predict": max_tokens,
            },
        }
        return endpoint, payload, {}

    def _anthropic_request(self, system: str, user: str, max_tokens: int):
        endpoint = self._base_url
        if not endpoint.endswith("/v1/messages"):
            endpoint = f"{endpoint}/v1/messages"
        headers = {"anthropic-version": ANTHROPIC_VERSION}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        payload = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": self._temperature,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }
        return endpoint, payload, headers

    def _extract_content(self, body: object) -> str:
        if not isinstance(body, dict):
            return ""
        if self._provider == "ollama":
            return _message_text(body.get("message"))
        if self._provider == "anthropic":
            blocks = body.get("content")
            if not isinstance(blocks, list):
                return ""
            texts = [
                block["text"]
                for block in blocks
                if isinstance(block, dict)
                and block.get("type") == "text"
                and isinstance(block.get("text"), str)
            ]
            return "".join(texts).strip()
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        return _message_text(choices[0].get("message"))


def _message_text(message: object) -> str:
    """Return a chat message's ``content`` when the reply has the expected shape."""

    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if not isinstance(content, str):
        return ""
    return content.strip()


def extract_json_array(text: str) -> str:
    """Return a JSON array substring from raw LLM text."""

    match = _JSON_ARRAY_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1].strip()
    return text.strip()


def build_llm_client(*, max_tokens: Optional[int] = None) -> HttpCompletionClient | None:
    """Create an LLM client from settings, or None when no endpoint is configured."""

    settings = get_settings()
    provider = (settings.llm_provider or "openai").strip().lower()
    base_url = settings.llm_base_url
    if not base_url and provider == "anthropic" and settings.llm_api_key:
        base_url = ANTHROPIC_DEFAULT_BASE_URL
    if not base_url:
        logger.debug("LLM features enabled but no base URL configured.")
        return None

    return HttpCompletionClient(
        base_url=base_url,
        model=settings.llm_model,
        provider=provider,
        api_key=settings.llm_api_key,
        temperature=settings.llm_temperature,
        max_tokens=max_tokens or settings.llm_max_tokens,
        timeout=settings.llm_timeout_seconds,
    )


__all__ = [
    "CompletionClient",
    "HttpCompletionClient",
    "build_llm_client",
    "extract_json_array",
]
