"""LLM HTTP client tests; httpx is replaced by dummy context-manager clients."""

from __future__ import annotations

import httpx
import pytest

from mealwise.config import get_settings
from mealwise.errors import ExternalServiceUnavailable
from mealwise.llm.client import HttpCompletionClient, build_llm_client, extract_json_array


class _Response:
    def __init__(self, body, status_code: int = 200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("POST", "http://llm.test")
            raise httpx.HTTPStatusError(
                "server error",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


def _install(monkeypatch, body=None, *, status_code=200, error=None):
    captured: dict[str, object] = {}

    class DummyClient:
        def __init__(self, *args, **kwargs):
            captured["timeout"] = kwargs.get("timeout")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def post(self, url, json=None, headers=None):
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if error is not None:
                raise error
            return _Response(body, status_code)

    monkeypatch.setattr("mealwise.llm.client.httpx.Client", DummyClient)
    return captured


def test_openai_request_shape(monkeypatch):
    captured = _install(monkeypatch, {"choices": [{"message": {"content": " [] "}}]})
    client = HttpCompletionClient(
        base_url="http://llm.test/v1/",
        model="test-model",
        api_key="sk-test",
        max_tokens=256,
        timeout=5,
    )

    assert client.complete("sys", "user") == "[]"
    assert captured["url"] == "http://llm.test/v1/chat/completions"
    assert captured["payload"]["model"] == "test-model"
    assert captured["payload"]["max_tokens"] == 256
    assert captured["payload"]["messages"][0] == {"role": "system", "content": "sys"}
    assert captured["headers"] == {"Authorization": "Bearer sk-test"}
    assert captured["timeout"] == 5


def test_ollama_request_shape(monkeypatch):
    captured = _install(monkeypatch, {"message": {"content": "hello"}})
    client = HttpCompletionClient(base_url="http://ollama:11434", model="llama3", provider="ollama")

    assert client.complete("sys", "user", max_tokens=99) == "hello"
    assert captured["url"] == "http://ollama:11434/api/chat"
    assert captured["payload"]["stream"] is False
    assert captured["payload"]["options"]["num_predict"] == 99


def test_anthropic_request_shape(monkeypatch):
    body = {"content": [{"type": "text", "text": "[1"}, {"type": "text", "text": "]"}]}
    captured = _install(monkeypatch, body)
    client = HttpCompletionClient(
        base_url="https://api.anthropic.com",
        model="claude-test",
        provider="anthropic",
        api_key="ak-test",
    )

    assert client.complete("sys", "user") == "[1]"
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["payload"]["system"] == "sys"
    assert captured["headers"]["x-api-key"] == "ak-test"
    assert captured["headers"]["anthropic-version"] == "2023-06-01"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"error": httpx.ReadTimeout("slow")},
        {"error": httpx.ConnectError("refused")},
        {"body": {"choices": []}},
        {"body": {"choices": [{"message": {"content": "ok"}}]}, "status_code": 503},
        {"body": ValueError("not json")},
        {"body": {"choices": [{"message": "oops"}]}},
        {"body": {"choices": {"0": {"message": {"content": "ok"}}}}},
        {"body": {"choices": [{"message": {"content": ["ok"]}}]}},
        {"body": ["not", "an", "object"]},
    ],
)
def test_failures_raise_external_service_unavailable(monkeypatch, kwargs):
    _install(monkeypatch, **kwargs)
    client = HttpCompletionClient(base_url="http://llm.test/v1", model="m")

    with pytest.raises(ExternalServiceUnavailable):
        client.complete("sys", "user")


@pytest.mark.parametrize(
    "provider, body",
    [
        ("ollama", {"message": "oops"}),
        ("ollama", {"message": {"content": 42}}),
        ("anthropic", {"content": "plain string"}),
        ("anthropic", {"content": [{"type": "text", "text": None}, "junk"]}),
    ],
)
def test_off_shape_provider_bodies_raise_external_service_unavailable(monkeypatch, provider, body):
    _install(monkeypatch, body)
    client = HttpCompletionClient(base_url="http://llm.test", model="m", provider=provider)

    with pytest.raises(ExternalServiceUnavailable):
        client.complete("sys", "user")


def test_extract_json_array_variants():
    assert extract_json_array('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'
    assert extract_json_array('Sure! [1, 2] done') == "[1, 2]"
    assert extract_json_array("no array here") == "no array here"


def test_build_llm_client_from_settings(monkeypatch):
    assert build_llm_client() is None

    monkeypatch.setenv("MEALWISE_LLM_BASE_URL", "http://llm.test/v1")
    monkeypatch.setenv("MEALWISE_LLM_PROVIDER", "Ollama")
    get_settings.cache_clear()
    client = build_llm_client()
    assert client is not None
    assert client.provider == "ollama"


def test_build_llm_client_defaults_anthropic_url(monkeypatch):
    monkeypatch.setenv("MEALWISE_LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak-env")
    get_settings.cache_clear()
    captured = _install(monkeypatch, {"content": [{"type": "text", "text": "hi"}]})

    client = build_llm_client()

    assert client is not None
    assert client.complete("sys", "user") == "hi"
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["headers"]["x-api-key"] == "ak-env"
