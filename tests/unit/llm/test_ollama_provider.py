from __future__ import annotations

import pytest
import requests

import leadengine.llm.ollama as ollama_module
from leadengine.core.exceptions import ProviderResponseError, ProviderTimeoutError
from leadengine.llm.ollama import OllamaProvider
from leadengine.llm.provider import ChatTurn, GenerationOptions


class _Response:
    def __init__(self, body, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


def _provider(**overrides) -> OllamaProvider:
    options = {
        "url": "http://ollama.internal:11434/api/chat",
        "model": "qwen2.5:7b",
        "timeout_seconds": 5,
        "max_retries": 0,
        "min_interval_seconds": 0,
    }
    options.update(overrides)
    return OllamaProvider(**options)


def test_classify_urgency_parses_json_and_clamps(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append((url, json, timeout))
        return _Response({"message": {"content": '{"score": 140, "reasoning": "Ready to buy"}'}})

    monkeypatch.setattr(ollama_module.requests, "post", fake_post)
    result = _provider().classify_urgency("Need it today", [ChatTurn(role="user", content="earlier")])

    assert result.score == 100
    assert result.reasoning == "Ready to buy"
    url, payload, timeout = calls[0]
    assert payload["format"] == "json"
    assert payload["stream"] is False
    assert "Context: earlier" in payload["messages"][1]["content"]
    assert timeout == (2, 5)


def test_classify_urgency_rejects_non_json(monkeypatch):
    monkeypatch.setattr(
        ollama_module.requests, "post", lambda url, json, timeout: _Response({"message": {"content": "very hot"}})
    )
    with pytest.raises(ProviderResponseError):
        _provider().classify_urgency("hi", [])


def test_generate_reply_sends_history_and_counts_tokens(monkeypatch):
    sent = {}

    def fake_post(url, json, timeout):
        sent.update(json)
        return _Response({"message": {"content": "  Sure thing.  "}, "prompt_eval_count": 30, "eval_count": 12})

    monkeypatch.setattr(ollama_module.requests, "post", fake_post)
    reply = _provider().generate_reply(
        "system text",
        [ChatTurn(role="user", content="hi"), ChatTurn(role="assistant", content="hello")],
        "price?",
        GenerationOptions(model="llama3", temperature=0.2, max_tokens=80),
    )

    assert reply.text == "Sure thing."
    assert reply.tokens_used == 42
    assert sent["model"] == "llama3"
    assert [message["role"] for message in sent["messages"]] == ["system", "user", "assistant", "user"]
    assert sent["options"] == {"temperature": 0.2, "num_predict": 80}


def test_empty_reply_is_an_error(monkeypatch):
    monkeypatch.setattr(
        ollama_module.requests, "post", lambda url, json, timeout: _Response({"message": {"content": "   "}})
    )
    with pytest.raises(ProviderResponseError):
        _provider().generate_reply("s", [], "m", GenerationOptions())


def test_timeout_raises_provider_timeout(monkeypatch):
    def fake_post(url, json, timeout):
        raise requests.exceptions.Timeout("read timed out")

    monkeypatch.setattr(ollama_module.requests, "post", fake_post)
    with pytest.raises(ProviderTimeoutError):
        _provider(url="http://localhost:11434/api/chat", max_retries=3).classify_urgency("hi", [])


def test_remote_errors_are_retried(monkeypatch):
    attempts = []

    def fake_post(url, json, timeout):
        attempts.append(1)
        if len(attempts) == 1:
            return _Response({}, status_code=503)
        return _Response({"message": {"content": '{"score": 30, "reasoning": "curious"}'}})

    monkeypatch.setattr(ollama_module.requests, "post", fake_post)
    monkeypatch.setattr(ollama_module.time, "sleep", lambda seconds: None)
    result = _provider(max_retries=1).classify_urgency("hi", [])

    assert len(attempts) == 2
    assert result.score == 30


def test_missing_message_object_is_an_error(monkeypatch):
    monkeypatch.setattr(ollama_module.requests, "post", lambda url, json, timeout: _Response({"done": True}))
    with pytest.raises(ProviderResponseError):
        _provider().classify_urgency("hi", [])
