"""Ollama chat API adapter with rate limiting, retries and explicit timeouts."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Sequence

import requests

from leadengine.core.config import get_config
from leadengine.core.exceptions import ProviderResponseError, ProviderTimeoutError
from leadengine.llm.prompts import URGENCY_SYSTEM_PROMPT, render_urgency_prompt
from leadengine.llm.provider import ChatTurn, GenerationOptions, ProviderReply, UrgencyAssessment

logger = logging.getLogger(__name__)
_RATE_LOCK = threading.Lock()
_LAST_REQUEST_TS = 0.0
CONNECT_TIMEOUT_SECONDS = 2


def _apply_rate_limit(min_interval_seconds: float) -> None:
    global _LAST_REQUEST_TS
    if min_interval_seconds <= 0:
        return

    with _RATE_LOCK:
        now = time.monotonic()
        elapsed = now - _LAST_REQUEST_TS
        if elapsed < min_interval_seconds:
            time.sleep(min_interval_seconds - elapsed)
        _LAST_REQUEST_TS = time.monotonic()


class OllamaProvider:
    """``AIProvider`` backed by a local or remote Ollama ``/api/chat`` endpoint."""

    def __init__(
        self,
        url: str | None = None,
        model: str | None = None,
        timeout_seconds: int | None = None,
        max_retries: int | None = None,
        min_interval_seconds: float | None = None,
    ) -> None:
        cfg = get_config()
        self.url = url or cfg.OLLAMA_URL
        self.model = model or cfg.OLLAMA_MODEL
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else cfg.LLM_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else cfg.LLM_MAX_RETRIES
        self.min_interval_seconds = (
            min_interval_seconds if min_interval_seconds is not None else cfg.LLM_MIN_INTERVAL_SECONDS
        )

    @property
    def _is_local(self) -> bool:
        return "localhost" in self.url or "127.0.0.1" in self.url

    def _chat(self, payload: dict[str, Any]) -> dict[str, Any]:
        last_error: Exception | None = None
        total_attempts = self.max_retries + 1

        for attempt in range(1, total_attempts + 1):
            try:
                _apply_rate_limit(self.min_interval_seconds)
                response = requests.post(
                    self.url,
                    json=payload,
                    timeout=(CONNECT_TIMEOUT_SECONDS, self.timeout_seconds),
                )
                response.raise_for_status()
                body = response.json()
                if not isinstance(body, dict) or not isinstance(body.get("message"), dict):
                    raise ProviderResponseError("Ollama response has no message object.")
                return body
            except (requests.exceptions.RequestException, ValueError, ProviderResponseError) as exc:
                last_error = exc
                logger.warning(
                    "llm.call.failed",
                    extra={
                        "event": "llm.call.failed",
                        "attempt": attempt,
                        "attempts_total": total_attempts,
                        "error": str(exc),
                    },
                )
                should_retry = attempt < total_attempts
                fast_fail_errors = (
                    requests.exceptions.ConnectionError,
                    requests.exceptions.Timeout,
                )
                if self._is_local and isinstance(exc, fast_fail_errors):
                    # Local Ollama down or stalled: let callers degrade immediately.
                    should_retry = False

                if should_retry:
                    time.sleep(min(2 * attempt, 5))
                else:
                    break

        logger.error(
            "llm.call.unavailable",
            extra={
                "event": "llm.call.unavailable",
                "ollama_url": self.url,
                "model": payload.get("model"),
                "error": str(last_error) if last_error else "unknown",
            },
        )
        if isinstance(last_error, requests.exceptions.Timeout):
            raise ProviderTimeoutError(f"Ollama did not answer within {self.timeout_seconds}s.") from last_error
        raise ProviderResponseError(f"Ollama call failed: {last_error}") from last_error

    def classify_urgency(self, text: str, context: Sequence[ChatTurn]) -> UrgencyAssessment:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": URGENCY_SYSTEM_PROMPT},
                {"role": "user", "content": render_urgency_prompt(text, context)},
            ],
            "stream": False,
            "format": "json",
            "options": {"temperature": 0.3, "num_predict": 100},
        }
        body = self._chat(payload)
        content = str(body["message"].get("content", "")).strip()
        try:
            data = json.loads(content)
            score = int(data.get("score", 0))
            reasoning = str(data.get("reasoning", "")).strip()
        except (ValueError, TypeError, AttributeError) as exc:
            raise ProviderResponseError("Urgency payload is not valid JSON.") from exc
        return UrgencyAssessment(score=max(0, min(score, 100)), reasoning=reasoning or "AI urgency assessment")

    def generate_reply(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        message: str,
        options: GenerationOptions,
    ) -> ProviderReply:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": message})
        payload = {
            "model": options.model or self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": options.temperature, "num_predict": options.max_tokens},
        }
        body = self._chat(payload)
        text = str(body["message"].get("content", "")).strip()
        if not text:
            raise ProviderResponseError("Ollama returned an empty reply.")
        tokens_used = int(body.get("prompt_eval_count") or 0) + int(body.get("eval_count") or 0)
        return ProviderReply(text=text, tokens_used=tokens_used)
