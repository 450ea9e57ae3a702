"""AI provider contract, prompts and the default Ollama adapter."""

from __future__ import annotations

from leadengine.core.config import get_config
from leadengine.llm.ollama import OllamaProvider
from leadengine.llm.provider import AIProvider, ChatTurn, GenerationOptions, ProviderReply, UrgencyAssessment


def get_default_provider() -> AIProvider | None:
    """Return the configured provider, or ``None`` when AI is switched off."""
    if not get_config().AI_ENABLED:
        return None
    return OllamaProvider()


__all__ = [
    "AIProvider",
    "ChatTurn",
    "GenerationOptions",
    "OllamaProvider",
    "ProviderReply",
    "UrgencyAssessment",
    "get_default_provider",
]
