"""AI provider contract shared by the classifier and the reply generator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str


@dataclass(frozen=True)
class UrgencyAssessment:
    score: int
    reasoning: str


@dataclass(frozen=True)
class ProviderReply:
    text: str
    tokens_used: int


@dataclass(frozen=True)
class GenerationOptions:
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 500


class AIProvider(Protocol):
    """Text-generation backend.

    Implementations raise ``ProviderError`` subclasses on timeouts and
    unusable payloads; callers decide how to degrade.
    """

    def classify_urgency(self, text: str, context: Sequence[ChatTurn]) -> UrgencyAssessment:
        ...

    def generate_reply(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        message: str,
        options: GenerationOptions,
    ) -> ProviderReply:
        ...
