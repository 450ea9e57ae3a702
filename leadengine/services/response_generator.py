"""Channel-aware reply generation with a canned fallback stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from leadengine.core.exceptions import GenerationDegraded, ProviderError
from leadengine.llm.prompts import render_reply_system_prompt
from leadengine.llm.provider import AIProvider, ChatTurn, GenerationOptions
from leadengine.models.enums import Channel
from leadengine.schemas.tenant_config import TenantAIConfig

logger = logging.getLogger(__name__)

HISTORY_TURNS = 10
SMS_MAX_CHARS = 160
SMS_TRUNCATION_SUFFIX = "... (call for more info)"

FALLBACK_REPLIES = {
    Channel.SMS: "I'm having a brief technical issue, but I'd be happy to help! Please try again in a moment.",
    Channel.EMAIL: (
        "Thank you for your email. I'm experiencing some technical difficulties right now, "
        "but I'll make sure someone gets back to you soon."
    ),
    Channel.FACEBOOK: (
        "Thanks for reaching out! I'm having a brief technical issue, but I'd love to help you. "
        "Please try again in a moment! 😊"
    ),
    Channel.INSTAGRAM: "Hey! Thanks for the message! I'm having a quick tech issue but I'll be right back to help! ✨",
    Channel.CHAT: "I'm having a brief technical issue. Please try again in a moment, and I'll be happy to help!",
    Channel.VOICE: "Sorry, I'm having a brief technical issue. Someone from our team will call you back shortly.",
}


@dataclass(frozen=True)
class GeneratedResponse:
    text: str
    tokens_used: int = 0
    knowledge_base_used: bool = False
    degraded: bool = False


def format_for_channel(text: str, channel: Channel, business_name: str) -> str:
    """Apply per-channel post-processing to raw model output."""
    if channel == Channel.SMS:
        if len(text) > SMS_MAX_CHARS:
            return text[: SMS_MAX_CHARS - len(SMS_TRUNCATION_SUFFIX)].rstrip() + SMS_TRUNCATION_SUFFIX
        return text
    if channel == Channel.EMAIL:
        return f"{text}\n\n--\nBest regards,\n{business_name}"
    return text


class ReplyGenerator(Protocol):
    def generate(
        self,
        tenant_config: TenantAIConfig,
        channel: Channel,
        message: str,
        history: Sequence[ChatTurn],
        context: dict[str, Any],
    ) -> GeneratedResponse:
        ...


class PrimaryGenerator:
    """Provider-backed stage; raises ``GenerationDegraded`` on any provider failure."""

    def __init__(self, provider: AIProvider) -> None:
        self.provider = provider

    def generate(self, tenant_config, channel, message, history, context) -> GeneratedResponse:
        system_prompt = render_reply_system_prompt(tenant_config, channel.value, context)
        options = GenerationOptions(
            model=tenant_config.model,
            temperature=tenant_config.temperature,
            max_tokens=tenant_config.max_tokens,
        )
        try:
            reply = self.provider.generate_reply(system_prompt, list(history)[-HISTORY_TURNS:], message, options)
        except ProviderError as exc:
            raise GenerationDegraded(str(exc)) from exc
        return GeneratedResponse(
            text=format_for_channel(reply.text, channel, tenant_config.business_name),
            tokens_used=reply.tokens_used,
            knowledge_base_used=tenant_config.has_knowledge_base,
        )


class FallbackGenerator:
    def generate(self, tenant_config, channel, message, history, context) -> GeneratedResponse:
        return GeneratedResponse(
            text=FALLBACK_REPLIES.get(channel, FALLBACK_REPLIES[Channel.CHAT]),
            tokens_used=0,
            knowledge_base_used=False,
            degraded=True,
        )


class ResponseGenerator:
    """Runs the primary stage and falls back to canned text; never raises."""

    def __init__(self, provider: AIProvider | None = None, stages: Sequence[ReplyGenerator] | None = None) -> None:
        if stages is None:
            stages = [PrimaryGenerator(provider)] if provider is not None else []
        self.stages = list(stages)
        self.fallback = FallbackGenerator()

    def generate(
        self,
        tenant_config: TenantAIConfig,
        channel: Channel | str,
        message: str,
        history: Sequence[ChatTurn] = (),
        context: dict[str, Any] | None = None,
    ) -> GeneratedResponse:
        channel = Channel.parse(channel)
        context = context or {}
        for stage in self.stages:
            try:
                return stage.generate(tenant_config, channel, message, history, context)
            except GenerationDegraded as exc:
                logger.warning(
                    "reply.generation_degraded",
                    extra={
                        "event": "reply.generation_degraded",
                        "tenant_id": tenant_config.tenant_id,
                        "channel": channel.value,
                        "stage": type(stage).__name__,
                        "error": str(exc),
                    },
                )
        return self.fallback.generate(tenant_config, channel, message, history, context)
