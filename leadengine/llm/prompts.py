"""Prompt templates for urgency scoring and channel replies."""

from __future__ import annotations

from typing import Any, Sequence

from leadengine.llm.provider import ChatTurn
from leadengine.schemas.tenant_config import TenantAIConfig

URGENCY_SYSTEM_PROMPT = (
    "You are a hot lead detection AI. Analyze messages to determine lead urgency (0-100 score).\n\n"
    "Hot indicators:\n"
    "- Urgency words (urgent, asap, immediately)\n"
    "- Buying signals (budget, ready, purchase)\n"
    "- Contact requests (call me, meet, schedule)\n"
    "- Problem urgency (broken, not working, emergency)\n\n"
    'Return JSON only: {"score": 0-100, "reasoning": "brief explanation"}'
)

_CHANNEL_GUIDELINES = {
    "sms": (
        "SMS GUIDELINES:\n"
        "- Keep responses under 160 characters\n"
        "- Be concise and direct\n"
        "- Use emojis sparingly\n"
        "- If a longer answer is needed, offer a callback\n"
        "- Always be {tone}"
    ),
    "email": (
        "EMAIL GUIDELINES:\n"
        "- Write a formal, well-structured email reply\n"
        "- Be detailed but concise\n"
        "- Include relevant business information\n"
        "- Maintain a {tone} tone\n"
        "- Do not add a signature; it is appended for {business}"
    ),
    "facebook": (
        "FACEBOOK MESSENGER GUIDELINES:\n"
        "- Keep responses conversational and friendly\n"
        "- Use a casual but {tone} tone\n"
        "- Emojis are appropriate\n"
        "- Encourage further conversation"
    ),
    "instagram": (
        "INSTAGRAM GUIDELINES:\n"
        "- Use casual, social media appropriate language\n"
        "- Relevant emojis are welcome\n"
        "- Keep it fun but {tone}"
    ),
    "chat": (
        "WEB CHAT GUIDELINES:\n"
        "- Conversational and helpful\n"
        "- Can be detailed since space isn't limited\n"
        "- Be {tone} and guide towards business goals"
    ),
    "voice": (
        "VOICE GUIDELINES:\n"
        "- The reply will be spoken aloud\n"
        "- Use short, plain sentences without lists, links or emojis\n"
        "- Be {tone} and end with a clear next step"
    ),
}


def render_urgency_prompt(text: str, context: Sequence[ChatTurn]) -> str:
    joined = " ".join(turn.content for turn in context if turn.content)
    return f'Message: "{text}"\nContext: {joined}'


def render_reply_system_prompt(
    tenant_config: TenantAIConfig,
    channel: str,
    context: dict[str, Any] | None = None,
) -> str:
    context = context or {}
    business = tenant_config.business_name
    sections = [f"You are an AI assistant representing {business}."]

    if tenant_config.has_knowledge_base:
        sections.append(f"BUSINESS KNOWLEDGE:\n{tenant_config.knowledge_base.strip()}")
    if tenant_config.effective_instructions:
        sections.append(f"CUSTOM INSTRUCTIONS:\n{tenant_config.effective_instructions}")

    if channel == "email" and context.get("subject"):
        sections.append(f'EMAIL SUBJECT: "{context["subject"]}"')
    if channel == "sms" and context.get("phone_number"):
        sections.append(f"SMS CONVERSATION with {context['phone_number']}")

    template = _CHANNEL_GUIDELINES.get(channel, _CHANNEL_GUIDELINES["chat"])
    sections.append(template.format(tone=tenant_config.tone, business=business))
    sections.append("Always be helpful, accurate, and represent the business professionally.")
    return "\n\n".join(sections)
