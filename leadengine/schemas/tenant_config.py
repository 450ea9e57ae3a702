"""Typed per-tenant AI configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BUSINESS_NAME = "My Business"
GENERIC_INSTRUCTIONS = "You are a helpful AI assistant."


class TenantAIConfig(BaseModel):
    """Immutable tenant settings with every default resolved at load time."""

    model_config = ConfigDict(frozen=True)

    tenant_id: int | None = None
    business_name: str = DEFAULT_BUSINESS_NAME
    tone: str = "professional"
    knowledge_base: str = ""
    custom_instructions: str = ""
    hot_lead_keywords: tuple[str, ...] = ()
    lead_detection_enabled: bool = True
    auto_reply_enabled: bool = True
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1, le=8192)
    channel_flags: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("hot_lead_keywords", mode="before")
    @classmethod
    def _clean_keywords(cls, value):
        if value is None:
            return ()
        cleaned = []
        for keyword in value:
            keyword = str(keyword).strip().lower()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        return tuple(cleaned)

    @field_validator("business_name", "tone", mode="before")
    @classmethod
    def _blank_to_default(cls, value, info):
        if value is None or not str(value).strip():
            return DEFAULT_BUSINESS_NAME if info.field_name == "business_name" else "professional"
        return str(value).strip()

    @property
    def has_knowledge_base(self) -> bool:
        return bool(self.knowledge_base.strip())

    @property
    def effective_instructions(self) -> str:
        """Custom instructions, ignoring the stock placeholder prompt."""
        instructions = self.custom_instructions.strip()
        if instructions == GENERIC_INSTRUCTIONS:
            return ""
        return instructions

    def replies_enabled_for(self, channel: str) -> bool:
        if not self.auto_reply_enabled:
            return False
        flags = self.channel_flags.get(getattr(channel, "value", channel), {})
        return bool(flags.get("auto_reply", True))
