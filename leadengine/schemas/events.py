"""Inbound event and ledger payload schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leadengine.models.enums import Channel, EventType


class ContactHints(BaseModel):
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    name: str | None = Field(default=None, max_length=255)
    company: str | None = Field(default=None, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    tags: list[str] = Field(default_factory=list)


class InboundEventRequest(BaseModel):
    """Inbound event body as delivered by a channel integration."""

    channel: Channel
    contact_hints: ContactHints
    message_text: str = Field(min_length=1, max_length=20000)
    subject: str | None = Field(default=None, max_length=500)
    timestamp: datetime | None = None
    provider_message_id: str | None = Field(default=None, max_length=255)

    @field_validator("channel", mode="before")
    @classmethod
    def _parse_channel(cls, value):
        return Channel.parse(value)

    def to_event(self, tenant_id: int) -> "InboundEvent":
        return InboundEvent(tenant_id=tenant_id, **self.model_dump())


class InboundEvent(InboundEventRequest):
    tenant_id: int = Field(ge=1)


class EventPayload(BaseModel):
    """Optional fields stored with a ledger event."""

    user_message: str | None = None
    ai_response: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    confidence_score: float | None = Field(default=None, ge=0.0, le=1.0)
    dedup_key: str | None = Field(default=None, max_length=255)
    occurred_at: datetime | None = None


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int | None = None
    event_type: EventType
    channel: Channel
    user_message: str | None = None
    ai_response: str | None = None
    confidence_score: float | None = None
    created_at: datetime


class ProcessingResponse(BaseModel):
    contact_id: int
    event_id: int
    duplicate: bool = False
    is_hot_lead: bool = False
    hot_lead_score: int = 0
    classification_method: str | None = None
    reply: str | None = None
    reply_degraded: bool = False
    behaviors: list[str] = Field(default_factory=list)
    lead_score: int = 0
    lead_temperature: str = "cold"
