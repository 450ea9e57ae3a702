"""Lead list, detail and contact maintenance schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leadengine.schemas.common import Pagination
from leadengine.schemas.events import EventResponse


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    title: str | None = None
    location: str | None = None
    lead_score: int
    lead_temperature: str
    lead_status: str
    potential_value: Decimal
    first_interaction_at: datetime | None = None
    last_interaction_at: datetime | None = None
    total_interactions: int = 0
    hot_lead_count: int = 0
    appointment_count: int = 0
    phone_request_count: int = 0
    pricing_discussion_count: int = 0
    source_channel: str | None = None
    channels_used: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    merged_into: int | None = None

    @field_validator("lead_temperature", "lead_status", mode="before")
    @classmethod
    def _enum_value(cls, value):
        return getattr(value, "value", value)


class LeadSummary(BaseModel):
    total: int = 0
    hot: int = 0
    warm: int = 0
    cold: int = 0
    total_value: Decimal = Decimal("0")
    avg_score: float = 0.0


class LeadPage(BaseModel):
    leads: list[LeadResponse] = Field(default_factory=list)
    pagination: Pagination
    summary: LeadSummary


class LeadDetail(BaseModel):
    lead: LeadResponse
    timeline: list[EventResponse] = Field(default_factory=list)


class MergeRequest(BaseModel):
    primary_id: int = Field(ge=1)
    duplicate_ids: list[int] = Field(min_length=1, max_length=100)


class MergeResponse(BaseModel):
    primary_id: int
    merged_ids: list[int]
    events_reassigned: int
    lead_score: int
    lead_temperature: str


class DuplicateGroupResponse(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    contact_ids: list[int]
