"""Per-tenant AI settings model module."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from leadengine.models.base import AuditMixin, Base, TenantScopedMixin


class TenantAIConfigRecord(Base, AuditMixin, TenantScopedMixin):
    """Stored tenant settings; nullable columns fall back to engine defaults on load."""

    __tablename__ = "tenant_ai_configs"
    __table_args__ = (UniqueConstraint("tenant_id", name="uq_tenant_ai_configs_tenant"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_name: Mapped[str | None] = mapped_column(String(255))
    tone: Mapped[str | None] = mapped_column(String(60))
    knowledge_base: Mapped[str | None] = mapped_column(Text)
    custom_instructions: Mapped[str | None] = mapped_column(Text)
    hot_lead_keywords: Mapped[list[str] | None] = mapped_column(JSON)
    lead_detection_enabled: Mapped[bool | None] = mapped_column(Boolean)
    auto_reply_enabled: Mapped[bool | None] = mapped_column(Boolean)
    model: Mapped[str | None] = mapped_column(String(120))
    temperature: Mapped[float | None] = mapped_column(Float)
    max_tokens: Mapped[int | None] = mapped_column(Integer)
    channel_flags: Mapped[dict[str, Any] | None] = mapped_column(JSON)
