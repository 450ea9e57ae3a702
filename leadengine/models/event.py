"""Interaction event model module."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Enum, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leadengine.models.base import AuditMixin, Base, TenantScopedMixin
from leadengine.models.enums import Channel, EventType


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Event(Base, AuditMixin, TenantScopedMixin):
    """Append-only interaction record.

    Rows are never updated after insert except for ``contact_id``, which is
    backfilled during identity resolution and reassigned by contact merges.
    """

    __tablename__ = "events"
    __table_args__ = (
        UniqueConstraint("tenant_id", "dedup_key", name="uq_events_tenant_dedup_key"),
        Index("idx_events_tenant_created", "tenant_id", "created_at"),
        Index("idx_events_tenant_type", "tenant_id", "event_type"),
        Index("idx_events_contact_created", "contact_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contact_id: Mapped[int | None] = mapped_column(ForeignKey("contacts.id", ondelete="RESTRICT"), index=True)
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, values_callable=_enum_values, native_enum=False, length=40),
        nullable=False,
    )
    channel: Mapped[Channel] = mapped_column(
        Enum(Channel, values_callable=_enum_values, native_enum=False, length=20),
        nullable=False,
    )
    user_message: Mapped[str | None] = mapped_column(Text)
    ai_response: Mapped[str | None] = mapped_column(Text)
    metadata_json: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict, nullable=False)
    confidence_score: Mapped[float | None] = mapped_column(Float)
    dedup_key: Mapped[str | None] = mapped_column(String(255))

    contact = relationship("Contact", back_populates="events")
