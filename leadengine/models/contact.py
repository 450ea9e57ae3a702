"""Contact model module."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leadengine.models.base import AuditMixin, Base, TenantScopedMixin
from leadengine.models.enums import LeadStatus, LeadTemperature


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Contact(Base, AuditMixin, TenantScopedMixin):
    __tablename__ = "contacts"
    __table_args__ = (
        CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="ck_contacts_has_identifier"),
        CheckConstraint("lead_score >= 0 AND lead_score <= 100", name="ck_contacts_lead_score_range"),
        Index(
            "uq_contacts_tenant_email_active",
            "tenant_id",
            "email",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active IS TRUE"),
        ),
        Index(
            "uq_contacts_tenant_phone_active",
            "tenant_id",
            "phone",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active IS TRUE"),
        ),
        Index("idx_contacts_tenant_temperature", "tenant_id", "lead_temperature"),
        Index("idx_contacts_tenant_score", "tenant_id", "lead_score"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320))
    phone: Mapped[str | None] = mapped_column(String(40))
    name: Mapped[str] = mapped_column(String(255), default="Unknown", nullable=False)
    company: Mapped[str | None] = mapped_column(String(255))
    title: Mapped[str | None] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255))

    lead_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lead_temperature: Mapped[LeadTemperature] = mapped_column(
        Enum(LeadTemperature, values_callable=_enum_values, native_enum=False, length=16),
        default=LeadTemperature.COLD,
        nullable=False,
    )
    lead_status: Mapped[LeadStatus] = mapped_column(
        Enum(LeadStatus, values_callable=_enum_values, native_enum=False, length=16),
        default=LeadStatus.NEW,
        nullable=False,
    )
    potential_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)

    first_interaction_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_interaction_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    total_interactions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hot_lead_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    appointment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    phone_request_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pricing_discussion_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    source_channel: Mapped[str | None] = mapped_column(String(40))
    channels_used: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    merged_into: Mapped[int | None] = mapped_column(ForeignKey("contacts.id", ondelete="SET NULL"))

    events = relationship("Event", back_populates="contact", order_by="Event.created_at")

    def add_channel(self, channel: str) -> None:
        if channel and channel not in (self.channels_used or []):
            self.channels_used = sorted({*(self.channels_used or []), channel})

    def add_tags(self, tags: list[str] | set[str] | None) -> None:
        cleaned = {tag.strip() for tag in tags or [] if tag and tag.strip()}
        if cleaned - set(self.tags or []):
            self.tags = sorted({*(self.tags or []), *cleaned})
