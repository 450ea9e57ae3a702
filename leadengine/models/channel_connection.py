"""Channel connection model module."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from leadengine.models.base import AuditMixin, Base, TenantScopedMixin


class ChannelConnection(Base, AuditMixin, TenantScopedMixin):
    """Maps an external channel account (page id, phone number, inbox) to its tenant."""

    __tablename__ = "channel_connections"
    __table_args__ = (
        UniqueConstraint("channel", "external_account_id", name="uq_channel_connections_account"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    channel: Mapped[str] = mapped_column(String(20), nullable=False)
    external_account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
