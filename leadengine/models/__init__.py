"""Modular SQLAlchemy model package for the tenant-aware schema."""

from leadengine.models.base import Base
from leadengine.models.channel_connection import ChannelConnection
from leadengine.models.contact import Contact
from leadengine.models.enums import Channel, EventType, LeadStatus, LeadTemperature
from leadengine.models.event import Event
from leadengine.models.tenant import Tenant
from leadengine.models.tenant_ai_config import TenantAIConfigRecord

__all__ = [
    "Base",
    "Channel",
    "ChannelConnection",
    "Contact",
    "Event",
    "EventType",
    "LeadStatus",
    "LeadTemperature",
    "Tenant",
    "TenantAIConfigRecord",
]
