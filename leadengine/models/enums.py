"""Canonical enum values for the tenant-aware schema."""

from __future__ import annotations

import enum


class Channel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    VOICE = "voice"

    @classmethod
    def parse(cls, value: "str | Channel") -> "Channel":
        """Accept enum members, raw values and the ``gmail`` alias."""
        if isinstance(value, Channel):
            return value
        cleaned = str(value).strip().lower()
        if cleaned == "gmail":
            return cls.EMAIL
        return cls(cleaned)


class EventType(str, enum.Enum):
    MESSAGE_RECEIVED = "message_received"
    AI_RESPONSE = "ai_response"
    HOT_LEAD = "hot_lead"
    PHONE_REQUEST = "phone_request"
    EMAIL_REQUEST = "email_request"
    APPOINTMENT_SCHEDULED = "appointment_scheduled"
    APPOINTMENT_OFFERED = "appointment_offered"
    PRICING_DISCUSSED = "pricing_discussed"
    FOLLOW_UP = "follow_up"
    QUALIFYING_QUESTIONS = "qualifying_questions"
    URGENCY_CREATED = "urgency_created"
    ADVANTAGES_HIGHLIGHTED = "advantages_highlighted"
    CTA_INCLUDED = "cta_included"
    CONTACT_FORM = "contact_form"


class LeadTemperature(str, enum.Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class LeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"
