from __future__ import annotations

from leadengine.models import EventType
from leadengine.services.behavior_analyzer import BehaviorAnalyzer


def test_detects_phone_scheduling_and_pricing():
    reply = (
        "What's the best phone number to reach you? We can schedule an appointment tomorrow. "
        "Our pricing starts at $499."
    )
    detected = {behavior.event_type: behavior for behavior in BehaviorAnalyzer().analyze(reply, channel="sms")}

    assert set(detected) == {
        EventType.PHONE_REQUEST,
        EventType.APPOINTMENT_OFFERED,
        EventType.PRICING_DISCUSSED,
    }
    assert detected[EventType.PHONE_REQUEST].confidence == 0.7
    assert detected[EventType.APPOINTMENT_OFFERED].metadata == {"channel": "sms", "urgency": "high"}
    assert detected[EventType.PRICING_DISCUSSED].metadata["quoted_price"] == "$499"


def test_detects_follow_up_urgency_email_and_cta():
    reply = "Email me your address and I will follow up. Limited time offer, sign up today!"
    detected = {behavior.event_type: behavior.confidence for behavior in BehaviorAnalyzer().analyze(reply)}

    assert detected[EventType.EMAIL_REQUEST] == 0.9
    assert detected[EventType.FOLLOW_UP] == 0.85
    assert detected[EventType.URGENCY_CREATED] == 0.9
    assert EventType.CTA_INCLUDED in detected
    assert EventType.HOT_LEAD not in detected


def test_confidence_grows_with_matches_and_caps():
    reply = "Click here, sign up, contact us, or book now."
    (cta,) = [b for b in BehaviorAnalyzer().analyze(reply) if b.event_type == EventType.CTA_INCLUDED]
    assert cta.confidence == 1.0


def test_blank_reply_detects_nothing():
    assert BehaviorAnalyzer().analyze("   ") == []
