"""Detects sales behaviors in AI replies so they can be recorded as events."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from leadengine.models.enums import EventType

_I = re.IGNORECASE

PHONE_PATTERNS = [
    re.compile(pattern, _I)
    for pattern in (
        r"phone number",
        r"call you",
        r"best number to reach",
        r"contact number",
        r"phone to discuss",
        r"number to call",
        r"reach you by phone",
        r"give me a call",
        r"phone consultation",
    )
]
SCHEDULING_PATTERNS = [
    re.compile(pattern, _I)
    for pattern in (
        r"schedule.*appointment",
        r"book.*meeting",
        r"available.*time",
        r"calendar.*availability",
        r"within.*24.*hour",
        r"tomorrow.*available",
        r"today.*available",
        r"this week.*meet",
        r"consultation.*time",
        r"demo.*schedule",
    )
]
PRICING_PATTERNS = [
    re.compile(r"price|pricing|cost|quote|estimate|budget|investment|fee", _I),
    re.compile(r"how much|what.*charge|rate|package", _I),
]
CTA_PATTERNS = [
    re.compile(r"click.*here|visit.*website|check out|learn more|get started", _I),
    re.compile(r"sign up|register|join|subscribe|download", _I),
    re.compile(r"contact us|reach out|let.*know|reply", _I),
    re.compile(r"book now|reserve|claim|secure your", _I),
]
ADVANTAGE_PATTERNS = [
    re.compile(r"better than|unlike.*competitor|advantage|superior", _I),
    re.compile(r"why choose us|what sets us apart|difference", _I),
    re.compile(r"unique|exclusive|only.*offer|special", _I),
]
QUALIFYING_PATTERNS = [
    re.compile(r"what.*looking for|what.*need|what.*goal", _I),
    re.compile(r"tell.*more about|help.*understand|clarify", _I),
    re.compile(r"how many|how often|when.*need|timeline", _I),
    re.compile(r"budget.*mind|price range|investment level", _I),
]
EMAIL_REQUEST_RE = re.compile(r"email.*address|email me|send.*email", _I)
FOLLOW_UP_RE = re.compile(r"follow up|check in|circle back|touch base|reach out again", _I)
URGENCY_RE = re.compile(r"limited time|act now|expires|ending soon|last chance|today only", _I)
URGENT_TIMEFRAME_RE = re.compile(r"within.*24.*hour|today|tomorrow|asap|urgent", _I)
PRICE_RE = re.compile(r"\$\s?\d[\d,]*(?:\.\d{2})?")


@dataclass(frozen=True)
class DetectedBehavior:
    event_type: EventType
    confidence: float
    metadata: dict[str, Any] = field(default_factory=dict)


def _pattern_confidence(text: str, patterns: list[re.Pattern]) -> float:
    matches = sum(1 for pattern in patterns if pattern.search(text))
    return round(min(0.6 + matches * 0.1, 1.0), 2)


def _any(text: str, patterns: list[re.Pattern]) -> bool:
    return any(pattern.search(text) for pattern in patterns)


class BehaviorAnalyzer:
    """Pure regex pass over an AI reply.

    An offered appointment is recorded as ``appointment_offered``, which moves
    no contact counter; only a real booking is ``appointment_scheduled``.
    Hot-lead intent is left to ``HotLeadClassifier``.
    """

    def analyze(self, ai_response: str, user_message: str = "", channel: str = "email") -> list[DetectedBehavior]:
        text = ai_response or ""
        if not text.strip():
            return []
        detected: list[DetectedBehavior] = []

        def add(event_type: EventType, confidence: float, **metadata: Any) -> None:
            detected.append(DetectedBehavior(event_type, confidence, {"channel": channel, **metadata}))

        if _any(text, PHONE_PATTERNS):
            add(EventType.PHONE_REQUEST, _pattern_confidence(text, PHONE_PATTERNS))

        if _any(text, SCHEDULING_PATTERNS):
            urgency = "high" if URGENT_TIMEFRAME_RE.search(text) else "normal"
            add(EventType.APPOINTMENT_OFFERED, _pattern_confidence(text, SCHEDULING_PATTERNS), urgency=urgency)

        if _any(text, PRICING_PATTERNS):
            price = PRICE_RE.search(text)
            add(
                EventType.PRICING_DISCUSSED,
                _pattern_confidence(text, PRICING_PATTERNS),
                quoted_price=price.group(0) if price else None,
            )

        if _any(text, CTA_PATTERNS):
            add(EventType.CTA_INCLUDED, _pattern_confidence(text, CTA_PATTERNS))

        if _any(text, ADVANTAGE_PATTERNS):
            add(EventType.ADVANTAGES_HIGHLIGHTED, _pattern_confidence(text, ADVANTAGE_PATTERNS))

        if EMAIL_REQUEST_RE.search(text):
            add(EventType.EMAIL_REQUEST, 0.9)

        if FOLLOW_UP_RE.search(text):
            add(EventType.FOLLOW_UP, 0.85)

        qualifying = sum(1 for pattern in QUALIFYING_PATTERNS if pattern.search(text))
        if qualifying:
            add(EventType.QUALIFYING_QUESTIONS, round(min(0.6 + qualifying * 0.1, 1.0), 2), question_count=qualifying)

        if URGENCY_RE.search(text):
            add(EventType.URGENCY_CREATED, 0.9)

        return detected
