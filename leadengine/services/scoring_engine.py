"""Deterministic 0-100 lead scoring with temperature and value tiers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from leadengine.core.config import get_config
from leadengine.models.base import as_utc
from leadengine.models.enums import LeadTemperature

ENGAGEMENT_MAX = 40
RECENCY_MAX = 20
COMPLETENESS_MAX = 20
FREQUENCY_MAX = 20

# (max age in days, points), checked in order.
RECENCY_TIERS = ((0, 20), (1, 15), (3, 10), (7, 5))
# (min interactions, points), checked in order.
FREQUENCY_TIERS = ((10, 20), (5, 15), (3, 10), (1, 5))

VALUE_APPOINTMENT = Decimal("497")
VALUE_HOT_LEAD = Decimal("297")
VALUE_INTERESTED = Decimal("197")
VALUE_BASELINE = Decimal("97")


@dataclass(frozen=True)
class ContactSnapshot:
    """Fields of a contact the score depends on."""

    email: str | None = None
    phone: str | None = None
    company: str | None = None
    total_interactions: int = 0
    hot_lead_count: int = 0
    appointment_count: int = 0
    phone_request_count: int = 0
    pricing_discussion_count: int = 0
    last_interaction_at: datetime | None = None

    @classmethod
    def from_contact(cls, contact) -> "ContactSnapshot":
        return cls(
            email=contact.email,
            phone=contact.phone,
            company=contact.company,
            total_interactions=contact.total_interactions or 0,
            hot_lead_count=contact.hot_lead_count or 0,
            appointment_count=contact.appointment_count or 0,
            phone_request_count=contact.phone_request_count or 0,
            pricing_discussion_count=contact.pricing_discussion_count or 0,
            last_interaction_at=contact.last_interaction_at,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    engagement: int
    recency: int
    completeness: int
    frequency: int

    @property
    def total(self) -> int:
        return self.engagement + self.recency + self.completeness + self.frequency


@dataclass(frozen=True)
class LeadScore:
    score: int
    temperature: LeadTemperature
    potential_value: Decimal
    breakdown: ScoreBreakdown


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


class ScoringEngine:
    """Pure scoring function over a contact snapshot.

    The same snapshot and ``now`` always produce the same ``LeadScore``.
    """

    def __init__(self, recency_window_days: int | None = None) -> None:
        if recency_window_days is None:
            recency_window_days = get_config().SCORING_RECENCY_WINDOW_DAYS
        self.recency_window_days = recency_window_days

    @staticmethod
    def engagement(snapshot: ContactSnapshot) -> int:
        points = 0
        if snapshot.hot_lead_count > 0:
            points += 20
        if snapshot.appointment_count > 0:
            points += 15
        if snapshot.phone_request_count > 0:
            points += 10
        if snapshot.pricing_discussion_count > 0:
            points += 10
        return _clamp(points, ENGAGEMENT_MAX)

    def recency(self, last_interaction_at: datetime | None, now: datetime) -> int:
        if last_interaction_at is None:
            return 0
        age_days = (as_utc(now) - as_utc(last_interaction_at)).days
        if age_days > self.recency_window_days:
            return 0
        for max_age, points in RECENCY_TIERS:
            if age_days <= max_age:
                return _clamp(points, RECENCY_MAX)
        return 0

    @staticmethod
    def completeness(snapshot: ContactSnapshot) -> int:
        points = 0
        if snapshot.email:
            points += 10
        if snapshot.phone:
            points += 10
        if snapshot.company:
            points += 5
        return _clamp(points, COMPLETENESS_MAX)

    @staticmethod
    def frequency(total_interactions: int) -> int:
        for minimum, points in FREQUENCY_TIERS:
            if total_interactions >= minimum:
                return _clamp(points, FREQUENCY_MAX)
        return 0

    @staticmethod
    def temperature(score: int, snapshot: ContactSnapshot) -> LeadTemperature:
        if score >= 70 or snapshot.hot_lead_count > 0 or snapshot.appointment_count > 0:
            return LeadTemperature.HOT
        if score >= 40 or snapshot.phone_request_count > 0:
            return LeadTemperature.WARM
        return LeadTemperature.COLD

    @staticmethod
    def potential_value(snapshot: ContactSnapshot) -> Decimal:
        if snapshot.appointment_count > 0:
            return VALUE_APPOINTMENT
        if snapshot.hot_lead_count > 0:
            return VALUE_HOT_LEAD
        if snapshot.pricing_discussion_count > 0 or snapshot.phone_request_count > 0:
            return VALUE_INTERESTED
        return VALUE_BASELINE

    def score(self, snapshot: ContactSnapshot, now: datetime) -> LeadScore:
        breakdown = ScoreBreakdown(
            engagement=self.engagement(snapshot),
            recency=self.recency(snapshot.last_interaction_at, now),
            completeness=self.completeness(snapshot),
            frequency=self.frequency(snapshot.total_interactions),
        )
        total = _clamp(breakdown.total, 100)
        return LeadScore(
            score=total,
            temperature=self.temperature(total, snapshot),
            potential_value=self.potential_value(snapshot),
            breakdown=breakdown,
        )

    def apply(self, contact, now: datetime) -> LeadScore:
        """Score a contact row and write the result onto it."""
        result = self.score(ContactSnapshot.from_contact(contact), now)
        contact.lead_score = result.score
        contact.lead_temperature = result.temperature
        contact.potential_value = result.potential_value
        return result
