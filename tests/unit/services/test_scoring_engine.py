from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import itertools

from leadengine.models import LeadTemperature
from leadengine.services.scoring_engine import ContactSnapshot, ScoringEngine

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def test_score_stays_within_bounds_for_every_counter_mix():
    engine = ScoringEngine(recency_window_days=7)
    for hot, appt, phone, total, age in itertools.product((0, 1, 5), (0, 1), (0, 2), (0, 1, 3, 5, 10, 50), (None, 0, 2, 30)):
        snapshot = ContactSnapshot(
            email="a@example.com",
            phone="+15550100",
            company="Acme",
            total_interactions=total,
            hot_lead_count=hot,
            appointment_count=appt,
            phone_request_count=phone,
            last_interaction_at=None if age is None else NOW - timedelta(days=age),
        )
        result = engine.score(snapshot, NOW)
        assert 0 <= result.score <= 100
        assert result.score == min(100, result.breakdown.total)


def test_score_is_deterministic_for_same_snapshot():
    engine = ScoringEngine(recency_window_days=7)
    snapshot = ContactSnapshot(email="a@example.com", total_interactions=4, hot_lead_count=1, last_interaction_at=NOW)
    assert engine.score(snapshot, NOW) == engine.score(snapshot, NOW)


def test_fully_engaged_contact_caps_at_one_hundred():
    engine = ScoringEngine(recency_window_days=7)
    snapshot = ContactSnapshot(
        email="a@example.com",
        phone="+15550100",
        company="Acme",
        total_interactions=12,
        hot_lead_count=2,
        appointment_count=1,
        phone_request_count=1,
        last_interaction_at=NOW,
    )
    result = engine.score(snapshot, NOW)
    assert result.breakdown.engagement == 40
    assert result.breakdown.completeness == 20
    assert result.score == 100
    assert result.temperature == LeadTemperature.HOT


def test_recency_tiers_and_window():
    engine = ScoringEngine(recency_window_days=7)
    assert engine.recency(NOW, NOW) == 20
    assert engine.recency(NOW - timedelta(days=1), NOW) == 15
    assert engine.recency(NOW - timedelta(days=3), NOW) == 10
    assert engine.recency(NOW - timedelta(days=6), NOW) == 5
    assert engine.recency(NOW - timedelta(days=8), NOW) == 0
    assert engine.recency(None, NOW) == 0
    assert ScoringEngine(recency_window_days=2).recency(NOW - timedelta(days=3), NOW) == 0


def test_recency_accepts_naive_timestamps_as_utc():
    engine = ScoringEngine(recency_window_days=7)
    assert engine.recency(datetime(2026, 10, 1, 11, 0), NOW) == 20


def test_pricing_discussion_adds_engagement_within_cap():
    assert ScoringEngine.engagement(
        ContactSnapshot(email="a@example.com", pricing_discussion_count=2, total_interactions=1)
    ) == 10
    assert ScoringEngine.engagement(
        ContactSnapshot(hot_lead_count=1, appointment_count=1, phone_request_count=1, pricing_discussion_count=1)
    ) == 40


def test_frequency_tiers():
    assert ScoringEngine.frequency(0) == 0
    assert ScoringEngine.frequency(1) == 5
    assert ScoringEngine.frequency(3) == 10
    assert ScoringEngine.frequency(5) == 15
    assert ScoringEngine.frequency(10) == 20


def test_appointment_forces_hot_despite_low_score():
    snapshot = ContactSnapshot(phone="+15550100", appointment_count=1)
    assert ScoringEngine.temperature(10, snapshot) == LeadTemperature.HOT


def test_phone_request_forces_warm_and_thresholds():
    assert ScoringEngine.temperature(10, ContactSnapshot(phone_request_count=1)) == LeadTemperature.WARM
    assert ScoringEngine.temperature(40, ContactSnapshot()) == LeadTemperature.WARM
    assert ScoringEngine.temperature(70, ContactSnapshot()) == LeadTemperature.HOT
    assert ScoringEngine.temperature(39, ContactSnapshot()) == LeadTemperature.COLD


def test_potential_value_tiers():
    assert ScoringEngine.potential_value(ContactSnapshot(appointment_count=1, hot_lead_count=1)) == Decimal("497")
    assert ScoringEngine.potential_value(ContactSnapshot(hot_lead_count=1)) == Decimal("297")
    assert ScoringEngine.potential_value(ContactSnapshot(pricing_discussion_count=1)) == Decimal("197")
    assert ScoringEngine.potential_value(ContactSnapshot(phone_request_count=1)) == Decimal("197")
    assert ScoringEngine.potential_value(ContactSnapshot()) == Decimal("97")
