from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from leadengine.core.exceptions import (
    AlreadyMergedError,
    ContactNotFoundError,
    IdentityError,
    InsufficientHintsError,
)
from leadengine.models import Contact, Event, EventType
from leadengine.services.event_ledger import EventLedger
from leadengine.services.identity_service import IdentityService
from leadengine.services.scoring_engine import ScoringEngine

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _service(db_session):
    return IdentityService(db=db_session, scoring_engine=ScoringEngine(recency_window_days=7))


def _record(db_session, contact, count, event_type=EventType.MESSAGE_RECEIVED):
    ledger = EventLedger(db=db_session, scoring_engine=ScoringEngine(recency_window_days=7))
    for _ in range(count):
        ledger.record(contact.tenant_id, contact.id, event_type, "sms", {"user_message": "hi"}, now=NOW)


def test_resolve_creates_contact_with_normalized_identifiers(db_session, tenant):
    contact = _service(db_session).resolve(
        1, {"email": "  Jane@Example.COM ", "phone": "+1 (555) 010-2000", "name": "Jane"}, channel="sms", now=NOW
    )
    assert contact.id is not None
    assert contact.email == "jane@example.com"
    assert contact.phone == "+15550102000"
    assert contact.name == "Jane"
    assert contact.source_channel == "sms"
    assert contact.channels_used == ["sms"]
    assert contact.is_active is True


def test_resolve_without_identifiers_raises(db_session, tenant):
    with pytest.raises(InsufficientHintsError) as exc_info:
        _service(db_session).resolve(1, {"name": "Nobody", "phone": "n/a"})
    assert exc_info.value.reason == "InsufficientHints"


def test_resolve_returns_same_contact_and_fills_empty_fields(db_session, tenant):
    service = _service(db_session)
    first = service.resolve(1, {"email": "jane@example.com"}, now=NOW)
    assert first.name == "Unknown"

    second = service.resolve(
        1, {"email": "JANE@example.com", "phone": "5550102000", "name": "Jane Roe", "company": "Acme", "tags": ["vip"]}
    )
    assert second.id == first.id
    assert second.phone == "5550102000"
    assert second.name == "Jane Roe"
    assert second.company == "Acme"
    assert second.tags == ["vip"]
    assert db_session.execute(select(Contact)).scalars().all() == [second]


def test_resolve_prefers_email_match_over_phone(db_session, tenant):
    service = _service(db_session)
    by_email = service.resolve(1, {"email": "a@example.com"})
    by_phone = service.resolve(1, {"phone": "+15550100"})

    resolved = service.resolve(1, {"email": "a@example.com", "phone": "+15550100"})
    assert resolved.id == by_email.id
    # Phone already belongs to another contact, so it is not copied over.
    assert resolved.phone is None
    assert by_phone.is_active is True


def test_resolve_does_not_match_across_tenants(db_session, add_tenant):
    add_tenant(db_session, 1)
    add_tenant(db_session, 2)
    service = _service(db_session)
    first = service.resolve(1, {"email": "shared@example.com"})
    second = service.resolve(2, {"email": "shared@example.com"})
    assert first.id != second.id
    assert (first.tenant_id, second.tenant_id) == (1, 2)


def test_get_contact_outside_tenant_is_not_found(db_session, add_tenant):
    add_tenant(db_session, 1)
    add_tenant(db_session, 2)
    contact = _service(db_session).resolve(1, {"email": "a@example.com"})
    with pytest.raises(ContactNotFoundError):
        _service(db_session).get_contact(2, contact.id)


def test_merge_sums_totals_and_retires_duplicates(db_session, tenant):
    service = _service(db_session)
    a = service.resolve(1, {"email": "a@example.com", "name": "Alex"}, channel="email", now=NOW)
    b = service.resolve(1, {"phone": "+15550100"}, channel="sms", now=NOW)
    c = service.resolve(1, {"email": "c@example.com", "company": "Acme"}, channel="chat", now=NOW)
    _record(db_session, a, 2)
    _record(db_session, b, 1)
    _record(db_session, b, 1, EventType.HOT_LEAD)
    _record(db_session, c, 3)
    before = a.total_interactions + b.total_interactions + c.total_interactions

    result = service.merge(1, a.id, [b.id, c.id], now=NOW)

    primary = service.get_contact(1, a.id)
    assert result.merged_ids == [b.id, c.id]
    assert result.events_reassigned == 5
    assert primary.total_interactions == before == 7
    assert primary.hot_lead_count == 1
    assert primary.phone == "+15550100"
    assert primary.company == "Acme"
    assert primary.name == "Alex"
    assert set(primary.channels_used) == {"email", "sms", "chat"}
    assert result.lead_score.score == primary.lead_score
    for duplicate_id in (b.id, c.id):
        duplicate = service.get_contact(1, duplicate_id)
        assert duplicate.is_active is False
        assert duplicate.merged_into == a.id
    owners = db_session.execute(select(Event.contact_id).where(Event.tenant_id == 1)).scalars().all()
    assert set(owners) == {a.id}


def test_merge_rejects_invalid_requests(db_session, tenant):
    service = _service(db_session)
    a = service.resolve(1, {"email": "a@example.com"})
    b = service.resolve(1, {"email": "b@example.com"})

    with pytest.raises(IdentityError) as empty:
        service.merge(1, a.id, [])
    assert empty.value.reason == "EmptyDuplicateList"
    with pytest.raises(IdentityError) as self_merge:
        service.merge(1, a.id, [a.id])
    assert self_merge.value.reason == "SelfMerge"
    with pytest.raises(ContactNotFoundError):
        service.merge(1, a.id, [9999])

    service.merge(1, a.id, [b.id])
    with pytest.raises(AlreadyMergedError):
        service.merge(1, a.id, [b.id])


def test_merge_cannot_reach_other_tenant_contacts(db_session, add_tenant):
    add_tenant(db_session, 1)
    add_tenant(db_session, 2)
    service = _service(db_session)
    mine = service.resolve(1, {"email": "a@example.com"})
    theirs = service.resolve(2, {"email": "b@example.com"})
    with pytest.raises(ContactNotFoundError):
        service.merge(1, mine.id, [theirs.id])
    assert service.get_contact(2, theirs.id).is_active is True


def test_find_duplicates_groups_on_normalized_identity(db_session, tenant):
    db_session.add_all(
        [
            Contact(tenant_id=1, name="Jane Roe", email="Jane@Example.com", channels_used=[], tags=[]),
            Contact(tenant_id=1, name="jane roe ", email="jane@example.com", channels_used=[], tags=[]),
            Contact(tenant_id=1, name="Other", email="other@example.com", channels_used=[], tags=[]),
        ]
    )
    db_session.commit()

    groups = _service(db_session).find_duplicates(1)
    assert len(groups) == 1
    assert len(groups[0].contact_ids) == 2
    assert _service(db_session).find_duplicates(2) == []


def test_find_duplicates_ignores_resolver_contacts_with_distinct_identifiers(db_session, tenant):
    service = _service(db_session)
    service.resolve(1, {"email": "jane@example.com", "name": "Jane Roe"})
    service.resolve(1, {"phone": "+15550100", "name": "Jane Roe"})
    service.resolve(1, {"email": "JANE@example.com", "name": "Jane Roe"})

    assert service.find_duplicates(1) == []
