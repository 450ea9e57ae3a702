from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from leadengine.core.exceptions import ContactNotFoundError, ValidationError
from leadengine.models import EventType
from leadengine.services.event_ledger import EventLedger
from leadengine.services.identity_service import IdentityService
from leadengine.services.lead_query_service import LeadQueryService

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded(db_session, tenant):
    identity = IdentityService(db=db_session)
    ledger = EventLedger(db=db_session)
    hot = identity.resolve(1, {"phone": "+15550001", "name": "Hannah Hot"}, channel="sms", now=NOW)
    warm = identity.resolve(1, {"email": "walt@example.com", "name": "Walt Warm"}, channel="email", now=NOW)
    cold = identity.resolve(1, {"email": "cora@cold.io", "name": "Cora Cold", "company": "Frost"}, channel="chat", now=NOW)
    ledger.record(1, hot.id, EventType.HOT_LEAD, "sms", now=NOW)
    ledger.record(1, warm.id, EventType.PHONE_REQUEST, "email", now=NOW)
    ledger.record(
        1, cold.id, EventType.MESSAGE_RECEIVED, "chat", {"occurred_at": NOW - timedelta(days=30)}, now=NOW
    )
    return hot, warm, cold


def test_list_leads_sorted_by_score_with_summary(db_session, seeded):
    hot, warm, cold = seeded
    page = LeadQueryService(db=db_session).list_leads(1)

    assert [lead.id for lead in page.leads][0] == hot.id
    assert page.summary.total == 3
    assert (page.summary.hot, page.summary.warm, page.summary.cold) == (1, 1, 1)
    assert page.summary.total_value == Decimal("297") + Decimal("197") + Decimal("97")
    assert page.pagination.total == 3
    assert page.pagination.has_more is False
    assert page.leads[0].lead_temperature == "hot"


def test_list_leads_filters(db_session, seeded):
    hot, warm, cold = seeded
    service = LeadQueryService(db=db_session)

    assert [lead.id for lead in service.list_leads(1, temperature="warm").leads] == [warm.id]
    assert [lead.id for lead in service.list_leads(1, channel="gmail").leads] == [warm.id]
    assert [lead.id for lead in service.list_leads(1, search="FROST").leads] == [cold.id]
    assert [lead.id for lead in service.list_leads(1, sort_by="name").leads] == [cold.id, hot.id, warm.id]


def test_search_treats_wildcards_literally(db_session, seeded):
    service = LeadQueryService(db=db_session)

    assert service.list_leads(1, search="_").leads == []
    assert service.list_leads(1, search="%").leads == []
    assert service.list_leads(1, search="walt_").leads == []


def test_list_leads_paginates(db_session, seeded):
    page = LeadQueryService(db=db_session).list_leads(1, sort_by="recent", limit=2, offset=0)
    assert len(page.leads) == 2
    assert page.pagination.has_more is True
    assert page.summary.total == 3


def test_list_leads_rejects_bad_arguments(db_session, seeded):
    service = LeadQueryService(db=db_session)
    with pytest.raises(ValidationError):
        service.list_leads(1, sort_by="shoe_size")
    with pytest.raises(ValidationError):
        service.list_leads(1, temperature="lukewarm")
    with pytest.raises(ValidationError):
        service.list_leads(1, channel="pager")


def test_lead_details_timeline_newest_first(db_session, seeded):
    hot, _warm, _cold = seeded
    ledger = EventLedger(db=db_session)
    ledger.record(1, hot.id, EventType.MESSAGE_RECEIVED, "sms", {"occurred_at": NOW - timedelta(hours=1)}, now=NOW)
    ledger.record(1, hot.id, EventType.AI_RESPONSE, "sms", {"occurred_at": NOW + timedelta(minutes=1)}, now=NOW)

    detail = LeadQueryService(db=db_session).get_lead_details(1, hot.id)
    assert detail.lead.id == hot.id
    assert [event.event_type for event in detail.timeline] == [
        EventType.AI_RESPONSE,
        EventType.HOT_LEAD,
        EventType.MESSAGE_RECEIVED,
    ]


def test_lead_details_of_other_tenant_is_not_found(db_session, seeded, add_tenant):
    add_tenant(db_session, 2)
    hot, _warm, _cold = seeded
    with pytest.raises(ContactNotFoundError):
        LeadQueryService(db=db_session).get_lead_details(2, hot.id)
