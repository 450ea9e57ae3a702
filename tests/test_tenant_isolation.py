from __future__ import annotations

import random

from sqlalchemy import select

from leadengine.models import Contact, Event
from leadengine.schemas.events import InboundEvent
from leadengine.services.analytics_service import AnalyticsService
from leadengine.services.event_ledger import EventLedger
from leadengine.services.identity_service import IdentityService
from leadengine.services.inbound_pipeline import InboundPipeline
from leadengine.services.lead_query_service import LeadQueryService

PEOPLE = [
    {"email": "jane@example.com", "name": "Jane Roe"},
    {"phone": "+15550001111", "name": "Sam Poe"},
    {"email": "lee@example.com", "phone": "+15550002222", "name": "Lee Moe"},
]
MESSAGES = ["hi", "price please", "urgent help needed", "call me tomorrow", "just browsing"]
CHANNELS = ["sms", "email", "chat", "facebook"]


def _fuzz(db_session, seed: int) -> None:
    rng = random.Random(seed)
    pipeline = InboundPipeline(db=db_session)
    for index in range(60):
        pipeline.process(
            InboundEvent(
                tenant_id=rng.choice([1, 2]),
                channel=rng.choice(CHANNELS),
                contact_hints=rng.choice(PEOPLE),
                message_text=rng.choice(MESSAGES),
                provider_message_id=f"msg-{rng.randint(0, 40)}",
            )
        )


def test_identical_identities_never_cross_tenants(db_session, add_tenant):
    add_tenant(db_session, 1)
    add_tenant(db_session, 2)
    _fuzz(db_session, seed=20261001)

    for tenant_id in (1, 2):
        page = LeadQueryService(db=db_session).list_leads(tenant_id, limit=500)
        assert all(lead.tenant_id == tenant_id for lead in page.leads)

        for lead in page.leads:
            detail = LeadQueryService(db=db_session).get_lead_details(tenant_id, lead.id)
            owned = {
                row.id
                for row in db_session.execute(select(Event).where(Event.contact_id == lead.id)).scalars()
            }
            assert {event.id for event in detail.timeline} <= owned
            assert all(
                event.tenant_id == tenant_id
                for event in db_session.execute(select(Event).where(Event.contact_id == lead.id)).scalars()
            )
            turns = EventLedger(db=db_session).conversation_history(tenant_id, lead.id)
            assert len(turns) <= 10

        expected_events = db_session.execute(select(Event).where(Event.tenant_id == tenant_id)).scalars().all()
        report = AnalyticsService(db=db_session).aggregate(tenant_id, "all", "all")
        assert report.total_interactions == len(expected_events)

        for group in IdentityService(db=db_session).find_duplicates(tenant_id):
            owners = db_session.execute(select(Contact.tenant_id).where(Contact.id.in_(group.contact_ids))).scalars()
            assert set(owners) == {tenant_id}


def test_event_dedup_keys_are_scoped_per_tenant(db_session, add_tenant):
    add_tenant(db_session, 1)
    add_tenant(db_session, 2)
    pipeline = InboundPipeline(db=db_session)
    for tenant_id in (1, 2):
        result = pipeline.process(
            InboundEvent(
                tenant_id=tenant_id,
                channel="sms",
                contact_hints={"phone": "+15550001111"},
                message_text="hello",
                provider_message_id="shared-id",
            )
        )
        assert result.duplicate is False
        assert result.contact.tenant_id == tenant_id

    contacts = db_session.execute(select(Contact)).scalars().all()
    assert sorted(contact.tenant_id for contact in contacts) == [1, 2]
