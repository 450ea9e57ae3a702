"""Append-only interaction ledger that keeps contact counters in step."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leadengine.auth.tenant_context import enforce_tenant_match
from leadengine.core.exceptions import AlreadyMergedError, ContactNotFoundError, ScoringInconsistency
from leadengine.llm.provider import ChatTurn
from leadengine.models import Channel, Contact, Event, EventType
from leadengine.models.base import as_utc, utcnow
from leadengine.schemas.events import EventPayload
from leadengine.services.base_service import BaseService
from leadengine.services.scoring_engine import LeadScore, ScoringEngine

logger = logging.getLogger(__name__)

COUNTER_BY_EVENT_TYPE = {
    EventType.HOT_LEAD: "hot_lead_count",
    EventType.APPOINTMENT_SCHEDULED: "appointment_count",
    EventType.PHONE_REQUEST: "phone_request_count",
    EventType.PRICING_DISCUSSED: "pricing_discussion_count",
}
COUNTER_FIELDS = ("total_interactions", *COUNTER_BY_EVENT_TYPE.values())
_CONVERSATION_TYPES = (EventType.MESSAGE_RECEIVED, EventType.AI_RESPONSE)


class EventLedger(BaseService):
    def __init__(self, db: Session | None = None, scoring_engine: ScoringEngine | None = None) -> None:
        super().__init__(db=db)
        self.scoring_engine = scoring_engine or ScoringEngine()

    def find_by_dedup_key(self, tenant_id: int, dedup_key: str) -> Event | None:
        event = self.db.execute(
            select(Event).where(Event.tenant_id == tenant_id, Event.dedup_key == dedup_key)
        ).scalar_one_or_none()
        if event is not None:
            enforce_tenant_match(event.tenant_id, tenant_id)
        return event

    def _lock_contact(self, tenant_id: int, contact_id: int) -> Contact:
        contact = self.db.execute(
            select(Contact)
            .where(Contact.tenant_id == tenant_id, Contact.id == contact_id)
            .with_for_update()
        ).scalar_one_or_none()
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} not found.")
        enforce_tenant_match(contact.tenant_id, tenant_id)
        return contact

    def record(
        self,
        tenant_id: int,
        contact_id: int,
        event_type: EventType | str,
        channel: Channel | str,
        payload: EventPayload | dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> Event:
        """Insert one event and update the contact in the same transaction.

        A repeated ``dedup_key`` returns the event stored first and changes
        nothing.
        """
        event, _created = self.try_record(tenant_id, contact_id, event_type, channel, payload, now=now)
        return event

    def try_record(
        self,
        tenant_id: int,
        contact_id: int,
        event_type: EventType | str,
        channel: Channel | str,
        payload: EventPayload | dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> tuple[Event, bool]:
        """Like ``record`` but also reports whether a new row was written."""
        if not isinstance(payload, EventPayload):
            payload = EventPayload(**(payload or {}))
        event_type = EventType(event_type)
        channel = Channel.parse(channel)
        now = as_utc(now) or utcnow()

        if payload.dedup_key:
            existing = self.find_by_dedup_key(tenant_id, payload.dedup_key)
            if existing is not None:
                logger.info(
                    "ledger.event.duplicate",
                    extra={
                        "event": "ledger.event.duplicate",
                        "tenant_id": tenant_id,
                        "event_id": existing.id,
                        "dedup_key": payload.dedup_key,
                    },
                )
                return existing, False

        occurred_at = as_utc(payload.occurred_at) or now
        try:
            contact = self._lock_contact(tenant_id, contact_id)
            if not contact.is_active:
                raise AlreadyMergedError(f"Contact {contact_id} was merged into {contact.merged_into}.")

            event = Event(
                tenant_id=tenant_id,
                contact_id=contact.id,
                event_type=event_type,
                channel=channel,
                user_message=payload.user_message,
                ai_response=payload.ai_response,
                metadata_json=dict(payload.metadata),
                confidence_score=payload.confidence_score,
                dedup_key=payload.dedup_key,
                created_at=occurred_at,
            )
            self.db.add(event)

            contact.total_interactions = (contact.total_interactions or 0) + 1
            counter = COUNTER_BY_EVENT_TYPE.get(event_type)
            if counter:
                setattr(contact, counter, (getattr(contact, counter) or 0) + 1)
            contact.last_interaction_at = max(as_utc(contact.last_interaction_at) or occurred_at, occurred_at)
            if contact.first_interaction_at is None:
                contact.first_interaction_at = occurred_at
            contact.add_channel(channel.value)

            self.scoring_engine.apply(contact, now)
            self.commit()
        except IntegrityError:
            self.rollback()
            if payload.dedup_key:
                existing = self.find_by_dedup_key(tenant_id, payload.dedup_key)
                if existing is not None:
                    return existing, False
            raise
        except Exception:
            self.rollback()
            raise

        logger.info(
            "ledger.event.recorded",
            extra={
                "event": "ledger.event.recorded",
                "tenant_id": tenant_id,
                "contact_id": contact.id,
                "event_id": event.id,
                "event_type": event_type.value,
                "channel": channel.value,
                "lead_score": contact.lead_score,
            },
        )
        return event, True

    def conversation_history(self, tenant_id: int, contact_id: int, limit: int = 10) -> list[ChatTurn]:
        """Most recent message/reply turns for a contact, oldest first."""
        rows = self.db.execute(
            select(Event)
            .where(
                Event.tenant_id == tenant_id,
                Event.contact_id == contact_id,
                Event.event_type.in_(_CONVERSATION_TYPES),
            )
            .order_by(Event.created_at.desc(), Event.id.desc())
            .limit(limit)
        ).scalars().all()

        turns: list[ChatTurn] = []
        for event in reversed(rows):
            enforce_tenant_match(event.tenant_id, tenant_id)
            if event.event_type == EventType.MESSAGE_RECEIVED and event.user_message:
                turns.append(ChatTurn(role="user", content=event.user_message))
            elif event.event_type == EventType.AI_RESPONSE and event.ai_response:
                turns.append(ChatTurn(role="assistant", content=event.ai_response))
        return turns

    def _expected_counters(self, tenant_id: int, contact_id: int) -> dict[str, int]:
        counts = dict(
            self.db.execute(
                select(Event.event_type, func.count(Event.id))
                .where(Event.tenant_id == tenant_id, Event.contact_id == contact_id)
                .group_by(Event.event_type)
            ).all()
        )
        expected = {"total_interactions": sum(counts.values())}
        for event_type, field in COUNTER_BY_EVENT_TYPE.items():
            expected[field] = counts.get(event_type, 0)
        return expected

    def verify_counters(self, tenant_id: int, contact_id: int) -> dict[str, int]:
        """Raise ``ScoringInconsistency`` when counters drift from the events."""
        contact = self.db.execute(
            select(Contact).where(Contact.tenant_id == tenant_id, Contact.id == contact_id)
        ).scalar_one_or_none()
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} not found.")
        enforce_tenant_match(contact.tenant_id, tenant_id)

        expected = self._expected_counters(tenant_id, contact_id)
        actual = {field: getattr(contact, field) or 0 for field in COUNTER_FIELDS}
        if expected != actual:
            raise ScoringInconsistency(
                f"Counters of contact {contact_id} disagree with its events.",
                expected=expected,
                actual=actual,
            )
        return expected

    def reconcile(self, tenant_id: int, contact_id: int, now: datetime | None = None) -> Contact:
        """Recount counters and interaction window from the events, then rescore."""
        now = as_utc(now) or utcnow()
        try:
            contact = self._lock_contact(tenant_id, contact_id)
            expected = self._expected_counters(tenant_id, contact_id)
            for field, value in expected.items():
                setattr(contact, field, value)

            first_at, last_at = self.db.execute(
                select(func.min(Event.created_at), func.max(Event.created_at)).where(
                    Event.tenant_id == tenant_id, Event.contact_id == contact_id
                )
            ).one()
            if last_at is not None:
                contact.last_interaction_at = as_utc(last_at)
                if contact.first_interaction_at is None or as_utc(first_at) < as_utc(contact.first_interaction_at):
                    contact.first_interaction_at = as_utc(first_at)

            channels = self.db.execute(
                select(Event.channel)
                .where(Event.tenant_id == tenant_id, Event.contact_id == contact_id)
                .distinct()
            ).scalars().all()
            for channel in channels:
                contact.add_channel(Channel(channel).value)

            self.scoring_engine.apply(contact, now)
            self.commit()
        except Exception:
            self.rollback()
            raise

        logger.info(
            "ledger.contact.reconciled",
            extra={
                "event": "ledger.contact.reconciled",
                "tenant_id": tenant_id,
                "contact_id": contact_id,
                "counters": expected,
            },
        )
        return contact

    def rescore(self, tenant_id: int, contact_id: int, now: datetime | None = None) -> LeadScore:
        """Refresh the stored score, repairing counters first when they drifted."""
        now = as_utc(now) or utcnow()
        try:
            self.verify_counters(tenant_id, contact_id)
        except ScoringInconsistency as exc:
            logger.warning(
                "ledger.scoring_inconsistency",
                extra={
                    "event": "ledger.scoring_inconsistency",
                    "tenant_id": tenant_id,
                    "contact_id": contact_id,
                    "expected": exc.expected,
                    "actual": exc.actual,
                },
            )
            self.reconcile(tenant_id, contact_id, now=now)

        try:
            contact = self._lock_contact(tenant_id, contact_id)
            result = self.scoring_engine.apply(contact, now)
            self.commit()
        except Exception:
            self.rollback()
            raise
        return result
