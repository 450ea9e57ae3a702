"""Inbound event processing: resolve, record, classify, reply."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from sqlalchemy.orm import Session

from leadengine.core.logging import LogContext, build_log_event
from leadengine.llm.provider import AIProvider
from leadengine.models import Contact, Event, EventType
from leadengine.models.base import as_utc, utcnow
from leadengine.schemas.events import EventPayload, InboundEvent, ProcessingResponse
from leadengine.services.behavior_analyzer import BehaviorAnalyzer
from leadengine.services.event_ledger import EventLedger
from leadengine.services.hot_lead_classifier import HotLeadAssessment, HotLeadClassifier
from leadengine.services.identity_service import IdentityService
from leadengine.services.response_generator import HISTORY_TURNS, GeneratedResponse, ResponseGenerator
from leadengine.services.scoring_engine import ScoringEngine
from leadengine.services.tenant_config_service import TenantConfigService
from leadengine.utils.validators import normalize_phone, sanitize_text

logger = logging.getLogger(__name__)


@dataclass
class ProcessingResult:
    contact: Contact
    message_event: Event
    duplicate: bool = False
    assessment: HotLeadAssessment | None = None
    hot_lead_event: Event | None = None
    reply: GeneratedResponse | None = None
    reply_event: Event | None = None
    behavior_events: list[Event] = field(default_factory=list)

    def to_response(self) -> ProcessingResponse:
        return ProcessingResponse(
            contact_id=self.contact.id,
            event_id=self.message_event.id,
            duplicate=self.duplicate,
            is_hot_lead=bool(self.assessment and self.assessment.is_hot_lead),
            hot_lead_score=self.assessment.score if self.assessment else 0,
            classification_method=self.assessment.method if self.assessment else None,
            reply=self.reply.text if self.reply else None,
            reply_degraded=bool(self.reply and self.reply.degraded),
            behaviors=[event.event_type.value for event in self.behavior_events],
            lead_score=self.contact.lead_score,
            lead_temperature=self.contact.lead_temperature.value,
        )


def _derived_key(base: str | None, suffix: str) -> str | None:
    return f"{base}:{suffix}" if base else None


class InboundPipeline:
    """Runs one inbound event through every engine component.

    With a provider message id every derived event carries a derived dedup
    key, so redelivery of the same webhook never double-counts.
    """

    def __init__(
        self,
        db: Session,
        provider: AIProvider | None = None,
        scoring_engine: ScoringEngine | None = None,
    ) -> None:
        scoring_engine = scoring_engine or ScoringEngine()
        self.db = db
        self.identity = IdentityService(db=db, scoring_engine=scoring_engine)
        self.ledger = EventLedger(db=db, scoring_engine=scoring_engine)
        self.config_service = TenantConfigService(db=db)
        self.classifier = HotLeadClassifier(provider=provider)
        self.generator = ResponseGenerator(provider=provider)
        self.analyzer = BehaviorAnalyzer()

    def process(self, event: InboundEvent, generate_reply: bool = True, now: datetime | None = None) -> ProcessingResult:
        now = as_utc(now) or utcnow()
        tenant_id = event.tenant_id
        channel = event.channel
        text = sanitize_text(event.message_text)
        message_key = event.provider_message_id
        occurred_at = as_utc(event.timestamp) or now
        context = LogContext(tenant_id=tenant_id, channel=channel.value, trace_id=message_key)

        tenant_config = self.config_service.load(tenant_id)
        contact = self.identity.resolve(tenant_id, event.contact_hints, channel=channel, now=now)
        context = replace(context, contact_id=contact.id)

        history = self.ledger.conversation_history(tenant_id, contact.id, limit=HISTORY_TURNS)
        message_event, created = self.ledger.try_record(
            tenant_id,
            contact.id,
            EventType.MESSAGE_RECEIVED,
            channel,
            EventPayload(
                user_message=text,
                metadata={"subject": event.subject} if event.subject else {},
                dedup_key=message_key,
                occurred_at=occurred_at,
            ),
            now=now,
        )
        if not created:
            logger.info(
                "pipeline.event.duplicate",
                extra=build_log_event("pipeline.event.duplicate", context, event_id=message_event.id),
            )
            return ProcessingResult(contact=contact, message_event=message_event, duplicate=True)

        result = ProcessingResult(contact=contact, message_event=message_event)
        result.assessment = self.classifier.classify(text, history, tenant_config)
        if result.assessment.is_hot_lead:
            result.hot_lead_event = self.ledger.record(
                tenant_id,
                contact.id,
                EventType.HOT_LEAD,
                channel,
                EventPayload(
                    user_message=text,
                    metadata={
                        "score": result.assessment.score,
                        "method": result.assessment.method,
                        "keywords": result.assessment.keywords,
                        "reasoning": result.assessment.reasoning,
                    },
                    confidence_score=result.assessment.score / 100,
                    dedup_key=_derived_key(message_key, EventType.HOT_LEAD.value),
                    occurred_at=occurred_at,
                ),
                now=now,
            )

        if generate_reply and tenant_config.replies_enabled_for(channel):
            self._reply(result, event, text, history, tenant_config, now)

        logger.info(
            "pipeline.event.processed",
            extra=build_log_event(
                "pipeline.event.processed",
                context,
                is_hot_lead=result.assessment.is_hot_lead,
                hot_lead_score=result.assessment.score,
                replied=result.reply is not None,
                lead_score=contact.lead_score,
            ),
        )
        return result

    def _reply(self, result, event, text, history, tenant_config, now) -> None:
        tenant_id = event.tenant_id
        contact_id = result.contact.id
        channel = event.channel
        reply_context = {
            "subject": event.subject,
            "phone_number": normalize_phone(event.contact_hints.phone),
        }
        result.reply = self.generator.generate(tenant_config, channel, text, history, reply_context)
        result.reply_event = self.ledger.record(
            tenant_id,
            contact_id,
            EventType.AI_RESPONSE,
            channel,
            EventPayload(
                user_message=text,
                ai_response=result.reply.text,
                metadata={
                    "tokens_used": result.reply.tokens_used,
                    "knowledge_base_used": result.reply.knowledge_base_used,
                    "degraded": result.reply.degraded,
                },
                dedup_key=_derived_key(event.provider_message_id, EventType.AI_RESPONSE.value),
            ),
            now=now,
        )
        if result.reply.degraded:
            return

        for behavior in self.analyzer.analyze(result.reply.text, text, channel.value):
            result.behavior_events.append(
                self.ledger.record(
                    tenant_id,
                    contact_id,
                    behavior.event_type,
                    channel,
                    EventPayload(
                        ai_response=result.reply.text,
                        metadata=behavior.metadata,
                        confidence_score=behavior.confidence,
                        dedup_key=_derived_key(event.provider_message_id, behavior.event_type.value),
                    ),
                    now=now,
                )
            )
