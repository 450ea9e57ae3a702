"""Counter repair and rescoring tasks for an external scheduler to trigger."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from leadengine.core.exceptions import ScoringInconsistency
from leadengine.database.db import get_db_session
from leadengine.models import Contact
from leadengine.services.event_ledger import EventLedger
from leadengine.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="leadengine.reconcile_contact")
def reconcile_contact_task(tenant_id: int, contact_id: int) -> dict[str, Any]:
    with get_db_session() as session:
        ledger = EventLedger(db=session)
        contact = ledger.reconcile(tenant_id, contact_id)
        return {
            "tenant_id": tenant_id,
            "contact_id": contact.id,
            "total_interactions": contact.total_interactions,
            "lead_score": contact.lead_score,
            "lead_temperature": contact.lead_temperature.value,
        }


@celery_app.task(name="leadengine.rescore_tenant")
def rescore_tenant_task(tenant_id: int) -> dict[str, Any]:
    """Verify and refresh every active contact of a tenant."""
    rescored = 0
    repaired = 0
    with get_db_session() as session:
        ledger = EventLedger(db=session)
        contact_ids = session.execute(
            select(Contact.id)
            .where(Contact.tenant_id == tenant_id, Contact.is_active.is_(True))
            .order_by(Contact.id)
        ).scalars().all()
        for contact_id in contact_ids:
            try:
                ledger.verify_counters(tenant_id, contact_id)
            except ScoringInconsistency:
                repaired += 1
            ledger.rescore(tenant_id, contact_id)
            rescored += 1

    logger.info(
        "tasks.rescore_tenant.finished",
        extra={
            "event": "tasks.rescore_tenant.finished",
            "tenant_id": tenant_id,
            "rescored": rescored,
            "repaired": repaired,
        },
    )
    return {"tenant_id": tenant_id, "rescored": rescored, "repaired": repaired}
