from __future__ import annotations

from leadengine.models import EventType
from leadengine.services.event_ledger import EventLedger
from leadengine.services.identity_service import IdentityService
from leadengine.tasks.maintenance_tasks import reconcile_contact_task, rescore_tenant_task


def _seed(session_factory, add_tenant):
    session = session_factory()
    add_tenant(session, 1)
    contact = IdentityService(db=session).resolve(1, {"email": "drift@example.com"})
    EventLedger(db=session).record(1, contact.id, EventType.APPOINTMENT_SCHEDULED, "email")
    contact.total_interactions = 9
    contact.appointment_count = 0
    session.commit()
    contact_id = contact.id
    session.close()
    return contact_id


def test_reconcile_contact_task_repairs_counters(isolated_session_factory, add_tenant):
    contact_id = _seed(isolated_session_factory, add_tenant)

    result = reconcile_contact_task.run(tenant_id=1, contact_id=contact_id)
    assert result["total_interactions"] == 1
    assert result["lead_temperature"] == "hot"


def test_rescore_tenant_task_counts_repairs(isolated_session_factory, add_tenant):
    _seed(isolated_session_factory, add_tenant)

    assert rescore_tenant_task.run(tenant_id=1) == {"tenant_id": 1, "rescored": 1, "repaired": 1}
    assert rescore_tenant_task.run(tenant_id=1) == {"tenant_id": 1, "rescored": 1, "repaired": 0}
