"""Contact maintenance: duplicate discovery, merge and rescoring."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leadengine.api.v1 import deps
from leadengine.schemas.leads import DuplicateGroupResponse, MergeRequest, MergeResponse
from leadengine.services.event_ledger import EventLedger
from leadengine.services.identity_service import IdentityService

router = APIRouter(tags=["contacts"])


@router.get("/tenants/{tenant_id}/contacts/duplicates")
def list_duplicates(tenant_id: int, limit: int = Query(default=50, ge=1, le=500)) -> dict:
    with deps.get_db_session() as session:
        groups = IdentityService(db=session).find_duplicates(tenant_id, limit=limit)
        return {
            "items": [DuplicateGroupResponse(**group.__dict__).model_dump() for group in groups],
            "total": len(groups),
        }


@router.post("/tenants/{tenant_id}/contacts/merge", response_model=MergeResponse)
def merge_contacts(tenant_id: int, payload: MergeRequest) -> MergeResponse:
    with deps.get_db_session() as session:
        try:
            result = IdentityService(db=session).merge(tenant_id, payload.primary_id, payload.duplicate_ids)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
        return MergeResponse(
            primary_id=result.primary_id,
            merged_ids=result.merged_ids,
            events_reassigned=result.events_reassigned,
            lead_score=result.lead_score.score,
            lead_temperature=result.lead_score.temperature.value,
        )


@router.post("/tenants/{tenant_id}/contacts/{contact_id}/rescore")
def rescore_contact(tenant_id: int, contact_id: int) -> dict:
    with deps.get_db_session() as session:
        try:
            score = EventLedger(db=session).rescore(tenant_id, contact_id)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
        return {
            "contact_id": contact_id,
            "lead_score": score.score,
            "lead_temperature": score.temperature.value,
            "potential_value": str(score.potential_value),
            "breakdown": score.breakdown.__dict__,
        }
