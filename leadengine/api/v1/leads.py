"""Lead list and detail endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leadengine.api.v1 import deps
from leadengine.schemas.leads import LeadDetail, LeadPage
from leadengine.services.lead_query_service import LeadQueryService

router = APIRouter(tags=["leads"])


@router.get("/tenants/{tenant_id}/leads", response_model=LeadPage)
def list_leads(
    tenant_id: int,
    channel: str = Query(default="all"),
    temperature: str = Query(default="all"),
    search: str = Query(default="", max_length=200),
    sort_by: str = Query(default="score"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> LeadPage:
    with deps.get_db_session() as session:
        try:
            return LeadQueryService(db=session).list_leads(
                tenant_id,
                channel=channel,
                temperature=temperature,
                search=search,
                sort_by=sort_by,
                limit=limit,
                offset=offset,
            )
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)


@router.get("/tenants/{tenant_id}/leads/{contact_id}", response_model=LeadDetail)
def get_lead(tenant_id: int, contact_id: int) -> LeadDetail:
    with deps.get_db_session() as session:
        try:
            return LeadQueryService(db=session).get_lead_details(tenant_id, contact_id)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
