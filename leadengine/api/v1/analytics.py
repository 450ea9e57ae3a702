"""Tenant analytics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leadengine.api.v1 import deps
from leadengine.schemas.analytics import AnalyticsReport
from leadengine.services.analytics_service import AnalyticsService

router = APIRouter(tags=["analytics"])


@router.get("/tenants/{tenant_id}/analytics", response_model=AnalyticsReport)
def get_analytics(
    tenant_id: int,
    channel: str = Query(default="all"),
    period: str | None = Query(default=None),
) -> AnalyticsReport:
    with deps.get_db_session() as session:
        try:
            return AnalyticsService(db=session).aggregate(tenant_id, channel=channel, period=period)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
