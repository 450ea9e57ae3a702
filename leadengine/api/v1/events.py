"""Inbound event ingestion and channel webhooks."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leadengine.api.v1 import deps
from leadengine.auth.tenant_context import from_path
from leadengine.schemas.events import InboundEventRequest, ProcessingResponse
from leadengine.services.channel_connection_service import ChannelConnectionService
from leadengine.services.inbound_pipeline import InboundPipeline

router = APIRouter(tags=["events"])


def _process(session, tenant_id: int, payload: InboundEventRequest, generate_reply: bool) -> ProcessingResponse:
    context = from_path(tenant_id)
    pipeline = InboundPipeline(db=session, provider=deps.get_provider())
    result = pipeline.process(payload.to_event(context.tenant_id), generate_reply=generate_reply)
    return result.to_response()


@router.post("/tenants/{tenant_id}/events", response_model=ProcessingResponse)
def ingest_event(
    tenant_id: int,
    payload: InboundEventRequest,
    generate_reply: bool = Query(default=True),
) -> ProcessingResponse:
    with deps.get_db_session() as session:
        try:
            return _process(session, tenant_id, payload, generate_reply)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)


@router.post("/webhooks/{channel}/{external_account_id}", response_model=ProcessingResponse)
def channel_webhook(
    channel: str,
    external_account_id: str,
    payload: InboundEventRequest,
    generate_reply: bool = Query(default=True),
) -> ProcessingResponse:
    with deps.get_db_session() as session:
        try:
            tenant_id = ChannelConnectionService(db=session).resolve_tenant(channel, external_account_id)
            return _process(session, tenant_id, payload, generate_reply)
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
