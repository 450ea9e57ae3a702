"""Channel account connections per tenant."""

from __future__ import annotations

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from leadengine.api.v1 import deps
from leadengine.services.channel_connection_service import ChannelConnectionService

router = APIRouter(tags=["channels"])


class ChannelConnectRequest(BaseModel):
    channel: str = Field(min_length=2, max_length=20)
    external_account_id: str = Field(min_length=1, max_length=255)
    display_name: str | None = Field(default=None, max_length=255)


def _serialize(connection) -> dict:
    return {
        "id": connection.id,
        "tenant_id": connection.tenant_id,
        "channel": connection.channel,
        "external_account_id": connection.external_account_id,
        "display_name": connection.display_name,
        "is_active": connection.is_active,
    }


@router.post("/tenants/{tenant_id}/channels", status_code=status.HTTP_201_CREATED)
def connect_channel(tenant_id: int, payload: ChannelConnectRequest) -> dict:
    with deps.get_db_session() as session:
        try:
            connection = ChannelConnectionService(db=session).connect(
                tenant_id,
                payload.channel,
                payload.external_account_id,
                display_name=payload.display_name,
            )
        except deps.DOMAIN_ERRORS as exc:
            deps.raise_http_error(exc)
        return _serialize(connection)


@router.get("/tenants/{tenant_id}/channels")
def list_channels(tenant_id: int) -> dict:
    with deps.get_db_session() as session:
        connections = ChannelConnectionService(db=session).list_for_tenant(tenant_id)
        return {"items": [_serialize(connection) for connection in connections]}
