"""Tenant-owned channel accounts used to route inbound webhooks."""

from __future__ import annotations

import logging

from sqlalchemy import select

from leadengine.auth.tenant_context import enforce_all
from leadengine.core.exceptions import ChannelNotConnectedError, ValidationError
from leadengine.models import Channel, ChannelConnection
from leadengine.services.base_service import BaseService
from leadengine.utils.validators import sanitize_text

logger = logging.getLogger(__name__)


class ChannelConnectionService(BaseService):
    def _find(self, channel: Channel, external_account_id: str) -> ChannelConnection | None:
        return self.db.execute(
            select(ChannelConnection).where(
                ChannelConnection.channel == channel.value,
                ChannelConnection.external_account_id == external_account_id,
            )
        ).scalar_one_or_none()

    def connect(
        self,
        tenant_id: int,
        channel: Channel | str,
        external_account_id: str,
        display_name: str | None = None,
    ) -> ChannelConnection:
        """Attach an external account to a tenant; reconnecting reactivates it."""
        channel = Channel.parse(channel)
        account_id = sanitize_text(external_account_id, max_len=255)
        if not account_id:
            raise ValidationError("external_account_id is required.")

        connection = self._find(channel, account_id)
        if connection is not None and connection.tenant_id != tenant_id and connection.is_active:
            raise ValidationError(f"{channel.value} account {account_id} is connected to another tenant.")
        if connection is None:
            connection = ChannelConnection(tenant_id=tenant_id, channel=channel.value, external_account_id=account_id)
            self.db.add(connection)
        connection.tenant_id = tenant_id
        connection.is_active = True
        if display_name:
            connection.display_name = sanitize_text(display_name, max_len=255)
        self.commit()
        logger.info(
            "channel.connected",
            extra={"event": "channel.connected", "tenant_id": tenant_id, "channel": channel.value},
        )
        return connection

    def disconnect(self, tenant_id: int, channel: Channel | str, external_account_id: str) -> None:
        channel = Channel.parse(channel)
        connection = self._find(channel, external_account_id)
        if connection is None or connection.tenant_id != tenant_id:
            raise ChannelNotConnectedError(f"No {channel.value} account {external_account_id} for this tenant.")
        connection.is_active = False
        self.commit()

    def resolve_tenant(self, channel: Channel | str, external_account_id: str) -> int:
        channel = Channel.parse(channel)
        connection = self._find(channel, external_account_id)
        if connection is None or not connection.is_active:
            logger.warning(
                "channel.unrouted_delivery",
                extra={"event": "channel.unrouted_delivery", "channel": channel.value},
            )
            raise ChannelNotConnectedError(f"No tenant owns {channel.value} account {external_account_id}.")
        return connection.tenant_id

    def list_for_tenant(self, tenant_id: int) -> list[ChannelConnection]:
        rows = self.db.execute(
            select(ChannelConnection)
            .where(ChannelConnection.tenant_id == tenant_id, ChannelConnection.is_active.is_(True))
            .order_by(ChannelConnection.channel, ChannelConnection.external_account_id)
        ).scalars().all()
        enforce_all(rows, tenant_id)
        return list(rows)
