"""Loads stored tenant AI settings into the typed ``TenantAIConfig``."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select

from leadengine.auth.tenant_context import enforce_tenant_match
from leadengine.core.exceptions import TenantNotFoundError, ValidationError
from leadengine.models import Tenant, TenantAIConfigRecord
from leadengine.schemas.tenant_config import TenantAIConfig
from leadengine.services.base_service import BaseService

logger = logging.getLogger(__name__)

_SETTING_FIELDS = (
    "business_name",
    "tone",
    "knowledge_base",
    "custom_instructions",
    "hot_lead_keywords",
    "lead_detection_enabled",
    "auto_reply_enabled",
    "model",
    "temperature",
    "max_tokens",
    "channel_flags",
)


class TenantConfigService(BaseService):
    def get_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id, Tenant.is_active.is_(True), Tenant.deleted_at.is_(None))
        ).scalar_one_or_none()
        if tenant is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found.")
        return tenant

    def _record(self, tenant_id: int) -> TenantAIConfigRecord | None:
        record = self.db.execute(
            select(TenantAIConfigRecord).where(TenantAIConfigRecord.tenant_id == tenant_id)
        ).scalar_one_or_none()
        if record is not None:
            enforce_tenant_match(record.tenant_id, tenant_id)
        return record

    def load(self, tenant_id: int) -> TenantAIConfig:
        """Resolve every default once; columns left NULL take engine defaults."""
        tenant = self.get_tenant(tenant_id)
        record = self._record(tenant_id)

        values: dict[str, Any] = {"tenant_id": tenant.id}
        if tenant.business_name or tenant.name:
            values["business_name"] = tenant.business_name or tenant.name
        if record is not None:
            for field in _SETTING_FIELDS:
                value = getattr(record, field)
                if value is not None:
                    values[field] = value
        return TenantAIConfig(**values)

    def upsert(self, tenant_id: int, **settings: Any) -> TenantAIConfig:
        unknown = set(settings) - set(_SETTING_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown tenant settings: {', '.join(sorted(unknown))}.")
        self.get_tenant(tenant_id)
        try:
            # Validate before touching the row.
            TenantAIConfig(**{key: value for key, value in settings.items() if value is not None})
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

        record = self._record(tenant_id)
        if record is None:
            record = TenantAIConfigRecord(tenant_id=tenant_id)
            self.db.add(record)
        for field, value in settings.items():
            if field == "hot_lead_keywords" and value is not None:
                value = list(value)
            setattr(record, field, value)
        self.commit()
        logger.info(
            "tenant.settings.updated",
            extra={"event": "tenant.settings.updated", "tenant_id": tenant_id, "fields": sorted(settings)},
        )
        return self.load(tenant_id)
