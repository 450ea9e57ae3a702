"""Tenant context construction and isolation enforcement."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable

from leadengine.core.exceptions import TenantIsolationViolation, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    tenant_id: int
    trace_id: str = field(default_factory=lambda: uuid.uuid4().hex)


def from_path(tenant_id: int | str, trace_id: str | None = None) -> TenantContext:
    """Build a tenant context from a routed tenant id."""
    try:
        resolved = int(tenant_id)
    except (TypeError, ValueError) as exc:
        raise ValidationError("tenant_id must be an integer.") from exc
    if resolved < 1:
        raise ValidationError("tenant_id must be positive.")
    if trace_id:
        return TenantContext(tenant_id=resolved, trace_id=trace_id)
    return TenantContext(tenant_id=resolved)


def enforce_tenant_match(entity_tenant_id: int, context: TenantContext | int) -> None:
    """Abort when a loaded row belongs to a tenant other than the caller's."""
    expected = context.tenant_id if isinstance(context, TenantContext) else context
    if int(entity_tenant_id) != int(expected):
        logger.error(
            "tenant.isolation_violation",
            extra={
                "event": "tenant.isolation_violation",
                "tenant_id": int(expected),
                "entity_tenant_id": int(entity_tenant_id),
            },
        )
        raise TenantIsolationViolation(
            f"Row of tenant {entity_tenant_id} reached a tenant {expected} operation."
        )


def enforce_all(rows: Iterable, context: TenantContext | int) -> None:
    for row in rows:
        enforce_tenant_match(row.tenant_id, context)
