"""Structured logging helpers for pipeline and API callers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    tenant_id: int | None = None
    contact_id: int | None = None
    channel: str | None = None
    trace_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload for ``extra=``."""
    payload: dict[str, Any] = {
        "logged_at": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "tenant_id": context.tenant_id,
        "contact_id": context.contact_id,
        "channel": context.channel,
        "trace_id": context.trace_id,
    }
    payload.update(fields)
    return payload
