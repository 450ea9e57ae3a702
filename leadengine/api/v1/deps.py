"""Shared dependencies and error mapping for API v1 route modules."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from leadengine.core.exceptions import (
    AlreadyMergedError,
    IdentityError,
    LeadEngineException,
    NotFoundError,
    TenantIsolationViolation,
    ValidationError,
)
from leadengine.database.db import get_db_session
from leadengine.llm import AIProvider, get_default_provider

logger = logging.getLogger(__name__)

__all__ = ["get_db_session", "get_provider", "map_domain_error", "raise_http_error"]


def get_provider() -> AIProvider | None:
    return get_default_provider()


def map_domain_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, TenantIsolationViolation):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Operation aborted."
    if isinstance(exc, AlreadyMergedError):
        return status.HTTP_409_CONFLICT, str(exc)
    if isinstance(exc, IdentityError):
        if exc.reason == "NotFound":
            return status.HTTP_404_NOT_FOUND, str(exc)
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, str(exc)
    if isinstance(exc, (ValidationError, ValueError)):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error."


def raise_http_error(exc: Exception) -> None:
    code, detail = map_domain_error(exc)
    if code >= 500:
        logger.error(
            "api.request.failed",
            extra={"event": "api.request.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
    raise HTTPException(status_code=code, detail=detail) from exc


DOMAIN_ERRORS = (LeadEngineException, ValueError)
