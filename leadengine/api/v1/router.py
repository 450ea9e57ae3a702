"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from leadengine.api.v1 import analytics, channels, contacts, events, health, leads
from leadengine.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(events.router)
api_router.include_router(channels.router)
api_router.include_router(leads.router)
api_router.include_router(contacts.router)
api_router.include_router(analytics.router)


def get_api_router() -> APIRouter:
    return api_router
