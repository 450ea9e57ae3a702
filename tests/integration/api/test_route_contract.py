from __future__ import annotations

from leadengine.api.v1.router import get_api_router


def test_required_endpoint_paths_are_registered():
    routes = {(route.path, method) for route in get_api_router().routes for method in route.methods}
    required = {
        ("/api/v1/health", "GET"),
        ("/api/v1/tenants/{tenant_id}/events", "POST"),
        ("/api/v1/webhooks/{channel}/{external_account_id}", "POST"),
        ("/api/v1/tenants/{tenant_id}/leads", "GET"),
        ("/api/v1/tenants/{tenant_id}/leads/{contact_id}", "GET"),
        ("/api/v1/tenants/{tenant_id}/contacts/duplicates", "GET"),
        ("/api/v1/tenants/{tenant_id}/contacts/merge", "POST"),
        ("/api/v1/tenants/{tenant_id}/contacts/{contact_id}/rescore", "POST"),
        ("/api/v1/tenants/{tenant_id}/analytics", "GET"),
        ("/api/v1/tenants/{tenant_id}/channels", "POST"),
    }
    assert required <= routes
