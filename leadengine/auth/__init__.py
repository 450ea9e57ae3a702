"""Tenant scoping guards."""
