from __future__ import annotations

import leadengine.models  # noqa: F401
from leadengine.models import Base


def test_model_metadata_contains_engine_tables():
    expected = {"tenants", "contacts", "events", "tenant_ai_configs", "channel_connections"}
    assert expected == set(Base.metadata.tables.keys())


def test_events_dedup_key_is_unique_per_tenant():
    constraints = {constraint.name for constraint in Base.metadata.tables["events"].constraints}
    assert "uq_events_tenant_dedup_key" in constraints


def test_contact_identifiers_are_unique_among_active_rows():
    indexes = {index.name: index for index in Base.metadata.tables["contacts"].indexes}
    assert indexes["uq_contacts_tenant_email_active"].unique is True
    assert indexes["uq_contacts_tenant_phone_active"].unique is True
