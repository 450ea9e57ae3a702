"""baseline schema for tenants, contacts, events and tenant settings

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_key", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("business_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_key"),
    )

    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("lead_score", sa.Integer(), nullable=False),
        sa.Column("lead_temperature", sa.String(length=16), nullable=False),
        sa.Column("lead_status", sa.String(length=16), nullable=False),
        sa.Column("potential_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("first_interaction_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_interaction_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_interactions", sa.Integer(), nullable=False),
        sa.Column("hot_lead_count", sa.Integer(), nullable=False),
        sa.Column("appointment_count", sa.Integer(), nullable=False),
        sa.Column("phone_request_count", sa.Integer(), nullable=False),
        sa.Column("pricing_discussion_count", sa.Integer(), nullable=False),
        sa.Column("source_channel", sa.String(length=40), nullable=True),
        sa.Column("channels_used", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("merged_into", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="ck_contacts_has_identifier"),
        sa.CheckConstraint("lead_score >= 0 AND lead_score <= 100", name="ck_contacts_lead_score_range"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["merged_into"], ["contacts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contacts_tenant_id", "contacts", ["tenant_id"])
    op.create_index(
        "uq_contacts_tenant_email_active",
        "contacts",
        ["tenant_id", "email"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active IS TRUE"),
    )
    op.create_index(
        "uq_contacts_tenant_phone_active",
        "contacts",
        ["tenant_id", "phone"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active IS TRUE"),
    )
    op.create_index("idx_contacts_tenant_temperature", "contacts", ["tenant_id", "lead_temperature"])
    op.create_index("idx_contacts_tenant_score", "contacts", ["tenant_id", "lead_score"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("contact_id", sa.Integer(), nullable=True),
        sa.Column("event_type", sa.String(length=40), nullable=False),
        sa.Column("channel", sa.String(length=20), nullable=False),
        sa.Column("user_message", sa.Text(), nullable=True),
        sa.Column("ai_response", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("dedup_key", sa.String(length=255), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "dedup_key", name="uq_events_tenant_dedup_key"),
    )
    op.create_index("ix_events_tenant_id", "events", ["tenant_id"])
    op.create_index("ix_events_contact_id", "events", ["contact_id"])
    op.create_index("idx_events_tenant_created", "events", ["tenant_id", "created_at"])
    op.create_index("idx_events_tenant_type", "events", ["tenant_id", "event_type"])
    op.create_index("idx_events_contact_created", "events", ["contact_id", "created_at"])

    op.create_table(
        "tenant_ai_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("business_name", sa.String(length=255), nullable=True),
        sa.Column("tone", sa.String(length=60), nullable=True),
        sa.Column("knowledge_base", sa.Text(), nullable=True),
        sa.Column("custom_instructions", sa.Text(), nullable=True),
        sa.Column("hot_lead_keywords", sa.JSON(), nullable=True),
        sa.Column("lead_detection_enabled", sa.Boolean(), nullable=True),
        sa.Column("auto_reply_enabled", sa.Boolean(), nullable=True),
        sa.Column("model", sa.String(length=120), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("max_tokens", sa.Integer(), nullable=True),
        sa.Column("channel_flags", sa.JSON(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", name="uq_tenant_ai_configs_tenant"),
    )
    op.create_index("ix_tenant_ai_configs_tenant_id", "tenant_ai_configs", ["tenant_id"])

    op.create_table(
        "channel_connections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("channel", sa.String(length=20), nullable=False),
        sa.Column("external_account_id", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("channel", "external_account_id", name="uq_channel_connections_account"),
    )
    op.create_index("ix_channel_connections_tenant_id", "channel_connections", ["tenant_id"])


def downgrade() -> None:
    op.drop_index("ix_channel_connections_tenant_id", table_name="channel_connections")
    op.drop_table("channel_connections")

    op.drop_index("ix_tenant_ai_configs_tenant_id", table_name="tenant_ai_configs")
    op.drop_table("tenant_ai_configs")

    op.drop_index("idx_events_contact_created", table_name="events")
    op.drop_index("idx_events_tenant_type", table_name="events")
    op.drop_index("idx_events_tenant_created", table_name="events")
    op.drop_index("ix_events_contact_id", table_name="events")
    op.drop_index("ix_events_tenant_id", table_name="events")
    op.drop_table("events")

    op.drop_index("idx_contacts_tenant_score", table_name="contacts")
    op.drop_index("idx_contacts_tenant_temperature", table_name="contacts")
    op.drop_index("uq_contacts_tenant_phone_active", table_name="contacts")
    op.drop_index("uq_contacts_tenant_email_active", table_name="contacts")
    op.drop_index("ix_contacts_tenant_id", table_name="contacts")
    op.drop_table("contacts")

    op.drop_table("tenants")
