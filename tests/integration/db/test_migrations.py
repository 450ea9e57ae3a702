from __future__ import annotations

from pathlib import Path
import uuid

from alembic import command
from sqlalchemy import create_engine, inspect

from leadengine.database.init_db import _build_alembic_config


def test_baseline_migration_creates_schema():
    tmp_root = Path(".test_tmp")
    tmp_root.mkdir(exist_ok=True)
    database_url = f"sqlite:///{tmp_root / f'migrate_{uuid.uuid4().hex}.db'}"

    command.upgrade(_build_alembic_config(database_url), "head")

    tables = set(inspect(create_engine(database_url)).get_table_names())
    assert {"tenants", "contacts", "events", "tenant_ai_configs", "channel_connections"} <= tables
