from __future__ import annotations

from alembic import command
from sqlalchemy import create_engine, inspect

from autoinspect.database.init_db import _build_alembic_config


def test_baseline_migration_creates_watchdog_schema(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'migrated.db'}"

    command.upgrade(_build_alembic_config(database_url), "head")

    engine = create_engine(database_url)
    try:
        inspector = inspect(engine)
        assert {"inspections", "agent_executions"}.issubset(set(inspector.get_table_names()))
        columns = {column["name"] for column in inspector.get_columns("agent_executions")}
        assert {"status", "attempt_number", "max_retries", "started_at", "lease_version", "metadata"} <= columns
        index_names = {index["name"] for index in inspector.get_indexes("agent_executions")}
        assert "idx_agent_executions_stuck_detection" in index_names
    finally:
        engine.dispose()


def test_baseline_migration_downgrades_cleanly(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'downgraded.db'}"
    alembic_cfg = _build_alembic_config(database_url)

    command.upgrade(alembic_cfg, "head")
    command.downgrade(alembic_cfg, "base")

    engine = create_engine(database_url)
    try:
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
