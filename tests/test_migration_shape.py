from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from core.config import get_settings
from core.models import Base


def test_required_tables_present_in_migration():
    text = Path("alembic/versions/20261001_0001_initial.py").read_text()
    for table in Base.metadata.tables:
        assert f'"{table}"' in text


def test_migrations_avoid_postgres_now_function_for_portability():
    migrations_dir = Path("alembic/versions")
    for migration_file in migrations_dir.glob("*.py"):
        text = migration_file.read_text(encoding="utf-8").lower()
        assert "now()" not in text, f"Non-portable now() found in {migration_file.name}"


def test_alembic_upgrade_head_matches_models_on_sqlite(tmp_path, monkeypatch):
    db_path = tmp_path / "migration_smoke.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    get_settings.cache_clear()
    try:
        command.upgrade(Config("alembic.ini"), "head")
    finally:
        get_settings.cache_clear()

    inspector = inspect(create_engine(f"sqlite:///{db_path}"))
    migrated = set(inspector.get_table_names()) - {"alembic_version"}
    assert migrated == set(Base.metadata.tables)
    for name, table in Base.metadata.tables.items():
        columns = {c["name"] for c in inspector.get_columns(name)}
        assert columns == {c.name for c in table.columns}, name
