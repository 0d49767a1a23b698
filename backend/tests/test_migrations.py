"""
Tests for the Alembic migrations against a throwaway SQLite database
"""
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from contactbook.models.contact import Contact

BACKEND_DIR = Path(__file__).resolve().parents[1]


@pytest.fixture(scope="function")
def migration_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'migrated.db'}"


@pytest.fixture(scope="function")
def alembic_cfg(migration_url: str) -> Config:
    """Config built in code so the ini file's logging setup is left alone"""
    cfg = Config()
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", migration_url)
    return cfg


def _columns(url: str, table: str):
    engine = create_engine(url)
    try:
        return {column["name"]: column for column in inspect(engine).get_columns(table)}
    finally:
        engine.dispose()


def test_upgrade_matches_contact_model(alembic_cfg, migration_url):
    command.upgrade(alembic_cfg, "head")

    migrated = _columns(migration_url, Contact.__tablename__)
    model_columns = {column.name: column for column in Contact.__table__.columns}

    assert set(migrated) == set(model_columns)
    for name, column in model_columns.items():
        assert migrated[name]["nullable"] == column.nullable, name
        assert getattr(migrated[name]["type"], "length", None) == getattr(column.type, "length", None), name


def test_downgrade_removes_contacts_table(alembic_cfg, migration_url):
    command.upgrade(alembic_cfg, "head")
    command.downgrade(alembic_cfg, "base")

    engine = create_engine(migration_url)
    try:
        assert Contact.__tablename__ not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
