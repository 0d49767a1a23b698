"""
Pytest configuration and fixtures
"""
import os

import pytest
from fastapi.testclient import TestClient

# Plain-text console logs and no log files during test runs
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from contactbook.core.config import Settings
from contactbook.core.database import Database
from contactbook.main import create_app
from contactbook.services.contact_repository import ContactRepository


@pytest.fixture(scope="function")
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file"""
    return Settings(
        app_env="test",
        secret_key="test-secret-key",
        database_url=f"sqlite:///{tmp_path / 'contacts.db'}",
        log_format="text",
        log_file_enabled=False,
    )


@pytest.fixture(scope="function")
def database(settings: Settings):
    """Store handle with a clean contacts table for each test"""
    db = Database.from_settings(settings)
    db.create_tables()
    try:
        yield db
    finally:
        db.drop_tables()
        db.dispose()


@pytest.fixture(scope="function")
def repository(database: Database) -> ContactRepository:
    return ContactRepository(database)


@pytest.fixture(scope="function")
def app(settings: Settings, database: Database):
    return create_app(settings, database)


@pytest.fixture(scope="function")
def client(app):
    """Test client; the context manager runs the lifespan startup checks"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def ana() -> dict:
    return {
        "name": "Ana",
        "email": "ana@x.com",
        "phone": "11999999999",
        "title": "Dev",
    }
