"""
Tests for settings and logging configuration
"""
import json
import logging

import pytest
from pydantic import ValidationError

from contactbook.core.config import Settings
from contactbook.core.logging_config import ContextualFormatter, LoggingConfig, SensitiveDataFilter


def test_database_url_takes_precedence():
    settings = Settings(database_url="sqlite:///custom.db", postgres_host="db")

    assert settings.sqlalchemy_url == "sqlite:///custom.db"


def test_postgres_url_built_from_parts():
    settings = Settings(
        database_url=None,
        postgres_host="db",
        postgres_user="book",
        postgres_password="pw",
        postgres_db="contacts",
        postgres_port=5433,
    )

    assert settings.sqlalchemy_url == "postgresql+psycopg://book:pw@db:5433/contacts"


def test_sqlite_fallback():
    settings = Settings(database_url=None, postgres_host=None)

    assert settings.sqlalchemy_url.startswith("sqlite:///")
    assert settings.sqlalchemy_url.endswith("contactbook.db")


def test_page_size_default():
    assert Settings().contacts_page_size == 5


def test_invalid_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(log_format="xml")


def _record(msg, *args):
    return logging.LogRecord("contactbook.test", logging.INFO, __file__, 1, msg, args, None)


def test_sensitive_filter_masks_database_password():
    record = _record("Connecting to postgresql+psycopg://book:hunter2@db:5432/contacts")

    SensitiveDataFilter().filter(record)

    assert "hunter2" not in record.getMessage()
    assert "book:***@db" in record.getMessage()


def test_sensitive_filter_masks_args():
    record = _record("settings: %s", "password=hunter2")

    SensitiveDataFilter().filter(record)

    assert "hunter2" not in record.getMessage()


def test_sensitive_filter_can_be_disabled():
    record = _record("password=hunter2")

    SensitiveDataFilter(enabled=False).filter(record)

    assert "hunter2" in record.getMessage()


def test_json_formatter_includes_request_context():
    LoggingConfig.set_context(request_id="abc-123", path="/contacts")
    try:
        payload = json.loads(ContextualFormatter().format(_record("hello %s", "world")))
    finally:
        LoggingConfig.clear_context()

    assert payload["message"] == "hello world"
    assert payload["request_id"] == "abc-123"
    assert payload["path"] == "/contacts"
    assert payload["level"] == "INFO"


def test_module_levels_from_settings():
    settings = Settings(log_format="text", log_module_levels='{"contactbook.services": "DEBUG"}')

    LoggingConfig.configure(settings, force=True)

    assert LoggingConfig.get_module_level("contactbook.services") == "DEBUG"
