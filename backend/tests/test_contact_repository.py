"""
Tests for ContactRepository against a SQLite store
"""
from datetime import datetime

import pytest

from contactbook.core.database import Database
from contactbook.core.exceptions import StoreConnectionError, StoreOperationError
from contactbook.services.contact_repository import ContactRepository, coerce_created


def _make(repository, count):
    return [
        repository.create({
            "name": f"Contact {i}",
            "email": f"contact{i}@example.com",
            "phone": f"555-{i:04d}",
        })
        for i in range(count)
    ]


def test_create_then_get_returns_same_values(repository, ana):
    created = repository.create(ana)

    assert isinstance(created.id, int) and created.id > 0
    loaded = repository.get_by_id(created.id)
    assert loaded is not None
    assert (loaded.name, loaded.email, loaded.phone, loaded.title) == (
        "Ana", "ana@x.com", "11999999999", "Dev"
    )


def test_create_defaults_created_to_now(repository, ana):
    before = datetime.now()
    contact = repository.create({**ana, "created": ""})
    after = datetime.now()

    assert before <= repository.get_by_id(contact.id).created <= after


def test_create_accepts_client_created(repository, ana):
    contact = repository.create({**ana, "created": "2024-01-02T03:04"})

    assert repository.get_by_id(contact.id).created == datetime(2024, 1, 2, 3, 4)


def test_create_ignores_client_id(repository, ana):
    contact = repository.create({**ana, "id": 99})

    assert contact.id == 1
    assert repository.get_by_id(99) is None


def test_empty_title_is_stored_as_null(repository, ana):
    contact = repository.create({**ana, "title": ""})

    assert repository.get_by_id(contact.id).title is None


def test_update_overwrites_fields(repository, ana):
    contact = repository.create(ana)

    updated = repository.update(contact.id, {
        "name": "Ana Maria",
        "email": "ana.maria@x.com",
        "phone": "11888888888",
        "title": "Lead",
        "created": "2023-12-31T23:59",
    })

    assert updated is True
    loaded = repository.get_by_id(contact.id)
    assert loaded.name == "Ana Maria"
    assert loaded.email == "ana.maria@x.com"
    assert loaded.phone == "11888888888"
    assert loaded.title == "Lead"
    assert loaded.created == datetime(2023, 12, 31, 23, 59)


def test_update_missing_returns_false(repository, ana):
    assert repository.update(12345, ana) is False
    assert repository.count() == 0


def test_delete_then_get_is_none(repository, ana):
    contact = repository.create(ana)

    assert repository.delete(contact.id) is True
    assert repository.get_by_id(contact.id) is None


def test_delete_missing_returns_false(repository):
    assert repository.delete(777) is False


def test_list_page_limits_and_orders_by_id(repository):
    contacts = _make(repository, 7)

    page = repository.list_page(limit=5, offset=0)

    assert [c.id for c in page] == [c.id for c in contacts[:5]]
    assert [c.id for c in page] == sorted(c.id for c in page)


def test_list_page_offset(repository):
    contacts = _make(repository, 7)

    assert [c.id for c in repository.list_page(limit=5, offset=5)] == [c.id for c in contacts[5:]]
    assert repository.list_page(limit=5, offset=10) == []
    assert [c.id for c in repository.list_page(offset=6)] == [contacts[6].id]


def test_list_page_without_bounds_returns_all(repository):
    _make(repository, 7)

    assert len(repository.list_page()) == 7


def test_count_tracks_creates_and_deletes(repository):
    contacts = _make(repository, 4)
    repository.delete(contacts[0].id)
    repository.delete(contacts[2].id)

    assert repository.count() == 2


def test_store_failure_raises_store_operation_error(settings, ana):
    # Tables were never created on this handle
    database = Database.from_settings(settings)
    repository = ContactRepository(database)
    try:
        with pytest.raises(StoreOperationError) as exc_info:
            repository.create(ana)
        assert exc_info.value.operation == "create"

        with pytest.raises(StoreOperationError):
            repository.count()
    finally:
        database.dispose()


def test_verify_connection_failure(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'contacts.db'}")
    try:
        with pytest.raises(StoreConnectionError):
            database.verify_connection()
    finally:
        database.dispose()


def test_coerce_created():
    assert coerce_created(datetime(2024, 1, 1)) == datetime(2024, 1, 1)
    assert coerce_created(" 2024-01-01 08:30:00 ") == datetime(2024, 1, 1, 8, 30)
    assert isinstance(coerce_created(None), datetime)
    with pytest.raises(ValueError):
        coerce_created("not a date")
