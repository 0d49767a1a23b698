"""
Contact repository: parameterized CRUD against the contacts table
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from contactbook.core.database import Database
from contactbook.core.exceptions import StoreOperationError
from contactbook.core.logging_config import LoggingConfig
from contactbook.core.metrics import contacts_mutations_total
from contactbook.models.contact import WRITABLE_FIELDS, Contact

logger = LoggingConfig.get_logger(__name__)


def coerce_created(value: Any) -> datetime:
    """
    Resolve the `created` column value.

    Absent or blank means "now"; strings must be ISO 8601. Aware datetimes are
    converted to local naive time, which is what the column stores.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return datetime.now()
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    if not isinstance(value, datetime):
        raise TypeError(f"created must be a datetime or ISO 8601 string, got {type(value).__name__}")
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def prepare_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only writable columns (never id) and normalise their values"""
    values: Dict[str, Any] = {}
    for name in WRITABLE_FIELDS:
        if name == "created":
            values[name] = coerce_created(fields.get(name))
            continue
        value = fields.get(name)
        if isinstance(value, str):
            value = value.strip()
        values[name] = value
    if not values.get("title"):
        values["title"] = None
    return values


class ContactRepository:
    """
    Data access for contacts.

    Every method runs in its own session; nothing is cached and no
    transaction spans more than one call.
    """

    def __init__(self, database: Database):
        self.database = database

    def list_page(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Contact]:
        """
        Contacts ordered by ascending id

        Args:
            limit: Maximum number of rows (all rows when None)
            offset: Number of rows to skip (none when None)
        """
        stmt = select(Contact).order_by(Contact.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)

        try:
            with self.database.session() as session:
                return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing contacts: {e}", exc_info=True)
            raise StoreOperationError("list", str(e)) from e

    def get_by_id(self, contact_id: int) -> Optional[Contact]:
        """Return the contact or None when it does not exist"""
        try:
            with self.database.session() as session:
                return session.get(Contact, contact_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading contact {contact_id}: {e}", exc_info=True)
            raise StoreOperationError("get", str(e)) from e

    def count(self) -> int:
        """Total number of contacts"""
        try:
            with self.database.session() as session:
                return session.scalar(select(func.count()).select_from(Contact)) or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting contacts: {e}", exc_info=True)
            raise StoreOperationError("count", str(e)) from e

    def create(self, fields: Mapping[str, Any]) -> Contact:
        """
        Insert a contact; the store assigns the id

        Returns:
            The stored contact, id included

        Raises:
            StoreOperationError: if the insert fails
        """
        contact = Contact(**prepare_fields(fields))

        with self.database.session() as session:
            try:
                session.add(contact)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                contacts_mutations_total.labels(operation="create", status="error").inc()
                logger.error(f"Error creating contact: {e}", exc_info=True)
                raise StoreOperationError("create", str(e)) from e

        contacts_mutations_total.labels(operation="create", status="success").inc()
        logger.info(f"Created contact {contact.id}", extra={"contact_id": contact.id})
        return contact

    def update(self, contact_id: int, fields: Mapping[str, Any]) -> bool:
        """
        Overwrite every writable column of a contact

        Returns:
            False when no row has that id
        """
        stmt = (
            update(Contact)
            .where(Contact.id == contact_id)
            .values(**prepare_fields(fields))
        )

        with self.database.session() as session:
            try:
                result = session.execute(stmt)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                contacts_mutations_total.labels(operation="update", status="error").inc()
                logger.error(f"Error updating contact {contact_id}: {e}", exc_info=True)
                raise StoreOperationError("update", str(e)) from e

        updated = result.rowcount > 0
        contacts_mutations_total.labels(
            operation="update", status="success" if updated else "missing"
        ).inc()
        if updated:
            logger.info(f"Updated contact {contact_id}", extra={"contact_id": contact_id})
        return updated

    def delete(self, contact_id: int) -> bool:
        """
        Delete a contact

        Returns:
            False when no row has that id
        """
        stmt = delete(Contact).where(Contact.id == contact_id)

        with self.database.session() as session:
            try:
                result = session.execute(stmt)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                contacts_mutations_total.labels(operation="delete", status="error").inc()
                logger.error(f"Error deleting contact {contact_id}: {e}", exc_info=True)
                raise StoreOperationError("delete", str(e)) from e

        deleted = result.rowcount > 0
        contacts_mutations_total.labels(
            operation="delete", status="success" if deleted else "missing"
        ).inc()
        if deleted:
            logger.info(f"Deleted contact {contact_id}", extra={"contact_id": contact_id})
        return deleted
