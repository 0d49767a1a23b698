"""
SQLAlchemy models
"""
from contactbook.core.database import Base
from contactbook.models.contact import WRITABLE_FIELDS, Contact  # noqa: F401

__all__ = ["Base", "Contact", "WRITABLE_FIELDS"]
