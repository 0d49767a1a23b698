"""
Contact model
"""
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Integer, String, func

from contactbook.core.database import Base

# Columns a caller may write; id is always assigned by the store
WRITABLE_FIELDS = ("name", "email", "phone", "title", "created")


class Contact(Base):
    """A single address-book entry"""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    title = Column(String(255), nullable=True)
    created = Column(DateTime, nullable=False, default=datetime.now, server_default=func.now())

    def __repr__(self):
        return f"<Contact(id={self.id}, name='{self.name}', email='{self.email}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "title": self.title,
            "created": self.created.isoformat() if self.created else None,
        }
