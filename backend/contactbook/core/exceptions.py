"""
Exception hierarchy shared by the store, the validator and the page handlers
"""
from typing import Dict, Optional


class ContactBookError(Exception):
    """Base class for all application errors"""

    # Text that is safe to show to end users
    user_message = "Something went wrong. Please try again."


class ValidationError(ContactBookError):
    """Submitted form data failed one or more field rules"""

    user_message = "Please correct the highlighted fields."

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(f"Validation failed for: {', '.join(sorted(self.errors))}")


class ContactNotFoundError(ContactBookError):
    """A referenced contact id does not exist"""

    user_message = "Contact not found."

    def __init__(self, contact_id: Optional[object]):
        self.contact_id = contact_id
        super().__init__(f"Contact {contact_id!r} not found")


class StoreConnectionError(ContactBookError):
    """The store could not be reached"""

    user_message = "The service is temporarily unavailable. Please try again later."


class StoreOperationError(ContactBookError):
    """A store statement failed unexpectedly"""

    user_message = "The operation could not be completed. Please try again."

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Store operation '{operation}' failed: {detail}")
