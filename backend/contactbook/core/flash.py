"""
One-time notices carried across a redirect in the signed session cookie
"""
from typing import Dict, List, MutableMapping

SESSION_KEY = "_flashes"

SUCCESS = "success"
ERROR = "error"


class FlashMessages:
    """Queue of (type, message) pairs stored in a session mapping"""

    def __init__(self, session: MutableMapping):
        self.session = session

    def set(self, kind: str, message: str):
        """Queue a message for the next rendered page"""
        queued = list(self.session.get(SESSION_KEY, []))
        queued.append({"type": kind, "message": message})
        self.session[SESSION_KEY] = queued

    def success(self, message: str):
        self.set(SUCCESS, message)

    def error(self, message: str):
        self.set(ERROR, message)

    def consume(self) -> List[Dict[str, str]]:
        """Return queued messages and clear the queue"""
        return list(self.session.pop(SESSION_KEY, []))
