# console errors: local validation and backend failure types
# controllers catch BackendError at every call site and report it through the notifier

from typing import Any, Optional


class ConsoleError(Exception):
    """base class for all console errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ConsoleError):
    """local, pre-network validation failure (never reaches the backend)"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class BackendError(ConsoleError):
    """network or server-reported failure"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class UnauthorizedError(BackendError):
    """the backend rejected the bearer token (session expired or revoked)"""


class ConflictError(BackendError):
    """deactivation blocked because the user still owns contacts"""

    def __init__(
        self,
        message: str,
        assigned_contacts: int,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message, status_code=status_code, payload=payload)
        self.assigned_contacts = assigned_contacts
