"""
Error types raised by the hierarchy and reporting services.

Access denial is never an exception: can_access_employee_data() answers False.
"""
from typing import Optional


class HierarchyError(Exception):
    """Base class for hierarchy service failures"""


class UserNotFoundError(HierarchyError):
    """A user id used for a direct lookup does not resolve to an active record"""

    def __init__(self, user_id: str, message: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message or f"User not found: {user_id}")


class StoreUnavailableError(HierarchyError):
    """The directory or report store failed to answer"""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        detail = f"Store unavailable during {operation}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class HierarchyValidationError(HierarchyError):
    """A manager reassignment would break a hierarchy invariant"""
