"""
Leave domain exceptions

Raised by the lifecycle/query engines and their collaborators. None of these
know about HTTP; core/errors.py maps them onto status codes.
"""
from decimal import Decimal
from typing import Any, Dict, Optional


class LeaveError(Exception):
    """Base class for every recoverable leave-domain failure"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class LeaveNotFound(LeaveError):
    """Referenced leave record does not exist"""

    def __init__(self, leave_id: int):
        self.leave_id = leave_id
        super().__init__(
            f"Leave request with id {leave_id} not found",
            details={"leave_id": leave_id},
        )


class ManagerNotFound(LeaveError):
    """Manager id unknown to the directory"""

    def __init__(self, manager_id: int):
        self.manager_id = manager_id
        super().__init__(
            f"Manager with id {manager_id} not found",
            details={"manager_id": manager_id},
        )


class InsufficientBalance(LeaveError):
    """An acceptance or upward edit would exceed the available leave days"""

    def __init__(self, employee_id: int, requested: Decimal, available: Decimal):
        self.employee_id = employee_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Employee {employee_id} has {available} leave days available, {requested} required",
            details={
                "employee_id": employee_id,
                "requested": str(requested),
                "available": str(available),
            },
        )


class LeaveValidationError(LeaveError):
    """Malformed leave input (date order, non-positive days, ...)"""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, details={"field": field} if field else None)


class LeaveConflict(LeaveError):
    """The record changed since the caller read it"""

    def __init__(self, leave_id: int, expected_version: int, actual_version: int):
        self.leave_id = leave_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Leave request {leave_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})",
            details={
                "leave_id": leave_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
