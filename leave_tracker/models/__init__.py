"""
Database models
"""
from leave_tracker.models.employee import Employee
from leave_tracker.models.leave import LeaveRequest, LeaveBalance, LeaveState

__all__ = [
    "Employee",
    "LeaveRequest",
    "LeaveBalance",
    "LeaveState",
]
