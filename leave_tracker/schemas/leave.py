"""
Leave schemas
"""
import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer
from pydantic import ConfigDict
from leave_tracker.core.constants import STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED
from leave_tracker.models.leave import LeaveState
from leave_tracker.utils.datetime_utils import iso_8601_utc


class LeaveRecord(BaseModel):
    """
    A leave request as handed out by a store.

    Stores return copies; mutating one has no effect until it is put back.
    The (active_flag, accepted_flag) pair is derived from state and cannot
    be set independently.
    """
    id: Optional[int] = None
    employee_id: int
    start_date: date
    end_date: date
    requested_days: Decimal
    reason: Optional[str] = None
    state: LeaveState = LeaveState.PENDING
    debited_days: Decimal = Decimal("0")
    version: int = 0
    created_at: datetime
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def active_flag(self) -> bool:
        return self.state.active_flag

    @property
    def accepted_flag(self) -> bool:
        return self.state.accepted_flag


class LeaveSubmission(BaseModel):
    """Schema for submitting a leave request (creates PENDING record)"""
    employee_id: int = Field(..., description="Employee requesting leave")
    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    requested_days: Decimal = Field(..., description="Leave days charged against the balance")
    reason: Optional[str] = Field(None, description="Reason for leave")

    model_config = ConfigDict(extra="forbid")


class LeavePatch(BaseModel):
    """Schema for correcting an existing leave request; only set fields are applied"""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    requested_days: Optional[Decimal] = None
    reason: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class LeaveStatusFilter(str, enum.Enum):
    """Manager status views exposed at the API boundary"""
    PENDING = STATUS_PENDING
    APPROVED = STATUS_APPROVED
    REJECTED = STATUS_REJECTED

    def to_state(self) -> LeaveState:
        return {
            LeaveStatusFilter.PENDING: LeaveState.PENDING,
            LeaveStatusFilter.APPROVED: LeaveState.ACCEPTED,
            LeaveStatusFilter.REJECTED: LeaveState.REJECTED,
        }[self]


class LeaveOut(BaseModel):
    """Schema for leave output (flags kept for legacy clients)"""
    id: int
    employee_id: int
    start_date: date
    end_date: date
    requested_days: Decimal
    debited_days: Decimal
    reason: Optional[str]
    state: LeaveState
    active_flag: bool
    accepted_flag: bool
    version: int
    created_at: datetime
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "decided_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveListResponse(BaseModel):
    """Schema for leave list response"""
    items: List[LeaveOut]
    total: int

    @classmethod
    def from_records(cls, records: List[LeaveRecord]) -> "LeaveListResponse":
        return cls(
            items=[LeaveOut.model_validate(r) for r in records],
            total=len(records),
        )


class LeaveUpdateResponse(BaseModel):
    """Envelope returned by PUT /leave/{id}: status code, message and the updated leave"""
    status_code: int
    message: str
    leave: Optional[LeaveOut] = None


class LeaveDeleteResponse(BaseModel):
    """DELETE always answers 200; deleted tells the caller whether anything was removed"""
    deleted: bool
    message: str


# --- Leave balance (ledger) ---


class BalanceOut(BaseModel):
    """Available leave days for one employee"""
    employee_id: int
    available: Decimal


class BalanceSetRequest(BaseModel):
    """Set an employee's available leave days"""
    days: Decimal = Field(..., ge=0, max_digits=7, decimal_places=2, description="New available balance")
