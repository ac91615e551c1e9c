"""
Leave models
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Numeric,
    Enum as SQLEnum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from typing import Optional
from leave_tracker.db.base import Base


class LeaveState(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @property
    def active_flag(self) -> bool:
        """True while the request awaits a decision"""
        return self is LeaveState.PENDING

    @property
    def accepted_flag(self) -> bool:
        """True only once the request has been approved"""
        return self is LeaveState.ACCEPTED

    @classmethod
    def from_flags(cls, active: bool, accepted: Optional[bool] = None) -> "LeaveState":
        """
        Decode the legacy (activeFlag, acceptedFlag) pair.

        acceptedFlag carries no meaning while a request is active, so it is
        ignored when active is True.
        """
        if active:
            return cls.PENDING
        return cls.ACCEPTED if accepted else cls.REJECTED


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    requested_days = Column(Numeric(5, 2), nullable=False)  # Supports 0.5 days
    debited_days = Column(Numeric(5, 2), nullable=False, server_default=text("'0'"))  # Held against the ledger while ACCEPTED
    reason = Column(Text, nullable=True)
    state = Column(SQLEnum(LeaveState), nullable=False, server_default=text("'PENDING'"), index=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    employee = relationship("Employee", back_populates="leave_requests")

    __table_args__ = (
        Index("ix_leave_requests_employee_state", "employee_id", "state"),
        CheckConstraint("start_date <= end_date", name="check_start_date_le_end_date"),
        CheckConstraint("requested_days > 0", name="check_requested_days_positive"),
    )


class LeaveBalance(Base):
    """
    Leave ledger: one row per employee.
    remaining is the number of leave days the employee can still take.
    """
    __tablename__ = "leave_balances"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, unique=True, index=True)
    remaining = Column(Numeric(7, 2), nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    employee = relationship("Employee", backref="leave_balance")

    __table_args__ = (
        CheckConstraint("remaining >= 0", name="check_remaining_non_negative"),
    )
