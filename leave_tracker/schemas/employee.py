"""
Employee schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from leave_tracker.utils.datetime_utils import iso_8601_utc


class EmployeeCreate(BaseModel):
    """Schema for registering an employee in the reporting directory"""
    name: str = Field(..., min_length=1, description="Employee name")
    reporting_manager_id: Optional[int] = Field(None, description="ID of the direct manager")


class EmployeeOut(BaseModel):
    """Schema for employee output"""
    id: int
    name: str
    reporting_manager_id: Optional[int]
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_created_at(self, dt: datetime) -> str:
        return iso_8601_utc(dt) or ""


class ReportingManagerUpdate(BaseModel):
    """Schema for moving an employee under another manager"""
    reporting_manager_id: Optional[int] = Field(None, description="New manager ID; null detaches")
