"""
Employee directory endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from leave_tracker.core.deps import get_db
from leave_tracker.schemas.employee import EmployeeCreate, EmployeeOut, ReportingManagerUpdate
from leave_tracker.services.employee_service import (
    create_employee,
    get_employee,
    set_reporting_manager,
)

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee_endpoint(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db)
):
    """Register an employee, optionally under a reporting manager"""
    return create_employee(db, employee_data)


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(employee_id: int, db: Session = Depends(get_db)):
    """Get an employee by ID"""
    return get_employee(db, employee_id)


@router.put("/{employee_id}/manager", response_model=EmployeeOut)
async def set_reporting_manager_endpoint(
    employee_id: int,
    request: ReportingManagerUpdate,
    db: Session = Depends(get_db)
):
    """Move an employee under another manager"""
    return set_reporting_manager(db, employee_id, request.reporting_manager_id)
