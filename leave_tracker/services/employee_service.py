"""
Employee service - maintains the reporting directory
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from leave_tracker.models.employee import Employee
from leave_tracker.schemas.employee import EmployeeCreate

logger = logging.getLogger(__name__)


def _check_reporting_hierarchy_cycle(
    db: Session,
    employee_id: int,
    reporting_manager_id: int
) -> bool:
    """
    Check if setting reporting_manager_id would create a cycle

    Args:
        db: Database session
        employee_id: ID of employee being updated
        reporting_manager_id: Proposed reporting manager ID

    Returns:
        True if cycle would be created, False otherwise
    """
    if employee_id == reporting_manager_id:
        return True  # Self-reference creates a cycle

    # Walk up the chain from the proposed manager
    visited = set()
    current_id = reporting_manager_id

    while current_id is not None:
        if current_id == employee_id:
            return True

        if current_id in visited:
            break

        visited.add(current_id)
        manager = db.query(Employee).filter(Employee.id == current_id).first()
        if not manager or not manager.reporting_manager_id:
            break

        current_id = manager.reporting_manager_id

    return False


def _require_manager(db: Session, manager_id: int) -> Employee:
    manager = db.query(Employee).filter(Employee.id == manager_id).first()
    if not manager:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Reporting manager with id {manager_id} not found"
        )
    return manager


def create_employee(db: Session, employee_data: EmployeeCreate) -> Employee:
    """
    Register an employee in the directory

    Raises:
        HTTPException: If the reporting manager does not exist
    """
    if employee_data.reporting_manager_id is not None:
        _require_manager(db, employee_data.reporting_manager_id)

    employee = Employee(
        name=employee_data.name,
        reporting_manager_id=employee_data.reporting_manager_id,
        active=True,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    logger.info(
        "employee created: employee_id=%s reporting_manager_id=%s",
        employee.id, employee.reporting_manager_id,
    )
    return employee


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with id {employee_id} not found"
        )
    return employee


def set_reporting_manager(
    db: Session,
    employee_id: int,
    reporting_manager_id: Optional[int]
) -> Employee:
    """
    Move an employee under another manager (or detach them with None)

    Raises:
        HTTPException: If either employee is missing or the move creates a cycle
    """
    employee = get_employee(db, employee_id)
    if reporting_manager_id is not None:
        _require_manager(db, reporting_manager_id)
        if _check_reporting_hierarchy_cycle(db, employee_id, reporting_manager_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Reporting manager assignment would create a cycle"
            )

    employee.reporting_manager_id = reporting_manager_id
    db.commit()
    db.refresh(employee)
    logger.info(
        "reporting manager changed: employee_id=%s reporting_manager_id=%s",
        employee_id, reporting_manager_id,
    )
    return employee
