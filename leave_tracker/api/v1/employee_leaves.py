"""
Per-employee leave views and balance
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from leave_tracker.core.deps import get_leave_service, get_ledger
from leave_tracker.schemas.leave import (
    LeavePatch,
    LeaveOut,
    LeaveListResponse,
    BalanceOut,
    BalanceSetRequest,
)
from leave_tracker.services.leave_service import LeaveService
from leave_tracker.services.leave_wallet_service import SqlBalanceLedger

router = APIRouter()


@router.get("/{employee_id}/leave", response_model=LeaveListResponse)
async def list_employee_leaves_endpoint(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """All leave requests of an employee"""
    return LeaveListResponse.from_records(service.list_by_employee(employee_id))


@router.get("/{employee_id}/leave/accepted", response_model=LeaveListResponse)
async def list_accepted_leaves_endpoint(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """Accepted leave requests of an employee (pending ones excluded)"""
    return LeaveListResponse.from_records(service.list_by_employee_and_decision(employee_id, True))


@router.get("/{employee_id}/leave/rejected", response_model=LeaveListResponse)
async def list_rejected_leaves_endpoint(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """Rejected leave requests of an employee (pending ones excluded)"""
    return LeaveListResponse.from_records(service.list_by_employee_and_decision(employee_id, False))


@router.get("/{employee_id}/leave/active", response_model=LeaveListResponse)
async def list_active_leaves_endpoint(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """Pending leave requests of an employee"""
    return LeaveListResponse.from_records(service.list_by_employee_and_active(employee_id, True))


@router.get("/{employee_id}/leave/inactive", response_model=LeaveListResponse)
async def list_inactive_leaves_endpoint(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """Decided leave requests of an employee, accepted and rejected together"""
    return LeaveListResponse.from_records(service.list_by_employee_and_active(employee_id, False))


@router.put("/{employee_id}/leave/{leave_id}", response_model=LeaveOut)
async def update_employee_leave_endpoint(
    employee_id: int,
    leave_id: int,
    patch: LeavePatch,
    version: Optional[int] = Query(None, description="Version last seen by the caller"),
    service: LeaveService = Depends(get_leave_service)
):
    """Correct one of the employee's own leave requests"""
    updated = service.update_fields(leave_id, patch, employee_id=employee_id, expected_version=version)
    return LeaveOut.model_validate(updated)


@router.get("/{employee_id}/balance", response_model=BalanceOut)
async def get_balance_endpoint(
    employee_id: int,
    ledger: SqlBalanceLedger = Depends(get_ledger)
):
    """Available leave days for an employee"""
    available = ledger.available(employee_id)
    ledger.db.commit()
    return BalanceOut(employee_id=employee_id, available=available)


@router.put("/{employee_id}/balance", response_model=BalanceOut)
async def set_balance_endpoint(
    employee_id: int,
    request: BalanceSetRequest,
    ledger: SqlBalanceLedger = Depends(get_ledger)
):
    """Overwrite an employee's available leave days"""
    ledger.set_balance(employee_id, request.days)
    ledger.db.commit()
    return BalanceOut(employee_id=employee_id, available=request.days)
