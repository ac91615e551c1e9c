"""
Manager views over their direct reports' leave requests
"""
from fastapi import APIRouter, Depends
from leave_tracker.core.deps import get_leave_service
from leave_tracker.schemas.leave import LeaveListResponse, LeaveStatusFilter
from leave_tracker.services.leave_service import LeaveService

router = APIRouter()


@router.get("/{manager_id}/leave", response_model=LeaveListResponse)
@router.get("/{manager_id}/leaves", response_model=LeaveListResponse)
async def list_manager_leaves_endpoint(
    manager_id: int,
    service: LeaveService = Depends(get_leave_service)
):
    """All leave requests of a manager's direct reports (400 for an unknown manager)"""
    return LeaveListResponse.from_records(service.list_by_manager(manager_id))


@router.get("/{manager_id}/leave/{status_filter}", response_model=LeaveListResponse)
async def list_manager_leaves_by_status_endpoint(
    manager_id: int,
    status_filter: LeaveStatusFilter,
    service: LeaveService = Depends(get_leave_service)
):
    """
    Leave requests of a manager's direct reports in one status

    status_filter is one of pending, approved, rejected.
    """
    records = service.list_by_manager_and_status(manager_id, status_filter.to_state())
    return LeaveListResponse.from_records(records)
