"""
Leave endpoints
"""
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from leave_tracker.core.deps import get_leave_service
from leave_tracker.core.exceptions import LeaveNotFound, InsufficientBalance
from leave_tracker.schemas.leave import (
    LeaveSubmission,
    LeavePatch,
    LeaveOut,
    LeaveListResponse,
    LeaveUpdateResponse,
    LeaveDeleteResponse,
)
from leave_tracker.services.leave_service import LeaveService

router = APIRouter()


@router.get("", response_model=LeaveListResponse)
async def list_leaves_endpoint(service: LeaveService = Depends(get_leave_service)):
    """List every leave request (an empty list is not an error)"""
    return LeaveListResponse.from_records(service.list_all())


@router.post("", response_model=LeaveOut, status_code=201)
async def submit_leave_endpoint(
    submission: LeaveSubmission,
    service: LeaveService = Depends(get_leave_service)
):
    """
    Submit a leave request (creates PENDING record)

    Validations:
    - Date order (start_date <= end_date)
    - requested_days > 0
    """
    return LeaveOut.model_validate(service.submit(submission))


@router.post("/active", response_model=LeaveListResponse)
async def list_leaves_by_active_endpoint(
    active: bool = Body(..., description="True for pending leaves, False for decided ones"),
    service: LeaveService = Depends(get_leave_service)
):
    """List all leave requests by active flag"""
    return LeaveListResponse.from_records(service.list_by_active(active))


@router.get("/{leave_id}", response_model=LeaveOut)
async def get_leave_endpoint(leave_id: int, service: LeaveService = Depends(get_leave_service)):
    """Get a single leave request"""
    return LeaveOut.model_validate(service.get(leave_id))


@router.put("/{leave_id}", response_model=LeaveUpdateResponse)
async def update_leave_endpoint(
    leave_id: int,
    patch: LeavePatch,
    version: Optional[int] = Query(None, description="Version last seen by the caller"),
    service: LeaveService = Depends(get_leave_service)
):
    """
    Correct a leave request

    Always answers with an envelope carrying the status code, a message and,
    on success, the updated leave. Editing an ACCEPTED leave re-checks the
    balance for the change in requested_days.
    """
    try:
        updated = service.update_fields(leave_id, patch, expected_version=version)
    except LeaveNotFound as e:
        return _update_failure(status.HTTP_400_BAD_REQUEST, e.message)
    except InsufficientBalance as e:
        return _update_failure(status.HTTP_424_FAILED_DEPENDENCY, e.message)

    return LeaveUpdateResponse(
        status_code=status.HTTP_200_OK,
        message="Leave updated successfully",
        leave=LeaveOut.model_validate(updated),
    )


def _update_failure(status_code: int, reason: str) -> JSONResponse:
    body = LeaveUpdateResponse(status_code=status_code, message=f"Leave is not updated: {reason}")
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post("/{leave_id}/accept", response_model=LeaveOut)
@router.get("/{leave_id}/accept", response_model=LeaveOut)
async def accept_leave_endpoint(
    leave_id: int,
    version: Optional[int] = Query(None, description="Version last seen by the caller"),
    service: LeaveService = Depends(get_leave_service)
):
    """
    Accept a leave request

    On acceptance:
    - The balance must cover requested_days (424 otherwise, nothing changes)
    - requested_days are debited from the balance
    - A previously rejected leave is re-checked and debited again
    """
    return LeaveOut.model_validate(service.decide(leave_id, True, expected_version=version))


@router.post("/{leave_id}/reject", response_model=LeaveOut)
@router.get("/{leave_id}/reject", response_model=LeaveOut)
async def reject_leave_endpoint(
    leave_id: int,
    version: Optional[int] = Query(None, description="Version last seen by the caller"),
    service: LeaveService = Depends(get_leave_service)
):
    """
    Reject a leave request

    No balance is consumed. Rejecting a previously accepted leave credits
    the debited days back.
    """
    return LeaveOut.model_validate(service.decide(leave_id, False, expected_version=version))


@router.delete("/{leave_id}", response_model=LeaveDeleteResponse)
async def delete_leave_endpoint(leave_id: int, service: LeaveService = Depends(get_leave_service)):
    """
    Delete a leave request in any state

    A missing leave still answers 200 (convention), with deleted=false.
    """
    try:
        service.delete(leave_id)
    except LeaveNotFound as e:
        return LeaveDeleteResponse(deleted=False, message=e.message)
    return LeaveDeleteResponse(deleted=True, message="Leave successfully deleted")
