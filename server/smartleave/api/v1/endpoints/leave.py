from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from smartleave.core.database import get_db
from smartleave.core.dependencies import get_current_user, get_current_manager
from smartleave.core.error_handling import handle_endpoint_errors, parse_uuid, verdict_response
from smartleave.core.exceptions import ForbiddenError
from smartleave.models.leave_request import LeaveStatus
from smartleave.models.profile import Profile, ProfileRole
from smartleave.schemas.leave_request import (
    LeaveRequestCreate,
    LeaveRequestReview,
    LeaveRequestResponse,
    LeaveRequestListResponse,
    LeaveErrorResponse,
    PendingCountResponse,
)
from smartleave.schemas.profile import LeaveTypeResponse
from smartleave.services.leave_service import (
    approve_leave_request,
    cancel_leave_request,
    count_pending_leave_requests,
    create_leave_request,
    get_leave_request,
    get_my_leave_requests,
    list_leave_requests,
    list_pending_leave_requests,
    reject_leave_request,
)
from smartleave.services.profile_service import list_leave_types

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": LeaveErrorResponse},
    403: {"model": LeaveErrorResponse},
    404: {"model": LeaveErrorResponse},
    409: {"model": LeaveErrorResponse},
    503: {"model": LeaveErrorResponse},
}


def to_list_response(requests, total: int) -> LeaveRequestListResponse:
    return LeaveRequestListResponse(
        requests=[LeaveRequestResponse.model_validate(req) for req in requests],
        total=total,
    )


@router.get("/types", response_model=List[LeaveTypeResponse])
@handle_endpoint_errors(operation_name="list_leave_types")
async def list_leave_types_endpoint(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List leave types for the request form."""
    return [LeaveTypeResponse.model_validate(t) for t in await list_leave_types(db)]


@router.post(
    "/requests",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@handle_endpoint_errors(operation_name="create_leave_request")
async def create_leave_request_endpoint(
    data: LeaveRequestCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request for the current user."""
    leave_req, verdict = await create_leave_request(db, current_user.id, data)
    if not verdict.admitted:
        return verdict_response(verdict)
    return LeaveRequestResponse.model_validate(leave_req)


@router.get("/requests/my", response_model=LeaveRequestListResponse)
@handle_endpoint_errors(operation_name="get_my_leave_requests")
async def get_my_leave_requests_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get current user's leave requests."""
    requests, total = await get_my_leave_requests(db, current_user.id, skip, limit)
    return to_list_response(requests, total)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse, responses=ERROR_RESPONSES)
@handle_endpoint_errors(operation_name="get_leave_request")
async def get_leave_request_endpoint(
    request_id: str,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a single leave request (owner or manager)."""
    req_id = parse_uuid(request_id, "Leave request ID")
    leave_req = await get_leave_request(db, req_id)
    if leave_req.user_id != current_user.id and current_user.role != ProfileRole.MANAGER:
        raise ForbiddenError("You can only view your own leave requests")
    return LeaveRequestResponse.model_validate(leave_req)


@router.post("/requests/{request_id}/cancel", response_model=LeaveRequestResponse, responses=ERROR_RESPONSES)
@handle_endpoint_errors(operation_name="cancel_leave_request")
async def cancel_leave_request_endpoint(
    request_id: str,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel one of the current user's pending requests."""
    req_id = parse_uuid(request_id, "Leave request ID")
    leave_req = await cancel_leave_request(db, req_id, current_user.id)
    return LeaveRequestResponse.model_validate(leave_req)


@router.get("/admin/requests", response_model=LeaveRequestListResponse)
@handle_endpoint_errors(operation_name="list_leave_requests")
async def list_leave_requests_endpoint(
    status: Optional[LeaveStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Get all leave requests for the manager view."""
    requests, total = await list_leave_requests(db, status, skip, limit)
    return to_list_response(requests, total)


@router.get("/admin/requests/pending", response_model=LeaveRequestListResponse)
@handle_endpoint_errors(operation_name="list_pending_leave_requests")
async def list_pending_leave_requests_endpoint(
    user_id: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Pending requests awaiting a decision, optionally for one employee."""
    owner_id = parse_uuid(user_id, "User ID") if user_id else None
    requests, total = await list_pending_leave_requests(db, owner_id, skip, limit)
    return to_list_response(requests, total)


@router.get("/admin/requests/pending/count", response_model=PendingCountResponse)
@handle_endpoint_errors(operation_name="count_pending_leave_requests")
async def count_pending_leave_requests_endpoint(
    current_user: Profile = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return PendingCountResponse(pending=await count_pending_leave_requests(db))


@router.post("/admin/requests/{request_id}/approve", response_model=LeaveRequestResponse, responses=ERROR_RESPONSES)
@handle_endpoint_errors(operation_name="approve_leave_request")
async def approve_leave_request_endpoint(
    request_id: str,
    review: Optional[LeaveRequestReview] = Body(None),
    current_user: Profile = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Approve a leave request and debit the requester's balance (manager only)."""
    req_id = parse_uuid(request_id, "Leave request ID")
    leave_req = await approve_leave_request(
        db,
        req_id,
        current_user.id,
        review.review_comment if review else None,
    )
    return LeaveRequestResponse.model_validate(leave_req)


@router.post("/admin/requests/{request_id}/reject", response_model=LeaveRequestResponse, responses=ERROR_RESPONSES)
@handle_endpoint_errors(operation_name="reject_leave_request")
async def reject_leave_request_endpoint(
    request_id: str,
    review: Optional[LeaveRequestReview] = Body(None),
    current_user: Profile = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Reject a leave request (manager only)."""
    req_id = parse_uuid(request_id, "Leave request ID")
    leave_req = await reject_leave_request(
        db,
        req_id,
        current_user.id,
        review.review_comment if review else None,
    )
    return LeaveRequestResponse.model_validate(leave_req)
