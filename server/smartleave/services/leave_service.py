"""
Leave request lifecycle: create, approve, reject, cancel and read queries.

Every write runs as one transaction. Approval flips the status and debits
the owner's balance in the same commit; both rows are locked first so
competing approvals serialize per request and per user.
"""
from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import DBAPIError
import logging
import uuid

from smartleave.core.database import storage_errors
from smartleave.core.exceptions import (
    ConsistencyError,
    ForbiddenError,
    InvalidTransitionError,
    LeaveValidationError,
    NotFoundError,
)
from smartleave.core.query_builder import get_paginated_results, build_owner_filtered_query
from smartleave.models.audit_log import AuditLog
from smartleave.models.leave_request import LeaveRequest, LeaveStatus
from smartleave.schemas.leave_request import LeaveRequestCreate
from smartleave.services import request_store
from smartleave.services.leave_validator import (
    LeaveCandidate,
    Verdict,
    insufficient_balance,
    validate_leave_request,
)
from smartleave.services.profile_service import debit_balance, get_leave_type, get_profile, lock_profile

logger = logging.getLogger(__name__)
consistency_logger = logging.getLogger("consistency")

NON_BLOCKING_STATUSES = (LeaveStatus.REJECTED, LeaveStatus.CANCELLED)


async def create_leave_request(
    db: AsyncSession,
    user_id: UUID,
    data: LeaveRequestCreate,
) -> Tuple[Optional[LeaveRequest], Verdict]:
    """Validate and persist a new Pending request.

    Returns ``(request, verdict)``. When the verdict is a rejection nothing is
    written and ``request`` is None. The owner's write lock is taken before
    the overlap/balance read and held until the insert commits, so two
    concurrent creates for one user cannot both pass the overlap check.
    """
    async with storage_errors("create_leave_request"):
        try:
            if not await lock_profile(db, user_id):
                raise NotFoundError("Profile", user_id)
            profile = await get_profile(db, user_id, for_update=True)

            leave_type = await get_leave_type(db, data.leave_type_id)
            if not leave_type:
                raise NotFoundError("Leave type", data.leave_type_id)

            existing = await request_store.list_by_owner(db, user_id, excluded=NON_BLOCKING_STATUSES)
            candidate = LeaveCandidate(
                user_id=user_id,
                leave_type_id=data.leave_type_id,
                start_date=data.start_date,
                end_date=data.end_date,
            )
            verdict = validate_leave_request(candidate, existing, profile.leave_balance)
            if not verdict.admitted:
                await db.rollback()
                logger.info(
                    f"Leave request rejected for user {user_id}: {verdict.reason.value}",
                    extra={"user_id": str(user_id), "reason": verdict.reason.value},
                )
                return None, verdict

            leave_request = LeaveRequest(
                id=uuid.uuid4(),
                user_id=user_id,
                leave_type_id=data.leave_type_id,
                start_date=data.start_date,
                end_date=data.end_date,
                reason=data.reason,
                attachment_url=data.attachment_url,
                status=LeaveStatus.PENDING,
            )
            await request_store.insert(db, leave_request)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(leave_request)

    logger.info(f"Leave request {leave_request.id} created for user {user_id} ({leave_request.requested_days} days)")
    return leave_request, verdict


async def _load_pending(db: AsyncSession, request_id: UUID, action: str) -> LeaveRequest:
    """Lock the request row and require it to be Pending."""
    leave_request = await request_store.get_by_id(db, request_id, for_update=True)
    if not leave_request:
        raise NotFoundError("Leave request", request_id)
    if leave_request.status != LeaveStatus.PENDING:
        raise InvalidTransitionError(request_id, leave_request.status, action)
    return leave_request


async def _current_status(db: AsyncSession, request_id: UUID) -> Optional[LeaveStatus]:
    result = await db.execute(select(LeaveRequest.status).where(LeaveRequest.id == request_id))
    return result.scalar_one_or_none()


async def _set_status(
    db: AsyncSession,
    leave_request: LeaveRequest,
    new_status: LeaveStatus,
    action: str,
    **fields,
) -> None:
    """Compare-and-set Pending -> ``new_status``; a lost race surfaces as InvalidTransitionError."""
    changed = await request_store.update_status(
        db, leave_request.id, LeaveStatus.PENDING, new_status, **fields
    )
    if not changed:
        current = await _current_status(db, leave_request.id)
        raise InvalidTransitionError(leave_request.id, current, action)


def _audit(actor_id: UUID, leave_request: LeaveRequest, new_status: LeaveStatus, **metadata) -> AuditLog:
    return AuditLog(
        id=uuid.uuid4(),
        actor_user_id=actor_id,
        action=f"leave_request_{new_status.value}",
        entity_type="leave_request",
        entity_id=leave_request.id,
        metadata_json={"status": new_status.value, **metadata},
    )


async def approve_leave_request(
    db: AsyncSession,
    request_id: UUID,
    reviewer_id: UUID,
    review_comment: Optional[str] = None,
) -> LeaveRequest:
    """Approve a Pending request and debit the owner's balance in one transaction.

    Raises:
        NotFoundError: no such request
        InvalidTransitionError: request is not Pending (including a lost race)
        LeaveValidationError: the balance no longer covers the request
        ConsistencyError: the debit write failed after the status write
        StorageError: any other storage failure; nothing was applied
    """
    async with storage_errors("approve_leave_request"):
        try:
            leave_request = await _load_pending(db, request_id, "approve")
            user_id = leave_request.user_id
            days = leave_request.requested_days
            # Serialize debits against this user's balance
            await get_profile(db, user_id, for_update=True)

            await _set_status(
                db,
                leave_request,
                LeaveStatus.APPROVED,
                "approve",
                reviewed_by=reviewer_id,
                review_comment=review_comment,
            )

            try:
                debited = await debit_balance(db, user_id, days)
            except DBAPIError as e:
                await db.rollback()
                consistency_logger.error(
                    "Balance debit failed after status write; approval rolled back",
                    exc_info=True,
                    extra={"request_id": str(request_id), "user_id": str(user_id), "days": days},
                )
                raise ConsistencyError(
                    f"Approval of leave request {request_id} could not debit the balance and was rolled back",
                    request_id=request_id,
                    user_id=user_id,
                ) from e

            if not debited:
                await db.rollback()
                profile = await get_profile(db, user_id)
                balance = profile.leave_balance if profile else 0
                logger.warning(
                    f"Approval of {request_id} refused: {days} days requested, {balance} available",
                    extra={"request_id": str(request_id), "user_id": str(user_id)},
                )
                raise LeaveValidationError(insufficient_balance(days, balance))

            db.add(_audit(reviewer_id, leave_request, LeaveStatus.APPROVED, days=days, comment=review_comment))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(leave_request)

    logger.info(
        f"Leave request {request_id} approved by {reviewer_id}; debited {days} days from {user_id}",
        extra={"request_id": str(request_id), "user_id": str(user_id), "days": days},
    )
    return leave_request


async def reject_leave_request(
    db: AsyncSession,
    request_id: UUID,
    reviewer_id: UUID,
    review_comment: Optional[str] = None,
) -> LeaveRequest:
    """Reject a Pending request. No balance effect."""
    async with storage_errors("reject_leave_request"):
        try:
            leave_request = await _load_pending(db, request_id, "reject")
            await _set_status(
                db,
                leave_request,
                LeaveStatus.REJECTED,
                "reject",
                reviewed_by=reviewer_id,
                review_comment=review_comment,
            )
            db.add(_audit(reviewer_id, leave_request, LeaveStatus.REJECTED, comment=review_comment))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(leave_request)

    logger.info(f"Leave request {request_id} rejected by {reviewer_id}")
    return leave_request


async def cancel_leave_request(
    db: AsyncSession,
    request_id: UUID,
    requester_id: UUID,
) -> LeaveRequest:
    """Cancel a Pending request on behalf of its owner. Nothing was debited, so nothing is refunded."""
    async with storage_errors("cancel_leave_request"):
        try:
            leave_request = await request_store.get_by_id(db, request_id, for_update=True)
            if not leave_request:
                raise NotFoundError("Leave request", request_id)
            if leave_request.user_id != requester_id:
                raise ForbiddenError("Only the owner can cancel a leave request")
            if leave_request.status != LeaveStatus.PENDING:
                raise InvalidTransitionError(request_id, leave_request.status, "cancel")

            await _set_status(db, leave_request, LeaveStatus.CANCELLED, "cancel")
            db.add(_audit(requester_id, leave_request, LeaveStatus.CANCELLED))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(leave_request)

    logger.info(f"Leave request {request_id} cancelled by owner {requester_id}")
    return leave_request


async def get_leave_request(db: AsyncSession, request_id: UUID) -> LeaveRequest:
    async with storage_errors("get_leave_request"):
        leave_request = await request_store.get_by_id(db, request_id)
    if not leave_request:
        raise NotFoundError("Leave request", request_id)
    return leave_request


async def get_my_leave_requests(
    db: AsyncSession,
    user_id: UUID,
    skip: int = 0,
    limit: int = 100,
) -> tuple[List[LeaveRequest], int]:
    """Get the user's own leave requests, newest first."""
    query = build_owner_filtered_query(LeaveRequest, user_id)
    async with storage_errors("get_my_leave_requests"):
        return await get_paginated_results(
            db,
            query,
            skip=skip,
            limit=limit,
            order_by=LeaveRequest.created_at.desc(),
        )


async def list_leave_requests(
    db: AsyncSession,
    status_filter: Optional[LeaveStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[List[LeaveRequest], int]:
    """All leave requests for the manager view."""
    query = build_owner_filtered_query(LeaveRequest, status=status_filter)
    async with storage_errors("list_leave_requests"):
        return await get_paginated_results(
            db,
            query,
            skip=skip,
            limit=limit,
            order_by=LeaveRequest.created_at.desc(),
        )


async def list_pending_leave_requests(
    db: AsyncSession,
    user_id: Optional[UUID] = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[List[LeaveRequest], int]:
    """Pending requests awaiting a decision, oldest first."""
    query = build_owner_filtered_query(LeaveRequest, user_id=user_id, status=LeaveStatus.PENDING)
    async with storage_errors("list_pending_leave_requests"):
        return await get_paginated_results(
            db,
            query,
            skip=skip,
            limit=limit,
            order_by=LeaveRequest.created_at.asc(),
        )


async def count_pending_leave_requests(db: AsyncSession) -> int:
    async with storage_errors("count_pending_leave_requests"):
        result = await db.execute(
            select(func.count()).select_from(LeaveRequest).where(LeaveRequest.status == LeaveStatus.PENDING)
        )
    return result.scalar() or 0
