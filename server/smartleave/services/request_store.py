"""
Request store: persistence primitives for leave requests.

Nothing here commits. The lifecycle service owns transaction boundaries so
that a status change and its balance debit land in one commit.
"""
from typing import Iterable, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from smartleave.models.leave_request import LeaveRequest, LeaveStatus
from smartleave.core.query_builder import build_owner_filtered_query, exclude_statuses


async def get_by_id(
    db: AsyncSession,
    request_id: UUID,
    for_update: bool = False,
) -> Optional[LeaveRequest]:
    query = select(LeaveRequest).where(LeaveRequest.id == request_id)
    if for_update:
        # Re-read the locked row even if the instance is already in the identity map
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_by_owner(
    db: AsyncSession,
    user_id: UUID,
    excluded: Iterable[LeaveStatus] = (),
) -> List[LeaveRequest]:
    query = exclude_statuses(build_owner_filtered_query(LeaveRequest, user_id), LeaveRequest, excluded)
    result = await db.execute(query.order_by(LeaveRequest.start_date))
    return list(result.scalars().all())


async def insert(db: AsyncSession, leave_request: LeaveRequest) -> UUID:
    db.add(leave_request)
    await db.flush()
    return leave_request.id


async def update_status(
    db: AsyncSession,
    request_id: UUID,
    expected_status: LeaveStatus,
    new_status: LeaveStatus,
    **fields,
) -> bool:
    """Compare-and-set the status. Returns False when the row is no longer in ``expected_status``."""
    result = await db.execute(
        update(LeaveRequest)
        .where(
            LeaveRequest.id == request_id,
            LeaveRequest.status == expected_status,
        )
        .values(status=new_status, **fields)
    )
    return result.rowcount == 1
