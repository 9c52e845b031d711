from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import uuid
import logging

from smartleave.core.config import settings
from smartleave.core.database import storage_errors
from smartleave.core.exceptions import NotFoundError
from smartleave.models.profile import Profile, ProfileRole
from smartleave.models.leave_type import LeaveType

logger = logging.getLogger(__name__)


async def get_profile(
    db: AsyncSession,
    user_id: UUID,
    for_update: bool = False,
) -> Optional[Profile]:
    """Load a profile, optionally locking its row (SELECT FOR UPDATE)."""
    query = select(Profile).where(Profile.id == user_id)
    if for_update:
        # Re-read the locked row even if the instance is already in the identity map
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def lock_profile(db: AsyncSession, user_id: UUID) -> bool:
    """Take the per-user write lock with a no-op update. False if the profile does not exist.

    A row lock on PostgreSQL and the database write lock on SQLite, where
    ``FOR UPDATE`` is not supported. Held until the caller's transaction ends.
    """
    result = await db.execute(
        update(Profile)
        .where(Profile.id == user_id)
        .values(leave_balance=Profile.leave_balance)
    )
    return result.rowcount == 1


async def get_profile_or_404(db: AsyncSession, user_id: UUID) -> Profile:
    async with storage_errors("get_profile"):
        profile = await get_profile(db, user_id)
    if not profile:
        raise NotFoundError("Profile", user_id)
    return profile


async def get_balance(db: AsyncSession, user_id: UUID) -> int:
    profile = await get_profile_or_404(db, user_id)
    return profile.leave_balance


async def debit_balance(db: AsyncSession, user_id: UUID, days: int) -> bool:
    """Atomically subtract ``days`` in the database. False if the balance would go negative.

    Does not commit; runs inside the caller's transaction.
    """
    result = await db.execute(
        update(Profile)
        .where(
            Profile.id == user_id,
            Profile.leave_balance >= days,
        )
        .values(leave_balance=Profile.leave_balance - days)
    )
    return result.rowcount == 1


async def create_profile(
    db: AsyncSession,
    full_name: str,
    role: ProfileRole = ProfileRole.EMPLOYEE,
    leave_balance: Optional[int] = None,
    user_id: Optional[UUID] = None,
) -> Profile:
    """Provision a profile. Used by seeding and tests; production profiles come from the user service."""
    profile = Profile(
        id=user_id or uuid.uuid4(),
        full_name=full_name,
        role=role,
        leave_balance=settings.DEFAULT_LEAVE_BALANCE if leave_balance is None else leave_balance,
    )
    async with storage_errors("create_profile"):
        try:
            db.add(profile)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    await db.refresh(profile)
    logger.info(f"Provisioned profile {profile.id} with balance {profile.leave_balance}")
    return profile


async def get_leave_type(db: AsyncSession, leave_type_id: UUID) -> Optional[LeaveType]:
    result = await db.execute(select(LeaveType).where(LeaveType.id == leave_type_id))
    return result.scalar_one_or_none()


async def list_leave_types(db: AsyncSession) -> List[LeaveType]:
    async with storage_errors("list_leave_types"):
        result = await db.execute(select(LeaveType).order_by(LeaveType.name))
    return list(result.scalars().all())
