"""
Seed script to create leave types, a manager and sample employees.
Prints a development access token for each profile.
Run with: python -m scripts.seed_data
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import select
from smartleave.core.database import AsyncSessionLocal, engine
from smartleave.core.security import create_access_token
from smartleave.models.leave_type import LeaveType
from smartleave.models.profile import Profile, ProfileRole
from smartleave.services.profile_service import create_profile
import uuid

LEAVE_TYPES = [
    ("Annual Leave", 20),
    ("Sick Leave", 10),
    ("Casual Leave", 5),
]

PROFILES = [
    ("Maya Manager", ProfileRole.MANAGER),
    ("John Doe", ProfileRole.EMPLOYEE),
    ("Jane Smith", ProfileRole.EMPLOYEE),
]


async def seed_data():
    """Seed the database with sample data."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Profile).where(Profile.role == ProfileRole.MANAGER))
        if result.scalars().first():
            print("A manager profile already exists. Skipping seed.")
            return

        for name, max_days in LEAVE_TYPES:
            db.add(LeaveType(id=uuid.uuid4(), name=name, max_days=max_days))
        await db.commit()

        for full_name, role in PROFILES:
            profile = await create_profile(db, full_name, role=role)
            token = create_access_token({"sub": str(profile.id)})
            print(f"{role.value:<8} {full_name:<14} balance={profile.leave_balance} token={token}")

    await engine.dispose()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed_data())
