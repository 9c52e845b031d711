from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from smartleave.models.profile import ProfileRole


class ProfileResponse(BaseModel):
    id: UUID
    full_name: Optional[str] = None
    role: ProfileRole
    leave_balance: int

    class Config:
        from_attributes = True


class LeaveTypeResponse(BaseModel):
    id: UUID
    name: str
    max_days: int

    class Config:
        from_attributes = True
