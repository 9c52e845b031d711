from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from smartleave.models.leave_request import LeaveStatus


class LeaveRequestCreate(BaseModel):
    # Date order is checked by the leave validator so it can report InvalidRange
    leave_type_id: UUID
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)
    attachment_url: Optional[str] = Field(None, max_length=1000)


class LeaveRequestReview(BaseModel):
    review_comment: Optional[str] = Field(None, max_length=1000)


class LeaveRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    requested_days: int
    reason: Optional[str] = None
    attachment_url: Optional[str] = None
    status: LeaveStatus
    reviewed_by: Optional[UUID] = None
    review_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeaveRequestListResponse(BaseModel):
    requests: list[LeaveRequestResponse]
    total: int


class PendingCountResponse(BaseModel):
    pending: int


class LeaveErrorResponse(BaseModel):
    detail: str
    code: str
