from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Enum, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from smartleave.core.database import Base


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING

    @property
    def blocks_dates(self) -> bool:
        return self in (LeaveStatus.PENDING, LeaveStatus.APPROVED)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    leave_type_id = Column(Uuid(as_uuid=True), ForeignKey("leave_types.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(1000), nullable=True)
    attachment_url = Column(String(1000), nullable=True)  # Opaque reference into the document store
    status = Column(Enum(LeaveStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=LeaveStatus.PENDING)
    reviewed_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=True)
    review_comment = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    owner = relationship("Profile", foreign_keys=[user_id], back_populates="leave_requests")
    reviewer = relationship("Profile", foreign_keys=[reviewed_by])
    leave_type = relationship("LeaveType")

    @property
    def requested_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_leave_requests_date_range"),
        Index("idx_leave_requests_user_status", "user_id", "status"),
        Index("idx_leave_requests_status_created", "status", "created_at"),
    )
